from services.session_context import SessionContext


def test_auth_headers():
    session = SessionContext(base_url="http://localhost:3000", token="abc")
    assert session.is_authenticated is True
    assert session.auth_headers() == {"Authorization": "Bearer abc"}


def test_invalidate():
    """トークン破棄後は認証ヘッダを付けない"""
    session = SessionContext(base_url="http://localhost:3000", token="abc")
    session.invalidate()
    assert session.is_authenticated is False
    assert session.auth_headers() == {}
