from graph.state import PunchState


def timer_sync_node(state: PunchState, timers=None) -> dict:
    """打刻結果に合わせて経過タイマーを作り直すノード"""
    if timers is None:
        return {}
    if state["action_taken"] in ("rejected", "error"):
        return {}

    timers.sync(state)
    return {}
