# graph/graph.py
from langgraph.graph import StateGraph, END
from graph.state import PunchState


def route_after_guard(state: PunchState) -> str:
    if state["action_taken"] == "rejected":
        return "notify"
    return "punch"


def build_graph(
    client=None,
    timers=None,
    notifier=None,
):
    """打刻1回分のLangGraphを構築して返す

    guard → punch → timer_sync → notify の順に流れる。
    guard で弾かれた場合は通信せず notify へ直行する。
    """
    from functools import partial
    from graph.nodes.guard_node import guard_node
    from graph.nodes.punch_node import punch_node
    from graph.nodes.timer_sync_node import timer_sync_node
    from graph.nodes.notify_node import notify_node

    # ノード関数をLangGraph互換の (state) -> dict にラップ
    punch_wrapped = partial(punch_node, client=client)
    timer_sync_wrapped = partial(timer_sync_node, timers=timers)
    notify_wrapped = partial(notify_node, notifier=notifier)

    workflow = StateGraph(PunchState)

    workflow.add_node("guard", guard_node)
    workflow.add_node("punch", punch_wrapped)
    workflow.add_node("timer_sync", timer_sync_wrapped)
    workflow.add_node("notify", notify_wrapped)

    workflow.set_entry_point("guard")

    workflow.add_conditional_edges(
        "guard",
        route_after_guard,
        {"punch": "punch", "notify": "notify"},
    )

    workflow.add_edge("punch", "timer_sync")
    workflow.add_edge("timer_sync", "notify")
    workflow.add_edge("notify", END)

    return workflow.compile()
