"""Tests for the transition graph wiring."""

from gitrewrite.workflow.graph import create_transition_graph


def test_graph_holds_every_transition_node():
    graph = create_transition_graph()

    assert set(graph.node_defs) == {
        "InvokeEngine",
        "ApplyOutcome",
        "RefreshDerivedState",
        "ResetToIdle",
    }


def test_graph_edges_follow_transition_order():
    graph = create_transition_graph()

    def successors(node_id):
        return set(graph.node_defs[node_id].next_node_edges)

    assert successors("InvokeEngine") == {"ApplyOutcome"}
    assert successors("ApplyOutcome") == {"RefreshDerivedState"}
    assert successors("RefreshDerivedState") == {"ResetToIdle"}
    assert graph.node_defs["ResetToIdle"].end_edge is not None
