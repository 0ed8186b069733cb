import pytest

from rcv_sankey.graph import FlowEdge
from rcv_sankey.results import base_name, label_round, terminal_nodes, winner_name, winner_node

SCENARIO_EDGES = [
    {"source": "C (1) ", "target": "A (3)  ", "weight": "1"},
    {"source": "A (2) ", "target": "A (3)  ", "weight": "2"},
    {"source": "B (2) ", "target": "B (2)  ", "weight": "2"},
    {"source": "B (2)  ", "target": "A (5)   ", "weight": "2"},
    {"source": "A (3)  ", "target": "A (5)   ", "weight": "3"},
]

# B's votes exhaust in round 2, so "B (2)  " is terminal as well
MULTI_TERMINAL_EDGES = [
    {"source": "B (2) ", "target": "B (2)  ", "weight": "2"},
    {"source": "A (3) ", "target": "A (3)  ", "weight": "3"},
    {"source": "A (3)  ", "target": "A (3)   ", "weight": "3"},
]


params = [
    ("A (2) ", "A", 1),
    ("A (5)   ", "A", 3),
    ("Game A (12)  ", "Game A", 2),
    ("Pat (Jr.) (7) ", "Pat (Jr.)", 1),
    ("B (0)", "B", 0),
]


@pytest.mark.parametrize("label, name, round_num", params)
def test_label_parts(label, name, round_num):
    assert base_name(label) == name
    assert label_round(label) == round_num


def test_terminal_nodes():
    assert terminal_nodes(SCENARIO_EDGES) == ["A (5)   "]
    assert terminal_nodes(MULTI_TERMINAL_EDGES) == ["B (2)  ", "A (3)   "]


params = [
    (SCENARIO_EDGES, "A (5)   ", "A"),
    (MULTI_TERMINAL_EDGES, "A (3)   ", "A"),
    ([], None, None),
]


@pytest.mark.parametrize("edges, node, name", params)
def test_winner(edges, node, name):
    assert winner_node(edges) == node
    assert winner_name(edges) == name


def test_winner_from_flow_edges():
    edges = [FlowEdge(e["source"], e["target"], int(e["weight"])) for e in SCENARIO_EDGES]
    assert winner_name(edges) == "A"


def test_winner_from_generator():
    assert winner_node(e for e in SCENARIO_EDGES) == "A (5)   "


def test_no_terminal_node():
    # every target is also a source
    edges = [
        {"source": "A (1) ", "target": "B (1) ", "weight": "1"},
        {"source": "B (1) ", "target": "A (1) ", "weight": "1"},
    ]
    assert winner_node(edges) == "A (1) "
    assert winner_name(edges) == "A"
