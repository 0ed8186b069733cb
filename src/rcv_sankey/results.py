"""
Recover the election winner from a flat list of flow edges.

The chart renderer only ever sees labelled edges, so the winner has to be
read back from the labels: a terminal label is a target that is never a
source, and the winner is the terminal label from the latest round.
"""

from __future__ import annotations
from typing import Iterable, List, Mapping, Optional, Union

import re

from rcv_sankey.graph import FlowEdge

VOTE_COUNT_SUFFIX = re.compile(r"\s*\(\d+\)\s*$")
TRAILING_SPACES = re.compile(r" *$")

AnyEdge = Union[FlowEdge, Mapping[str, object]]


def _endpoints(edge: AnyEdge):
    if isinstance(edge, FlowEdge):
        return edge.source, edge.target
    return edge["source"], edge["target"]


def base_name(label: str) -> str:
    """Strip the " (N)" vote count and the round padding from a label."""
    return VOTE_COUNT_SUFFIX.sub("", label).strip()


def label_round(label: str) -> int:
    """Round number encoded by the trailing spaces of a label."""
    return len(TRAILING_SPACES.search(label).group(0))


def terminal_nodes(edges: Iterable[AnyEdge]) -> List[str]:
    """Targets that never appear as a source, in first-seen order."""
    sources = set()
    targets = {}
    for edge in edges:
        source, target = _endpoints(edge)
        sources.add(source)
        targets.setdefault(target, None)
    return [t for t in targets if t not in sources]


def winner_node(edges: Iterable[AnyEdge]) -> Optional[str]:
    """Label of the winner's final vertex, or None for an empty edge list.

    Eliminated candidates whose votes all exhausted are terminal too, so among several
    terminal labels the one from the latest round wins. Ties keep the first seen.
    With no terminal label at all the target of the last edge is taken.
    """
    edges = list(edges)
    if not edges:
        return None

    terminals = terminal_nodes(edges)
    if not terminals:
        return _endpoints(edges[-1])[1]

    best = terminals[0]
    for candidate in terminals[1:]:
        if label_round(candidate) > label_round(best):
            best = candidate
    return best


def winner_name(edges: Iterable[AnyEdge]) -> Optional[str]:
    node = winner_node(edges)
    return base_name(node) if node else None
