"""
Contains the FlowGraph class, the round-layered vote transfer graph drawn as a Sankey chart.
"""

from __future__ import annotations
from typing import Dict, Iterator, List, Optional, Tuple

import collections
import dataclasses

from rcv_sankey.errors import FlowConservationError
from rcv_sankey.package_types import EdgeDict, VertexKey


def node_label(name: str, vote_count: int, round_num: int) -> str:
    """Render a vertex as "{name} ({vote_count})" followed by `round_num` spaces.

    The trailing spaces keep labels from different rounds distinct for the chart renderer
    and encode the round number for :func:`rcv_sankey.results.label_round`.
    """
    return f"{name} ({vote_count})" + " " * max(0, round_num)


@dataclasses.dataclass(frozen=True)
class FlowEdge:
    source: str
    target: str
    weight: int

    def to_dict(self) -> EdgeDict:
        return {"source": self.source, "target": self.target, "weight": str(self.weight)}


@dataclasses.dataclass
class Vertex:
    vote_count: int = 0
    out_edges: Dict[VertexKey, int] = dataclasses.field(default_factory=dict)


class FlowGraph:
    """Ordered mapping of (candidate name, round) vertices plus an append-only edge list.

    Edges only ever point from round r to round r + 1, so the graph is a DAG layered by round.
    An edge may target a vertex that does not exist yet, it is created when that round is recorded.
    """

    def __init__(self) -> None:
        self._vertices: Dict[VertexKey, Vertex] = collections.OrderedDict()
        self._edges: List[Tuple[VertexKey, VertexKey]] = []
        # running sums, kept in step with add_vertex and add_edge
        self._inbound: Dict[VertexKey, int] = collections.defaultdict(int)
        self._by_round: Dict[int, List[VertexKey]] = collections.defaultdict(list)

    def __contains__(self, key: VertexKey) -> bool:
        return key in self._vertices

    def __len__(self) -> int:
        return len(self._vertices)

    def vertices(self) -> Iterator[VertexKey]:
        return iter(self._vertices)

    def vertex(self, key: VertexKey) -> Vertex:
        return self._vertices[key]

    def vote_count(self, key: VertexKey) -> int:
        vertex = self._vertices.get(key)
        return vertex.vote_count if vertex is not None else 0

    def add_vertex(self, name: str, round_num: int, vote_count: int) -> VertexKey:
        key = (name, round_num)
        if key in self._vertices:
            self._vertices[key].vote_count = vote_count
        else:
            self._vertices[key] = Vertex(vote_count=vote_count)
            self._by_round[round_num].append(key)
        return key

    def add_edge(self, source: VertexKey, target: VertexKey, weight: int) -> None:
        if source not in self._vertices:
            raise KeyError(f"edge source vertex {source} has not been recorded")
        if target[1] != source[1] + 1:
            raise ValueError(f"edge {source} -> {target} does not connect consecutive rounds")
        out_edges = self._vertices[source].out_edges
        if target not in out_edges:
            self._edges.append((source, target))
        self._inbound[target] += weight - out_edges.get(target, 0)
        out_edges[target] = weight

    def edges(self) -> Iterator[tuple]:
        """Yield (source key, target key, weight) in the order edges were first added."""
        for source, target in self._edges:
            yield source, target, self._vertices[source].out_edges[target]

    def inbound_weight(self, key: VertexKey) -> int:
        return self._inbound.get(key, 0)

    def round_vertices(self, round_num: int) -> List[VertexKey]:
        return list(self._by_round.get(round_num, []))

    def terminal_vertices(self) -> List[VertexKey]:
        return [key for key, vertex in self._vertices.items() if not vertex.out_edges]

    def check_conservation(self, round_num: int) -> None:
        """Every vertex after round 1 must hold exactly the votes flowing into it.

        :raises FlowConservationError: on the first vertex that does not
        """
        if round_num <= 1:
            return
        for key in self.round_vertices(round_num):
            inbound = self.inbound_weight(key)
            if inbound != self._vertices[key].vote_count:
                raise FlowConservationError(
                    f"vertex {key} records {self._vertices[key].vote_count} votes"
                    f" but receives {inbound} from round {round_num - 1}"
                )

    def dangling_targets(self) -> List[VertexKey]:
        """Edge targets that were never recorded as vertices."""
        return [target for _, target in self._edges if target not in self._vertices]

    def label(self, key: VertexKey) -> str:
        name, round_num = key
        return node_label(name, self.vote_count(key), round_num)

    def to_edges(self, min_weight: Optional[int] = None) -> List[FlowEdge]:
        """Flatten the graph into labelled edges.

        :param min_weight: drop edges lighter than this, defaults to None (keep all)
        :type min_weight: Optional[int], optional
        :rtype: List[FlowEdge]
        """
        flat = []
        for source, target, weight in self.edges():
            if min_weight is not None and weight < min_weight:
                continue
            flat.append(FlowEdge(self.label(source), self.label(target), weight))
        return flat
