from collections.abc import Iterable, Mapping
from typing import Any

NodeId = str | int


class Node:
    def __init__(
        self,
        id: NodeId,
        data: Mapping[str, Any] | None = None,
        width: float = 0.0,
        height: float = 0.0,
    ):
        self.id = id
        self.data = dict(data) if data else {}
        self.width = width
        self.height = height

    def get_property(self, key: str) -> Any:
        return self.data.get(key)

    def __repr__(self) -> str:
        return f"Node({self.id!r})"


class Edge:
    def __init__(
        self,
        source: NodeId,
        target: NodeId,
        id: NodeId | None = None,
        directed: bool = True,
        data: Mapping[str, Any] | None = None,
    ):
        self.source = source
        self.target = target
        self.id = id if id is not None else f"{source}->{target}"
        self.directed = directed
        self.data = dict(data) if data else {}

    def __repr__(self) -> str:
        return f"Edge({self.source!r}, {self.target!r})"


class Graph:
    def __init__(
        self,
        nodes: list[Node],
        edges: list[Edge],
    ):
        self.nodes = nodes
        self.edges = edges
        self.id2idx = {str(node.id): idx for idx, node in enumerate(nodes)}
        self.incoming: dict[str, list[str]] = {str(node.id): [] for node in nodes}
        self.outgoing: dict[str, list[str]] = {str(node.id): [] for node in nodes}
        for edge in edges:
            src, dst = str(edge.source), str(edge.target)
            self.outgoing.setdefault(src, []).append(dst)
            self.incoming.setdefault(dst, []).append(src)

    @classmethod
    def from_records(
        cls,
        nodes: Iterable[Mapping[str, Any]],
        edges: Iterable[Mapping[str, Any]],
    ) -> "Graph":
        """Build a graph from plain dict records.

        Node records need an "id"; everything else becomes node data.
        Edge records need "source" and "target" and may carry "id" and
        "directed".
        """
        graph_nodes = []
        for record in nodes:
            data = {k: v for k, v in record.items() if k != "id"}
            graph_nodes.append(Node(record["id"], data=data))
        graph_edges = []
        for record in edges:
            data = {
                k: v for k, v in record.items()
                if k not in ("id", "source", "target", "directed")
            }
            graph_edges.append(Edge(
                record["source"],
                record["target"],
                id=record.get("id"),
                directed=record.get("directed", True),
                data=data,
            ))
        return cls(graph_nodes, graph_edges)

    def find_node(self, node_id: NodeId) -> Node | None:
        idx = self.id2idx.get(str(node_id))
        return None if idx is None else self.nodes[idx]


class Layout:
    def __init__(self, graph: Graph, centers: list[float]):
        self.graph = graph
        self.centers = centers

    def get_node_center(self, node_id: NodeId) -> tuple[float, float]:
        idx = self.graph.id2idx[str(node_id)] * 2
        return (self.centers[idx], self.centers[idx + 1])
