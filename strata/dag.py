"""Directed acyclic graph structure shared by the layout stages."""

from collections import deque
from collections.abc import Iterable, Iterator, Mapping
from typing import Any


class CycleError(ValueError):
    """Raised when a graph handed to a layered layout contains a cycle."""


class DagNode:
    """One node of the DAG, wrapping the caller's datum (or None)."""

    def __init__(self, id: str, data: Any = None):
        self.id = id
        self.data = data
        self.layer: int | None = None
        self.x: float | None = None
        self.y: float | None = None
        self.parents: list["DagNode"] = []
        self.children: list["DagNode"] = []

    def __repr__(self) -> str:
        return f"DagNode({self.id!r}, layer={self.layer}, x={self.x}, y={self.y})"


class DagLink:
    """A directed link; ``points`` is filled in by the coordinate stage."""

    def __init__(self, source: DagNode, target: DagNode, data: Any = None):
        self.source = source
        self.target = target
        self.data = data
        self.points: list[list[float]] = []

    def __repr__(self) -> str:
        return f"DagLink({self.source.id!r} -> {self.target.id!r})"


class Dag:
    def __init__(self, nodes: list[DagNode], links: list[DagLink]):
        self._nodes = nodes
        self._links = links
        self._by_id = {node.id: node for node in nodes}

    def __iter__(self) -> Iterator[DagNode]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def node(self, node_id: Any) -> DagNode | None:
        return self._by_id.get(str(node_id))

    def links(self) -> list[DagLink]:
        return self._links

    def roots(self) -> list[DagNode]:
        return [node for node in self._nodes if not node.parents]

    def topological_order(self) -> list[DagNode]:
        """
        Order nodes so every link points forward.

        Kahn's algorithm; among ready nodes the one that comes first in the
        DAG's own node order wins, which keeps the result deterministic.

        Raises:
            CycleError: if the graph has a cycle (self-loops included).
        """
        position = {id(node): i for i, node in enumerate(self._nodes)}
        in_degree = {id(node): len(node.parents) for node in self._nodes}
        ready = deque(node for node in self._nodes if in_degree[id(node)] == 0)
        order: list[DagNode] = []

        while ready:
            node = ready.popleft()
            order.append(node)
            released = []
            for child in node.children:
                in_degree[id(child)] -= 1
                if in_degree[id(child)] == 0:
                    released.append(child)
            for child in sorted(released, key=lambda n: position[id(n)]):
                ready.append(child)

        if len(order) != len(self._nodes):
            stuck = [node.id for node in self._nodes if in_degree[id(node)] > 0]
            raise CycleError(f"Graph contains a cycle through nodes: {stuck}")
        return order


def _field(record: Any, key: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(key)
    return getattr(record, key, None)


def build_dag(nodes: Iterable[Any], links: Iterable[Any]) -> Dag:
    """
    Build a DAG from caller node records and source/target link records.

    Node ids are compared as strings. Input nodes keep their input order and
    come first; link endpoints with no matching input node are appended with
    ``data=None`` so their links can still be routed. No cycle check happens
    here: the layering stage reports cycles.

    Args:
        nodes: Records with an "id" (mapping key or attribute).
        links: Records with "source" and "target" node ids.

    Returns:
        A freshly built Dag owning new DagNode and DagLink objects.
    """
    dag_nodes: dict[str, DagNode] = {}
    for record in nodes:
        node_id = str(_field(record, "id"))
        if node_id not in dag_nodes:
            dag_nodes[node_id] = DagNode(node_id, record)

    dag_links: list[DagLink] = []
    for record in links:
        endpoints = []
        for key in ("source", "target"):
            node_id = str(_field(record, key))
            if node_id not in dag_nodes:
                dag_nodes[node_id] = DagNode(node_id)
            endpoints.append(dag_nodes[node_id])
        source, target = endpoints
        source.children.append(target)
        target.parents.append(source)
        dag_links.append(DagLink(source, target, record))

    return Dag(list(dag_nodes.values()), dag_links)
