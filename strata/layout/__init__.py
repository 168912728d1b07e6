from abc import abstractmethod

from strata import graph
from strata.dag import DagLink, DagNode


class LayoutEngine:
    """Base class for layout engines."""

    @abstractmethod
    def fit(self, g: graph.Graph) -> "Result":
        """Compute layout for the given graph."""
        pass


class Result:
    """Layout result container."""

    def __init__(
        self,
        layout: graph.Layout,
        metadata: dict | None = None
    ):
        self.layout = layout
        self.metadata = metadata or {}


class Vertex:
    """
    A slot on one layer of the layered graph.

    Real vertices wrap a DagNode; dummy vertices stand in for a long link
    crossing an intermediate layer and have zero size.
    """

    def __init__(
        self,
        layer: int,
        node: DagNode | None = None,
        link: DagLink | None = None
    ):
        self.layer = layer
        self.node = node
        self.link = link
        self.parents: list["Vertex"] = []
        self.children: list["Vertex"] = []
        self.x = 0.0
        self.y = 0.0
        self.width = 0.0
        self.height = 0.0

    @property
    def is_dummy(self) -> bool:
        return self.node is None

    def __repr__(self) -> str:
        name = "dummy" if self.is_dummy else repr(self.node.id)
        return f"Vertex({name}, layer={self.layer}, x={self.x})"


def separation(a: Vertex, b: Vertex, gap: float) -> float:
    """Minimum center distance between two neighbours on a layer."""
    return (a.width + b.width) / 2 + gap


__all__ = [
    "LayoutEngine",
    "Result",
    "Vertex",
    "separation",
]
