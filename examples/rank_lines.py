from strata.config import GridConfig, LayoutConfig
from strata.graph import Graph

graph = Graph.from_records(
    nodes=[{"id": f"step {i}", "srank": i, "rankLabel": f"T+{i}"} for i in range(12)],
    edges=[{"source": f"step {i}", "target": f"step {i + 1}"} for i in range(11)],
)


if __name__ == "__main__":
    engine = LayoutConfig(coord="greedy", gap=(20, 30)).bind(rank="srank")
    result = engine.fit(graph)

    grid = GridConfig(max_count=5)
    lines = grid.rank_lines(
        graph.nodes,
        lambda node: result.layout.get_node_center(node.id),
        y_min=0,
        y_max=result.metadata["height"],
    )
    for line in lines:
        print(f"{line.label:>6}  y={line.y_position:.1f}")
