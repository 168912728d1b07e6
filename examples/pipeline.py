import logging

from strata import layout_dag_aligned

nodes = [
    {"id": "checkout", "srank": 0, "rankLabel": "0s"},
    {"id": "install", "srank": 12},
    {"id": "lint", "srank": 40},
    {"id": "unit tests", "srank": 40},
    {"id": "build", "srank": 95, "rankLabel": "95s"},
    {"id": "package", "srank": 130},
    {"id": "deploy", "srank": 180, "rankLabel": "3m"},
]

links = [
    {"source": "checkout", "target": "install"},
    {"source": "install", "target": "lint"},
    {"source": "install", "target": "unit tests"},
    {"source": "install", "target": "build"},
    {"source": "build", "target": "package"},
    {"source": "unit tests", "target": "deploy"},
    {"source": "package", "target": "deploy"},
]


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    # one pixel per elapsed second
    layout = layout_dag_aligned(nodes, links, rank="srank", y_scale=lambda seconds: seconds * 2, debug=True)
    for node in layout.nodes:
        print(f"{node['id']:>12}  x={node['x']:7.1f}  y={node['y']:7.1f}")
    print(f"size: {layout.width:.1f} x {layout.height:.1f}")
