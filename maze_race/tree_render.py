import logging
import os

from graphviz import Digraph

logger = logging.getLogger(__name__)

ROUTE_FILL = "#f39c12"


def node_id(pos):
    return str(tuple(pos))


def search_tree(runner):
    """Digraph of a runner's parent pointers; cells on the found route are filled."""
    dot = Digraph(name=f"{runner.key}_tree")
    dot.attr("node", shape="box", fontsize="10")
    on_route = set(runner.route())

    for child, parent in runner.came_from.items():
        if child in on_route:
            dot.node(node_id(child), style="filled", fillcolor=ROUTE_FILL)
        else:
            dot.node(node_id(child))
        if parent is not None:
            dot.edge(node_id(parent), node_id(child))
    return dot


def render_search_tree(runner, directory, fmt=None, view=False):
    """Write the tree to <directory>/<key>_tree.gv.

    With fmt (e.g. "png") the graphviz binaries are also run to produce an
    image; without it only the DOT source is written.
    """
    dot = search_tree(runner)
    os.makedirs(directory, exist_ok=True)
    filename = f"{runner.key}_tree.gv"
    if fmt is None:
        path = dot.save(filename=filename, directory=directory)
    else:
        path = dot.render(filename=filename, directory=directory, format=fmt, view=view)
    logger.info("Wrote search tree for %s to %s", runner.key, path)
    return path
