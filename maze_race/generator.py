import collections
import logging
import random

from maze_race.grid import Grid, Position, DIRECTIONS

logger = logging.getLogger(__name__)

# Carved passages live on every other cell so that walls stay one cell thick
LATTICE_STEP = 2


class Maze:
    """
    Generates and stores the base grid that every runner copies.

    Generation pipeline:
      1. Fill the grid with obstacles.
      2. Carve a perfect maze with randomized iterative DFS over the lattice of
         cells that sit an even number of rows and columns away from start.
      3. Force start and end open.
      4. Optionally link end to the carved network when step 3 left it
         stranded (link_end=True, the default).
      5. Clear the generator's visitation marks so clones start clean.

    Parameters:
      rows, cols (int): grid size
      start, end (Position): fixed endpoints, both must be in bounds
      seed (int | None): seed for this maze's private random.Random
      link_end (bool): repair an unreachable end; False keeps the stranded
                       end exactly as carving left it
    """
    def __init__(self, rows, cols, start, end, seed=None, link_end=True):
        self.rows = rows
        self.cols = cols
        self.start = Position(*start)
        self.end = Position(*end)
        self.seed = seed
        self.random = random.Random(seed)
        self.grid = Grid(rows, cols, fill_obstacle=True)
        # (from_node, through_cell, to_node) for every carve, in order
        self.carves = []
        # cells opened by the end link repair, empty when none was needed
        self.link_cells = []

        self._generate_dfs()

        self.grid.set_obstacle(self.start.x, self.start.y, False)
        self.grid.set_obstacle(self.end.x, self.end.y, False)

        if link_end and self.end not in self.reachable_from(self.start):
            self._link_end()

        self.grid.reset_visited()
        logger.info("Generated %dx%d maze (seed=%s): %d carves, %d open cells",
                    rows, cols, seed, len(self.carves), len(self.grid.open_cells()))

    def _generate_dfs(self):
        """Randomized depth-first carve.

        The stack holds lattice nodes still being explored. The top node looks
        two cells away in each direction for unvisited in-bounds nodes; if
        there are any, one is picked at random, the wall cell between them and
        the node itself are cleared, and the node is pushed. Otherwise the top
        is popped (backtrack). Every node is reached by exactly one carve, so
        the carved cells form a spanning tree.
        """
        grid = self.grid
        stack = [self.start]
        grid.set_obstacle(self.start.x, self.start.y, False)
        grid.mark_visited(self.start.x, self.start.y)

        while stack:
            x, y = stack[-1]

            candidates = []
            for dx, dy in DIRECTIONS:
                nx, ny = x + dx * LATTICE_STEP, y + dy * LATTICE_STEP
                if grid.in_bounds(nx, ny) and not grid.is_visited(nx, ny):
                    candidates.append((Position(nx, ny), Position(x + dx, y + dy)))

            if candidates:
                nxt, through = self.random.choice(candidates)
                grid.set_obstacle(through.x, through.y, False)
                grid.set_obstacle(nxt.x, nxt.y, False)
                grid.mark_visited(nxt.x, nxt.y)
                self.carves.append((Position(x, y), through, nxt))
                stack.append(nxt)
            else:
                stack.pop()

    def _link_end(self):
        # Nearest lattice node: at most one row and one column away from end
        ex, ey = self.end
        tx = ex - (ex - self.start.x) % LATTICE_STEP
        ty = ey - (ey - self.start.y) % LATTICE_STEP
        if tx < 0:
            tx = ex + 1
        if ty < 0:
            ty = ey + 1

        for cell in (Position(tx, ey), Position(tx, ty)):
            if self.grid.is_obstacle(cell.x, cell.y):
                self.grid.set_obstacle(cell.x, cell.y, False)
                self.link_cells.append(cell)
        logger.warning("End %s was cut off from the carved maze; opened %s",
                       tuple(self.end), [tuple(c) for c in self.link_cells])

    def lattice_nodes(self):
        """Carved lattice nodes: start plus the target of every carve."""
        return [self.start] + [to for _, _, to in self.carves]

    def reachable_from(self, origin):
        """Positions reachable from origin through open cells (ignores visited flags)."""
        seen = {Position(*origin)}
        queue = collections.deque(seen)
        while queue:
            current = queue.popleft()
            for nb in self.grid.neighbors(current):
                if nb not in seen and not self.grid.is_obstacle(nb.x, nb.y):
                    seen.add(nb)
                    queue.append(nb)
        return seen

    def clone_grid(self):
        return self.grid.clone()

    def clones(self, keys):
        """One independent grid per key, visited flags reset."""
        return {key: self.grid.clone() for key in keys}

    def __str__(self):
        return str(self.grid)
