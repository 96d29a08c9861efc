import collections
import enum
import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from maze_race.grid import Position

logger = logging.getLogger(__name__)


class Outcome(enum.Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"


class StepKind(enum.Enum):
    VISIT = "visit"          # an ordinary cell was expanded
    GOAL = "goal"            # end was taken off the frontier
    EXHAUSTED = "exhausted"  # frontier ran dry without reaching end


Step = collections.namedtuple("Step", ["kind", "position"])


@dataclass
class SearchResult:
    runner: str
    outcome: Outcome
    steps: int                      # frontier removals, the goal removal included
    found_at: Optional[int] = None  # step index at which end came off the frontier
    visit_order: List[Position] = field(default_factory=list)
    route: List[Position] = field(default_factory=list)

    @property
    def found(self):
        return self.outcome is Outcome.FOUND


def manhattan(a, b):
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


class SearchRunner:
    """
    One search over one private grid, advanced a single expansion per step().

    Shared skeleton:
      - The frontier is seeded with start, which is marked visited at once.
      - step() removes one position according to the subclass's ordering.
        If it is end, the run succeeds. Otherwise every in-bounds neighbour
        that is neither visited nor an obstacle is marked visited, gets a
        parent pointer and joins the frontier.
      - An empty frontier ends the run with Outcome.NOT_FOUND.

    Subclasses only provide the frontier: _push, _pop and _frontier_size.

    Metrics:
      - nodes_expanded: positions removed from the frontier (goal included)
      - unique_explored: positions discovered so far
      - frontier_max: largest frontier seen
      - path_length: edges on the reconstructed route, 0 when not found
    """
    key = None
    label = None
    # When False, the visited flag means "expanded" and is set on removal
    mark_on_discovery = True

    def __init__(self, grid, start, end):
        self.grid = grid
        self.start = Position(*start)
        self.end = Position(*end)
        self.came_from = {self.start: None}
        self.visit_order = []
        self.steps = 0
        self.found_at = None
        self.outcome = None
        self.is_done = False
        self.metrics = {
            'nodes_expanded': 0,
            'unique_explored': 1,
            'frontier_max': 0,
            'path_length': 0,
        }

        if self.mark_on_discovery:
            self.grid.mark_visited(self.start.x, self.start.y)
        self._push(self.start)
        self._bump_frontier_metric()

    # --- Frontier hooks ---
    def _push(self, pos):
        raise NotImplementedError

    def _pop(self):
        """Remove and return the next position, or None when nothing is left."""
        raise NotImplementedError

    def _frontier_size(self):
        raise NotImplementedError

    def _bump_frontier_metric(self):
        size = self._frontier_size()
        if size > self.metrics['frontier_max']:
            self.metrics['frontier_max'] = size

    def _expand(self, current):
        for nb in self.grid.neighbors(current):
            if self.grid.is_open(nb.x, nb.y):
                self.grid.mark_visited(nb.x, nb.y)
                self.came_from[nb] = current
                self._push(nb)
        self.metrics['unique_explored'] = len(self.came_from)

    def _finish(self, outcome):
        self.outcome = outcome
        self.is_done = True
        if outcome is Outcome.FOUND:
            self.metrics['path_length'] = max(0, len(self.route()) - 1)
        logger.debug("%s finished: %s after %d steps", self.key, outcome.value, self.steps)

    def step(self):
        """Advance one expansion. Returns a Step, or None once the run is over."""
        if self.is_done:
            return None

        current = self._pop()
        if current is None:
            self._finish(Outcome.NOT_FOUND)
            return Step(StepKind.EXHAUSTED, None)

        self.steps += 1
        self.metrics['nodes_expanded'] += 1

        if current == self.end:
            self.found_at = self.steps
            self._finish(Outcome.FOUND)
            return Step(StepKind.GOAL, current)

        self.visit_order.append(current)
        self._expand(current)
        self._bump_frontier_metric()
        return Step(StepKind.VISIT, current)

    def run(self):
        while not self.is_done:
            self.step()
        return self.result()

    def route(self):
        """start..end following parent pointers; empty unless end was reached."""
        if self.outcome is not Outcome.FOUND:
            return []
        route = []
        node = self.end
        while node is not None:
            route.append(node)
            node = self.came_from.get(node)
        route.reverse()
        return route

    def result(self):
        return SearchResult(
            runner=self.key,
            outcome=self.outcome if self.outcome is not None else Outcome.NOT_FOUND,
            steps=self.steps,
            found_at=self.found_at,
            visit_order=list(self.visit_order),
            route=self.route(),
        )


class BreadthFirstRunner(SearchRunner):
    """FIFO frontier: expands cells in non-decreasing hop count from start."""
    key = "bfs"
    label = "Breadth-First"

    def __init__(self, grid, start, end):
        self.queue = collections.deque()
        super().__init__(grid, start, end)

    def _push(self, pos):
        self.queue.append(pos)

    def _pop(self):
        return self.queue.popleft() if self.queue else None

    def _frontier_size(self):
        return len(self.queue)


class DepthFirstRunner(SearchRunner):
    """LIFO frontier. Cells are marked on discovery, so each is pushed at most once."""
    key = "dfs"
    label = "Depth-First"

    def __init__(self, grid, start, end):
        self.stack = []
        super().__init__(grid, start, end)

    def _push(self, pos):
        self.stack.append(pos)

    def _pop(self):
        return self.stack.pop() if self.stack else None

    def _frontier_size(self):
        return len(self.stack)


class PriorityRunner(SearchRunner):
    """Heap frontier ordered by priority(), ties broken by insertion order.

    The counter makes the heap pick the same element that a stable sort of
    the whole frontier followed by taking the head would pick.
    """
    def __init__(self, grid, start, end):
        self.heap = []
        self._counter = itertools.count()
        super().__init__(grid, start, end)

    def priority(self, pos):
        raise NotImplementedError

    def _push(self, pos):
        heapq.heappush(self.heap, (self.priority(pos), next(self._counter), pos))

    def _pop(self):
        if not self.heap:
            return None
        return heapq.heappop(self.heap)[2]

    def _frontier_size(self):
        return len(self.heap)


class GreedyBestFirstRunner(PriorityRunner):
    # Labelled "A*" in older versions of the race; there is no path-cost term.
    key = "greedy"
    label = "Greedy Best-First"

    def priority(self, pos):
        return manhattan(pos, self.end)


class NearestToStartRunner(PriorityRunner):
    # Labelled "Dijkstra" in older versions of the race; orders by straight
    # Manhattan distance from start, not by accumulated cost.
    key = "nearest_start"
    label = "Nearest-to-Start"

    def priority(self, pos):
        return manhattan(pos, self.start)


class CostRunner(PriorityRunner):
    """Textbook best-first search over accumulated path cost (unit edges).

    Cells are closed (marked visited) when expanded, and a neighbour is
    pushed again whenever a cheaper route to it turns up. Entries for cells
    that were closed in the meantime are skipped on removal.
    """
    mark_on_discovery = False

    def __init__(self, grid, start, end):
        self.cost_so_far = {Position(*start): 0}
        super().__init__(grid, start, end)

    def heuristic(self, pos):
        return 0

    def priority(self, pos):
        return self.cost_so_far[pos] + self.heuristic(pos)

    def _pop(self):
        while self.heap:
            pos = heapq.heappop(self.heap)[2]
            if not self.grid.is_visited(pos.x, pos.y):
                self.grid.mark_visited(pos.x, pos.y)
                return pos
        return None

    def _expand(self, current):
        new_cost = self.cost_so_far[current] + 1
        for nb in self.grid.neighbors(current):
            if not self.grid.is_open(nb.x, nb.y):
                continue
            if nb not in self.cost_so_far or new_cost < self.cost_so_far[nb]:
                self.cost_so_far[nb] = new_cost
                self.came_from[nb] = current
                self._push(nb)
        self.metrics['unique_explored'] = len(self.came_from)


class AStarRunner(CostRunner):
    key = "astar"
    label = "A*"

    def heuristic(self, pos):
        return manhattan(pos, self.end)


class DijkstraRunner(CostRunner):
    key = "dijkstra"
    label = "Dijkstra"


RUNNERS = collections.OrderedDict(
    (cls.key, cls) for cls in (
        BreadthFirstRunner,
        DepthFirstRunner,
        GreedyBestFirstRunner,
        NearestToStartRunner,
        AStarRunner,
        DijkstraRunner,
    )
)


def create_runner(key, grid, start, end):
    try:
        cls = RUNNERS[key]
    except KeyError:
        raise KeyError(f"unknown runner {key!r}; choose from {', '.join(RUNNERS)}") from None
    return cls(grid, start, end)
