import collections

import pytest

from maze_race.grid import Grid, Position


@pytest.fixture
def open_grid():
    """8x15 grid with no obstacles at all."""
    return Grid(8, 15, fill_obstacle=False)


@pytest.fixture
def sealed_grid():
    """End (2, 3) is walled in on all four sides; start (0, 0) is elsewhere."""
    return Grid.from_strings([
        ".....",
        "...#.",
        "..#.#",
        "...#.",
        ".....",
    ])


@pytest.fixture
def hop_distances():
    """Returns a function computing true hop counts from a start cell."""
    def distances(grid, start):
        start = Position(*start)
        dist = {start: 0}
        queue = collections.deque([start])
        while queue:
            current = queue.popleft()
            for nb in grid.neighbors(current):
                if nb not in dist and not grid.is_obstacle(nb.x, nb.y):
                    dist[nb] = dist[current] + 1
                    queue.append(nb)
        return dist
    return distances
