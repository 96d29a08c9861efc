"""Tests for the search runners."""

import random

import pytest

from maze_race.generator import Maze
from maze_race.grid import Grid, Position, DIRECTIONS
from maze_race.runners import (RUNNERS, Outcome, StepKind, create_runner, manhattan,
                               BreadthFirstRunner, DepthFirstRunner, GreedyBestFirstRunner,
                               NearestToStartRunner, AStarRunner, DijkstraRunner)

START = Position(0, 0)
END = Position(7, 14)


def resort_then_shift(grid, start, end, key):
    """Frontier discipline of the priority runners, written the slow way:
    stable-sort the whole frontier before every removal and take the head."""
    frontier = [start]
    seen = {start}
    order = []
    while frontier:
        frontier.sort(key=key)
        current = frontier.pop(0)
        if current == end:
            return order, True
        order.append(current)
        for dx, dy in DIRECTIONS:
            nb = Position(current.x + dx, current.y + dy)
            if grid.in_bounds(*nb) and not grid.is_obstacle(*nb) and nb not in seen:
                seen.add(nb)
                frontier.append(nb)
    return order, False


def random_obstacles(rows, cols, density, seed):
    rng = random.Random(seed)
    grid = Grid(rows, cols, fill_obstacle=False)
    for r in range(rows):
        for c in range(cols):
            if rng.random() < density:
                grid.set_obstacle(r, c, True)
    grid.set_obstacle(0, 0, False)
    grid.set_obstacle(rows - 1, cols - 1, False)
    return grid


class TestBreadthFirst:

    def test_open_grid_reaches_goal_in_21_hops(self, open_grid):
        result = BreadthFirstRunner(open_grid, START, END).run()
        assert result.found
        assert result.outcome is Outcome.FOUND
        assert len(result.route) - 1 == 21
        assert result.route[0] == START and result.route[-1] == END
        assert result.steps <= (21 + 1) ** 2
        assert result.found_at == result.steps

    @pytest.mark.parametrize("seed", range(15))
    def test_visits_in_non_decreasing_hop_order(self, seed, hop_distances):
        maze = Maze(8, 15, START, END, seed=seed)
        dist = hop_distances(maze.grid, START)
        result = BreadthFirstRunner(maze.clone_grid(), START, END).run()
        hops = [dist[pos] for pos in result.visit_order]
        assert hops == sorted(hops)
        assert len(result.route) - 1 == dist[END]

    @pytest.mark.parametrize("seed", range(10))
    def test_shortest_route_with_loops(self, seed, hop_distances):
        grid = random_obstacles(10, 12, 0.25, seed)
        end = Position(9, 11)
        dist = hop_distances(grid, START)
        result = BreadthFirstRunner(grid.clone(), START, end).run()
        if end in dist:
            assert result.found
            assert len(result.route) - 1 == dist[end]
        else:
            assert result.outcome is Outcome.NOT_FOUND


class TestDepthFirst:

    @pytest.mark.parametrize("seed", range(10))
    def test_each_cell_expanded_at_most_once(self, seed):
        maze = Maze(8, 15, START, END, seed=seed)
        result = DepthFirstRunner(maze.clone_grid(), START, END).run()
        assert result.found
        assert len(set(result.visit_order)) == len(result.visit_order)

    def test_terminates_on_open_and_sealed_grids(self, open_grid, sealed_grid):
        assert DepthFirstRunner(open_grid, START, END).run().found
        result = DepthFirstRunner(sealed_grid, START, (2, 3)).run()
        assert result.outcome is Outcome.NOT_FOUND
        assert len(result.visit_order) == len(sealed_grid.open_cells()) - 1

    def test_goes_deep_first(self, open_grid):
        runner = DepthFirstRunner(open_grid, START, END)
        runner.step()
        # start pushed (1, 0) then (0, 1); the later push comes off first
        assert runner.step().position == Position(0, 1)


class TestPriorityRunners:

    @pytest.mark.parametrize("cls", [GreedyBestFirstRunner, NearestToStartRunner])
    @pytest.mark.parametrize("seed", range(10))
    def test_heap_matches_stable_resort(self, cls, seed):
        maze = Maze(8, 15, START, END, seed=seed)
        if cls is GreedyBestFirstRunner:
            key = lambda pos: manhattan(pos, END)
        else:
            key = lambda pos: manhattan(pos, START)
        expected, found = resort_then_shift(maze.grid, START, END, key)
        result = cls(maze.clone_grid(), START, END).run()
        assert result.visit_order == expected
        assert result.found == found

    def test_greedy_heads_straight_for_the_goal_on_open_grid(self, open_grid):
        result = GreedyBestFirstRunner(open_grid, START, END).run()
        assert result.steps == 22
        assert len(result.route) - 1 == 21

    def test_nearest_to_start_ties_follow_insertion_order(self, open_grid):
        runner = NearestToStartRunner(open_grid, START, END)
        order = [runner.step().position for _ in range(3)]
        # (1, 0) and (0, 1) tie at distance 1; (1, 0) was pushed first
        assert order == [START, Position(1, 0), Position(0, 1)]


class TestCostRunners:

    @pytest.mark.parametrize("cls", [AStarRunner, DijkstraRunner])
    @pytest.mark.parametrize("seed", range(15))
    def test_routes_are_shortest(self, cls, seed, hop_distances):
        grid = random_obstacles(10, 12, 0.3, seed)
        end = Position(9, 11)
        dist = hop_distances(grid, START)
        result = cls(grid.clone(), START, end).run()
        if end in dist:
            assert result.found
            assert len(result.route) - 1 == dist[end]
        else:
            assert not result.found
            assert result.route == []

    def test_astar_expands_no_more_than_dijkstra(self, open_grid):
        astar = AStarRunner(open_grid.clone(), START, END).run()
        dijkstra = DijkstraRunner(open_grid.clone(), START, END).run()
        assert astar.steps <= dijkstra.steps
        assert len(astar.route) == len(dijkstra.route) == 22

    def test_cells_are_closed_on_expansion(self, open_grid):
        runner = AStarRunner(open_grid, START, END)
        assert not open_grid.is_visited(0, 0)
        runner.step()
        assert open_grid.is_visited(0, 0)
        assert not open_grid.is_visited(1, 0)


class TestSharedContract:

    @pytest.mark.parametrize("key", list(RUNNERS))
    def test_sealed_end_is_not_found(self, key, sealed_grid):
        runner = create_runner(key, sealed_grid, START, (2, 3))
        result = runner.run()
        assert result.outcome is Outcome.NOT_FOUND
        assert not result.found
        assert result.found_at is None
        assert result.route == []
        assert runner.metrics['path_length'] == 0

    @pytest.mark.parametrize("key", list(RUNNERS))
    def test_step_events(self, key, open_grid):
        runner = create_runner(key, open_grid, START, END)
        kinds = []
        while True:
            step = runner.step()
            if step is None:
                break
            kinds.append(step.kind)
        assert kinds[-1] is StepKind.GOAL
        assert kinds.count(StepKind.GOAL) == 1
        assert all(kind is StepKind.VISIT for kind in kinds[:-1])
        assert END not in runner.visit_order
        assert runner.step() is None

    def test_exhausted_event(self, sealed_grid):
        runner = BreadthFirstRunner(sealed_grid, START, (2, 3))
        steps = []
        while not runner.is_done:
            steps.append(runner.step())
        assert steps[-1].kind is StepKind.EXHAUSTED
        assert steps[-1].position is None

    @pytest.mark.parametrize("key", list(RUNNERS))
    def test_metrics(self, key, open_grid):
        runner = create_runner(key, open_grid, START, END)
        result = runner.run()
        assert runner.metrics['nodes_expanded'] == result.steps
        assert runner.metrics['unique_explored'] >= result.steps
        assert runner.metrics['frontier_max'] >= 1
        assert runner.metrics['path_length'] == len(result.route) - 1 >= 21

    def test_runners_on_separate_clones_do_not_interfere(self):
        maze = Maze(8, 15, START, END, seed=2)
        grids = maze.clones(["bfs", "dfs"])
        BreadthFirstRunner(grids["bfs"], START, END).run()
        assert grids["dfs"].visited_cells() == []

    def test_unknown_runner(self, open_grid):
        with pytest.raises(KeyError):
            create_runner("bogus", open_grid, START, END)
