import collections
import logging
import random

from maze_race.generator import Maze
from maze_race.runners import StepKind, create_runner
from maze_race.scheduler import Scheduler

logger = logging.getLogger(__name__)

EVENTS = ("visit", "goal", "exhausted", "new_maze")


class Race:
    """
    Races a lineup of runners over private copies of one maze.

    Lifecycle:
      - new_maze() generates a base maze, clones one grid per runner and
        bumps the generation token. Runners from the previous maze are
        dropped; tasks they still have queued see a stale token and no-op.
      - start() queues the first step of every runner. Each step that visits
        an ordinary cell re-queues the runner after step_delay_ms, so runners
        interleave one cell at a time like the animation they drive.
      - A runner's last step records its SearchResult and fires "goal" or
        "exhausted" exactly once.

    Listeners (subscribe(event, fn)):
      visit(key, position), goal(key, position), exhausted(key), new_maze(race)
    """
    def __init__(self, config, scheduler=None):
        self.config = config.validate()
        self.scheduler = scheduler if scheduler is not None else Scheduler()
        self.generation = 0
        self.maze = None
        self.runners = collections.OrderedDict()
        self.results = {}
        self.started = False
        self._listeners = {event: [] for event in EVENTS}
        self._seeds = random.Random(config.seed)

    def subscribe(self, event, fn):
        if event not in self._listeners:
            raise ValueError(f"unknown event {event!r}; choose from {', '.join(EVENTS)}")
        self._listeners[event].append(fn)

    def _emit(self, event, *args):
        for fn in self._listeners[event]:
            fn(*args)

    def new_maze(self, seed=None):
        cfg = self.config
        self.generation += 1
        if seed is None:
            seed = self._seeds.randrange(2 ** 32)
        self.maze = Maze(cfg.rows, cfg.cols, cfg.start, cfg.end, seed=seed, link_end=cfg.link_end)
        grids = self.maze.clones(cfg.lineup)
        self.runners = collections.OrderedDict(
            (key, create_runner(key, grids[key], cfg.start, cfg.end)) for key in cfg.lineup
        )
        self.results = {}
        self.started = False
        logger.info("Race generation %d ready with %s", self.generation, ", ".join(cfg.lineup))
        self._emit("new_maze", self)
        return self.maze

    def start(self):
        if self.maze is None:
            self.new_maze()
        if self.started:
            return
        self.started = True
        token = self.generation
        for key in self.runners:
            self.scheduler.call_later(0, self._tick, token, key)

    def _tick(self, token, key):
        if token != self.generation:
            logger.debug("Dropping stale step of %s from generation %d", key, token)
            return
        runner = self.runners[key]
        step = runner.step()
        if step is None:
            return

        if step.kind is StepKind.VISIT:
            self._emit("visit", key, step.position)
            self.scheduler.call_later(self.config.step_delay_ms, self._tick, token, key)
        elif step.kind is StepKind.GOAL:
            self.results[key] = runner.result()
            logger.info("%s reached the goal after %d steps", key, runner.steps)
            self._emit("goal", key, step.position)
        else:
            self.results[key] = runner.result()
            logger.info("%s exhausted its frontier after %d steps", key, runner.steps)
            self._emit("exhausted", key)

    @property
    def is_finished(self):
        return self.started and all(runner.is_done for runner in self.runners.values())

    def run_to_completion(self, limit=None):
        """Start (if needed) and drain the scheduler. Needs a VirtualClock scheduler."""
        self.start()
        self.scheduler.run_until_idle(limit)
        return self.results
