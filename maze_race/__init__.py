from maze_race.grid import Grid, Cell, Position
from maze_race.generator import Maze
from maze_race.runners import (RUNNERS, Outcome, SearchResult, create_runner,
                               BreadthFirstRunner, DepthFirstRunner, GreedyBestFirstRunner,
                               NearestToStartRunner, AStarRunner, DijkstraRunner)
from maze_race.config import RaceConfig
from maze_race.race import Race
from maze_race.scheduler import Scheduler, VirtualClock, MonotonicClock

__version__ = "0.1.0"
