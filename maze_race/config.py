from dataclasses import dataclass
from typing import Optional, Tuple

from maze_race.errors import ConfigError
from maze_race.grid import Position
from maze_race.runners import RUNNERS

# --- Maze ---
ROWS = 8
COLS = 15
START = Position(0, 0)
END = Position(7, 14)

# --- Animation ---
STEP_DELAY_MS = 50     # pause between two expansions of the same runner
FRAME_MS = 15          # how often the GUI pumps the scheduler
CELL_SIZE = 20         # GUI

DEFAULT_LINEUP = ("bfs", "dfs", "greedy", "nearest_start")

# --- Color Scheme ---
BG_COLOR = "#2c3e50"
PANEL_COLOR = "#34495e"
WALL_COLOR = "#2c3e50"
PATH_COLOR = "#ecf0f1"
VISITED_COLOR = "#95a5a6"
ROUTE_COLOR = "#f39c12"
START_COLOR = "#1abc9c"
GOAL_COLOR = "#e74c3c"
GOAL_REACHED_COLOR = "#f1c40f"
TEXT_COLOR = "white"


@dataclass
class RaceConfig:
    """Startup configuration for one race window or one batch run.

    Defaults reproduce the fixed constants above; the CLIs override them.
    """
    rows: int = ROWS
    cols: int = COLS
    start: Position = START
    end: Position = END
    step_delay_ms: int = STEP_DELAY_MS
    lineup: Tuple[str, ...] = DEFAULT_LINEUP
    seed: Optional[int] = None
    link_end: bool = True

    def __post_init__(self):
        self.start = Position(*self.start)
        self.end = Position(*self.end)
        self.lineup = tuple(self.lineup)

    def validate(self):
        if self.rows < 1 or self.cols < 1:
            raise ConfigError(f"grid must be at least 1x1, got {self.rows}x{self.cols}")
        for name, pos in (("start", self.start), ("end", self.end)):
            if not (0 <= pos.x < self.rows and 0 <= pos.y < self.cols):
                raise ConfigError(f"{name} {tuple(pos)} is outside a {self.rows}x{self.cols} grid")
        if self.start == self.end:
            raise ConfigError("start and end must be different cells")
        if self.step_delay_ms < 0:
            raise ConfigError(f"step delay must not be negative, got {self.step_delay_ms}")
        if not self.lineup:
            raise ConfigError("at least one runner is required")
        unknown = [key for key in self.lineup if key not in RUNNERS]
        if unknown:
            raise ConfigError(f"unknown runner(s): {', '.join(unknown)}; choose from {', '.join(RUNNERS)}")
        if len(set(self.lineup)) != len(self.lineup):
            raise ConfigError("each runner may appear only once in the lineup")
        return self
