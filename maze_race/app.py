import argparse
import logging
import tkinter as tk
from tkinter import ttk

from maze_race.config import (RaceConfig, ROWS, COLS, START, END, STEP_DELAY_MS, FRAME_MS,
                              CELL_SIZE, DEFAULT_LINEUP, BG_COLOR, PANEL_COLOR, WALL_COLOR,
                              PATH_COLOR, VISITED_COLOR, ROUTE_COLOR, START_COLOR, GOAL_COLOR,
                              GOAL_REACHED_COLOR, TEXT_COLOR)
from maze_race.errors import ConfigError
from maze_race.race import Race
from maze_race.runners import RUNNERS
from maze_race.scheduler import Scheduler

logger = logging.getLogger(__name__)

PANEL_COLUMNS = 2


class MazeRaceApp:
    """
    Tkinter window showing every runner of a Race on its own canvas.

    Architecture:
      - The Race owns the maze, the runners and the scheduler; this class only
        listens to its events and recolors cells.
      - A root.after() loop pumps scheduler.run_due() every FRAME_MS, so runner
        steps land on the Tk thread between redraws.
      - New Maze bumps the race generation; queued steps of the old maze
        become no-ops, so they cannot paint over the new canvases.
    """
    def __init__(self, root, config):
        self.root = root
        self.root.title("Maze Race")
        self.root.configure(bg=BG_COLOR)
        self.root.resizable(False, False)

        self.race = Race(config, Scheduler())
        self.race.subscribe("new_maze", self.on_new_maze)
        self.race.subscribe("visit", self.on_visit)
        self.race.subscribe("goal", self.on_goal)
        self.race.subscribe("exhausted", self.on_exhausted)

        self.delay = tk.IntVar(value=config.step_delay_ms)
        self.canvases = {}
        self.cell_items = {}    # key -> {(row, col): canvas item}
        self.status_vars = {}

        self._setup_ui()
        self.race.new_maze()
        self.root.after(FRAME_MS, self._pump)

    def _setup_ui(self):
        style = ttk.Style()
        style.configure("TButton", padding=6, relief="flat")
        style.configure("TLabel", background=BG_COLOR, foreground=TEXT_COLOR)
        style.configure("TScale", background=BG_COLOR)

        control_frame = tk.Frame(self.root, bg=BG_COLOR, padx=10, pady=10)
        control_frame.pack(side=tk.TOP, fill=tk.X)
        ttk.Button(control_frame, text="New Maze", command=self.new_maze).pack(side=tk.LEFT, padx=5)
        ttk.Button(control_frame, text="Start", command=self.start).pack(side=tk.LEFT, padx=5)
        ttk.Label(control_frame, text="Step delay (ms):").pack(side=tk.LEFT, padx=(20, 5))
        ttk.Scale(control_frame, from_=0, to=500, orient=tk.HORIZONTAL, variable=self.delay,
                  command=self._on_delay_change).pack(side=tk.LEFT, fill=tk.X, expand=True)

        maze_frame = tk.Frame(self.root, bg=BG_COLOR, padx=10, pady=10)
        maze_frame.pack(side=tk.TOP, fill=tk.BOTH, expand=True)
        cfg = self.race.config
        for i, key in enumerate(cfg.lineup):
            panel = tk.Frame(maze_frame, bg=PANEL_COLOR, padx=6, pady=6)
            panel.grid(row=i // PANEL_COLUMNS, column=i % PANEL_COLUMNS, padx=8, pady=8)
            tk.Label(panel, text=RUNNERS[key].label, bg=PANEL_COLOR, fg=TEXT_COLOR,
                     font=("Helvetica", 12, "bold")).pack(side=tk.TOP, anchor=tk.W)
            canvas = tk.Canvas(panel, width=cfg.cols * CELL_SIZE, height=cfg.rows * CELL_SIZE,
                               bg=WALL_COLOR, highlightthickness=0)
            canvas.pack(side=tk.TOP)
            status = tk.StringVar(value="Ready")
            tk.Label(panel, textvariable=status, bg=PANEL_COLOR, fg=TEXT_COLOR).pack(side=tk.TOP, anchor=tk.W)
            self.canvases[key] = canvas
            self.status_vars[key] = status

    # --- Controls ---
    def new_maze(self):
        self.race.new_maze()

    def start(self):
        if self.race.started:
            # A finished or running race restarts on a fresh maze
            self.race.new_maze()
        self.race.start()
        for status in self.status_vars.values():
            status.set("Searching...")

    def _on_delay_change(self, _value=None):
        self.race.config.step_delay_ms = int(self.delay.get())

    def _pump(self):
        self.race.scheduler.run_due()
        self.root.after(FRAME_MS, self._pump)

    # --- Race events ---
    def on_new_maze(self, race):
        for key in race.runners:
            self._draw_grid(key, race.runners[key].grid)
            self.status_vars[key].set("Ready")

    def on_visit(self, key, pos):
        if pos not in (self.race.config.start, self.race.config.end):
            self._paint(key, pos, VISITED_COLOR)
        self.status_vars[key].set(f"Searching... {self.race.runners[key].steps} cells")

    def on_goal(self, key, pos):
        result = self.race.results[key]
        for cell in result.route[1:-1]:
            self._paint(key, cell, ROUTE_COLOR)
        self._paint(key, pos, GOAL_REACHED_COLOR)
        self.status_vars[key].set(f"Goal reached at step {result.found_at}, route {len(result.route) - 1}")

    def on_exhausted(self, key):
        self.status_vars[key].set(f"No path after {self.race.runners[key].steps} cells")

    # --- Drawing ---
    def _draw_grid(self, key, grid):
        canvas = self.canvases[key]
        canvas.delete("all")
        items = {}
        start, end = self.race.config.start, self.race.config.end
        for r in range(grid.rows):
            for c in range(grid.cols):
                if (r, c) == start:
                    fill = START_COLOR
                elif (r, c) == end:
                    fill = GOAL_COLOR
                elif grid.is_obstacle(r, c):
                    fill = WALL_COLOR
                else:
                    fill = PATH_COLOR
                x1, y1 = c * CELL_SIZE, r * CELL_SIZE
                items[(r, c)] = canvas.create_rectangle(x1, y1, x1 + CELL_SIZE, y1 + CELL_SIZE,
                                                        fill=fill, outline=BG_COLOR)
        self.cell_items[key] = items

    def _paint(self, key, pos, color):
        item = self.cell_items.get(key, {}).get((pos[0], pos[1]))
        if item is not None:
            self.canvases[key].itemconfigure(item, fill=color)


def build_parser():
    parser = argparse.ArgumentParser(description="Watch search algorithms race through a random maze.")
    parser.add_argument("--rows", type=int, default=ROWS)
    parser.add_argument("--cols", type=int, default=COLS)
    parser.add_argument("--start", type=int, nargs=2, default=list(START), metavar=("ROW", "COL"))
    parser.add_argument("--end", type=int, nargs=2, default=list(END), metavar=("ROW", "COL"))
    parser.add_argument("--delay", type=int, default=STEP_DELAY_MS, help="Milliseconds between steps")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--runners", nargs="*", default=list(DEFAULT_LINEUP), choices=list(RUNNERS))
    parser.add_argument("--no-link-end", dest="link_end", action="store_false",
                        help="Leave an unreachable end as carving left it")
    parser.add_argument("--log-level", default="WARNING")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    config = RaceConfig(rows=args.rows, cols=args.cols, start=args.start, end=args.end,
                        step_delay_ms=args.delay, lineup=args.runners, seed=args.seed,
                        link_end=args.link_end)
    try:
        config.validate()
    except ConfigError as e:
        parser.error(str(e))

    root = tk.Tk()
    MazeRaceApp(root, config)
    root.mainloop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
