import argparse
import csv
import logging
import os
import random
import statistics
import time

from matplotlib.figure import Figure

from maze_race.config import (RaceConfig, ROWS, COLS, START, END, STEP_DELAY_MS,
                              DEFAULT_LINEUP)
from maze_race.errors import ConfigError
from maze_race.race import Race
from maze_race.runners import RUNNERS
from maze_race.scheduler import Scheduler, VirtualClock
from maze_race.tree_render import render_search_tree

logger = logging.getLogger(__name__)

METRICS = [
    "elapsed_sec",
    "virtual_ms",
    "steps",
    "nodes_expanded",
    "unique_explored",
    "frontier_max",
    "path_length",
]

CHART_METRICS = [
    "virtual_ms_avg",
    "nodes_expanded_avg",
    "unique_explored_avg",
    "frontier_max_avg",
    "path_length_avg",
]


def run_single(config, seed, run_index=0, tree_dir=None):
    """Race every runner in config.lineup on one seeded maze, headless.

    Returns one row per runner. virtual_ms is the time on the virtual clock
    at which the runner finished, i.e. how long its animation would take.
    """
    clock = VirtualClock()
    race = Race(config, Scheduler(clock))
    finished_at = {}
    race.subscribe("goal", lambda key, pos: finished_at.__setitem__(key, clock.now()))
    race.subscribe("exhausted", lambda key: finished_at.__setitem__(key, clock.now()))
    race.new_maze(seed=seed)

    t0 = time.perf_counter()
    results = race.run_to_completion()
    elapsed = time.perf_counter() - t0

    rows = []
    for key, runner in race.runners.items():
        res = results[key]
        m = runner.metrics
        rows.append({
            "run": run_index,
            "seed": seed,
            "runner": key,
            "rows": config.rows,
            "cols": config.cols,
            "outcome": res.outcome.value,
            "found": res.found,
            "found_at": res.found_at if res.found_at is not None else "",
            "steps": res.steps,
            "nodes_expanded": m["nodes_expanded"],
            "unique_explored": m["unique_explored"],
            "frontier_max": m["frontier_max"],
            "path_length": m["path_length"],
            "virtual_ms": finished_at.get(key, 0),
            "elapsed_sec": elapsed,
            "end_linked": bool(race.maze.link_cells),
        })
        if tree_dir is not None:
            render_search_tree(runner, os.path.join(tree_dir, f"run_{run_index}"))
    return rows


def aggregate_results(rows, group_by=("runner",)):
    grouped = {}
    for r in rows:
        key = tuple(r[k] for k in group_by)
        grouped.setdefault(key, []).append(r)

    def agg_stat(values):
        if not values:
            return {"avg": 0, "min": 0, "max": 0, "stdev": 0}
        return {
            "avg": statistics.mean(values),
            "min": min(values),
            "max": max(values),
            "stdev": statistics.pstdev(values) if len(values) > 1 else 0,
        }

    summary = []
    for key, items in grouped.items():
        entry = dict(zip(group_by, key))
        entry["count"] = len(items)
        for m in METRICS:
            for stat_name, value in agg_stat([it[m] for it in items]).items():
                entry[f"{m}_{stat_name}"] = value
        entry["found_rate"] = sum(1 for it in items if it["found"]) / len(items)
        summary.append(entry)
    return summary


def write_csv(path, rows):
    if not rows:
        return
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        writer.writeheader()
        for r in rows:
            writer.writerow(r)


def plot_metric(summary, metric_key, out_path):
    labels = [RUNNERS[row["runner"]].label for row in summary]
    values = [row.get(metric_key, 0) for row in summary]

    fig = Figure(figsize=(max(6, len(labels) * 1.2), 4))
    ax = fig.add_subplot(111)
    bars = ax.bar(range(len(values)), values)
    ax.set_xticks(range(len(values)))
    ax.set_xticklabels(labels, rotation=30, ha="right")
    ax.set_ylabel(metric_key)
    ax.set_title(f"{metric_key} by runner")
    for bar, v in zip(bars, values):
        ax.text(bar.get_x() + bar.get_width() / 2.0, bar.get_height(), f"{v:.1f}",
                ha="center", va="bottom", fontsize=8)
    fig.tight_layout()
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    fig.savefig(out_path)
    return out_path


def run_batch(config, runs, seed=None, tree_dir=None):
    seeds = random.Random(seed)
    all_rows = []
    for i in range(runs):
        all_rows.extend(run_single(config, seeds.randrange(2 ** 32), run_index=i, tree_dir=tree_dir))
    return all_rows


def main(argv=None):
    parser = argparse.ArgumentParser(description="Race the maze runners repeatedly and chart their metrics.")
    parser.add_argument("--gui", action="store_true", help="Open the race window instead of a headless run")
    parser.add_argument("--runs", type=int, default=10, help="Number of mazes to race")
    parser.add_argument("--rows", type=int, default=ROWS)
    parser.add_argument("--cols", type=int, default=COLS)
    parser.add_argument("--start", type=int, nargs=2, default=list(START), metavar=("ROW", "COL"))
    parser.add_argument("--end", type=int, nargs=2, default=list(END), metavar=("ROW", "COL"))
    parser.add_argument("--delay", type=int, default=STEP_DELAY_MS, help="Virtual ms between steps")
    parser.add_argument("--runners", nargs="*", default=list(DEFAULT_LINEUP), choices=list(RUNNERS))
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--no-link-end", dest="link_end", action="store_false")
    parser.add_argument("--out_dir", default="metrics_output")
    parser.add_argument("--tree_dir", default=None, help="Also write each runner's search tree (DOT)")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if args.gui:
        from maze_race import app
        return app.main([])

    config = RaceConfig(rows=args.rows, cols=args.cols, start=args.start, end=args.end,
                        step_delay_ms=args.delay, lineup=args.runners, seed=args.seed,
                        link_end=args.link_end)
    try:
        config.validate()
    except ConfigError as e:
        parser.error(str(e))
    if args.runs < 1:
        parser.error("--runs must be at least 1")

    all_rows = run_batch(config, args.runs, seed=args.seed, tree_dir=args.tree_dir)
    write_csv(os.path.join(args.out_dir, "raw_results.csv"), all_rows)

    summary = aggregate_results(all_rows)
    write_csv(os.path.join(args.out_dir, "summary.csv"), summary)
    for metric in CHART_METRICS:
        plot_metric(summary, metric, os.path.join(args.out_dir, f"{metric}.png"))

    for row in summary:
        print(f"{RUNNERS[row['runner']].label:>18}: found {row['found_rate']:.0%}, "
              f"{row['nodes_expanded_avg']:.1f} cells expanded on average")
    print(f"Wrote results to {args.out_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
