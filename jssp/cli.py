"""Command line driver.

Usage::

    jssp --instance data/ft06.txt --solver tabu-search --timeout 5 --seed 1
    jssp --config run.yaml --charts-dir charts

Values from ``--config`` (YAML or JSON) are defaults; explicit flags win.
The report (makespan, then start times per job) is written to stdout.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, Optional, Sequence

import yaml

from .algorithms import SearchConfig, available_solvers, solve
from .errors import JSSPError
from .parser import load_instance
from .report import format_report, verify_schedule
from .visualization import plot_gantt, plot_progress

logger = logging.getLogger("jssp")

DEFAULT_SOLVER = "tabu-search"


def load_config(path: str) -> Dict[str, Any]:
    """Load a YAML or JSON run configuration."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    if path.endswith(".json"):
        cfg = json.loads(text)
    else:
        cfg = yaml.safe_load(text) or {}
    if not isinstance(cfg, dict):
        raise ValueError(f"Config {path} must be a mapping, got {type(cfg).__name__}")
    return cfg


def _section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = cfg.get(name, {})
    return value if isinstance(value, dict) else {}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jssp", description="Job shop scheduling heuristics (construction and local search)"
    )
    parser.add_argument("--instance", help="Path to the instance file")
    parser.add_argument("--solver", help=f"Solver name, one of: {', '.join(available_solvers())}")
    parser.add_argument("--timeout", type=float, help="Time limit in seconds (default 10)")
    parser.add_argument("--seed", type=int, help="Random seed (default 0)")
    parser.add_argument("--max-iterations", type=int, help="Cap on search iterations")
    parser.add_argument("--tabu-tenure", type=int, help="Tabu tenure (default: Taillard formula)")
    parser.add_argument(
        "--tabu-frequency-penalty",
        action=argparse.BooleanOptionalAction,
        help="Penalise often pushed-back operations in tabu search (default on)",
    )
    parser.add_argument(
        "--sa-start-acceptance-ratio",
        type=float,
        help="SA acceptance ratio used to derive the initial temperature, in (0, 1)",
    )
    parser.add_argument("--sa-delta", type=float, help="SA cooling parameter, > 0")
    parser.add_argument("--config", help="YAML/JSON file with default values")
    parser.add_argument("--charts-dir", help="Write Gantt and progress charts into this directory")
    parser.add_argument("--log-level", help="Logging level (default INFO)")
    return parser


def _pick(flag: Any, fallback: Any) -> Any:
    return flag if flag is not None else fallback


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        cfg = load_config(args.config) if args.config else {}
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    sa_cfg = _section(cfg, "sa")
    tabu_cfg = _section(cfg, "tabu")
    charts_cfg = _section(cfg, "charts")

    log_level = _pick(args.log_level, cfg.get("log_level", "INFO"))
    logging.basicConfig(
        level=getattr(logging, str(log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    instance_path = _pick(args.instance, cfg.get("instance"))
    if not instance_path:
        logger.error("No instance given (use --instance or 'instance' in the config)")
        return 2
    solver = _pick(args.solver, cfg.get("solver", DEFAULT_SOLVER))
    charts_dir = _pick(args.charts_dir, charts_cfg.get("dir"))

    defaults = SearchConfig()
    try:
        config = SearchConfig(
            timeout=float(_pick(args.timeout, cfg.get("timeout", defaults.timeout))),
            seed=int(_pick(args.seed, cfg.get("seed", defaults.seed))),
            max_iterations=_pick(args.max_iterations, cfg.get("max_iterations")),
            tabu_tenure=_pick(args.tabu_tenure, tabu_cfg.get("tenure")),
            tabu_frequency_penalty=bool(
                _pick(
                    args.tabu_frequency_penalty,
                    tabu_cfg.get("frequency_penalty", defaults.tabu_frequency_penalty),
                )
            ),
            sa_start_acceptance_ratio=float(
                _pick(
                    args.sa_start_acceptance_ratio,
                    sa_cfg.get("start_acceptance_ratio", defaults.sa_start_acceptance_ratio),
                )
            ),
            sa_delta=float(_pick(args.sa_delta, sa_cfg.get("delta", defaults.sa_delta))),
        )
        problem = load_instance(instance_path)
        result = solve(problem, solver, config)
    except OSError as e:
        logger.error("Cannot read instance: %s", e)
        return 2
    except (JSSPError, ValueError) as e:
        logger.error("%s", e)
        return 2

    verify_schedule(problem, result.best.start_times())
    print(format_report(result.best))

    if charts_dir:
        base = os.path.splitext(os.path.basename(instance_path))[0]
        plot_gantt(
            result.best,
            save_path=os.path.join(charts_dir, f"{base}_{solver}_gantt.png"),
            algo_name=solver,
        )
        plot_progress(
            result.history,
            save_path=os.path.join(charts_dir, f"{base}_{solver}_progress.png"),
            current_history=result.current_history,
            title=f"{solver} on {base}",
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
