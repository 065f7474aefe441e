from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from trainplan.core.exceptions import PlanEngineError
from trainplan.core.logging import setup_logging
from trainplan.plan_framework.constants import DAYS_OF_WEEK, ExperienceLevel
from trainplan.plan_framework.generator import TargetPlanGenerator
from trainplan.plan_framework.inputs import PlanInputs

logger = logging.getLogger(__name__)

DAY_CHOICES = list(DAYS_OF_WEEK) + [d[:3] for d in DAYS_OF_WEEK]


def _add_plan_inputs(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--mileage", type=float, required=True, help="Current weekly mileage")
    parser.add_argument("--long-run", type=float, required=True, help="Current long run (miles)")
    parser.add_argument("--weeks", type=int, required=True, help="Plan length in weeks (10-30)")
    parser.add_argument("--race", required=True, help="5K, 10K, Half or Marathon")
    parser.add_argument(
        "--experience",
        required=True,
        choices=[level.value for level in ExperienceLevel],
        help="Runner experience level",
    )
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")


def _inputs(args: argparse.Namespace) -> PlanInputs:
    return PlanInputs.create(
        {
            "current_weekly_mileage": args.mileage,
            "current_long_run": args.long_run,
            "total_weeks": args.weeks,
            "race_distance": args.race,
            "experience_level": args.experience,
        }
    )


def _print_targets(plan) -> None:
    print(f"Plan targets: {plan.inputs.describe()}")
    print(f"- peak weekly mileage: {plan.peak_weekly_mileage}")
    print(f"- long run max: {plan.long_run_max}")
    print(f"- growth rate: {plan.growth_rate:.3f}")
    print("- phases: " + ", ".join(f"{p.phase.value} {p.start_week}-{p.end_week}" for p in plan.phases))
    print()
    print(f"{'week':>4}  {'phase':<6} {'miles':>5} {'long':>4} {'tempo':>5} {'intvl':>5} {'hill':>4}")
    for w in plan.weeks:
        marker = "*" if w.cutback else ""
        print(
            f"{w.week_number:>4}  {w.phase.value:<6} {w.weekly_mileage:>5} {w.long_run:>4} "
            f"{w.tempo_distance:>5} {w.interval_distance:>5} {w.hill_distance:>4} {marker}"
        )
    for warning in plan.warnings:
        print(f"WARNING: {warning}")


def cmd_targets(args: argparse.Namespace) -> int:
    plan = TargetPlanGenerator().generate(_inputs(args))
    if args.json:
        print(json.dumps(plan.to_dict(), indent=2))
    else:
        _print_targets(plan)
    return 0


def cmd_repair(args: argparse.Namespace) -> int:
    from trainplan.services.plan_assembler import PlanAssembler, race_paces

    inputs = _inputs(args)
    text = Path(args.plan).read_text(encoding="utf-8")
    current = race_paces(args.recent_race or args.race, args.recent_time) if args.recent_time else None
    goal = race_paces(args.race, args.goal_time) if args.goal_time else None

    result = PlanAssembler(long_run_day=args.long_run_day).assemble(
        inputs, text, hard_days=args.hard_days, current_paces=current, goal_paces=goal
    )

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    print(f"Repaired plan: {len(result.weeks)} weeks, {result.size_bytes} bytes")
    print(f"- repairs applied: {len(result.report.applied)}")
    for message in result.report.applied:
        print(f"  - {message}")
    print(f"- repairs skipped: {len(result.report.skipped)}")
    for advisory in result.advisories:
        print(f"WARNING: {advisory}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="trainplan", description="Endurance training plan targets and repair.")
    sub = parser.add_subparsers(dest="command", required=True)

    targets = sub.add_parser("targets", help="Print week-by-week plan targets")
    _add_plan_inputs(targets)
    targets.set_defaults(func=cmd_targets)

    repair = sub.add_parser("repair", help="Parse, repair and enrich a generated plan text file")
    repair.add_argument("plan", help="Path to the generated plan text")
    _add_plan_inputs(repair)
    repair.add_argument("--hard-days", nargs="*", default=[], choices=DAY_CHOICES, help="Quality workout days")
    repair.add_argument("--long-run-day", default=None, help="Long run day (default: settings.LONG_RUN_DAY)")
    repair.add_argument("--recent-race", default=None, help="Distance of a recent race (default: --race)")
    repair.add_argument("--recent-time", default=None, help="Recent race time, e.g. 1:52:10")
    repair.add_argument("--goal-time", default=None, help="Goal race time, e.g. 3:59:00")
    repair.set_defaults(func=cmd_repair)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(sys.stderr)
    try:
        return args.func(args)
    except PlanEngineError as e:
        logger.error(f"{e.error_code}: {e.detail}")
        print(f"error: {e.detail}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
