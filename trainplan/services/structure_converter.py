"""
Turn vague template ranges into specific prescriptions.

Templates describe a range ("4-6 x 3-8 min"); a runner needs one number.
The pick moves from the low end toward the high end as the plan
progresses, reaching the top three quarters of the way through.

    convert_vague_structure("Warmup + 4-6 x 3-8 min @ tempo", 1, 16)
    -> "Warmup + 4 x 3 min @ tempo"
"""

import re
from typing import Optional

from trainplan.plan_framework.growth import round_half_up

_REP_AND_DURATION = re.compile(r"(\d+)-(\d+)\s*x\s*(\d+)-(\d+)\s*min")
_REP_RANGE_GROUP = re.compile(r"(\d+)-(\d+)\s*x\s*\(")
_TRAILING_REP_RANGE = re.compile(r"x\s*(\d+)-(\d+)(?=\s|$|\)|,)")
_FIXED_REP_DURATION_RANGE = re.compile(r"(\d+)\s*x\s*(\d+)-(\d+)\s*min")
_RECOVERY_RANGE = re.compile(r"(\d+)-(\d+)\s*min\s*recovery")
_SEGMENT_RANGE = re.compile(r"(\d+)-(\d+)\s*min\s+(easy|warmup|cooldown|tempo|steady)")


def pick_in_range(low: int, high: int, week_number: Optional[int] = None, total_weeks: Optional[int] = None) -> int:
    if week_number and total_weeks:
        progression = min(1.0, week_number / (total_weeks * 0.75))
        return round_half_up(low + progression * (high - low))
    return round_half_up((low + high) / 2)


def convert_vague_structure(
    structure: Optional[str],
    week_number: Optional[int] = None,
    total_weeks: Optional[int] = None,
) -> Optional[str]:
    """Replace the first occurrence of each known range pattern with a single value."""
    if not structure:
        return structure

    def pick(low: str, high: str) -> int:
        return pick_in_range(int(low), int(high), week_number, total_weeks)

    text = _REP_AND_DURATION.sub(
        lambda m: f"{pick(m.group(1), m.group(2))} x {pick(m.group(3), m.group(4))} min",
        structure,
        count=1,
    )
    text = _REP_RANGE_GROUP.sub(lambda m: f"{pick(m.group(1), m.group(2))} x (", text, count=1)
    if "x (" not in structure:
        text = _TRAILING_REP_RANGE.sub(lambda m: f"x {pick(m.group(1), m.group(2))}", text, count=1)
    text = _FIXED_REP_DURATION_RANGE.sub(
        lambda m: f"{m.group(1)} x {pick(m.group(2), m.group(3))} min", text, count=1
    )
    text = _RECOVERY_RANGE.sub(_specific_recovery, text, count=1)
    text = _SEGMENT_RANGE.sub(
        lambda m: f"{pick(m.group(1), m.group(2))} min {m.group(3)}", text
    )
    return text


def _specific_recovery(match: "re.Match") -> str:
    minutes = round_half_up((int(match.group(1)) + int(match.group(2))) / 2)
    if minutes <= 2:
        return f"{minutes * 60} sec recovery"
    return f"{minutes} min recovery"
