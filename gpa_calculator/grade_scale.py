from dataclasses import dataclass
from typing import Dict, Tuple

# ------------------------
# Classification labels
# ------------------------
FIRST_CLASS = "First Class"
SECOND_UPPER = "Second Class Upper"
SECOND_LOWER = "Second Class Lower"
THIRD_CLASS = "Third Class"
PASS = "Pass"
FAIL = "Fail"
NOT_ENOUGH_CREDITS = "Not Enough Credits"


@dataclass(frozen=True)
class GradeScale:
    """
    One grading scale: the letter grades, their point values and the
    classification ladder on the scale's GPA range.

    cutpoints: descending (minimum_gpa, label) pairs, last one at 0.0
    """
    name: str
    label: str
    grades: Tuple[str, ...]
    points: Dict[str, float]
    max_points: float
    cutpoints: Tuple[Tuple[float, str], ...]


def validate_scale(scale: GradeScale) -> GradeScale:
    missing = [g for g in scale.grades if g not in scale.points]
    if missing:
        raise ValueError(f"Scale {scale.name!r} has no points for grades: {missing}")
    extra = sorted(set(scale.points) - set(scale.grades))
    if extra:
        raise ValueError(f"Scale {scale.name!r} has points for unlisted grades: {extra}")
    if any(p < 0 for p in scale.points.values()):
        raise ValueError(f"Scale {scale.name!r} has negative grade points.")
    if max(scale.points.values()) > scale.max_points:
        raise ValueError(f"Scale {scale.name!r} has points above max_points.")

    cuts = [cut for cut, _ in scale.cutpoints]
    if not cuts or cuts[-1] != 0.0:
        raise ValueError(f"Scale {scale.name!r} cutpoints must end at 0.0.")
    if any(hi <= lo for hi, lo in zip(cuts, cuts[1:])):
        raise ValueError(f"Scale {scale.name!r} cutpoints must be strictly descending.")
    return scale


# 9-point institutional scale (default)
UDS_SCALE = validate_scale(GradeScale(
    name="uds",
    label="UDS 9-point scale (0-5.0)",
    grades=("A+", "A", "B+", "B", "C+", "C", "D+", "D", "F"),
    points={
        "A+": 5.0,
        "A": 4.5,
        "B+": 4.0,
        "B": 3.5,
        "C+": 3.0,
        "C": 2.5,
        "D+": 2.0,
        "D": 1.5,
        "F": 1.0,
    },
    max_points=5.0,
    cutpoints=(
        (4.5, FIRST_CLASS),
        (3.5, SECOND_UPPER),
        (2.5, SECOND_LOWER),
        (2.0, THIRD_CLASS),
        (1.5, PASS),
        (0.0, FAIL),
    ),
))

# Standard 12-point letter scale (0-4.0)
US_SCALE = validate_scale(GradeScale(
    name="us",
    label="12-point letter scale (0-4.0)",
    grades=("A", "A-", "B+", "B", "B-", "C+", "C", "C-", "D+", "D", "D-", "F"),
    points={
        "A": 4.0,
        "A-": 3.7,
        "B+": 3.3,
        "B": 3.0,
        "B-": 2.7,
        "C+": 2.3,
        "C": 2.0,
        "C-": 1.7,
        "D+": 1.3,
        "D": 1.0,
        "D-": 0.7,
        "F": 0.0,
    },
    max_points=4.0,
    cutpoints=(
        (3.6, FIRST_CLASS),
        (3.0, SECOND_UPPER),
        (2.5, SECOND_LOWER),
        (2.0, THIRD_CLASS),
        (1.0, PASS),
        (0.0, FAIL),
    ),
))

SCALES = {
    UDS_SCALE.name: UDS_SCALE,
    US_SCALE.name: US_SCALE,
}

DEFAULT_SCALE_NAME = UDS_SCALE.name


def get_scale(name: str) -> GradeScale:
    key = str(name).strip().lower()
    if key not in SCALES:
        raise ValueError(f"Unknown grade scale {name!r}. Expected one of: {sorted(SCALES)}.")
    return SCALES[key]
