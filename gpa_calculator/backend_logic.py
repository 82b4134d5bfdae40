from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
import numpy as np
import pandas as pd
from decimal import Decimal, ROUND_HALF_UP

from gpa_calculator.grade_scale import (
    FAIL,
    FIRST_CLASS,
    NOT_ENOUGH_CREDITS,
    PASS,
    SECOND_LOWER,
    SECOND_UPPER,
    THIRD_CLASS,
    GradeScale,
)

MIN_CLASSIFIABLE_CREDITS = 3.0


@dataclass(frozen=True)
class Course:
    id: str
    name: str
    credits: float
    grade: str
    term: str = ""


# ------------------------
# Core logic
# ------------------------
def round_2dp_half_up(x: float) -> Decimal:
    return Decimal(str(x)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def grade_points(grade: str, scale: GradeScale) -> float:
    if grade not in scale.points:
        raise ValueError(f"Unknown grade {grade!r} for the {scale.name} scale.")
    return scale.points[grade]


def _points_and_credits(courses: Sequence[Course], scale: GradeScale) -> np.ndarray:
    """
    returns: Nx2 numpy array -> [points, credit]
    """
    if len(courses) == 0:
        return np.zeros((0, 2), dtype=float)
    return np.array(
        [(grade_points(c.grade, scale), float(c.credits)) for c in courses],
        dtype=float,
    )


def compute_gpa(courses: Sequence[Course], scale: GradeScale) -> float:
    """
    Credit-weighted mean grade point. Courses with credits <= 0 are left out
    of both sums; an empty (or all zero-credit) list gives 0.0.
    """
    pc = _points_and_credits(courses, scale)

    counted = pc[pc[:, 1] > 0]
    if counted.size == 0:
        return 0.0

    points = counted[:, 0]
    credits = counted[:, 1]
    return float(np.dot(points, credits) / credits.sum())


def total_credits(courses: Sequence[Course]) -> float:
    # raw credit load, non-positive entries included
    return float(sum(float(c.credits) for c in courses))


def format_gpa(gpa: float) -> str:
    return str(round_2dp_half_up(gpa))


CLASS_COLORS = {
    FIRST_CLASS: "green",
    SECOND_UPPER: "blue",
    SECOND_LOWER: "violet",
    THIRD_CLASS: "orange",
    PASS: "orange",
    FAIL: "red",
}

NEUTRAL_COLOR = "gray"


def classify_degree(gpa: float, credits: float, scale: GradeScale) -> str:
    if credits < MIN_CLASSIFIABLE_CREDITS:
        return NOT_ENOUGH_CREDITS

    for cut, label in scale.cutpoints:
        if gpa >= cut:
            return label
    # negative or NaN GPA
    return scale.cutpoints[-1][1]


def classification_color(label: str) -> str:
    return CLASS_COLORS.get(label, NEUTRAL_COLOR)


def gpa_progress(gpa: float, scale: GradeScale) -> float:
    return max(0.0, min(gpa / scale.max_points * 100.0, 100.0))


def gpa_by_term(courses: Sequence[Course], scale: GradeScale) -> Dict[str, float]:
    """
    GPA per term, in order of first appearance. Terms holding only
    zero-credit courses get 0.0.
    """
    if len(courses) == 0:
        return {}

    pc = _points_and_credits(courses, scale)
    df = pd.DataFrame({
        "term": [c.term for c in courses],
        "points": pc[:, 0],
        "credits": pc[:, 1],
    })
    df["counted"] = df["credits"].where(df["credits"] > 0, 0.0)
    df["weighted"] = df["counted"] * df["points"]

    sums = df.groupby("term", sort=False)[["weighted", "counted"]].sum()
    gpas = (sums["weighted"] / sums["counted"]).fillna(0.0)
    return {str(term): float(gpa) for term, gpa in gpas.items()}


def gpa_summary(
    courses: Sequence[Course],
    scale: GradeScale,
    current_term: Optional[str] = None,
):
    """
    Everything the summary panel shows, recomputed from the full list.
    gpa is the current term's GPA, or the CGPA when no term is given.
    """
    cgpa = compute_gpa(courses, scale)
    credits = total_credits(courses)

    if current_term is None:
        gpa = cgpa
    else:
        gpa = compute_gpa([c for c in courses if c.term == current_term], scale)

    classification = classify_degree(cgpa, credits, scale)

    return {
        "gpa": gpa,
        "gpa_display": format_gpa(gpa),
        "cgpa": cgpa,
        "cgpa_display": format_gpa(cgpa),
        "total_credits": credits,
        "course_count": len(courses),
        "classification": classification,
        "classification_color": classification_color(classification),
        "progress": gpa_progress(gpa, scale),
        "term_gpas": gpa_by_term(courses, scale),
    }


def minimal_forward_average_for_target(target_gpa,
                                       credits_outstanding,
                                       current_gpa,
                                       credits_completed):
    Ca = credits_completed
    Cr = credits_outstanding
    Ma = current_gpa

    if Cr <= 0:
        return float('nan')

    x = (target_gpa * (Ca + Cr) - Ma * Ca) / Cr
    return x


def required_average_for_target(
    courses: Sequence[Course],
    scale: GradeScale,
    target_class: str,
    credits_outstanding: float,
):
    """
    Minimum uniform grade-point average over the outstanding credits for the
    CGPA to reach the target class's cutpoint.
    """
    cuts = {label: cut for cut, label in scale.cutpoints}
    if target_class not in cuts:
        raise ValueError(
            f"Target class must be one of: {[label for _, label in scale.cutpoints]}"
        )

    target_gpa = cuts[target_class]
    current_gpa = compute_gpa(courses, scale)
    credits_completed = float(sum(c.credits for c in courses if c.credits > 0))
    credits_outstanding = float(credits_outstanding)

    needed = minimal_forward_average_for_target(
        target_gpa=target_gpa,
        credits_outstanding=credits_outstanding,
        current_gpa=current_gpa,
        credits_completed=credits_completed,
    )

    if np.isnan(needed):
        possible = bool(credits_completed > 0 and current_gpa >= target_gpa)
    else:
        possible = bool(needed <= scale.max_points)

    return {
        "target_class": target_class,
        "target_gpa": target_gpa,
        "current_cgpa": current_gpa,
        "needed_average": needed,
        "possible": possible,
    }


def grade_options(scale: GradeScale) -> List[str]:
    return list(scale.grades)
