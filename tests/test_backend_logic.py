import math
import random

import pytest

from gpa_calculator.backend_logic import (
    Course,
    classification_color,
    classify_degree,
    compute_gpa,
    format_gpa,
    gpa_by_term,
    gpa_progress,
    gpa_summary,
    grade_points,
    required_average_for_target,
    total_credits,
)
from gpa_calculator.grade_scale import UDS_SCALE, US_SCALE


def course(credits, grade, term="", name="Course", id="c1"):
    return Course(id=id, name=name, credits=credits, grade=grade, term=term)


# ------------------------
# Grade points
# ------------------------

def test_grade_points_lookup():
    assert grade_points("A+", UDS_SCALE) == 5.0
    assert grade_points("F", UDS_SCALE) == 1.0
    assert grade_points("A-", US_SCALE) == 3.7
    assert grade_points("F", US_SCALE) == 0.0


def test_grade_points_unknown_grade_fails_fast():
    with pytest.raises(ValueError):
        grade_points("A-", UDS_SCALE)
    with pytest.raises(ValueError):
        grade_points("E", US_SCALE)


def test_unknown_grade_fails_even_with_zero_credits():
    with pytest.raises(ValueError):
        compute_gpa([course(0, "Z")], UDS_SCALE)


# ------------------------
# GPA
# ------------------------

def test_worked_example_uds_scale():
    courses = [course(3, "A", id="a"), course(2, "B+", id="b")]

    gpa = compute_gpa(courses, UDS_SCALE)

    assert gpa == pytest.approx(4.3)
    assert format_gpa(gpa) == "4.30"
    assert total_credits(courses) == 5
    assert classify_degree(gpa, 5, UDS_SCALE) == "Second Class Upper"


def test_empty_list():
    gpa = compute_gpa([], UDS_SCALE)

    assert gpa == 0
    assert format_gpa(gpa) == "0.00"
    assert total_credits([]) == 0
    assert classify_degree(gpa, total_credits([]), UDS_SCALE) == "Not Enough Credits"


def test_single_zero_credit_course():
    courses = [course(0, "F")]

    assert compute_gpa(courses, UDS_SCALE) == 0
    assert total_credits(courses) == 0


def test_negative_credits_excluded_from_gpa():
    courses = [course(-2, "F", id="a"), course(3, "A", id="b")]

    assert compute_gpa(courses, UDS_SCALE) == pytest.approx(4.5)


def test_zero_credit_course_does_not_change_gpa():
    courses = [course(3, "B", id="a"), course(1.5, "A+", id="b")]
    before = compute_gpa(courses, UDS_SCALE)

    after = compute_gpa(courses + [course(0, "F", id="z")], UDS_SCALE)

    assert after == pytest.approx(before)


def test_gpa_is_permutation_invariant():
    rng = random.Random(7)
    grades = list(UDS_SCALE.grades)
    courses = [
        course(rng.choice([0.5, 1, 2, 3, 4]), rng.choice(grades), id=str(i))
        for i in range(25)
    ]
    expected = compute_gpa(courses, UDS_SCALE)

    for _ in range(10):
        shuffled = list(courses)
        rng.shuffle(shuffled)
        assert compute_gpa(shuffled, UDS_SCALE) == pytest.approx(expected, abs=1e-12)


def test_gpa_lies_between_min_and_max_points():
    rng = random.Random(11)
    for scale in (UDS_SCALE, US_SCALE):
        grades = list(scale.grades)
        for _ in range(20):
            courses = [
                course(rng.uniform(0.5, 6), rng.choice(grades), id=str(i))
                for i in range(rng.randint(1, 8))
            ]
            points = [scale.points[c.grade] for c in courses]
            gpa = compute_gpa(courses, scale)
            assert min(points) - 1e-9 <= gpa <= max(points) + 1e-9


def test_fractional_credits_on_us_scale():
    courses = [course(0.5, "A", id="a"), course(1.5, "C", id="b")]

    assert compute_gpa(courses, US_SCALE) == pytest.approx((0.5 * 4.0 + 1.5 * 2.0) / 2.0)


# ------------------------
# Total credits
# ------------------------

def test_total_credits_includes_non_positive_entries():
    courses = [course(-1, "A", id="a"), course(2, "B", id="b")]

    assert total_credits(courses) == 1


# ------------------------
# Formatting
# ------------------------

def test_format_gpa_two_places():
    assert format_gpa(3.7) == "3.70"
    assert format_gpa(5) == "5.00"


def test_format_gpa_rounds_half_up():
    # float round() would give 2.67 here
    assert format_gpa(2.675) == "2.68"
    assert format_gpa(3.125) == "3.13"
    assert format_gpa(3.124) == "3.12"


# ------------------------
# Classification
# ------------------------

@pytest.mark.parametrize("gpa", [0.0, 2.0, 4.9, 5.0])
def test_not_enough_credits_below_three(gpa):
    assert classify_degree(gpa, 2.5, UDS_SCALE) == "Not Enough Credits"
    assert classify_degree(gpa, 0, UDS_SCALE) == "Not Enough Credits"
    assert classify_degree(gpa, -4, UDS_SCALE) == "Not Enough Credits"


def test_three_credits_is_enough():
    assert classify_degree(4.5, 3, UDS_SCALE) == "First Class"


@pytest.mark.parametrize("gpa, expected", [
    (5.0, "First Class"),
    (4.5, "First Class"),
    (4.49, "Second Class Upper"),
    (3.5, "Second Class Upper"),
    (3.49, "Second Class Lower"),
    (2.5, "Second Class Lower"),
    (2.49, "Third Class"),
    (2.0, "Third Class"),
    (1.99, "Pass"),
    (1.5, "Pass"),
    (1.49, "Fail"),
    (1.0, "Fail"),
    (0.0, "Fail"),
])
def test_uds_ladder_boundaries(gpa, expected):
    assert classify_degree(gpa, 30, UDS_SCALE) == expected


@pytest.mark.parametrize("gpa, expected", [
    (4.0, "First Class"),
    (3.6, "First Class"),
    (3.59, "Second Class Upper"),
    (3.0, "Second Class Upper"),
    (2.5, "Second Class Lower"),
    (2.0, "Third Class"),
    (1.0, "Pass"),
    (0.99, "Fail"),
])
def test_us_ladder_boundaries(gpa, expected):
    assert classify_degree(gpa, 30, US_SCALE) == expected


def test_every_gpa_maps_to_exactly_one_band():
    labels = {label for _, label in UDS_SCALE.cutpoints}
    steps = [i / 100 for i in range(0, 501)]
    for gpa in steps:
        assert classify_degree(gpa, 10, UDS_SCALE) in labels


def test_nan_gpa_is_fail():
    assert classify_degree(float("nan"), 10, UDS_SCALE) == "Fail"


def test_classification_color():
    assert classification_color("First Class") == "green"
    assert classification_color("Fail") == "red"
    assert classification_color("Not Enough Credits") == "gray"
    assert classification_color("Something else") == "gray"


# ------------------------
# Summary
# ------------------------

def test_gpa_progress_is_capped():
    assert gpa_progress(2.5, UDS_SCALE) == pytest.approx(50.0)
    assert gpa_progress(6.0, UDS_SCALE) == 100.0
    assert gpa_progress(0.0, UDS_SCALE) == 0.0
    assert gpa_progress(4.0, US_SCALE) == 100.0


def test_gpa_by_term():
    courses = [
        course(3, "A", term="Year 1", id="a"),
        course(3, "B", term="Year 1", id="b"),
        course(2, "A+", term="Year 2", id="c"),
        course(0, "F", term="Year 3", id="d"),
    ]

    term_gpas = gpa_by_term(courses, UDS_SCALE)

    assert list(term_gpas) == ["Year 1", "Year 2", "Year 3"]
    assert term_gpas["Year 1"] == pytest.approx(4.0)
    assert term_gpas["Year 2"] == pytest.approx(5.0)
    assert term_gpas["Year 3"] == 0.0


def test_gpa_by_term_empty():
    assert gpa_by_term([], UDS_SCALE) == {}


def test_gpa_summary_for_current_term():
    courses = [
        course(3, "A", term="Sem 1", id="a"),
        course(2, "B+", term="Sem 1", id="b"),
        course(3, "C", term="Sem 2", id="c"),
    ]

    summary = gpa_summary(courses, UDS_SCALE, current_term="Sem 2")

    assert summary["gpa"] == pytest.approx(2.5)
    assert summary["gpa_display"] == "2.50"
    assert summary["cgpa"] == pytest.approx((21.5 + 7.5) / 8)
    assert summary["cgpa_display"] == "3.63"
    assert summary["total_credits"] == 8
    assert summary["course_count"] == 3
    assert summary["classification"] == "Second Class Upper"
    assert summary["classification_color"] == "blue"
    assert summary["progress"] == pytest.approx(50.0)
    assert set(summary["term_gpas"]) == {"Sem 1", "Sem 2"}


def test_gpa_summary_empty():
    summary = gpa_summary([], UDS_SCALE)

    assert summary["gpa"] == 0
    assert summary["gpa_display"] == "0.00"
    assert summary["classification"] == "Not Enough Credits"
    assert summary["classification_color"] == "gray"
    assert summary["course_count"] == 0


# ------------------------
# Target planner
# ------------------------

def test_required_average_for_target():
    courses = [course(3, "A", id="a"), course(2, "B+", id="b")]

    plan = required_average_for_target(courses, UDS_SCALE, "First Class", 5)

    # (4.5 * 10 - 4.3 * 5) / 5
    assert plan["needed_average"] == pytest.approx(4.7)
    assert plan["target_gpa"] == 4.5
    assert plan["current_cgpa"] == pytest.approx(4.3)
    assert plan["possible"] is True


def test_required_average_impossible():
    courses = [course(10, "C", id="a")]

    plan = required_average_for_target(courses, UDS_SCALE, "First Class", 2)

    assert plan["needed_average"] > UDS_SCALE.max_points
    assert plan["possible"] is False


def test_required_average_with_nothing_outstanding():
    met = required_average_for_target([course(6, "A+", id="a")], UDS_SCALE, "First Class", 0)
    not_met = required_average_for_target([course(6, "C", id="a")], UDS_SCALE, "First Class", 0)

    assert math.isnan(met["needed_average"])
    assert met["possible"] is True
    assert not_met["possible"] is False
    assert required_average_for_target([], UDS_SCALE, "Pass", 0)["possible"] is False


def test_required_average_rejects_unknown_target():
    with pytest.raises(ValueError):
        required_average_for_target([], UDS_SCALE, "Not Enough Credits", 10)
