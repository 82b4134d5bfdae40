import hashlib
import logging
import math
import os
import uuid
from dataclasses import replace
from typing import Dict, List

import pandas as pd

from gpa_calculator.backend_logic import Course
from gpa_calculator.grade_scale import GradeScale

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "credits", "grade", "term")
CSV_COLUMNS = ["id", "owner", "term", "name", "credits", "grade"]


def generate_id() -> str:
    return uuid.uuid4().hex[:7]


def validate_course_fields(name, credits, grade, scale: GradeScale):
    """
    Entry-time checks for one course. Returns the cleaned
    (name, credits, grade); raises ValueError with a user-facing message.
    """
    name = "" if name is None else str(name).strip()
    if name == "":
        raise ValueError("Course name must not be empty.")

    try:
        credits = float(credits)
    except (TypeError, ValueError):
        raise ValueError(f"Credits must be a number (got {credits!r}).")
    if math.isnan(credits) or math.isinf(credits) or credits < 0:
        raise ValueError(f"Credits must be zero or more (got {credits}).")

    if grade not in scale.points:
        raise ValueError(f"Grade must be one of {list(scale.grades)} (got {grade!r}).")

    return name, credits, grade


def _check_owner(owner: str) -> str:
    owner = "" if owner is None else str(owner).strip()
    if owner == "":
        raise ValueError("An owner key is required to access courses.")
    return owner


class CourseStore:
    """
    Per-owner course lists. Subclasses provide _load/_save; every save
    replaces the owner's whole list, so a single writer per owner is assumed.
    """

    def __init__(self, scale: GradeScale):
        self.scale = scale

    def _load(self, owner: str) -> List[Course]:
        raise NotImplementedError

    def _save(self, owner: str, courses: List[Course]) -> None:
        raise NotImplementedError

    def list_courses(self, owner: str) -> List[Course]:
        return list(self._load(_check_owner(owner)))

    def add_course(self, owner: str, name, credits, grade, term: str = "") -> Course:
        owner = _check_owner(owner)
        name, credits, grade = validate_course_fields(name, credits, grade, self.scale)

        courses = self._load(owner)
        existing = {c.id for c in courses}
        course_id = generate_id()
        while course_id in existing:
            course_id = generate_id()

        course = Course(id=course_id, name=name, credits=credits, grade=grade,
                        term=str(term or "").strip())
        self._save(owner, courses + [course])
        logger.info("Added course %s (%s) for %s", course.id, course.name, owner)
        return course

    def add_courses(self, owner: str, rows) -> List[Course]:
        """
        Add several courses at once. Every row is validated before anything
        is saved, so a bad row leaves the owner's list unchanged.
        """
        owner = _check_owner(owner)

        cleaned = []
        for i, row in enumerate(rows):
            try:
                name, credits, grade = validate_course_fields(
                    row.get("name"), row.get("credits"), row.get("grade"), self.scale
                )
            except ValueError as e:
                raise ValueError(f"Row {i + 1}: {e}")
            cleaned.append((name, credits, grade, str(row.get("term") or "").strip()))

        courses = self._load(owner)
        existing = {c.id for c in courses}
        added = []
        for name, credits, grade, term in cleaned:
            course_id = generate_id()
            while course_id in existing:
                course_id = generate_id()
            existing.add(course_id)
            added.append(Course(id=course_id, name=name, credits=credits, grade=grade, term=term))

        self._save(owner, courses + added)
        logger.info("Added %d courses for %s", len(added), owner)
        return added

    def update_course(self, owner: str, course_id: str, **changes) -> Course:
        owner = _check_owner(owner)
        if "id" in changes:
            raise ValueError("Course id cannot be changed.")
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown course fields: {sorted(unknown)}")

        courses = self._load(owner)
        index = self._index_of(courses, owner, course_id)

        updated = replace(courses[index], **changes)
        name, credits, grade = validate_course_fields(
            updated.name, updated.credits, updated.grade, self.scale
        )
        updated = replace(updated, name=name, credits=credits, grade=grade,
                          term=str(updated.term or "").strip())

        courses[index] = updated
        self._save(owner, courses)
        logger.info("Updated course %s for %s: %s", course_id, owner, sorted(changes))
        return updated

    def remove_course(self, owner: str, course_id: str) -> None:
        owner = _check_owner(owner)
        courses = self._load(owner)
        index = self._index_of(courses, owner, course_id)
        del courses[index]
        self._save(owner, courses)
        logger.info("Removed course %s for %s", course_id, owner)

    def clear_courses(self, owner: str) -> None:
        owner = _check_owner(owner)
        self._save(owner, [])
        logger.info("Cleared all courses for %s", owner)

    @staticmethod
    def _index_of(courses: List[Course], owner: str, course_id: str) -> int:
        for i, course in enumerate(courses):
            if course.id == course_id:
                return i
        raise KeyError(f"No course {course_id!r} for {owner!r}")


class InMemoryCourseStore(CourseStore):

    def __init__(self, scale: GradeScale):
        super().__init__(scale)
        self._courses: Dict[str, List[Course]] = {}

    def _load(self, owner: str) -> List[Course]:
        return list(self._courses.get(owner, []))

    def _save(self, owner: str, courses: List[Course]) -> None:
        self._courses[owner] = list(courses)


class CsvCourseStore(CourseStore):
    """
    One CSV file per owner under data_dir. The owner column is bookkeeping
    only; the grade engine never reads it.
    """

    def __init__(self, data_dir: str, scale: GradeScale):
        super().__init__(scale)
        self.data_dir = data_dir
        os.makedirs(data_dir, exist_ok=True)

    def path_for(self, owner: str) -> str:
        digest = hashlib.sha256(owner.encode("utf-8")).hexdigest()[:16]
        return os.path.join(self.data_dir, f"courses_{digest}.csv")

    def _load(self, owner: str) -> List[Course]:
        path = self.path_for(owner)
        if not os.path.exists(path):
            return []

        try:
            df = pd.read_csv(
                path,
                dtype={"id": str, "owner": str, "term": str, "name": str, "grade": str},
                keep_default_na=False,
            )
            missing = set(CSV_COLUMNS) - set(df.columns)
            if missing:
                raise ValueError(f"Missing columns: {sorted(missing)}")
            courses = []
            for i, row in df.iterrows():
                try:
                    name, credits, grade = validate_course_fields(
                        row["name"], row["credits"], row["grade"], self.scale
                    )
                    if str(row["id"]).strip() == "":
                        raise ValueError("Course id must not be empty.")
                except ValueError as e:
                    raise ValueError(f"{path}, row {i + 1}: {e}")
                courses.append(Course(id=row["id"], name=name, credits=credits,
                                      grade=grade, term=row["term"]))
        except (pd.errors.ParserError, ValueError):
            logger.error("Failed to read saved courses from %s", path)
            raise

        return courses

    def _save(self, owner: str, courses: List[Course]) -> None:
        df = pd.DataFrame(
            [
                {
                    "id": c.id,
                    "owner": owner,
                    "term": c.term,
                    "name": c.name,
                    "credits": c.credits,
                    "grade": c.grade,
                }
                for c in courses
            ],
            columns=CSV_COLUMNS,
        )
        df.to_csv(self.path_for(owner), index=False)
