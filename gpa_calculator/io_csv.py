import pandas as pd
from typing import Dict, List, Sequence

from gpa_calculator.backend_logic import Course

# ------------------------
# CSV helpers (UI-side)
# ------------------------

COLUMN_ALIASES = {
    "credit": "credits",
    "course": "name",
    "course name": "name",
    "semester": "term",
}


def _normalise_cols(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = [str(c).strip().lower() for c in df.columns]
    # allow common alternative headers
    renames = {
        alias: target for alias, target in COLUMN_ALIASES.items()
        if alias in df.columns and target not in df.columns
    }
    if renames:
        df = df.rename(columns=renames)
    return df


def read_csv_upload(uploaded_file) -> pd.DataFrame:
    df = pd.read_csv(uploaded_file)
    return _normalise_cols(df)


def validate_courses_csv(df: pd.DataFrame) -> pd.DataFrame:
    required = {"name", "credits", "grade"}
    missing = required - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns: {sorted(missing)}. Expected: Name, Credits, Grade (Term optional).")
    out = df[["name", "credits", "grade"]].copy()
    out["term"] = df["term"] if "term" in df.columns else ""
    out = out.rename(columns={"name": "Name", "credits": "Credits", "grade": "Grade", "term": "Term"})
    return out


def parse_courses(df: pd.DataFrame) -> List[Dict]:
    """
    Rows with a missing name, credits or grade are skipped. Field checks
    (empty names, negative credits, unknown grades) happen in the store.
    """
    rows = []
    for _, row in df.iterrows():
        name = row.get("Name")
        credit = row.get("Credits")
        grade = row.get("Grade")
        if pd.isna(name) or pd.isna(credit) or pd.isna(grade):
            continue
        term = row.get("Term")
        rows.append({
            "name": str(name).strip(),
            "credits": float(credit),
            "grade": str(grade).strip().upper(),
            "term": "" if pd.isna(term) else str(term).strip(),
        })
    return rows


def courses_to_frame(courses: Sequence[Course]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"Name": c.name, "Credits": c.credits, "Grade": c.grade, "Term": c.term}
            for c in courses
        ],
        columns=["Name", "Credits", "Grade", "Term"],
    )


def courses_to_csv(courses: Sequence[Course]) -> str:
    return courses_to_frame(courses).to_csv(index=False)
