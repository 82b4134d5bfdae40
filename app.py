import streamlit as st
import numpy as np
import pandas as pd
from gpa_calculator.backend_logic import *
from gpa_calculator.io_csv import *
from gpa_calculator.config import configure_logging, load_settings
from gpa_calculator.course_store import CsvCourseStore
from gpa_calculator.grade_scale import get_scale

# ------------------------
# Streamlit UI (with optional CSV upload)
# ------------------------

st.set_page_config(
    page_title="UDS GPA Calculator | GPA, CGPA & Degree Classification",
    page_icon="🎓",
    layout="wide",
)

settings = load_settings()
configure_logging(settings.log_level)
scale = settings.scale
GRADE_OPTIONS = grade_options(scale)


@st.cache_resource
def get_store(data_dir: str, scale_name: str) -> CsvCourseStore:
    return CsvCourseStore(data_dir, get_scale(scale_name))


store = get_store(settings.data_dir, scale.name)

st.title("🎓 UDS GPA Calculator")
st.write("Track your courses and calculate your grade point average and degree classification.")

with st.sidebar:
    owner = st.text_input("Student ID", key="owner_key").strip()
    st.caption(f"Grade scale: {scale.label}")

if not owner:
    st.info("Enter your **Student ID** in the sidebar to load your courses.")
    st.stop()

try:
    courses = store.list_courses(owner)
except ValueError as e:
    st.error(f"Could not load your saved courses: {e}")
    st.stop()


def run_action(action, success_message: str):
    try:
        action()
    except (ValueError, KeyError) as e:
        st.error(str(e))
        return False
    st.toast(success_message)
    return True


col_summary, col_courses = st.columns([1, 2])

# ------------------------
# Summary
# ------------------------
with col_summary:
    st.subheader("GPA Summary")

    terms = sorted({c.term for c in courses if c.term})
    current_term = None
    if terms:
        picked = st.selectbox("Current term", ["All courses"] + terms, index=0)
        current_term = None if picked == "All courses" else picked

    summary = gpa_summary(courses, scale, current_term=current_term)

    st.metric("Current GPA", summary["gpa_display"])
    st.progress(summary["progress"] / 100.0, text=f"0.0 – {scale.max_points:.1f}")

    st.markdown(
        f"### :{summary['classification_color']}[{summary['classification']}]"
    )
    st.caption("Degree Classification")

    m1, m2, m3 = st.columns(3)
    with m1:
        st.metric("Courses", summary["course_count"])
    with m2:
        st.metric("Credits", f"{summary['total_credits']:g}")
    with m3:
        st.metric("CGPA", summary["cgpa_display"])

    if len(summary["term_gpas"]) > 1:
        st.dataframe(
            pd.DataFrame(
                [{"Term": t or "(no term)", "GPA": format_gpa(g)} for t, g in summary["term_gpas"].items()]
            ),
            hide_index=True,
            use_container_width=True,
        )

    if courses and st.button("Clear All Courses"):
        if run_action(lambda: store.clear_courses(owner), "All courses cleared"):
            st.rerun()

# ------------------------
# Course entry
# ------------------------
with col_courses:
    with st.form("new_course_form", clear_on_submit=True):
        st.subheader("Add a course")
        name = st.text_input("Course Name", placeholder="Enter course name", key="new_name")
        c1, c2, c3 = st.columns(3)
        with c1:
            credits = st.number_input("Credits", min_value=0.0, value=3.0, step=0.5, key="new_credits")
        with c2:
            grade = st.selectbox("Grade", GRADE_OPTIONS, index=0, key="new_grade")
        with c3:
            term = st.text_input("Term (optional)", key="new_term")
        add_clicked = st.form_submit_button("Add Course", type="primary")

    if add_clicked:
        if run_action(
            lambda: store.add_course(owner, name, credits, grade, term),
            "Course added successfully",
        ):
            st.rerun()

    if not courses:
        st.info("No courses added yet. Add your first course above!")
    else:
        st.subheader("Your Courses")
        for course in courses:
            with st.form(f"course_{course.id}"):
                e1, e2, e3, e4 = st.columns([3, 1, 1, 1])
                with e1:
                    new_name = st.text_input("Course Name", value=course.name, key=f"name_{course.id}")
                with e2:
                    new_credits = st.number_input(
                        "Credits", min_value=0.0, value=float(course.credits), step=0.5,
                        key=f"credits_{course.id}",
                    )
                with e3:
                    new_grade = st.selectbox(
                        "Grade", GRADE_OPTIONS, index=GRADE_OPTIONS.index(course.grade),
                        key=f"grade_{course.id}",
                    )
                with e4:
                    new_term = st.text_input("Term", value=course.term, key=f"term_{course.id}")
                b1, b2 = st.columns([1, 1])
                with b1:
                    save_clicked = st.form_submit_button("Save", key=f"save_{course.id}")
                with b2:
                    delete_clicked = st.form_submit_button("Delete", key=f"delete_{course.id}")

            if save_clicked:
                if run_action(
                    lambda: store.update_course(
                        owner, course.id,
                        name=new_name, credits=new_credits, grade=new_grade, term=new_term,
                    ),
                    "Course updated successfully",
                ):
                    st.rerun()
            if delete_clicked:
                if run_action(
                    lambda: store.remove_course(owner, course.id),
                    "Course removed successfully",
                ):
                    st.rerun()

    # ------------------------
    # CSV import / export
    # ------------------------
    st.markdown("---")
    up, down = st.columns(2)
    with up:
        courses_csv = st.file_uploader(
            "Import courses CSV (Name, Credits, Grade, optional Term)",
            type=["csv"],
            key="courses_csv",
        )
        if courses_csv is not None and st.button("Import"):
            upload_error = None
            try:
                rows = parse_courses(validate_courses_csv(read_csv_upload(courses_csv)))
                store.add_courses(owner, rows)
            except ValueError as e:
                upload_error = str(e)

            if upload_error:
                st.error(f"CSV error: {upload_error}")
            else:
                st.toast(f"Imported {len(rows)} courses")
                st.rerun()
    with down:
        st.download_button(
            "Export courses CSV",
            data=courses_to_csv(courses),
            file_name="courses.csv",
            mime="text/csv",
            disabled=not courses,
        )

# ------------------------
# Target planner
# ------------------------
st.markdown("---")
st.subheader("Plan for a target classification")

TARGET_CLASS_OPTIONS = [label for _, label in scale.cutpoints[:-1]]

p1, p2 = st.columns(2)
with p1:
    target_label = st.selectbox("Target classification", TARGET_CLASS_OPTIONS, index=0)
with p2:
    remaining_credits = st.number_input("Credits still to take", min_value=0.0, value=15.0, step=0.5)

plan = required_average_for_target(courses, scale, target_label, remaining_credits)

if np.isnan(plan["needed_average"]):
    if plan["possible"]:
        st.success(f"✅ Your CGPA already meets {plan['target_class']} (≥ {plan['target_gpa']:.1f}).")
    else:
        st.info("Enter the credits you still have to take to see what you need.")
elif plan["possible"]:
    st.success(
        f"✅ Averaging **{format_gpa(max(plan['needed_average'], 0.0))}** over your remaining "
        f"credits reaches {plan['target_class']} (≥ {plan['target_gpa']:.1f})."
    )
else:
    st.error(
        f"❌ {plan['target_class']} would need an average of {format_gpa(plan['needed_average'])}, "
        f"above the scale maximum of {scale.max_points:.1f}."
    )
