from weekgrid.services.catalog import PLACEHOLDER_LAB_COURSES, PLACEHOLDER_THEORY_COURSES, SessionCatalogBuilder
from weekgrid.services.entities import Batch, Course, DivisionPlan, FacultyMember


def make_plan(**overrides):
    values = {
        "division": 1,
        "branch": "CSE",
        "theory_courses": (),
        "lab_courses": (),
        "faculty": (),
        "batches": (),
    }
    values.update(overrides)
    return DivisionPlan(**values)


def test_empty_division_gets_placeholder_curriculum_and_batches():
    plan = SessionCatalogBuilder().prepare(make_plan())
    assert plan.placeholder_curriculum is True
    assert [course.name for course in plan.theory_courses] == list(PLACEHOLDER_THEORY_COURSES)
    assert [course.name for course in plan.lab_courses] == list(PLACEHOLDER_LAB_COURSES)
    assert [batch.identifier for batch in plan.batches] == ["CSE11", "CSE12", "CSE13", "CSE14"]


def test_theory_only_division_keeps_its_curriculum():
    plan = SessionCatalogBuilder().prepare(
        make_plan(theory_courses=(Course("DS101", "theory", 1),))
    )
    assert plan.placeholder_curriculum is False
    assert [course.name for course in plan.theory_courses] == ["DS101"]
    assert plan.lab_courses == ()


def test_prepare_truncates_inputs():
    builder = SessionCatalogBuilder(max_theory_courses=2, max_lab_courses=1, max_faculty=1)
    plan = builder.prepare(
        make_plan(
            theory_courses=tuple(Course(f"T{index}", "theory", 1) for index in range(4)),
            lab_courses=tuple(Course(f"L{index}", "lab", 1) for index in range(3)),
            faculty=(FacultyMember("A"), FacultyMember("B")),
            batches=(Batch("B1", 1),),
        )
    )
    assert [course.name for course in plan.theory_courses] == ["T0", "T1"]
    assert [course.name for course in plan.lab_courses] == ["L0"]
    assert [member.name for member in plan.faculty] == ["A"]
    assert [batch.identifier for batch in plan.batches] == ["B1"]


def test_build_expands_theory_and_labs():
    builder = SessionCatalogBuilder(theory_repetitions=2)
    plan = builder.prepare(
        make_plan(
            theory_courses=(
                Course("Algorithms", "theory", 1),
                Course("Compilers", "theory", 1, subject="Languages", weekly_sessions=3),
            ),
            lab_courses=(Course("Algorithms Lab", "lab", 1),),
            batches=(Batch("B1", 1), Batch("B2", 1)),
        )
    )
    requirements = builder.build(plan)

    theory = [item for item in requirements if item.kind == "theory"]
    assert [(item.subject, item.repetitions) for item in theory] == [("Algorithms", 2), ("Compilers", 3)]
    assert all(item.scope.is_all_batches for item in theory)
    assert theory[1].affinity == "Languages"

    labs = [item for item in requirements if item.kind == "lab"]
    assert [item.scope.batch for item in labs] == ["B1", "B2"]
    assert all(item.repetitions == 1 for item in labs)
