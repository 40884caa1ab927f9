import pytest

from weekgrid.core.config import Settings
from weekgrid.core.exceptions import CapacityOverrunError
from weekgrid.schemas.generator import GenerateTimetableRequest, GenerationSettingsOverride
from weekgrid.schemas.timetable import TimetableTable
from weekgrid.services.external_source import StaticTextSource
from weekgrid.services.table_normalizer import TableNormalizer
from weekgrid.services.timetable_generator import TimetableGenerator, resolve_generation_settings

VALID_EXTERNAL = """
| Day | Time | Class/Batch | Course Name | Faculty | Venue |
|---|---|---|---|---|---|
| Monday | 09:00-10:00 | All Batches (Div 1) | DS101 | Dr. A | H101 |
| Tuesday | 09:00-10:00 | All Batches (Div 1) | DS101 | Dr. A | H101 |
"""

CONFLICTING_EXTERNAL = """
| Day | Time | Class/Batch | Course Name | Faculty | Venue |
|---|---|---|---|---|---|
| Monday | 09:00-10:00 | All Batches (Div 1) | DS101 | Dr. A | H101 |
| Monday | 09:00-10:00 | All Batches (Div 2) | OS201 | Dr. A | H102 |
"""


def run(payload, settings=None, text_source=None):
    settings = settings or Settings(_env_file=None)
    request = GenerateTimetableRequest.model_validate(payload)
    generation = resolve_generation_settings(settings, request.settings_override)
    return TimetableGenerator(settings=settings, generation=generation, text_source=text_source).run(request)


def scenario_a_payload():
    return {
        "divisions": [
            {
                "division": 1,
                "theory_courses": [{"Course": "DS101"}],
                "faculty": [{"Name": "Dr. A"}],
            }
        ],
        "venues": [{"Venue": "H101"}],
    }


def test_single_theory_course_yields_seven_rows():
    result = run(scenario_a_payload())

    assert result.source == "algorithmic"
    assert result.status == "complete"
    assert len(result.rows) == 7
    ds101 = [row for row in result.rows if row[3] == "DS101"]
    assert len(ds101) == 2
    assert len({(row[0], row[1]) for row in ds101}) == 2
    assert all(row[4] == "Dr. A" and row[5] == "H101" for row in ds101)
    assert len([row for row in result.rows if row[3] in ("Library", "Project Work")]) == 4
    assert result.rows[-1] == ["Sunday", "-", "-", "Holiday", "-", "-"]


def test_lab_pool_is_padded_for_every_batch():
    result = run(
        {
            "divisions": [
                {
                    "division": 1,
                    "lab_courses": [{"Course": "Networks Lab"}],
                    "faculty": [{"Name": "Ms. Iyer", "Subject": "Networks Lab"}],
                    "batches": [{"Batch": "B11"}, {"Batch": "B12"}],
                }
            ],
            "venues": [{"Venue": "CN Lab"}],
        }
    )

    lab_rows = [row for row in result.rows if row[3] == "Networks Lab"]
    assert sorted(row[2] for row in lab_rows) == ["B11", "B12"]
    assert {row[4] for row in lab_rows} == {"Ms. Iyer", "Lab Assistant 2"}
    assert {row[5] for row in lab_rows} == {"CN Lab", "Lab-2"}
    assert len({(row[0], row[1]) for row in lab_rows}) == 2


def test_empty_input_falls_back_to_placeholder_curriculum():
    result = run({})

    assert result.status == "complete"
    assert result.placeholder_divisions == [1]
    subjects = {row[3] for row in result.rows}
    assert "Engineering Mathematics" in subjects
    assert "Programming Lab" in subjects
    assert {row[2] for row in result.rows if row[3] == "Programming Lab"} == {"CSE11", "CSE12", "CSE13", "CSE14"}
    assert result.occupancy[0].division == 1


def test_two_divisions_never_share_faculty_in_a_cell():
    shared = [{"Name": "Dr. Shared", "Subject": "Mathematics"}]
    result = run(
        {
            "divisions": [
                {"division": 1, "theory_courses": [{"Course": "Mathematics"}]},
                {"division": 2, "theory_courses": [{"Course": "Mathematics"}]},
            ],
            "shared_faculty": shared,
            "venues": [{"Venue": "H101"}, {"Venue": "H102"}],
            "settings_override": {"random_seed": 21},
        }
    )
    math_rows = [row for row in result.rows if row[3] == "Mathematics"]
    assert len(math_rows) == 4
    assert {row[4] for row in math_rows} == {"Dr. Shared"}
    assert len({(row[0], row[1]) for row in math_rows}) == 4
    assert result.seed == 21


def test_overflow_rejected_by_default():
    payload = {
        "divisions": [
            {
                "division": 1,
                "theory_courses": [{"Course": f"Course {index}"} for index in range(5)],
                "load_distribution": [{"Course": f"Course {index}", "Lectures": 6} for index in range(5)],
                "lab_courses": [{"Course": "Big Lab"}],
            }
        ]
    }
    with pytest.raises(CapacityOverrunError) as exc_info:
        run(payload)
    assert exc_info.value.dropped_count > 0

    payload["settings_override"] = {"overflow_policy": "partial"}
    result = run(payload)
    assert result.status == "partial"
    assert result.dropped_count == exc_info.value.dropped_count


def test_valid_external_text_is_used():
    payload = scenario_a_payload()
    payload["external_text"] = VALID_EXTERNAL
    result = run(payload)
    assert result.source == "external"
    assert len(result.rows) == 2
    assert result.fallback_reason is None


@pytest.mark.parametrize(
    ("text", "reason"),
    [
        ("Sorry, I cannot help with that.", "no pipe table"),
        ("| Day | Course |\n|---|---|\n| Monday | DS101 |", "missing required columns"),
        ("| Day | Time | Course | Faculty | Venue |", "no rows"),
        (CONFLICTING_EXTERNAL, "conflict"),
    ],
)
def test_unusable_external_text_falls_back(text, reason):
    payload = scenario_a_payload()
    payload["external_text"] = text
    result = run(payload)
    assert result.source == "algorithmic"
    assert reason in result.fallback_reason
    assert len(result.rows) == 7


class FailingSource:
    def generate(self, request):
        raise TimeoutError("upstream timed out")


def test_text_source_only_consulted_when_enabled():
    disabled = run(scenario_a_payload(), text_source=StaticTextSource(VALID_EXTERNAL))
    assert disabled.source == "algorithmic"

    settings = Settings(_env_file=None, external_generation_enabled=True)
    enabled = run(scenario_a_payload(), settings=settings, text_source=StaticTextSource(VALID_EXTERNAL))
    assert enabled.source == "external"

    failed = run(scenario_a_payload(), settings=settings, text_source=FailingSource())
    assert failed.source == "algorithmic"
    assert "upstream timed out" in failed.fallback_reason


def test_settings_override_is_merged():
    settings = Settings(_env_file=None, theory_repetitions=3, random_seed=5)
    resolved = resolve_generation_settings(settings, GenerationSettingsOverride(deterministic=True))
    assert resolved.theory_repetitions == 3
    assert resolved.random_seed == 5
    assert resolved.deterministic is True
    assert resolved.overflow_policy == "reject"


def test_occupancy_grid_lists_sessions_per_cell():
    result = run({**scenario_a_payload(), "settings_override": {"deterministic": True}})
    occupancy = result.occupancy[0]
    assert occupancy.cells["Monday"]["09:00-10:00"] == ["DS101 [All Batches (Div 1)]"]
    assert occupancy.cells["Tuesday"]["15:00-16:00"] == ["Library [All Batches (Div 1)]"]
    assert occupancy.free_cells == 29 - 2
    assert result.seed is None


def test_two_division_table_is_accepted_as_external_text():
    payload = {
        "divisions": [
            {
                "division": division,
                "theory_courses": [{"Course": f"Mathematics {division}"}],
                "lab_courses": [{"Course": f"Physics Lab {division}"}],
            }
            for division in (1, 2)
        ],
        "settings_override": {"deterministic": True},
    }
    first = run(payload)
    assert first.source == "algorithmic"
    assert any(row[2] == "CSE11" for row in first.rows)

    payload["external_text"] = TableNormalizer.to_markdown(TimetableTable(headers=first.headers, rows=first.rows))
    second = run(payload)
    assert second.source == "external"
    assert second.fallback_reason is None
    assert second.rows == first.rows
