from weekgrid.services.entities import FacultyMember, Venue, VenueCategory
from weekgrid.services.resource_pool import ResourcePool


def test_faculty_matched_by_subject_token_and_role():
    pool = ResourcePool(
        [
            FacultyMember("Dr. Rao", subject="Data Structures", role="theory", division=1),
            FacultyMember("Ms. Iyer", subject="Data Structures Lab", role="lab", division=1),
            FacultyMember("Dr. Sen", subject="Physics", role="theory", division=1),
        ],
        [],
    )
    assert pool.faculty_for("Data Structures", "theory", 1) == ("Dr. Rao",)
    assert pool.faculty_for("Data Structures Lab", "lab", 1) == ("Ms. Iyer",)


def test_affinity_tag_overrides_course_name():
    pool = ResourcePool([FacultyMember("Dr. Rao", subject="Algorithms", division=1)], [])
    assert pool.faculty_for("CS301", "theory", 1, affinity="Algorithms") == ("Dr. Rao",)


def test_fallback_uses_upper_half_of_division_roster():
    pool = ResourcePool(
        [
            FacultyMember("F1", subject="Chemistry", division=1),
            FacultyMember("F2", subject="Biology", division=1),
            FacultyMember("F3", subject="History", division=1),
            FacultyMember("F4", subject="Music", division=1),
            FacultyMember("Other", subject="Music", division=2),
        ],
        [],
    )
    assert pool.faculty_for("Economics", "theory", 1) == ("F3", "F4")


def test_shared_faculty_serve_every_division():
    pool = ResourcePool([FacultyMember("Dr. Shared", subject="Mathematics", division=None)], [])
    assert pool.faculty_for("Mathematics", "theory", 7) == ("Dr. Shared",)


def test_lab_pool_is_padded_to_batch_count():
    pool = ResourcePool(
        [FacultyMember("Ms. Iyer", subject="Networks Lab", role="lab", division=1)],
        [Venue("CN Lab", VenueCategory.lab)],
    )
    candidates = pool.candidates("Networks Lab", "lab", 1, required=2)
    assert candidates.faculty == ("Ms. Iyer", "Lab Assistant 2")
    assert candidates.venues == ("CN Lab", "Lab-2")


def test_empty_pool_synthesizes_every_entry():
    candidates = ResourcePool([], []).candidates("Mathematics", "theory", 1, required=2)
    assert candidates.faculty == ("Guest Faculty 1", "Guest Faculty 2")
    assert candidates.venues == ("Room-1", "Room-2")
    assert candidates.faculty_at(3) == "Guest Faculty 2"


def test_shared_venues_come_from_category_only():
    pool = ResourcePool(
        [],
        [
            Venue("Seminar Hall", VenueCategory.shared),
            Venue("H101", VenueCategory.theory),
            Venue("Project Lab", VenueCategory.lab),
        ],
    )
    assert pool.shared_venues == frozenset({"Seminar Hall"})
    assert pool.venues_for("theory") == ("H101",)
    assert pool.venues_for("lab") == ("Project Lab",)
