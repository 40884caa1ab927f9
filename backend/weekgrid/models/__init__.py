from weekgrid.models.timetable_generation import TimetableGeneration  # noqa: F401
