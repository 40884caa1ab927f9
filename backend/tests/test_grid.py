import pytest

from weekgrid.core.exceptions import ConfigurationError
from weekgrid.services.grid import TIME_SLOTS, ReservedSlot, ScheduleGrid


def test_default_grid_shape():
    grid = ScheduleGrid()
    assert len(grid.cells()) == 5 * len(TIME_SLOTS) + 3
    assert len(grid.open_cells()) == 29
    saturday = [cell.slot for cell in grid.cells() if cell.day == "Saturday"]
    assert saturday == list(TIME_SLOTS[:3])


def test_reserved_cells_are_not_open():
    grid = ScheduleGrid()
    open_keys = {cell.key for cell in grid.open_cells()}
    for day, slot in (
        ("Tuesday", "15:00-16:00"),
        ("Thursday", "14:00-15:00"),
        ("Wednesday", "15:00-16:00"),
        ("Friday", "15:00-16:00"),
    ):
        assert grid.reserved_at(day, slot) is not None
        assert (day, slot) not in open_keys
    assert grid.reserved_at("Tuesday", "15:00-16:00").activity == "Library"
    assert grid.reserved_at("Friday", "15:00-16:00").venue == "Project Lab"
    assert grid.reserved_at("Monday", "09:00-10:00") is None


def test_open_cells_are_day_major():
    cells = ScheduleGrid().open_cells()
    assert cells[0].key == ("Monday", "09:00-10:00")
    assert [cell.day_index for cell in cells] == sorted(cell.day_index for cell in cells)


def test_invalid_grid_configuration():
    with pytest.raises(ConfigurationError):
        ScheduleGrid(days=())
    with pytest.raises(ConfigurationError):
        ScheduleGrid(reserved_slots=[ReservedSlot("Saturday", "15:00-16:00", "Library", "Library")])
    duplicate = ReservedSlot("Monday", "09:00-10:00", "Library", "Library")
    with pytest.raises(ConfigurationError):
        ScheduleGrid(reserved_slots=[duplicate, duplicate])
