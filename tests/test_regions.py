import pytest

from sudomines import regions
from sudomines.errors import GenerationTimedOut, RegionGenerationFailed
from sudomines.regions import create_regions, is_region_connected, validate_region_map
from sudomines.utils import Deadline


@pytest.mark.parametrize("size", [3, 4, 5, 6, 7, 8])
def test_create_regions_partitions_grid(size):
    region_map, region_sizes = create_regions(size)

    assert len(region_map) == size
    assert all(len(row) == size for row in region_map)
    assert region_sizes == {rid: size for rid in range(size)}
    assert validate_region_map(region_map)


def test_every_region_is_connected():
    region_map, _ = create_regions(6)
    for rid in range(6):
        assert is_region_connected(region_map, rid)


def test_validate_region_map_rejects_unequal_regions():
    region_map = [
        [0, 0, 1, 1],
        [2, 0, 3, 1],
        [2, 3, 3, 1],
        [2, 2, 3, 1],
    ]
    assert not validate_region_map(region_map)


def test_validate_region_map_rejects_split_region():
    region_map = [
        [0, 1],
        [1, 0],
    ]
    assert not is_region_connected(region_map, 0)
    assert not validate_region_map(region_map)


def test_validate_region_map_rejects_ragged_and_empty():
    assert not validate_region_map([])
    assert not validate_region_map([[0, 0], [1]])


def test_is_region_connected_missing_region():
    assert not is_region_connected([[0, 0], [1, 1]], 5)


def test_create_regions_rejects_non_positive_size():
    with pytest.raises(ValueError):
        create_regions(0)


def test_create_regions_gives_up_after_max_attempts(monkeypatch):
    monkeypatch.setattr(regions, "_grow_region", lambda *args: [])

    with pytest.raises(RegionGenerationFailed) as excinfo:
        create_regions(4, max_attempts=7)

    assert excinfo.value.size == 4
    assert excinfo.value.attempts == 7
    assert "after 7 attempts" in str(excinfo.value)


def test_create_regions_respects_deadline():
    with pytest.raises(GenerationTimedOut):
        create_regions(5, deadline=Deadline(0))
