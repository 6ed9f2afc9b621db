import json

import pytest

from depthsperite.core.config import RESOLUTION_TIERS, CaptureTier, ConfigManager


def test_defaults_when_file_missing(tmp_path):
    config = ConfigManager(str(tmp_path / "missing.json"))
    assert config.depth_range == (450.0, 1000.0)
    assert config.capture_tier is CaptureTier.SINGLE
    assert config.calibrate_gamma is True
    assert config.history_size == 10
    assert config.resolution_tiers == RESOLUTION_TIERS


def test_partial_tier_table_is_merged(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"resolution_tiers": {"full": [3000, 2000]}, "calibrate_gamma": False}))
    config = ConfigManager(str(path))

    assert config.resolution_tiers[CaptureTier.FULL] == (3000, 2000)
    assert config.resolution_tiers[CaptureTier.DOUBLE] == (1280, 960)
    assert config.calibrate_gamma is False


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
def test_unreadable_file_falls_back_to_defaults(tmp_path, content):
    path = tmp_path / "config.json"
    path.write_text(content)
    config = ConfigManager(str(path))
    assert config.depth_range == (450.0, 1000.0)


def test_save_round_trip(tmp_path):
    path = tmp_path / "nested" / "config.json"
    config = ConfigManager(str(path))
    config.save(depth_range=(500, 800), capture_res=CaptureTier.QUAD)

    reloaded = ConfigManager(str(path))
    assert reloaded.depth_range == (500.0, 800.0)
    assert reloaded.capture_tier is CaptureTier.QUAD


def test_tier_names():
    assert CaptureTier.from_name("Double") is CaptureTier.DOUBLE
    assert CaptureTier.from_name(CaptureTier.FULL) is CaptureTier.FULL
    with pytest.raises(ValueError):
        CaptureTier.from_name("octo")
