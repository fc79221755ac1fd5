import pytest

from shift_log_tool.core.config import STATIONS, CompressionConfig, OversizePolicy, load_config


def test_defaults():
    config = CompressionConfig()
    assert config.max_dimension_px == 1600
    assert config.byte_budget == 900 * 1024
    assert (config.start_quality, config.quality_floor, config.quality_step) == (0.75, 0.45, 0.10)
    assert config.stations[0] == "Alpha" and config.stations[-1] == "Kilo"
    assert config.pil_format == "JPEG" and config.file_extension == ".jpg"
    assert config.oversize_policy is OversizePolicy.RECOMPRESS


@pytest.mark.parametrize("kwargs", [
    {"max_dimension_px": 0},
    {"byte_budget": 0},
    {"quality_step": 0},
    {"quality_floor": 0.0},
    {"quality_floor": 0.8, "start_quality": 0.7},
    {"start_quality": 1.2},
    {"output_mime_type": "image/gif"},
    {"stations": ()},
    {"stations": ("Alpha", "Alpha")},
    {"oversize_policy": "ignore"},
])
def test_invalid_settings_are_rejected(kwargs):
    with pytest.raises(ValueError):
        CompressionConfig(**kwargs)


def test_stations_are_stored_as_tuple():
    config = CompressionConfig(stations=["North", "South"])
    assert config.stations == ("North", "South")


def test_load_config_reads_environment(monkeypatch):
    monkeypatch.setenv("SHIFT_LOG_API_URL", "https://logs.example/exec")
    monkeypatch.setenv("SHIFT_LOG_HISTORY_LIMIT", "10")
    monkeypatch.delenv("SHIFT_LOG_TIMEOUT", raising=False)
    config = load_config(byte_budget=500 * 1024)
    assert config.api_url == "https://logs.example/exec"
    assert config.history_limit == 10
    assert config.compression.byte_budget == 500 * 1024
    assert config.compression.stations == STATIONS


def test_load_config_explicit_url_wins(monkeypatch):
    monkeypatch.setenv("SHIFT_LOG_API_URL", "https://env.example/exec")
    assert load_config(api_url="https://cli.example/exec").api_url == "https://cli.example/exec"


def test_load_config_rejects_bad_numbers(monkeypatch):
    monkeypatch.setenv("SHIFT_LOG_HISTORY_LIMIT", "five")
    with pytest.raises(ValueError):
        load_config()
