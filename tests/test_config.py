import pytest

from sketchplot.config import MODEL_BOUNDS, PlotterConfig, SerialSettings


def test_defaults():
    config = PlotterConfig()
    assert config.model == "A4"
    assert (config.bounds.width_in, config.bounds.height_in) == (11.81, 8.58)
    assert config.copies == 1
    assert (config.pen_down_percent, config.pen_up_percent) == (35, 65)


def test_unknown_model_is_rejected():
    with pytest.raises(ValueError, match="Unknown plotter model"):
        PlotterConfig(model="Z9")


def test_every_model_has_positive_bounds():
    assert set(MODEL_BOUNDS) == {"A4", "A3", "XLX", "MiniKit", "A2", "A1", "B6"}
    assert all(b.width_in > 0 and b.height_in > 0 for b in MODEL_BOUNDS.values())


def test_bounds_are_inclusive():
    bounds = MODEL_BOUNDS["MiniKit"]
    assert bounds.contains(0, 0)
    assert bounds.contains(6.3, 4.0)
    assert not bounds.contains(6.31, 4.0)
    assert not bounds.contains(1, -0.01)


@pytest.mark.parametrize("repeat, copies", [(0, 1), (-5, 1), (1, 1), (4, 4)])
def test_copies(repeat, copies):
    assert PlotterConfig(repeat_count=repeat).copies == copies


def test_speed_percent_is_clamped():
    config = PlotterConfig(speed_pen_down=0, speed_pen_up=400)
    assert config.pen_down_percent == 1
    assert config.pen_up_percent == 100


def test_from_dict_applies_changes_on_base():
    base = PlotterConfig(model="A3", repeat_count=2)
    config = PlotterConfig.from_dict({"speed_pen_down": "50", "pen_up_delay_ms": 99.9}, base=base)
    assert config.model == "A3"
    assert config.repeat_count == 2
    assert config.speed_pen_down == 50.0
    assert config.pen_up_delay_ms == 99
    assert PlotterConfig.from_dict(config.to_dict()) == config


def test_from_dict_validates_model():
    with pytest.raises(ValueError):
        PlotterConfig.from_dict({"model": "nope"})


def test_plotter_config_from_env(monkeypatch):
    monkeypatch.setenv("SKETCHPLOT_MODEL", "B6")
    assert PlotterConfig.from_env().model == "B6"
    monkeypatch.delenv("SKETCHPLOT_MODEL")
    assert PlotterConfig.from_env() == PlotterConfig()


def test_serial_settings_from_env(monkeypatch):
    monkeypatch.delenv("SKETCHPLOT_PORT", raising=False)
    monkeypatch.delenv("SKETCHPLOT_BAUDRATE", raising=False)
    assert SerialSettings.from_env() == SerialSettings()

    monkeypatch.setenv("SKETCHPLOT_PORT", "/dev/ttyACM0")
    monkeypatch.setenv("SKETCHPLOT_BAUDRATE", "115200")
    settings = SerialSettings.from_env()
    assert settings.port == "/dev/ttyACM0"
    assert settings.baudrate == 115200
