from pathlib import Path

import pytest
from pydantic import ValidationError

from lumon.backends import create_backend
from lumon.backends.ddc import DDCBackend
from lumon.backends.memory import MemoryBackend
from lumon.config import ConfigError, Settings


def write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults(isolated_home):
    settings = Settings.load()

    assert settings.backend == "ddc"
    assert settings.ddc.retries == 2
    assert settings.ddc.skip_models == ["Generic PnP Monitor"]
    assert settings.ui.step == 5
    assert settings.ui.title == "Welcome to Lumon"


def test_yaml_file(isolated_home):
    cfg = write(
        isolated_home / "lumon.yaml",
        "backend: memory\n"
        "memory:\n"
        "  displays:\n"
        "    - {id: a, name: Left, brightness: 20}\n"
        "ui:\n"
        "  step: 10\n",
    )

    settings = Settings.load(cfg)

    assert settings.backend == "memory"
    assert [d.id for d in settings.memory.displays] == ["a"]
    assert settings.ui.step == 10


def test_default_location(isolated_home):
    config_dir = isolated_home / ".config" / "lumon"
    config_dir.mkdir(parents=True)
    write(config_dir / "config.yaml", "app:\n  log_level: DEBUG\n")

    assert Settings.load().app.log_level == "DEBUG"


def test_env_overrides_yaml(isolated_home, monkeypatch):
    cfg = write(isolated_home / "lumon.yaml", "ddc:\n  retries: 1\n  command_timeout: 5\n")
    monkeypatch.setenv("LUMON_DDC__RETRIES", "4")

    settings = Settings.load(cfg)

    assert settings.ddc.retries == 4
    assert settings.ddc.command_timeout == 5.0


def test_invalid_yaml(isolated_home):
    cfg = write(isolated_home / "lumon.yaml", "ddc: [unclosed\n")

    with pytest.raises(ConfigError):
        Settings.load(cfg)


def test_non_mapping_yaml(isolated_home):
    cfg = write(isolated_home / "lumon.yaml", "- just\n- a list\n")

    with pytest.raises(ConfigError):
        Settings.load(cfg)


def test_out_of_range_value(isolated_home):
    cfg = write(isolated_home / "lumon.yaml", "ddc:\n  retries: 9\n")

    with pytest.raises(ValidationError):
        Settings.load(cfg)


def test_create_backend(isolated_home):
    settings = Settings.load()
    backend = create_backend(settings)
    assert isinstance(backend, DDCBackend)
    assert backend.retries == 2

    settings.backend = "memory"
    assert isinstance(create_backend(settings), MemoryBackend)


@pytest.mark.parametrize("step", [1, 7, 55])
def test_ui_step_must_follow_slider_grid(isolated_home, step):
    cfg = write(isolated_home / "lumon.yaml", f"ui:\n  step: {step}\n")

    with pytest.raises(ValidationError):
        Settings.load(cfg)


def test_ui_step_multiple_of_five(isolated_home):
    cfg = write(isolated_home / "lumon.yaml", "ui:\n  step: 10\n")

    assert Settings.load(cfg).ui.step == 10
