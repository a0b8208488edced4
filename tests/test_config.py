import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from skein.config import SkeinConfig, find_config, import_target, load_config
from skein.exceptions import InvalidCommandError
from skein.flags import FlagDef


@pytest.fixture(autouse=True)
def no_config_env(monkeypatch):
    monkeypatch.delenv("SKEIN_CONFIG", raising=False)


def test_defaults():
    config = SkeinConfig()
    assert config.program is None
    assert config.console_log_level == logging.WARNING
    assert config.configure_logging is True
    assert config.commands == []


def test_log_level_names_are_normalized():
    assert SkeinConfig(console_log_level="debug").console_log_level == logging.DEBUG
    assert SkeinConfig(console_log_level=" Info ").console_log_level == logging.INFO
    assert SkeinConfig(console_log_level=40).console_log_level == logging.ERROR


def test_unknown_log_level():
    with pytest.raises(ValidationError):
        SkeinConfig(console_log_level="chatty")


def test_log_mode_is_restricted():
    assert SkeinConfig(log_mode="json").log_mode == "json"
    with pytest.raises(ValidationError):
        SkeinConfig(log_mode="xml")


def test_command_paths_must_be_dotted():
    with pytest.raises(ValidationError):
        SkeinConfig(commands=["Build"])


def test_load_yaml(tmp_path):
    path = tmp_path / "skein.yaml"
    path.write_text(
        "program: tasks\n"
        "description: Project tasks\n"
        "log_mode: cli\n"
        "console_log_level: info\n"
        "commands:\n"
        "  - tasks.Build\n"
    )
    config = load_config(path)
    assert config.program == "tasks"
    assert config.description == "Project tasks"
    assert config.log_mode == "cli"
    assert config.console_log_level == logging.INFO
    assert config.commands == ["tasks.Build"]


def test_load_toml(tmp_path):
    path = tmp_path / "skein.toml"
    path.write_text('program = "tasks"\ndisable_help = true\n')
    config = load_config(str(path))
    assert config.program == "tasks"
    assert config.disable_help is True


def test_load_pyproject_table(tmp_path):
    path = tmp_path / "pyproject.toml"
    path.write_text('[project]\nname = "demo"\n\n[tool.skein]\nprogram = "demo"\n')
    assert load_config(path).program == "demo"


def test_load_empty_file(tmp_path):
    path = tmp_path / "skein.yaml"
    path.write_text("")
    assert load_config(path) == SkeinConfig()


def test_load_non_mapping(tmp_path):
    path = tmp_path / "skein.yaml"
    path.write_text("- tasks.Build\n")
    with pytest.raises(ValueError, match="must contain a mapping"):
        load_config(path)


def test_load_unsupported_format(tmp_path):
    path = tmp_path / "skein.json"
    path.write_text("{}")
    with pytest.raises(ValueError, match="Unsupported config format"):
        load_config(path)


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_load_rejects_other_types():
    with pytest.raises(TypeError):
        load_config(42)


def test_find_config_prefers_skein_yaml(tmp_path):
    (tmp_path / "skein.toml").write_text("")
    (tmp_path / "skein.yaml").write_text("")
    assert find_config(tmp_path) == tmp_path / "skein.yaml"


def test_find_config_hidden_file(tmp_path):
    (tmp_path / ".skein.toml").write_text("")
    assert find_config(tmp_path) == tmp_path / ".skein.toml"


def test_find_config_env(tmp_path, monkeypatch):
    custom = tmp_path / "custom.yaml"
    custom.write_text("")
    monkeypatch.setenv("SKEIN_CONFIG", str(custom))
    assert find_config(tmp_path / "elsewhere") == custom


def test_find_config_pyproject_needs_table(tmp_path):
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text('[project]\nname = "demo"\n')
    assert find_config(tmp_path) is None
    pyproject.write_text('[project]\nname = "demo"\n\n[tool.skein]\nprogram = "demo"\n')
    assert find_config(tmp_path) == pyproject


def test_find_config_defaults_to_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert find_config() is None
    (tmp_path / "skein.yaml").write_text("")
    assert find_config() == Path.cwd() / "skein.yaml"


def test_import_target():
    assert import_target("skein.flags.FlagDef") is FlagDef


def test_import_target_missing_module():
    with pytest.raises(InvalidCommandError, match="Could not import"):
        import_target("skein_no_such_module.Build")


def test_import_target_missing_attribute():
    with pytest.raises(InvalidCommandError, match="has no attribute"):
        import_target("skein.flags.NoSuchThing")


def test_import_target_needs_module():
    with pytest.raises(InvalidCommandError):
        import_target("Build")
