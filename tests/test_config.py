from pathlib import Path

import pytest
import yaml

from kvdb.config import StoreConfig, load_config, resolve_config, save_config


def test_defaults() -> None:
    config = StoreConfig()
    assert config.db_path == "kvdb.db"
    assert config.strict_delete is True
    assert config.log_level == "CRITICAL"


def test_load_config_from_yaml(tmp_path: Path) -> None:
    config_file = tmp_path / "kvdb.yaml"
    with open(config_file, "w") as f:
        yaml.dump({"db_path": "data/store.db", "strict_delete": False, "log_level": "debug"}, f)

    config = load_config(config_file)

    assert config.db_path == "data/store.db"
    assert config.strict_delete is False
    assert config.log_level == "DEBUG"


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_load_config_empty_file(tmp_path: Path) -> None:
    config_file = tmp_path / "kvdb.yaml"
    config_file.write_text("")
    with pytest.raises(ValueError):
        load_config(config_file)


def test_load_config_malformed_yaml(tmp_path: Path) -> None:
    config_file = tmp_path / "kvdb.yaml"
    config_file.write_text("db_path: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid YAML") as excinfo:
        load_config(config_file)
    assert "\n" not in str(excinfo.value)


def test_load_config_rejects_unknown_log_level(tmp_path: Path) -> None:
    config_file = tmp_path / "kvdb.yaml"
    config_file.write_text("log_level: LOUD\n")
    with pytest.raises(ValueError, match="Invalid configuration"):
        load_config(config_file)


def test_save_and_load_preserves_fields(tmp_path: Path) -> None:
    config = StoreConfig(db_path="other.db", strict_delete=False)
    config_file = tmp_path / "out" / "kvdb.yaml"
    save_config(config, config_file)

    assert load_config(config_file).to_dict() == config.to_dict()


def test_resolve_config_precedence(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("KVDB_DB_PATH", raising=False)
    assert resolve_config().db_path == "kvdb.db"

    (tmp_path / "kvdb.yaml").write_text("db_path: from_file.db\n")
    assert resolve_config().db_path == "from_file.db"

    monkeypatch.setenv("KVDB_DB_PATH", "from_env.db")
    assert resolve_config().db_path == "from_env.db"

    assert resolve_config(db_path="from_arg.db").db_path == "from_arg.db"


def test_resolve_config_explicit_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("KVDB_DB_PATH", raising=False)
    config_file = tmp_path / "custom.yaml"
    config_file.write_text("db_path: custom.db\nstrict_delete: false\n")

    config = resolve_config(config_path=config_file)

    assert config.db_path == "custom.db"
    assert config.strict_delete is False
