from pathlib import Path

import pytest
from pydantic import ValidationError

from lingoflash.application.config import resolve_config
from lingoflash.application.factory import get_library_repository, get_rng
from lingoflash.infrastructure.adapters.json_library import JsonLibraryRepository


def test_defaults_live_under_home(mock_home):
    config = resolve_config()
    assert config.library_path == mock_home / ".config/lingoflash/library.json"
    assert config.practice_floor == 10
    assert config.practice_cap == 10
    assert config.seed is None
    assert config.verbose == 0


def test_none_overrides_are_ignored(mock_home):
    config = resolve_config({"practice_cap": None, "seed": 5})
    assert config.practice_cap == 10
    assert config.seed == 5


def test_env_overrides(mock_home, monkeypatch):
    monkeypatch.setenv("LINGOFLASH_PRACTICE_CAP", "4")
    monkeypatch.setenv("LINGOFLASH_LIBRARY_PATH", "~/words.json")
    config = resolve_config()
    assert config.practice_cap == 4
    assert config.library_path == mock_home / "words.json"


def test_toml_file(mock_home):
    cfg = mock_home / ".config/lingoflash/config.toml"
    cfg.parent.mkdir(parents=True)
    cfg.write_text('practice_floor = 20\nport = 9100\n', encoding="utf-8")

    config = resolve_config({"port": 9200})

    assert config.practice_floor == 20
    assert config.port == 9200


def test_factory_builds_json_repository(mock_home, tmp_path):
    config = resolve_config({"library_path": tmp_path / "lib.json"})
    repo = get_library_repository(config)
    assert isinstance(repo, JsonLibraryRepository)
    assert repo.path == Path(tmp_path / "lib.json")


def test_seeded_rng_is_deterministic(mock_home):
    config = resolve_config({"seed": 11})
    assert get_rng(config).random() == get_rng(config).random()


def test_invalid_values_are_rejected(mock_home):
    with pytest.raises(ValidationError):
        resolve_config({"practice_cap": 0})
    with pytest.raises(ValidationError):
        resolve_config({"verbose": -1})
