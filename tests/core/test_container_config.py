from __future__ import annotations

from pathlib import Path

import pytest

from facultyhiring.config import DATABASE_URL_ENV, ConfigManager, resolve_config
from facultyhiring.container import build_rubric_config, create_container
from facultyhiring.persistence import MemoryStore, SqlStore
from facultyhiring.schemas import AppConfig, load_config


def test_create_container_defaults_to_memory_store():
    container = create_container()

    store = container.store()
    assert isinstance(store, MemoryStore)
    assert container.store() is store
    assert container.service().store is store


def test_create_container_with_overrides(tmp_path: Path):
    container = create_container(
        settings={
            "workflow": {"required_documents": ["pds_url"], "require_passing_score": True},
            "rubric": {"educational_cap": 60, "degree_points": {"PhD": 80}},
            "database": {"url": f"sqlite:///{tmp_path / 'hiring.db'}"},
        }
    )

    workflow = container.workflow()
    rubric = container.rubric()
    store = container.store()

    assert workflow._config.required_documents == ("pds_url",)
    assert workflow._config.require_passing_score is True
    assert rubric._config.educational_cap == 60
    assert rubric._config.degree_points["PhD"] == 80
    assert rubric._config.degree_points["Masters"] == 65
    assert isinstance(store, SqlStore)
    assert container.service().store is store
    store.close()


def test_create_container_overrides_clock(now):
    container = create_container(now_provider=lambda: now)
    assert container.workflow()._now_provider() == now


def test_build_rubric_config_rejects_unknown_setting():
    with pytest.raises(ValueError, match="Unknown rubric setting"):
        build_rubric_config({"bonus_cap": 5})


def test_workflow_and_rubric_read_the_config_provider():
    container = create_container(
        settings={"workflow": {"require_passing_score": True}, "rubric": {"experience_cap": 20}}
    )

    assert container.config.workflow() == {"require_passing_score": True}
    assert container.workflow()._config.require_passing_score is True
    assert container.rubric()._config.experience_cap == 20

    container.config.from_dict({"rubric": {"bonus_cap": 5}})
    container.rubric.reset()
    with pytest.raises(ValueError, match="Unknown rubric setting"):
        container.rubric()


def test_defaults_without_settings():
    container = create_container()
    assert container.workflow()._config.required_documents == ()
    assert container.rubric()._config.educational_cap == 85


def test_load_config_validation():
    data = {
        "workflow": {"require_passing_score": True},
        "rubric": {"technological_cap": 40},
        "logging": {"level": "DEBUG"},
    }
    app_config = load_config(data)
    assert isinstance(app_config, AppConfig)
    settings = app_config.to_settings()
    assert settings["workflow"] == {"require_passing_score": True}
    assert settings["rubric"] == {"technological_cap": 40}
    assert "database" not in settings
    assert app_config.logging.level == "DEBUG"


def test_load_config_rejects_unknown_sections():
    with pytest.raises(ValueError):
        load_config({"evaluators": {"bm25": {}}})


def test_empty_config_yields_defaults():
    assert load_config(None).to_settings() == {}


def test_environment_overrides_database_url():
    config = resolve_config(
        {"database": {"url": "sqlite:///from-file.db"}},
        environ={DATABASE_URL_ENV: "sqlite:///from-env.db"},
    )
    assert config.database.url == "sqlite:///from-env.db"
    assert config.to_settings()["database"]["url"] == "sqlite:///from-env.db"


def test_config_manager_loads_named_yaml(tmp_path: Path):
    (tmp_path / "hiring.yaml").write_text(
        "workflow:\n  required_documents: [pds_url, transcript_url]\n",
        encoding="utf-8",
    )
    manager = ConfigManager(tmp_path)

    assert manager.load("hiring")["workflow"]["required_documents"] == ["pds_url", "transcript_url"]
    app_config = manager.load_app_config("hiring", environ={})
    assert app_config.workflow.required_documents == ["pds_url", "transcript_url"]
