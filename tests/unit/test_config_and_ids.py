"""Configuration precedence, id canonicalization and id-generation strategies."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from form_service import config as config_module
from form_service.config import load_config
from form_service.logic.errors import InputShapeError
from form_service.logic.identifiers import MAX_ID, canonical_id, id_sort_key
from form_service.logic.id_generation import (
    ClockIdGenerator,
    SequenceIdGenerator,
    UuidIdGenerator,
    build_id_generator,
)
from form_service.logic.inmemory_state import InMemoryFormStore
from form_service.logic.repositories import build_form_store
from form_service.logic.repository_sql import SqlFormStore

_ENV_KEYS = ("DATABASE_URL", "AUTO_APPLY_MIGRATIONS", "FORM_STORE_BACKEND", "FORM_ID_STRATEGY", "LOG_LEVEL")


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(config_module, "CONFIG_DIR", tmp_path / "config")
    monkeypatch.setattr(config_module, "ROOT_CONFIG_FILE", tmp_path / "form_service_config.json")
    return tmp_path


def test_defaults_without_any_source(isolated_config):
    cfg = load_config()

    assert cfg.database.dsn == "sqlite+pysqlite:///:memory:"
    assert cfg.database.auto_apply_migrations is True
    assert cfg.store.backend == "sql"
    assert cfg.store.id_strategy == "sequence"
    assert cfg.logging.level == "INFO"


def test_precedence_env_over_files_over_json(isolated_config, monkeypatch):
    (isolated_config / "form_service_config.json").write_text(
        json.dumps(
            {
                "database": {"dsn": "sqlite:///from-json.db", "auto_apply_migrations": False},
                "store": {"backend": "memory", "id_strategy": "clock"},
                "logging": {"level": "debug"},
            }
        ),
        encoding="utf-8",
    )
    (isolated_config / "config").mkdir()
    (isolated_config / "config" / "database.url").write_text("sqlite:///from-file.db\n", encoding="utf-8")
    monkeypatch.setenv("LOG_LEVEL", "warning")

    cfg = load_config()

    assert cfg.database.dsn == "sqlite:///from-file.db"
    assert cfg.database.auto_apply_migrations is False
    assert cfg.store.backend == "memory"
    assert cfg.store.id_strategy == "clock"
    assert cfg.logging.level == "WARNING"


@pytest.mark.parametrize(
    "key,value",
    [("FORM_STORE_BACKEND", "redis"), ("FORM_ID_STRATEGY", "uuid"), ("LOG_LEVEL", "chatty")],
)
def test_invalid_values_raise(isolated_config, monkeypatch, key, value):
    monkeypatch.setenv(key, value)

    with pytest.raises(ValidationError):
        load_config()


def test_store_selection_follows_backend(isolated_config, monkeypatch):
    monkeypatch.setenv("FORM_STORE_BACKEND", "memory")
    assert isinstance(build_form_store(load_config()), InMemoryFormStore)

    monkeypatch.setenv("FORM_STORE_BACKEND", "sql")
    assert isinstance(build_form_store(load_config()), SqlFormStore)


def test_sequence_generator_counts_from_start():
    gen = SequenceIdGenerator(start=10)

    assert [gen(), gen(), gen()] == ["10", "11", "12"]


def test_clock_generator_is_strictly_increasing():
    gen = ClockIdGenerator()
    ids = [int(gen()) for _ in range(50)]

    assert ids == sorted(set(ids))


def test_uuid_generator_and_unknown_strategy():
    assert len(UuidIdGenerator()()) == 36
    assert isinstance(build_id_generator("clock"), ClockIdGenerator)
    with pytest.raises(ValueError):
        build_id_generator("snowflake")


def test_canonical_id_accepts_up_to_signed_64_bits():
    assert canonical_id(" 42 ") == "42"
    assert canonical_id(MAX_ID) == "9223372036854775807"
    assert canonical_id(str(MAX_ID)) == str(MAX_ID)
    with pytest.raises(InputShapeError):
        canonical_id(str(MAX_ID + 1), "form ID")
    with pytest.raises(InputShapeError):
        canonical_id(True)


def test_id_sort_key_orders_numerically():
    assert sorted(["10", "9", "legacy", "100"], key=id_sort_key) == ["9", "10", "100", "legacy"]
