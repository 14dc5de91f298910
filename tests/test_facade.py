"""Tests for DataStorage — the full put/get/delete surface."""

import logging
from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel

import typed_storage
from typed_storage import (
    Bool,
    DataStorage,
    DomainOpenError,
    DomainRegistry,
    ErrorCause,
    Float32,
    Float64,
    Int32,
    Int64,
    NotInitializedError,
    StorageDomain,
    StorageSettings,
    Text,
)
from typed_storage.exceptions import EngineError


class Profile(BaseModel):
    name: str = ""
    tags: list[str] = []


@dataclass
class Session:
    user: str = ""
    scopes: list[str] = field(default_factory=list)


class Note:
    def __init__(self, title="", body=""):
        self.title = title
        self.body = body


# ── round trips ──────────────────────────────────────────────


@pytest.mark.parametrize(
    ("value", "default"),
    [
        ("Alex", ""),
        (Text("Alex"), Text("")),
        (Int32(-7), Int32(0)),
        (Int64(2**40), Int64(0)),
        (2**40, 0),
        (Float32(0.25), Float32(0.0)),
        (Float32(0.1), Float32(0.0)),
        (Float32(1 / 3), Float32(0.0)),
        (Float32(3.5e38), Float32(0.0)),
        (Float64(3.5), Float64(0.0)),
        (3.5, 0.0),
        (Bool(True), Bool(False)),
        (True, False),
    ],
)
def test_primitive_round_trip(storage, value, default):
    assert storage.put("k", value, StorageDomain.USER)
    assert storage.get("k", default, StorageDomain.USER) == value


@pytest.mark.parametrize("domain", list(StorageDomain))
def test_unwritten_key_returns_default(storage, domain):
    assert storage.get("never", 99, domain) == 99
    assert storage.get("never", "dflt", domain) == "dflt"
    default = {"a": 1}
    assert storage.get("never", default, domain) is default


@pytest.mark.parametrize("domain", list(StorageDomain))
def test_works_in_every_domain(storage, domain):
    assert storage.put("flag", True, domain)
    assert storage.get("flag", False, domain) is True


def test_default_domain_is_general(storage):
    storage.put("k", "v")
    assert storage.get("k", "", StorageDomain.GENERAL) == "v"
    assert storage.list_keys() == {"k"}


def test_age_scenario(storage):
    assert storage.put("age", 30, StorageDomain.USER)
    assert storage.get("age", 0, StorageDomain.USER) == 30
    assert storage.get("age", 0, StorageDomain.CONFIG) == 0


def test_profile_scenario(storage):
    assert storage.put("profile", {"name": "A", "tags": ["x", "y"]}, StorageDomain.CACHE)
    result = storage.get("profile", Profile(), StorageDomain.CACHE)
    assert result.name == "A"
    assert result.tags == ["x", "y"]


def test_structured_round_trips(storage):
    storage.put("dict", {"n": 1, "nested": {"l": [1, 2]}})
    storage.put("model", Profile(name="B", tags=["t"]))
    storage.put("dataclass", Session(user="u", scopes=["read"]))
    storage.put("list", [Profile(name="C")])

    assert storage.get("dict", {}) == {"n": 1, "nested": {"l": [1, 2]}}
    assert storage.get("model", Profile()) == Profile(name="B", tags=["t"])
    assert storage.get("dataclass", Session()) == Session(user="u", scopes=["read"])
    assert storage.get("list", [], shape=list[Profile]) == [Profile(name="C")]


def test_plain_object_round_trip(storage):
    assert storage.put("note", Note("groceries", "milk"), StorageDomain.USER)

    result = storage.try_get("note", Note(), StorageDomain.USER)
    assert result.ok
    assert isinstance(result.value, Note)
    assert (result.value.title, result.value.body) == ("groceries", "milk")


# ── delete / contains / clear / list ─────────────────────────


def test_delete(storage):
    storage.put("k", 1, StorageDomain.CONFIG)
    assert storage.contains("k", StorageDomain.CONFIG)
    assert storage.delete("k", StorageDomain.CONFIG)
    assert not storage.contains("k", StorageDomain.CONFIG)
    assert storage.get("k", -1, StorageDomain.CONFIG) == -1


def test_delete_missing_key_succeeds(storage):
    assert storage.delete("nope")


def test_clear_all_isolated(storage):
    storage.put("a", 1, StorageDomain.CACHE)
    storage.put("b", 2, StorageDomain.CACHE)
    storage.put("a", 3, StorageDomain.USER)

    storage.clear_all(StorageDomain.CACHE)

    assert storage.list_keys(StorageDomain.CACHE) == set()
    assert storage.list_keys(StorageDomain.USER) == {"a"}
    assert storage.get("a", 0, StorageDomain.USER) == 3


def test_list_keys_is_a_set(storage):
    storage.put("x", 1)
    storage.put("y", "two")
    storage.put("z", {"three": 3})
    keys = storage.list_keys()
    assert isinstance(keys, set)
    assert keys == {"x", "y", "z"}


def test_same_key_in_two_domains(storage):
    storage.put("k", "user", StorageDomain.USER)
    storage.put("k", "cache", StorageDomain.CACHE)
    storage.delete("k", StorageDomain.USER)
    assert storage.get("k", "", StorageDomain.CACHE) == "cache"


# ── degraded paths ───────────────────────────────────────────


def test_malformed_structured_text_returns_default(storage):
    storage.put("profile", "{not json", StorageDomain.CACHE)
    default = Profile(name="fallback")
    assert storage.get("profile", default, StorageDomain.CACHE) is default

    result = storage.try_get("profile", default, StorageDomain.CACHE)
    assert not result.ok
    assert result.cause is ErrorCause.SERIALIZATION
    assert result.value is default


def test_shape_mismatch_returns_default(storage):
    storage.put("items", [1, 2, 3])
    assert storage.get("items", {"d": 0}) == {"d": 0}


def test_kind_mismatch_returns_default(storage):
    storage.put("n", 5)  # int64
    assert storage.get("n", Int32(0)) == Int32(0)
    result = storage.try_get("n", Int32(0))
    assert result.cause is ErrorCause.KIND_MISMATCH
    assert "int64" in result.detail


def test_primitive_read_of_structured_key(storage):
    storage.put("obj", {"a": 1})
    assert storage.get("obj", 0) == 0


def test_put_too_wide_int(storage):
    result = storage.try_put("n", 2**70)
    assert not result.ok
    assert result.value is False
    assert result.cause is ErrorCause.ENCODE
    assert not storage.contains("n")


def test_put_unserializable(storage):
    assert storage.put("obj", object()) is False
    assert storage.try_put("obj", object()).cause is ErrorCause.SERIALIZATION


def test_engine_rejecting_write(storage, monkeypatch):
    handle = storage.registry.resolve(StorageDomain.GENERAL)
    monkeypatch.setattr(handle, "encode_text", lambda key, value: False)
    result = storage.try_put("k", "v")
    assert not result.ok
    assert result.cause is ErrorCause.ENGINE
    assert result.detail == "engine rejected the write"


def test_engine_failure(storage, monkeypatch):
    handle = storage.registry.resolve(StorageDomain.USER)

    def broken(*args):
        raise EngineError("all_keys", "disk I/O error")

    monkeypatch.setattr(handle, "all_keys", broken)
    monkeypatch.setattr(handle, "clear_all", broken)
    monkeypatch.setattr(handle, "remove", broken)

    assert storage.list_keys(StorageDomain.USER) == set()
    assert storage.try_list_keys(StorageDomain.USER).cause is ErrorCause.ENGINE
    assert storage.clear_all(StorageDomain.USER) is None
    assert not storage.try_clear_all(StorageDomain.USER).ok
    assert storage.delete("k", StorageDomain.USER) is False


def test_unexpected_exception_is_absorbed(storage, monkeypatch, caplog):
    handle = storage.registry.resolve(StorageDomain.GENERAL)

    def boom(key):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(handle, "contains", boom)
    with caplog.at_level(logging.ERROR, logger="typed_storage.facade"):
        assert storage.contains("k") is False
    record = caplog.records[-1]
    assert record.exc_info is not None
    assert "contains data error: key=k, domain=GENERAL" in record.getMessage()


def test_unopenable_domain_degrades(engine, caplog):
    storage = DataStorage(DomainRegistry(engine))  # no encryption key
    domain = StorageDomain.ENCRYPTED

    with caplog.at_level(logging.ERROR, logger="typed_storage.facade"):
        assert storage.put("token", "abc", domain) is False
    assert "cause=handle_open" in caplog.records[-1].getMessage()

    assert storage.get("token", "none", domain) == "none"
    assert storage.contains("token", domain) is False
    assert storage.delete("token", domain) is False
    assert storage.list_keys(domain) == set()
    storage.clear_all(domain)

    result = storage.try_clear_all(domain)
    assert not result.ok
    assert result.cause is ErrorCause.HANDLE_OPEN

    with pytest.raises(DomainOpenError):
        storage.open_domain(domain)


def test_mismatch_logged_as_warning(storage, caplog):
    storage.put("n", 5)
    with caplog.at_level(logging.WARNING, logger="typed_storage.facade"):
        storage.get("n", Int32(0))
    assert caplog.records[-1].levelno == logging.WARNING


# ── encrypted domain ─────────────────────────────────────────


def test_encrypted_round_trip(storage):
    assert storage.put("token", "abc123", StorageDomain.ENCRYPTED)
    assert storage.get("token", "", StorageDomain.ENCRYPTED) == "abc123"
    assert storage.get("token", "", StorageDomain.GENERAL) == ""


def test_wrong_encryption_key_returns_default(engine):
    DataStorage(DomainRegistry(engine, encryption_key="right")).put(
        "token", "abc", StorageDomain.ENCRYPTED
    )
    intruder = DataStorage(DomainRegistry(engine, encryption_key="wrong"))
    result = intruder.try_get("token", "none", StorageDomain.ENCRYPTED)
    assert result.value == "none"
    assert result.cause is ErrorCause.DECODE


# ── sqlite backing ───────────────────────────────────────────


def test_sqlite_persists_across_instances(sqlite_settings):
    first = DataStorage.from_settings(sqlite_settings)
    first.put("age", 30, StorageDomain.USER)
    first.put("profile", {"name": "A"}, StorageDomain.CACHE)
    first.put("token", "abc", StorageDomain.ENCRYPTED)
    first.close()

    second = DataStorage.from_settings(sqlite_settings)
    try:
        assert second.get("age", 0, StorageDomain.USER) == 30
        assert second.get("profile", {}, StorageDomain.CACHE) == {"name": "A"}
        assert second.get("token", "", StorageDomain.ENCRYPTED) == "abc"
    finally:
        second.close()


def test_sqlite_storage_operations(sqlite_storage):
    sqlite_storage.put("a", 1, StorageDomain.CONFIG)
    sqlite_storage.put("b", Int32(2), StorageDomain.CONFIG)
    assert sqlite_storage.list_keys(StorageDomain.CONFIG) == {"a", "b"}
    assert sqlite_storage.get("b", Int32(0), StorageDomain.CONFIG) == Int32(2)
    sqlite_storage.clear_all(StorageDomain.CONFIG)
    assert sqlite_storage.list_keys(StorageDomain.CONFIG) == set()


# ── process-wide default ─────────────────────────────────────


def test_get_storage_before_init():
    with pytest.raises(NotInitializedError):
        typed_storage.get_storage()


def test_init_sets_process_default(tmp_path):
    storage = typed_storage.init(StorageSettings(engine="memory", root_dir=tmp_path))
    assert typed_storage.get_storage() is storage
    storage.put("k", "v")
    assert typed_storage.get_storage().get("k", "") == "v"


def test_reinit_replaces_default(tmp_path):
    first = typed_storage.init(StorageSettings(engine="sqlite", root_dir=tmp_path))
    first.put("k", 1)
    second = typed_storage.init(StorageSettings(engine="sqlite", root_dir=tmp_path))
    assert typed_storage.get_storage() is second
    assert second.get("k", 0) == 1


def test_shutdown():
    typed_storage.init(StorageSettings(engine="memory"))
    typed_storage.shutdown()
    with pytest.raises(NotInitializedError):
        typed_storage.get_storage()
