"""Shared test fixtures."""

import pytest

import typed_storage
from typed_storage import DataStorage, DomainRegistry, StorageSettings
from typed_storage.engine import InMemoryEngine

# Keep key derivation cheap in tests.
FAST_KDF = 1_000
PASSPHRASE = "correct horse battery staple"


@pytest.fixture(autouse=True)
def _reset_default_storage():
    yield
    typed_storage.shutdown()


@pytest.fixture
def engine():
    engine = InMemoryEngine(kdf_iterations=FAST_KDF)
    engine.initialize()
    return engine


@pytest.fixture
def registry(engine):
    return DomainRegistry(engine, encryption_key=PASSPHRASE)


@pytest.fixture
def storage(registry):
    return DataStorage(registry)


@pytest.fixture
def sqlite_settings(tmp_path):
    return StorageSettings(
        engine="sqlite",
        root_dir=tmp_path / "storage",
        encryption_key=PASSPHRASE,
        kdf_iterations=FAST_KDF,
    )


@pytest.fixture
def sqlite_storage(sqlite_settings):
    storage = DataStorage.from_settings(sqlite_settings)
    yield storage
    storage.close()
