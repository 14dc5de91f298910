"""Tests for StorageDomain."""

import pytest

from typed_storage import StorageDomain


def test_namespaces():
    assert StorageDomain.GENERAL.namespace == "default_storage"
    assert StorageDomain.USER.namespace == "user_storage"
    assert StorageDomain.CONFIG.namespace == "config_storage"
    assert StorageDomain.CACHE.namespace == "cache_storage"
    assert StorageDomain.ENCRYPTED.namespace == "encrypted_storage"


def test_only_encrypted_domain_is_encrypted():
    assert [d for d in StorageDomain if d.encrypted] == [StorageDomain.ENCRYPTED]


@pytest.mark.parametrize("name", ["user", "USER", "user_storage", StorageDomain.USER])
def test_parse(name):
    assert StorageDomain.parse(name) is StorageDomain.USER


def test_parse_unknown():
    with pytest.raises(ValueError, match="Unknown storage domain"):
        StorageDomain.parse("archive")
