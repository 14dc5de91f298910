"""StorageDomain — the isolated namespaces every entry lives in."""

from __future__ import annotations

from enum import Enum


class StorageDomain(Enum):
    """Named, mutually isolated key-value namespaces.

    Each member's value is the stable namespace string the engine uses to
    locate the domain's data.  The same key in two domains refers to two
    unrelated entries.
    """

    GENERAL = "default_storage"
    USER = "user_storage"
    CONFIG = "config_storage"
    CACHE = "cache_storage"
    ENCRYPTED = "encrypted_storage"

    @property
    def namespace(self) -> str:
        return self.value

    @property
    def encrypted(self) -> bool:
        """``True`` when the domain's handle is opened with an encryption key."""
        return self is StorageDomain.ENCRYPTED

    @classmethod
    def parse(cls, name: str | StorageDomain) -> StorageDomain:
        """Accept a member, a member name (``"user"``) or a namespace (``"user_storage"``)."""
        if isinstance(name, StorageDomain):
            return name
        lowered = name.strip().lower()
        for domain in cls:
            if lowered in (domain.name.lower(), domain.namespace):
                return domain
        valid = ", ".join(d.name.lower() for d in cls)
        raise ValueError(f"Unknown storage domain: '{name}'. Valid domains: {valid}")
