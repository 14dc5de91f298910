"""DomainRegistry — one lazily opened, shared handle per storage domain."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from typed_storage.domains import StorageDomain
from typed_storage.exceptions import DomainOpenError

if TYPE_CHECKING:
    from typed_storage.engine.base import Engine, Handle

logger = logging.getLogger(__name__)


class DomainRegistry:
    """Routes a :class:`StorageDomain` to its handle, opening it on first use.

    Each domain's handle is constructed exactly once per registry, even when
    many threads resolve it at the same time, and is shared by every caller
    afterwards.  A failed open is not cached and not retried: the failure is
    raised to the caller as :class:`DomainOpenError`.

    Parameters:
        engine:         Initialized engine handles are opened from.
        encryption_key: Passphrase for :attr:`StorageDomain.ENCRYPTED`.  Left
                        unset, opening that domain fails.
    """

    def __init__(self, engine: Engine, *, encryption_key: str | None = None) -> None:
        self._engine = engine
        self._encryption_key = encryption_key
        self._handles: dict[StorageDomain, Handle] = {}
        # Opening one domain holds only that domain's lock.
        self._locks = {domain: threading.Lock() for domain in StorageDomain}

    @property
    def engine(self) -> Engine:
        return self._engine

    def resolve(self, domain: StorageDomain) -> Handle:
        """Return the handle for *domain*, opening it if needed.

        Raises:
            DomainOpenError: If the engine cannot open the domain.
        """
        handle = self._handles.get(domain)
        if handle is not None:
            return handle
        with self._locks[domain]:
            handle = self._handles.get(domain)
            if handle is None:
                handle = self._open(domain)
                self._handles[domain] = handle
            return handle

    def _open(self, domain: StorageDomain) -> Handle:
        crypt_key: str | None = None
        if domain.encrypted:
            if not self._encryption_key:
                raise DomainOpenError(domain, "no encryption key configured")
            crypt_key = self._encryption_key

        try:
            handle = self._engine.open(domain.namespace, crypt_key=crypt_key)
        except Exception as e:
            raise DomainOpenError(domain, str(e)) from e

        logger.debug("Opened storage domain %s (%s)", domain.name, domain.namespace)
        return handle

    def open_all(self) -> None:
        """Eagerly open every domain, surfacing the first open failure."""
        for domain in StorageDomain:
            self.resolve(domain)

    def is_open(self, domain: StorageDomain) -> bool:
        return domain in self._handles

    def close(self) -> None:
        """Close every open handle.  Later ``resolve`` calls reopen them."""
        handles = []
        for domain, lock in self._locks.items():
            with lock:
                handle = self._handles.pop(domain, None)
            if handle is not None:
                handles.append(handle)
        for handle in handles:
            handle.close()
