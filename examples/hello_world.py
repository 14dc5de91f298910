"""
typed_storage — Hello World

Primitives are stored natively, everything else as JSON. The default you
pass to get() decides how a value is read back, and nothing ever raises.
"""

import tempfile

from pydantic import BaseModel

import typed_storage
from typed_storage import ErrorCause, Int32, StorageDomain, StorageSettings


class Profile(BaseModel):
    name: str = ""
    tags: list[str] = []


def main():
    # ──────────────────────────────────────
    #  1. Initialize once per process
    # ──────────────────────────────────────
    root = tempfile.mkdtemp(prefix="typed_storage_")
    storage = typed_storage.init(
        StorageSettings(root_dir=root, encryption_key="demo-passphrase-only")
    )

    # ──────────────────────────────────────
    #  2. Primitives, per domain
    # ──────────────────────────────────────
    storage.put("age", 30, StorageDomain.USER)
    print("user age:  ", storage.get("age", 0, StorageDomain.USER))
    print("config age:", storage.get("age", 0, StorageDomain.CONFIG), "(domains are isolated)")

    storage.put("retries", Int32(3), StorageDomain.CONFIG)
    print("retries:   ", storage.get("retries", Int32(0), StorageDomain.CONFIG))

    # ──────────────────────────────────────
    #  3. Structured objects
    # ──────────────────────────────────────
    storage.put("profile", Profile(name="A", tags=["x", "y"]), StorageDomain.CACHE)
    profile = storage.get("profile", Profile(), StorageDomain.CACHE)
    print("profile:   ", profile)

    # ──────────────────────────────────────
    #  4. Secrets at rest
    # ──────────────────────────────────────
    storage.put("token", "abc123", StorageDomain.ENCRYPTED)
    print("token:     ", storage.get("token", "", StorageDomain.ENCRYPTED))

    # ──────────────────────────────────────
    #  5. Failures come back as defaults
    # ──────────────────────────────────────
    result = storage.try_get("age", Int32(0), StorageDomain.USER)
    if result.cause is ErrorCause.KIND_MISMATCH:
        print(f"  [FALLBACK] {result.detail}")

    print("user keys: ", storage.list_keys(StorageDomain.USER))
    storage.clear_all(StorageDomain.USER)
    print("after clear:", storage.list_keys(StorageDomain.USER))

    typed_storage.shutdown()


if __name__ == "__main__":
    main()
