from __future__ import annotations

import json
from typing import Any, Optional

from apps.common import get_logger

from .dtos import CartSnapshot
from .mappers import SnapshotMapper
from .protocols import CacheBackendProtocol, SessionProtocol

logger = get_logger(__name__).bind(component="carts", layer="persistence")

DEFAULT_SESSION_KEY = "cart"
CACHE_KEY_PREFIX = "carts:snapshot"


class BlobPersistence:
    """
    Best-effort snapshot storage over some key/value blob store.

    ``load`` and ``save`` never raise: a missing, corrupt or unreadable blob
    loads as ``None`` and a failed write is logged and dropped.
    """

    name = "blob"

    def __init__(self) -> None:
        self.logger = logger.bind(adapter=self.name)

    def _read_blob(self) -> Any:
        raise NotImplementedError

    def _write_blob(self, blob: Any) -> None:
        raise NotImplementedError

    def load(self) -> Optional[CartSnapshot]:
        try:
            blob = self._read_blob()
        except Exception as exc:
            self.logger.warning("Cart snapshot read failed", error=str(exc))
            return None
        if blob is None:
            self.logger.debug("No stored cart snapshot")
            return None
        try:
            if isinstance(blob, (str, bytes, bytearray)):
                blob = json.loads(blob)
            snapshot = SnapshotMapper.from_blob(blob)
        except (ValueError, TypeError) as exc:
            self.logger.warning("Discarding unreadable cart snapshot", error=str(exc))
            return None
        self.logger.debug("Loaded cart snapshot", items=len(snapshot.items))
        return snapshot

    def save(self, snapshot: CartSnapshot) -> None:
        try:
            self._write_blob(SnapshotMapper.to_blob(snapshot))
        except Exception as exc:
            self.logger.warning(
                "Cart snapshot write failed; continuing in memory",
                error=str(exc),
                items=len(snapshot.items),
            )
            return
        self.logger.debug("Saved cart snapshot", items=len(snapshot.items))


class InMemoryPersistence(BlobPersistence):
    """Keeps the serialized blob in process memory."""

    name = "memory"

    def __init__(self, initial: Optional[str] = None) -> None:
        super().__init__()
        self.blob: Optional[str] = initial

    def _read_blob(self) -> Any:
        return self.blob

    def _write_blob(self, blob: Any) -> None:
        self.blob = json.dumps(blob)


class SessionPersistence(BlobPersistence):
    """Stores the blob in the visitor's Django session under one key."""

    name = "session"

    def __init__(self, session: SessionProtocol, key: str = DEFAULT_SESSION_KEY) -> None:
        super().__init__()
        self.session = session
        self.key = key

    def _read_blob(self) -> Any:
        return self.session.get(self.key)

    def _write_blob(self, blob: Any) -> None:
        self.session[self.key] = blob
        self.session.modified = True


class CachePersistence(BlobPersistence):
    """Stores the blob in the Django cache, keyed per visitor."""

    name = "cache"

    def __init__(
        self,
        cache: CacheBackendProtocol,
        owner_key: str,
        timeout: Optional[int] = None,
    ) -> None:
        super().__init__()
        self.cache = cache
        self.key = f"{CACHE_KEY_PREFIX}:{owner_key}"
        self.timeout = timeout

    def _read_blob(self) -> Any:
        return self.cache.get(self.key)

    def _write_blob(self, blob: Any) -> None:
        self.cache.set(self.key, json.dumps(blob), timeout=self.timeout)
