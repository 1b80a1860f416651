"""Signed session tokens and storage of counting sessions between requests."""

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any
from uuid import uuid4

import redis.asyncio as redis
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from redis.exceptions import RedisError

from config import config
from core.tracker import CountingSession

logger = logging.getLogger(__name__)


class SessionSigner:
    """Issue and verify the tokens clients send as X-Session-ID."""

    def __init__(self, secret_key: str | None = None) -> None:
        self._serializer = URLSafeTimedSerializer(
            secret_key or config.session.secret_key,
            salt=config.session.salt,
        )

    def issue(self) -> str:
        """Return a signed token for a fresh session id."""
        return self._serializer.dumps(uuid4().hex)

    def verify(self, token: str, max_age: int | None = None) -> str | None:
        """
        Check a token's signature and age.

        Returns:
            The session id inside the token, or None if the token is
            forged, malformed or older than `max_age` (default: session TTL)
        """
        try:
            return self._serializer.loads(token, max_age=max_age or config.session.ttl)
        except SignatureExpired:
            logger.debug("Session token expired")
        except BadSignature:
            logger.debug("Session token has a bad signature")
        return None


_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


class SessionStore(ABC):
    """Keeps serialized counting sessions, keyed by session token."""

    @abstractmethod
    async def read(self, token: str) -> dict[str, Any] | None:
        """Return the stored blob, or None if absent or expired."""

    @abstractmethod
    async def write(self, token: str, blob: dict[str, Any], ttl: int) -> None:
        """Store a blob that expires after `ttl` seconds."""


class InMemorySessionStore(SessionStore):
    """Process-local store for development, tests and Redis outages."""

    def __init__(self) -> None:
        self._blobs: dict[str, tuple[dict[str, Any], float]] = {}

    async def read(self, token: str) -> dict[str, Any] | None:
        entry = self._blobs.get(token)
        if entry is None:
            return None
        blob, expires_at = entry
        if expires_at <= time.monotonic():
            del self._blobs[token]
            return None
        return blob

    async def write(self, token: str, blob: dict[str, Any], ttl: int) -> None:
        self._blobs[token] = (blob, time.monotonic() + ttl)


class RedisSessionStore(SessionStore):
    """Stores each counting session as a JSON string with a Redis TTL."""

    def __init__(self, client: redis.Redis, prefix: str | None = None) -> None:
        self._redis = client
        self._prefix = prefix if prefix is not None else config.redis.key_prefix

    async def read(self, token: str) -> dict[str, Any] | None:
        raw = await self._redis.get(self._prefix + token)
        return json.loads(raw) if raw is not None else None

    async def write(self, token: str, blob: dict[str, Any], ttl: int) -> None:
        await self._redis.setex(self._prefix + token, ttl, json.dumps(blob))


_session_store: SessionStore | None = None


async def get_session_store() -> SessionStore:
    """Return the shared store, connecting to Redis on first use when enabled."""
    global _session_store
    if _session_store is not None:
        return _session_store

    if config.redis.enabled:
        client = redis.from_url(config.redis.url)
        try:
            await client.ping()
        except (RedisError, OSError) as exc:
            logger.warning("Redis unavailable at %s (%s); using in-memory sessions", config.redis.url, exc)
        else:
            logger.info("Using Redis session store at %s", config.redis.url)
            _session_store = RedisSessionStore(client)
            return _session_store

    _session_store = InMemorySessionStore()
    return _session_store


async def load_counting_session(token: str) -> CountingSession | None:
    """Restore the counting session stored under `token`, if any."""
    store = await get_session_store()
    blob = await store.read(token)
    if blob is None:
        return None
    try:
        return CountingSession.from_dict(blob)
    except ValueError as exc:
        logger.warning("Discarding unreadable counting session: %s", exc)
        return None


async def save_counting_session(token: str, session: CountingSession) -> None:
    """Store a counting session and restart its expiry clock."""
    store = await get_session_store()
    await store.write(token, session.to_dict(), config.session.ttl)
