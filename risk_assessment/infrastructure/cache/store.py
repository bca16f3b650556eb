"""
Key-value cache with per-entry TTL.

Values are stored wholesale as JSON strings; a missing key and a key holding
an empty value both read back as None.
"""

import logging
import uuid
from datetime import timedelta
from typing import Protocol, Type, TypeVar
import redis.asyncio as aioredis
from pydantic import TypeAdapter

logger = logging.getLogger(__name__)

T = TypeVar("T")

CREDIT_KEY_PREFIX = "credit:"
ASSESSMENT_KEY_PREFIX = "risk_assessment:"


def credit_cache_key(customer_id: str) -> str:
    return f"{CREDIT_KEY_PREFIX}{customer_id}"


def assessment_cache_key(application_id: uuid.UUID | str) -> str:
    return f"{ASSESSMENT_KEY_PREFIX}{application_id}"


class CacheStore(Protocol):
    """Get / set-with-TTL contract the gateway and orchestrator rely on"""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl: timedelta) -> None: ...


class RedisCacheStore:
    """CacheStore backed by redis.asyncio"""

    def __init__(self, client: aioredis.Redis):
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCacheStore":
        return cls(aioredis.Redis.from_url(url, decode_responses=True, socket_timeout=5.0, socket_connect_timeout=5.0))

    async def get(self, key: str) -> str | None:
        data = await self._client.get(key)
        if data is None:
            return None
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return data or None

    async def set(self, key: str, value: str, ttl: timedelta) -> None:
        await self._client.set(key, value, ex=ttl)

    async def close(self) -> None:
        await self._client.aclose()


class CacheCodec:
    """JSON encoding of frozen domain dataclasses for cache storage"""

    def __init__(self, model_class: Type[T]):
        self.model_class = model_class
        self._adapter = TypeAdapter(model_class)

    def encode(self, value: T) -> str:
        return self._adapter.dump_json(value).decode("utf-8")

    def decode(self, data: str) -> T:
        return self._adapter.validate_json(data)
