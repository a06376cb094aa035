# app/services/redis_service.py
from typing import Optional
from redis.asyncio import Redis
from app.config import settings

_client: Optional[Redis] = None

def get_redis_client() -> Redis:
    """Shared client, created on first use"""
    global _client
    if _client is None:
        _client = Redis.from_url(settings.redis_url, decode_responses=True)
    return _client

def set_redis_client(client: Optional[Redis]) -> None:
    """Swap the shared client (tests install fakeredis here)"""
    global _client
    _client = client

class RedisService:
    def __init__(self, client: Optional[Redis] = None):
        self.redis: Redis = client or get_redis_client()

    async def setex(self, key: str, expire: int, value: str):
        """Set a key that expires after ``expire`` seconds"""
        await self.redis.setex(key, expire, value)

    async def get(self, key: str):
        """Get the value of a key"""
        return await self.redis.get(key)

    async def exists(self, key: str) -> bool:
        return bool(await self.redis.exists(key))

    async def delete(self, *keys: str):
        """Delete one or more keys"""
        if keys:
            await self.redis.delete(*keys)

    async def close(self):
        """Close the Redis connection"""
        await self.redis.aclose()
