from typing import List, Optional
import json
import logging

from app.config import settings
from app.services.redis_service import RedisService

logger = logging.getLogger(__name__)

def followers_key(user_id: int) -> str:
    return f"user:{user_id}:followers"

def following_key(user_id: int) -> str:
    return f"user:{user_id}:following"

def invalidated_key(key: str) -> str:
    return f"{key}:invalidated"

class FollowListCache:
    """Ordered user ids of follower/following lists, dropped on every graph change.

    Only ids are cached; profile fields are read from the database on every
    request. Invalidation also leaves a short-lived marker so a reader that
    loaded the list before the change cannot write the old ids back.

    Cache errors never fail a request: reads fall back to the database and
    writes are skipped, both with a log line.
    """

    def __init__(self, redis: Optional[RedisService] = None):
        self.enabled = settings.CACHE_ENABLED
        self._redis = redis

    @property
    def redis(self) -> RedisService:
        if self._redis is None:
            self._redis = RedisService()
        return self._redis

    async def get(self, key: str) -> Optional[List[int]]:
        if not self.enabled:
            return None
        try:
            cached = await self.redis.get(key)
        except Exception as e:
            logger.error(f"Cache read failed for {key}: {e}")
            return None
        if cached is None:
            logger.debug(f"Cache miss for {key}")
            return None
        logger.debug(f"Cache hit for {key}")
        return json.loads(cached)

    async def set(self, key: str, user_ids: List[int]) -> None:
        if not self.enabled:
            return
        try:
            if await self.redis.exists(invalidated_key(key)):
                logger.debug(f"Skipped caching {key}: invalidated while loading")
                return
            await self.redis.setex(key, settings.FOLLOW_LIST_CACHE_TTL, json.dumps(user_ids))
        except Exception as e:
            logger.error(f"Error caching {key}: {e}")

    async def invalidate_edge(self, follower_id: int, followed_id: int) -> None:
        """Drop every list an edge between these users appears in"""
        if not self.enabled:
            return
        keys = (followers_key(followed_id), following_key(follower_id))
        try:
            await self.redis.delete(*keys)
            for key in keys:
                await self.redis.setex(invalidated_key(key), settings.FOLLOW_LIST_INVALIDATION_TTL, "1")
        except Exception as e:
            logger.error(f"Cache invalidation failed for {follower_id} -> {followed_id}: {e}")
