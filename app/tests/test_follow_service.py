import json
import pytest
from unittest.mock import AsyncMock
from sqlalchemy import select, func
from sqlalchemy.exc import OperationalError

from app.models.follow import Follow
from app.models.notification import Notification
from app.schemas.follow_schema import FollowOutcome, UnfollowOutcome
from app.services.follow_service import FollowService
from app.services.notification_service import NotificationService
from app.utils.cache import FollowListCache, followers_key, following_key
from app.utils.exceptions import PersistenceError, ValidationError

async def _count(db, model, *conditions) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(*conditions))
    return result.scalar()

@pytest.mark.asyncio
async def test_follow_twice_keeps_one_edge_and_one_notification(test_db, alice, bob):
    service = FollowService(test_db)

    _, first = await service.follow(alice.id, bob.id)
    _, second = await service.follow(alice.id, bob.id)

    assert first == FollowOutcome.CREATED
    assert second == FollowOutcome.ALREADY_EXISTED
    assert await _count(test_db, Follow, Follow.follower_id == alice.id, Follow.followed_id == bob.id) == 1
    assert await _count(
        test_db, Notification,
        Notification.recipient_id == bob.id,
        Notification.type == "follow"
    ) == 1

@pytest.mark.asyncio
async def test_self_follow_raises_validation_error(test_db, alice):
    service = FollowService(test_db)

    with pytest.raises(ValidationError):
        await service.follow(alice.id, alice.id)

    assert await _count(test_db, Follow) == 0

@pytest.mark.asyncio
async def test_unfollow_outcomes(test_db, alice, bob):
    service = FollowService(test_db)
    await service.follow(alice.id, bob.id)

    assert await service.unfollow(alice.id, bob.id) == UnfollowOutcome.DELETED
    assert await service.unfollow(alice.id, bob.id) == UnfollowOutcome.DID_NOT_EXIST
    assert await service.is_following(alice.id, bob.id) is False

@pytest.mark.asyncio
async def test_is_following_short_circuits_without_query():
    db = AsyncMock()
    service = FollowService(db)

    assert await service.is_following(None, 2) is False
    assert await service.is_following(2, 2) is False
    db.execute.assert_not_awaited()

@pytest.mark.asyncio
async def test_follow_survives_notification_failure(test_db, alice, bob, monkeypatch):
    """A failed follow notification is logged, the follow itself stands"""
    async def failing_create(self, *args, **kwargs):
        raise PersistenceError("notifications table unavailable")

    monkeypatch.setattr(NotificationService, "create_notification", failing_create)

    follow, outcome = await FollowService(test_db).follow(alice.id, bob.id)

    assert outcome == FollowOutcome.CREATED
    assert follow.followed_id == bob.id
    assert await _count(test_db, Follow) == 1
    assert await _count(test_db, Notification) == 0

@pytest.mark.asyncio
async def test_follow_survives_notification_commit_failure(test_db, alice, bob, monkeypatch):
    """Even a database error while saving the notification does not undo the follow"""
    # The rollback expires every loaded object, fixtures included
    alice_id, bob_id = alice.id, bob.id
    service = FollowService(test_db)
    original_commit = test_db.commit
    calls = {"n": 0}

    async def flaky_commit():
        calls["n"] += 1
        # First commit stores the edge, the second one belongs to the notification
        if calls["n"] == 2:
            raise OperationalError("INSERT INTO notifications", {}, Exception("disk I/O error"))
        await original_commit()

    monkeypatch.setattr(test_db, "commit", flaky_commit)

    _, outcome = await service.follow(alice_id, bob_id)
    monkeypatch.setattr(test_db, "commit", original_commit)

    assert outcome == FollowOutcome.CREATED
    assert await service.is_following(alice_id, bob_id) is True
    assert await NotificationService(test_db).unread_count(bob_id) == 0

@pytest.mark.asyncio
async def test_follow_and_unfollow_invalidate_cached_lists(test_db, alice, bob, fake_redis):
    service = FollowService(test_db, cache=FollowListCache())

    assert await service.list_followers(bob.id) == []
    assert await service.list_following(alice.id) == []
    assert await fake_redis.exists(followers_key(bob.id))
    assert await fake_redis.exists(following_key(alice.id))

    await service.follow(alice.id, bob.id)
    assert not await fake_redis.exists(followers_key(bob.id))
    assert not await fake_redis.exists(following_key(alice.id))

    followers = await service.list_followers(bob.id)
    assert [f["id"] for f in followers] == [alice.id]

    await service.unfollow(alice.id, bob.id)
    assert not await fake_redis.exists(followers_key(bob.id))
    assert await service.list_followers(bob.id) == []

@pytest.mark.asyncio
async def test_lists_fall_back_to_database_when_cache_is_down(test_db, alice, bob):
    broken = AsyncMock()
    broken.get.side_effect = ConnectionError("redis unavailable")
    broken.setex.side_effect = ConnectionError("redis unavailable")
    broken.delete.side_effect = ConnectionError("redis unavailable")

    service = FollowService(test_db, cache=FollowListCache(redis=broken))
    await service.follow(alice.id, bob.id)

    followers = await service.list_followers(bob.id, viewer_id=alice.id)
    assert [f["id"] for f in followers] == [alice.id]

@pytest.mark.asyncio
async def test_cached_lists_hold_only_ids(test_db, alice, bob, fake_redis):
    test_db.add(Follow(follower_id=alice.id, followed_id=bob.id))
    await test_db.commit()

    service = FollowService(test_db, cache=FollowListCache())
    followers = await service.list_followers(bob.id)

    assert followers[0]["nickname"] == "Alice"
    assert json.loads(await fake_redis.get(followers_key(bob.id))) == [alice.id]

@pytest.mark.asyncio
async def test_list_loaded_before_a_follow_is_not_written_back(test_db, alice, bob, carol, fake_redis, monkeypatch):
    """A reader that loaded the old list before a follow must not cache it afterwards"""
    service = FollowService(test_db, cache=FollowListCache())
    load_ids = service._load_ids

    async def load_then_follow(*args):
        user_ids = await load_ids(*args)
        await FollowService(test_db).follow(carol.id, bob.id)
        return user_ids

    monkeypatch.setattr(service, "_load_ids", load_then_follow)

    assert await service.list_followers(bob.id) == []
    assert not await fake_redis.exists(followers_key(bob.id))

    followers = await FollowService(test_db, cache=FollowListCache()).list_followers(bob.id)
    assert [f["id"] for f in followers] == [carol.id]
