from __future__ import annotations

from collections.abc import Generator

import fakeredis
import pytest
from fastapi.testclient import TestClient


@pytest.fixture()
def r() -> fakeredis.FakeRedis:
    client = fakeredis.FakeRedis(decode_responses=True)
    # FakeRedis instances may share one in-process server; start clean.
    client.flushall()
    return client


@pytest.fixture()
def client_and_redis(
    r: fakeredis.FakeRedis, monkeypatch: pytest.MonkeyPatch
) -> Generator[tuple[TestClient, fakeredis.FakeRedis], None, None]:
    """TestClient whose lifespan opens fakeredis instead of a live server."""

    import checkoutpets.main as main_module

    monkeypatch.setattr(main_module, "create_redis", lambda *_args, **_kwargs: r)
    with TestClient(main_module.app) as c:
        yield c, r


@pytest.fixture()
def client(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> TestClient:
    return client_and_redis[0]


@pytest.fixture()
def make_user():
    """Factory for UserRecord rows that never touch the store."""

    from checkoutpets.api.models import UserRecord

    def _make(**overrides):  # type: ignore[no-untyped-def]
        data = {
            "id": "u1",
            "username": "alice",
            "password_hash": "x",
            "salt": "y",
            "created_at": "2025-01-01T00:00:00Z",
        }
        data.update(overrides)
        return UserRecord.model_validate(data)

    return _make


@pytest.fixture()
def make_pet():
    from checkoutpets.api.models import Pet

    def _make(**overrides):  # type: ignore[no-untyped-def]
        data = {"id": "p1", "user_id": "u1"}
        data.update(overrides)
        return Pet.model_validate(data)

    return _make
