# tests/conftest.py

from __future__ import annotations

import pytest

from todo_sync.config import Settings
from todo_sync.state import AppState
from todo_sync.todo.persistence import SnapshotStore

from .fakes import FakeRedis


@pytest.fixture()
def settings() -> Settings:
    """Settings independent of the developer's environment."""
    return Settings(
        PERSIST_ENABLED=False,
        CHANNEL_QUEUE_SIZE=8,
        PEER_TIMEOUT=1.0,
        SELF_ADDRESS="http://local.test",
        SNAPSHOT_KEY_PREFIX="test",
    )


@pytest.fixture()
def redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture()
def snapshots(redis: FakeRedis) -> SnapshotStore:
    return SnapshotStore(redis, key_prefix="test")  # type: ignore[arg-type]


@pytest.fixture()
def state(settings: Settings) -> AppState:
    """Purely in-memory AppState; persistence is tested separately."""
    return AppState(settings)


@pytest.fixture()
def persistent_state(settings: Settings, snapshots: SnapshotStore) -> AppState:
    return AppState(settings, snapshots=snapshots)
