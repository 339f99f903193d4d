# tests/test_handlers.py

from __future__ import annotations

import pytest

from todo_sync.state import AppState
from todo_sync.sync.handlers import FrameKind, command_router, connect, handle_frame

from .fakes import FakeRedis, drain


def test_router_registers_every_push_action() -> None:
    assert sorted(command_router.actions) == ["add_task", "get_tasks", "toggle_task"]


@pytest.mark.asyncio
async def test_add_task_broadcasts_to_all_channels(state: AppState) -> None:
    a_id, a_queue = await connect(state)
    _, b_queue = await connect(state)

    await handle_frame(state, a_id, FrameKind.TEXT, '{"action": "add_task", "text": "x"}')

    a_frames, b_frames = drain(a_queue), drain(b_queue)
    assert len(a_frames) == 1 and len(b_frames) == 1
    assert a_frames[0]["type"] == b_frames[0]["type"] == "task_added"
    assert a_frames[0]["tasks"] == b_frames[0]["tasks"]
    assert a_frames[0]["task"]["text"] == "x"
    assert a_frames[0]["tasks"] == [a_frames[0]["task"]]


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   "])
async def test_blank_add_task_is_dropped_silently(state: AppState, text: str) -> None:
    channel_id, queue = await connect(state)

    await handle_frame(
        state, channel_id, FrameKind.TEXT, f'{{"action": "add_task", "text": "{text}"}}'
    )

    assert len(state.store) == 0
    assert drain(queue) == []


@pytest.mark.asyncio
async def test_toggle_task_broadcasts_updated_task(state: AppState) -> None:
    task = state.store.create("a")
    a_id, a_queue = await connect(state)
    _, b_queue = await connect(state)

    await handle_frame(
        state, a_id, FrameKind.TEXT, f'{{"action": "toggle_task", "id": "{task.id}"}}'
    )

    for queue in (a_queue, b_queue):
        frames = drain(queue)
        assert len(frames) == 1
        assert frames[0]["type"] == "task_toggled"
        assert frames[0]["task"] == {"id": task.id, "text": "a", "completed": True}
        assert frames[0]["tasks"] == [frames[0]["task"]]


@pytest.mark.asyncio
async def test_toggle_unknown_id_is_dropped(state: AppState) -> None:
    state.store.create("a")
    channel_id, queue = await connect(state)

    await handle_frame(
        state, channel_id, FrameKind.TEXT, '{"action": "toggle_task", "id": "bad-id"}'
    )

    assert len(state.store) == 1
    assert state.store.list()[0].completed is False
    assert drain(queue) == []


@pytest.mark.asyncio
async def test_get_tasks_goes_to_every_channel(state: AppState) -> None:
    state.store.create("a")
    a_id, a_queue = await connect(state)
    _, b_queue = await connect(state)

    await handle_frame(state, a_id, FrameKind.TEXT, '{"action": "get_tasks"}')

    for queue in (a_queue, b_queue):
        frames = drain(queue)
        assert [f["type"] for f in frames] == ["tasks_overview"]
        assert [t["text"] for t in frames[0]["tasks"]] == ["a"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "frame",
    ['{"action": "explode"}', "not json", '{"text": "x"}', '{"action": "add_task"}'],
)
async def test_bad_frames_are_dropped(state: AppState, frame: str) -> None:
    channel_id, queue = await connect(state)

    await handle_frame(state, channel_id, FrameKind.TEXT, frame)

    assert len(state.store) == 0
    assert drain(queue) == []


@pytest.mark.asyncio
async def test_binary_frame_is_rejected(state: AppState) -> None:
    channel_id, queue = await connect(state)

    await handle_frame(
        state, channel_id, FrameKind.BINARY, b'{"action": "add_task", "text": "x"}'
    )

    assert len(state.store) == 0
    assert drain(queue) == []


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", [FrameKind.PING, FrameKind.PONG])
async def test_liveness_probe_acks_origin_only(state: AppState, kind: FrameKind) -> None:
    a_id, a_queue = await connect(state)
    _, b_queue = await connect(state)

    await handle_frame(state, a_id, kind)

    assert drain(a_queue) == [{"type": "ack"}]
    assert drain(b_queue) == []


@pytest.mark.asyncio
async def test_close_unregisters_channel(state: AppState) -> None:
    a_id, _ = await connect(state)
    b_id, b_queue = await connect(state)

    await handle_frame(state, a_id, FrameKind.CLOSE)
    await handle_frame(state, b_id, FrameKind.TEXT, '{"action": "add_task", "text": "x"}')

    assert state.registry.members() == frozenset({b_id})
    assert len(drain(b_queue)) == 1


@pytest.mark.asyncio
async def test_events_arrive_in_mutation_order(state: AppState) -> None:
    channel_id, queue = await connect(state)

    await handle_frame(state, channel_id, FrameKind.TEXT, '{"action": "add_task", "text": "a"}')
    task_id = state.store.list()[0].id
    await handle_frame(
        state, channel_id, FrameKind.TEXT, f'{{"action": "toggle_task", "id": "{task_id}"}}'
    )
    await handle_frame(state, channel_id, FrameKind.TEXT, '{"action": "add_task", "text": "b"}')

    frames = drain(queue)
    assert [f["type"] for f in frames] == ["task_added", "task_toggled", "task_added"]
    assert [len(f["tasks"]) for f in frames] == [1, 1, 2]


@pytest.mark.asyncio
async def test_mutation_schedules_snapshot(
    persistent_state: AppState, redis: FakeRedis
) -> None:
    channel_id, _ = await connect(persistent_state)

    await handle_frame(
        persistent_state, channel_id, FrameKind.TEXT, '{"action": "add_task", "text": "x"}'
    )
    await persistent_state.snapshots.flush()

    assert '"text":"x"' in redis.data["test:snapshot"]


@pytest.mark.asyncio
async def test_rejected_command_does_not_persist(
    persistent_state: AppState, redis: FakeRedis
) -> None:
    channel_id, _ = await connect(persistent_state)

    await handle_frame(
        persistent_state, channel_id, FrameKind.TEXT, '{"action": "toggle_task", "id": "nope"}'
    )
    await persistent_state.snapshots.flush()

    assert redis.set_calls == 0


@pytest.mark.asyncio
async def test_toggle_schedules_snapshot(persistent_state: AppState, redis: FakeRedis) -> None:
    task = persistent_state.store.create("x")
    channel_id, _ = await connect(persistent_state)

    await handle_frame(
        persistent_state,
        channel_id,
        FrameKind.TEXT,
        f'{{"action": "toggle_task", "id": "{task.id}"}}',
    )
    await persistent_state.snapshots.flush()

    assert '"completed":true' in redis.data["test:snapshot"]
