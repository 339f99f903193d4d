"""
推送通道入站处理

传输层把每一帧归类为 FrameKind 后交给 handle_frame()，这里完成：
解析命令 → 查表分发 → TaskStore 变更 → 触发快照 → 广播。

错误策略：所有错误只影响当前这一帧，记 warning 日志后静默丢弃，
不给任何订阅者回错误帧，也不断开连接。
"""

import asyncio
import enum

import structlog

from todo_sync.errors import TodoSyncError
from todo_sync.observability.metrics import INBOUND_DROPPED_TOTAL, TASK_MUTATION_TOTAL
from todo_sync.state import AppState
from todo_sync.sync.protocol import AddTask, GetTasks, ToggleTask, parse_command
from todo_sync.sync.router import ActionRouter

log = structlog.get_logger()


class FrameKind(enum.Enum):
    TEXT = "text"
    BINARY = "binary"
    PING = "ping"
    PONG = "pong"
    CLOSE = "close"


command_router = ActionRouter("push")


@command_router.route("get_tasks")
def _get_tasks(state: AppState, channel_id: int, command: GetTasks) -> None:
    # 共享视图：刷新请求的结果发给所有订阅者，而不只是请求方
    log.debug("刷新任务列表", channel=channel_id)
    state.broadcaster.tasks_overview(state.store.list())


@command_router.route("add_task")
def _add_task(state: AppState, channel_id: int, command: AddTask) -> None:
    task = state.store.create(command.text)
    TASK_MUTATION_TOTAL.labels(op="create").inc()
    state.persist()
    state.broadcaster.task_added(task, state.store.list())
    log.info("任务已添加", channel=channel_id, task_id=task.id)


@command_router.route("toggle_task")
def _toggle_task(state: AppState, channel_id: int, command: ToggleTask) -> None:
    task = state.store.toggle(command.id)
    TASK_MUTATION_TOTAL.labels(op="toggle").inc()
    state.persist()
    state.broadcaster.task_toggled(task, state.store.list())
    log.info("任务已切换", channel=channel_id, task_id=task.id, completed=task.completed)


def _drop(channel_id: int, error: TodoSyncError) -> None:
    INBOUND_DROPPED_TOTAL.labels(reason=error.reason).inc()
    log.warning("入站帧已丢弃", channel=channel_id, reason=error.reason, error=str(error))


# ── 连接生命周期 ──


async def connect(state: AppState) -> tuple[int, asyncio.Queue[str]]:
    """新订阅者：分配 channel id + 出站队列，并登记到 ChannelRegistry"""
    async with state.lock:
        channel_id, queue = state.outbox.open()
        state.registry.register(channel_id)
    log.info("订阅者已连接", channel=channel_id, total=len(state.registry))
    return channel_id, queue


async def disconnect(state: AppState, channel_id: int) -> None:
    """关闭 / 出错：注销并丢弃出站队列，重复调用无副作用"""
    async with state.lock:
        was_open = channel_id in state.registry
        state.registry.unregister(channel_id)
        state.outbox.close(channel_id)
    if was_open:
        log.info("订阅者已断开", channel=channel_id, total=len(state.registry))


# ── 入站帧 ──


async def handle_frame(
    state: AppState,
    channel_id: int,
    kind: FrameKind,
    data: str | bytes | None = None,
) -> None:
    """处理单个入站帧，任何业务错误都不会向外抛"""
    if kind is FrameKind.CLOSE:
        await disconnect(state, channel_id)
        return

    if kind in (FrameKind.PING, FrameKind.PONG):
        log.debug("收到探活", channel=channel_id, kind=kind.value)
        state.broadcaster.ack(channel_id)
        return

    if kind is FrameKind.BINARY:
        INBOUND_DROPPED_TOTAL.labels(reason="binary").inc()
        log.error("不支持二进制帧，已丢弃", channel=channel_id)
        return

    try:
        command = parse_command(data or "")
    except TodoSyncError as e:
        _drop(channel_id, e)
        return

    async with state.lock:
        try:
            command_router.dispatch(command.action, state, channel_id, command)
        except TodoSyncError as e:
            _drop(channel_id, e)
