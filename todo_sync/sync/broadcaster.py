"""
SyncBroadcaster：把 TaskStore 的变更结果翻译成类型化事件并下发

投递约定：
- 同一事件只序列化一次，同样的字节发给每个已登记订阅者，不做按人过滤
- 单个订阅者投递失败不影响其他订阅者（逐个 best-effort）
- 不负责注销订阅者，注销由传输边界在连接关闭时完成
- 同一订阅者收到的事件顺序 = TaskStore 变更顺序（由 AppState 单锁保证）
"""

import structlog

from todo_sync.observability.metrics import BROADCAST_TOTAL
from todo_sync.sync.protocol import Ack, Event, TaskAdded, TasksOverview, TaskToggled
from todo_sync.sync.registry import ChannelRegistry
from todo_sync.sync.transport import ChannelOutbox
from todo_sync.todo.schemas import Task

log = structlog.get_logger()


class SyncBroadcaster:
    """事件序列化 + 扇出"""

    def __init__(self, registry: ChannelRegistry, outbox: ChannelOutbox):
        self.registry = registry
        self.outbox = outbox

    def broadcast(self, event: Event) -> int:
        """发给所有已登记订阅者，返回成功入队的订阅者数"""
        frame = event.model_dump_json()
        members = self.registry.members()
        delivered = 0
        for channel_id in members:
            if self.outbox.send(channel_id, frame):
                delivered += 1
        BROADCAST_TOTAL.labels(event_type=event.type).inc(delivered)
        log.debug(
            "事件已广播",
            event_type=event.type,
            subscribers=len(members),
            delivered=delivered,
        )
        return delivered

    def send_to(self, channel_id: int, event: Event) -> bool:
        """只发给单个订阅者（ack 用）"""
        ok = self.outbox.send(channel_id, event.model_dump_json())
        if ok:
            BROADCAST_TOTAL.labels(event_type=event.type).inc()
        return ok

    # ── 协议事件快捷入口 ──

    def tasks_overview(self, tasks: list[Task]) -> int:
        return self.broadcast(TasksOverview(tasks=tasks))

    def task_added(self, task: Task, tasks: list[Task]) -> int:
        return self.broadcast(TaskAdded(task=task, tasks=tasks))

    def task_toggled(self, task: Task, tasks: list[Task]) -> int:
        return self.broadcast(TaskToggled(task=task, tasks=tasks))

    def ack(self, channel_id: int) -> bool:
        return self.send_to(channel_id, Ack())
