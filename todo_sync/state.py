"""
AppState：服务进程唯一拥有的状态对象

启动时创建一次，挂在 app.state 上，所有 handler 通过引用访问；
外部组件不得绕过它直接修改 TaskStore / ChannelRegistry。

单 actor 约定：任何读写 TaskStore / ChannelRegistry 的入站事件都在 self.lock 内
一次处理完（变更 + 广播入队 + 触发快照），事件之间不会交错。
"""

import asyncio

import structlog

from todo_sync.config import Settings
from todo_sync.sync.broadcaster import SyncBroadcaster
from todo_sync.sync.registry import ChannelRegistry
from todo_sync.sync.transport import ChannelOutbox
from todo_sync.todo.persistence import SnapshotStore
from todo_sync.todo.schemas import StateSnapshot
from todo_sync.todo.store import TaskStore

log = structlog.get_logger()


class AppState:
    """TaskStore + ChannelRegistry + 广播器 + 已知 Peer 列表"""

    def __init__(self, settings: Settings, snapshots: SnapshotStore | None = None):
        self.settings = settings
        self.snapshots = snapshots
        self.store = TaskStore()
        self.registry = ChannelRegistry()
        self.outbox = ChannelOutbox(maxsize=settings.CHANNEL_QUEUE_SIZE)
        self.broadcaster = SyncBroadcaster(self.registry, self.outbox)
        self.peers: list[str] = []
        self.lock = asyncio.Lock()

    # ── 生命周期 ──

    async def startup(self) -> None:
        """从快照恢复任务列表和 Peer 列表；推送通道集合永远从空开始"""
        if self.snapshots is None:
            log.info("持久化未启用，以空状态启动")
            return
        snapshot = await self.snapshots.load()
        self.store = TaskStore(snapshot.tasks)
        self.peers = list(snapshot.peers)
        log.info("状态已从快照恢复", tasks=len(self.store), peers=len(self.peers))

    async def shutdown(self) -> None:
        """写最终快照并等待所有未完成写入"""
        if self.snapshots is None:
            return
        async with self.lock:
            self.persist()
        await self.snapshots.flush()
        log.info("最终快照已写入", tasks=len(self.store))

    # ── 持久化 ──

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(tasks=self.store.list(), peers=list(self.peers))

    def persist(self) -> None:
        """变更完成后调用（持锁期间），不等待写入结果"""
        if self.snapshots is not None:
            self.snapshots.schedule(self.snapshot())

    # ── Peer 列表 ──

    def add_peer(self, address: str) -> bool:
        """登记 Peer 地址，已存在返回 False"""
        if address in self.peers:
            return False
        self.peers.append(address)
        return True
