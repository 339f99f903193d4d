"""
PeerSync：跨实例对账的两个操作

- share：把本地任务列表整体交给调用方，不改动本地状态，不做访问控制
- merge：把调用方给的任务整体追加进本地 TaskStore（不去重），触发快照

Peer 发起的 merge 不会向本地推送订阅者广播，订阅者要等下一次 get_tasks
才能看到合并进来的任务。
"""

import structlog

from todo_sync.observability.metrics import PEER_CALL_TOTAL, TASK_MUTATION_TOTAL
from todo_sync.state import AppState
from todo_sync.todo.schemas import Task

log = structlog.get_logger()


class PeerSync:
    """share / merge 针对 AppState 的实现"""

    def __init__(self, state: AppState):
        self.state = state

    async def share(self, caller: str) -> list[Task]:
        async with self.state.lock:
            tasks = self.state.store.list()
        PEER_CALL_TOTAL.labels(op="share_tasks", direction="inbound", status="success").inc()
        log.info("向 Peer 共享任务", caller=caller, count=len(tasks))
        return tasks

    async def merge(self, incoming: list[Task], caller: str) -> None:
        async with self.state.lock:
            self.state.store.merge(incoming)
            TASK_MUTATION_TOTAL.labels(op="merge").inc()
            self.state.persist()
            total = len(self.state.store)
        PEER_CALL_TOTAL.labels(op="merge_tasks", direction="inbound", status="success").inc()
        log.info("已合并 Peer 任务", caller=caller, incoming=len(incoming), total=total)
