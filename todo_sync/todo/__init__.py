"""
Todo 模块：权威任务集合 + 快照持久化

TaskStore 为纯内存逻辑，SnapshotStore 负责 Redis 快照读写，
由 AppState 串起来（变更后触发快照）。
"""

from todo_sync.todo.persistence import SnapshotStore
from todo_sync.todo.schemas import StateSnapshot, Task
from todo_sync.todo.store import TaskStore

__all__ = ["SnapshotStore", "StateSnapshot", "Task", "TaskStore"]
