"""
TaskStore：进程内唯一权威的任务集合

纯内存逻辑，不做 I/O；持久化由调用方在变更后触发（见 AppState.persist）。
- 按插入顺序保存，toggle 原地修改不重排
- create 时拒绝空白内容，之后不再校验（merge 进来的任务原样接收）
- merge 只追加、不按 id 去重，重复 id 是已知行为
"""

from __future__ import annotations

import structlog

from todo_sync.errors import EmptyText, NotFound
from todo_sync.todo.schemas import Task, new_task_id

log = structlog.get_logger()


class TaskStore:
    """有序任务集合"""

    def __init__(self, tasks: list[Task] | None = None):
        self._tasks: list[Task] = [t.model_copy() for t in tasks or []]

    def __len__(self) -> int:
        return len(self._tasks)

    def list(self) -> list[Task]:
        """返回当前集合的副本（插入顺序），调用方修改不影响内部状态"""
        return [t.model_copy() for t in self._tasks]

    def create(self, text: str) -> Task:
        """新建任务，text 去除首尾空白后为空时抛 EmptyText"""
        cleaned = text.strip()
        if not cleaned:
            raise EmptyText()

        task = Task(id=new_task_id(), text=cleaned, completed=False)
        self._tasks.append(task)
        log.debug("任务已创建", task_id=task.id, total=len(self._tasks))
        return task.model_copy()

    def toggle(self, task_id: str) -> Task:
        """
        翻转 completed。

        存在重复 id（merge 后）时只翻转第一个匹配项。
        """
        for task in self._tasks:
            if task.id == task_id:
                task.completed = not task.completed
                log.debug("任务已切换", task_id=task_id, completed=task.completed)
                return task.model_copy()
        raise NotFound(task_id)

    def merge(self, incoming: list[Task]) -> None:
        """整体追加远端任务，不去重"""
        self._tasks.extend(t.model_copy() for t in incoming)
        log.debug("任务已合并", incoming=len(incoming), total=len(self._tasks))
