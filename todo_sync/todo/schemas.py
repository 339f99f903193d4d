"""
任务数据模型

Task 是 HTTP / 推送通道 / Peer 三个面共用的唯一形状，
StateSnapshot 是写入 Redis 的整体快照（不含推送通道 id）。
"""

import uuid

from pydantic import BaseModel, Field, field_validator


def new_task_id() -> str:
    """任务 id：创建时生成一次，之后不可变"""
    return str(uuid.uuid4())


class Task(BaseModel):
    """单个任务条目"""

    id: str
    text: str
    completed: bool

    @field_validator("id", mode="before")
    @classmethod
    def coerce_int_id(cls, v: object) -> object:
        """远端 Peer 可能传整数 id，转为字符串；null 等其余类型交给 str 校验拒绝"""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class StateSnapshot(BaseModel):
    """持久化快照：任务列表 + 已知 Peer 地址（advisory，不会被自动使用）"""

    tasks: list[Task] = Field(default_factory=list)
    peers: list[str] = Field(default_factory=list)
