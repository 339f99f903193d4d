"""
推送通道消息协议

入站（客户端 → 服务端）：{"action": ..., ...}，在边界处解析为封闭的命令集合
    GetTasks / AddTask{text} / ToggleTask{id}
出站（服务端 → 客户端）：{"type": ..., ...}
    tasks_overview / task_added / task_toggled / ack

解析失败直接抛 MalformedMessage / UnknownAction，handler 拿到的永远是强类型命令。
"""

import json
from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from todo_sync.errors import MalformedMessage, UnknownAction
from todo_sync.todo.schemas import Task

# ── 入站命令 ──


class GetTasks(BaseModel):
    action: Literal["get_tasks"] = "get_tasks"


class AddTask(BaseModel):
    action: Literal["add_task"] = "add_task"
    text: str


class ToggleTask(BaseModel):
    action: Literal["toggle_task"] = "toggle_task"
    id: str


Command = Annotated[GetTasks | AddTask | ToggleTask, Field(discriminator="action")]

_command_adapter: TypeAdapter[GetTasks | AddTask | ToggleTask] = TypeAdapter(Command)

KNOWN_ACTIONS = frozenset({"get_tasks", "add_task", "toggle_task"})


def parse_command(raw: str | bytes) -> GetTasks | AddTask | ToggleTask:
    """
    文本帧 → 命令。

    - 字节无法按 UTF-8 解码 / 不是 JSON / 不是对象 / 缺少字符串 action → MalformedMessage
    - action 不在命令集合里 → UnknownAction
    - 字段缺失或类型不对（如 add_task 的 text 不是字符串）→ MalformedMessage
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedMessage(f"帧内容不是合法 UTF-8: {e}") from e

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedMessage(f"帧内容不是合法 JSON: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedMessage(f"命令必须是 JSON 对象，收到 {type(payload).__name__}")

    action = payload.get("action")
    if not isinstance(action, str):
        raise MalformedMessage("命令缺少字符串类型的 action 字段")
    if action not in KNOWN_ACTIONS:
        raise UnknownAction(action)

    try:
        return _command_adapter.validate_python(payload)
    except ValidationError as e:
        raise MalformedMessage(f"{action} 字段校验失败: {e.errors(include_url=False)}") from e


# ── 出站事件 ──


class TasksOverview(BaseModel):
    type: Literal["tasks_overview"] = "tasks_overview"
    tasks: list[Task]


class TaskAdded(BaseModel):
    type: Literal["task_added"] = "task_added"
    task: Task
    tasks: list[Task]


class TaskToggled(BaseModel):
    type: Literal["task_toggled"] = "task_toggled"
    task: Task
    tasks: list[Task]


class Ack(BaseModel):
    type: Literal["ack"] = "ack"


Event = TasksOverview | TaskAdded | TaskToggled | Ack
