# tests/test_protocol.py

from __future__ import annotations

import json

import pytest

from todo_sync.errors import MalformedMessage, UnknownAction
from todo_sync.sync.protocol import (
    Ack,
    AddTask,
    GetTasks,
    TaskAdded,
    ToggleTask,
    parse_command,
)
from todo_sync.todo.schemas import Task


def test_parse_known_commands() -> None:
    assert isinstance(parse_command('{"action": "get_tasks"}'), GetTasks)

    add = parse_command('{"action": "add_task", "text": "x"}')
    assert isinstance(add, AddTask)
    assert add.text == "x"

    toggle = parse_command(b'{"action": "toggle_task", "id": "abc"}')
    assert isinstance(toggle, ToggleTask)
    assert toggle.id == "abc"


def test_parse_ignores_extra_fields() -> None:
    command = parse_command('{"action": "get_tasks", "extra": 1}')

    assert isinstance(command, GetTasks)


def test_parse_unknown_action() -> None:
    with pytest.raises(UnknownAction) as exc:
        parse_command('{"action": "delete_task", "id": "1"}')

    assert exc.value.action == "delete_task"


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[1, 2]",
        '"get_tasks"',
        "{}",
        '{"action": 5}',
        '{"action": "add_task"}',
        '{"action": "add_task", "text": 3}',
        '{"action": "toggle_task"}',
        b"\xff\xfe",
    ],
)
def test_parse_malformed(raw: str | bytes) -> None:
    with pytest.raises(MalformedMessage):
        parse_command(raw)


def test_events_serialize_with_type_discriminant() -> None:
    task = Task(id="1", text="a", completed=False)

    added = json.loads(TaskAdded(task=task, tasks=[task]).model_dump_json())
    ack = json.loads(Ack().model_dump_json())

    assert added == {
        "type": "task_added",
        "task": {"id": "1", "text": "a", "completed": False},
        "tasks": [{"id": "1", "text": "a", "completed": False}],
    }
    assert ack == {"type": "ack"}
