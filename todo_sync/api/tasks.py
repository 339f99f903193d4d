"""
/api 查询接口

- GET  /api                       — 返回全部任务
- POST /api {"tasks": "<任意字符串>"} — method-dispatch 请求体，同样返回全部任务

只读：不修改 TaskStore，也不触发广播。创建 / 切换只走推送通道。
"""

import json

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from todo_sync.api.deps import get_state
from todo_sync.errors import UnknownAction
from todo_sync.state import AppState
from todo_sync.sync.router import ActionRouter
from todo_sync.todo.schemas import Task

router = APIRouter(tags=["任务"])
log = structlog.get_logger()

method_router = ActionRouter("api")


@method_router.route("tasks")
def _list_tasks(state: AppState, request: object) -> list[Task]:
    log.debug("查询任务列表", request=request)
    return state.store.list()


def _error(message: str, status_code: int) -> JSONResponse:
    # 错误体就是一个 JSON 字符串
    return JSONResponse(content=message, status_code=status_code)


def _tasks_response(tasks: list[Task]) -> JSONResponse:
    return JSONResponse(content=[t.model_dump() for t in tasks])


@router.get("/api")
async def get_tasks(state: AppState = Depends(get_state)):
    async with state.lock:
        tasks = method_router.dispatch("tasks", state, "")
    return _tasks_response(tasks)


@router.post("/api")
async def call_method(request: Request, state: AppState = Depends(get_state)):
    """请求体形如 {"<method>": <参数>}，且只能包含一个 method"""
    try:
        body = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error("请求体不是合法 JSON", 400)

    if not isinstance(body, dict) or len(body) != 1:
        return _error("请求体必须是只含一个 method 的 JSON 对象", 400)

    method, argument = next(iter(body.items()))
    if method == "tasks" and not isinstance(argument, str):
        return _error("tasks 的参数必须是字符串", 400)

    try:
        async with state.lock:
            tasks = method_router.dispatch(method, state, argument)
    except UnknownAction:
        log.warning("未知 /api method", method=method)
        return _error(f"未知 method: {method}", 400)

    return _tasks_response(tasks)
