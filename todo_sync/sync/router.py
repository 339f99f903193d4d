"""
动作路由：action / method 名称 → handler 的显式注册表

启动时注册，运行时只查表分发；推送通道命令和 /api 的 method-dispatch 请求体共用。
"""

from collections.abc import Callable
from typing import Any

import structlog

from todo_sync.errors import UnknownAction

log = structlog.get_logger()


class ActionRouter:
    """名称 → handler 注册中心"""

    def __init__(self, name: str):
        self.name = name
        self._handlers: dict[str, Callable[..., Any]] = {}

    def register(self, action: str, handler: Callable[..., Any]) -> None:
        """注册一个 handler，同名覆盖"""
        self._handlers[action] = handler
        log.debug("handler 已注册", router=self.name, action=action)

    def route(self, action: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """装饰器形式的 register"""

        def decorator(handler: Callable[..., Any]) -> Callable[..., Any]:
            self.register(action, handler)
            return handler

        return decorator

    def dispatch(self, action: str, *args: Any) -> Any:
        """查表执行，未注册的名称抛 UnknownAction；handler 自身异常原样上抛"""
        handler = self._handlers.get(action)
        if handler is None:
            raise UnknownAction(action)
        return handler(*args)

    @property
    def actions(self) -> list[str]:
        """所有已注册名称"""
        return list(self._handlers.keys())
