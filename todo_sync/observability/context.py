"""
链路追踪上下文：通过 contextvars 在协程间自动传播 trace_id / channel_id
"""

import contextvars
import uuid

import structlog

# ── 全局上下文变量 ──
trace_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("trace_id", default="")


def new_trace_id() -> str:
    """生成新的 trace_id"""
    return str(uuid.uuid4())


def get_trace_id() -> str:
    return trace_id_var.get()


def bind_channel(channel_id: int) -> None:
    """推送通道协程入口调用：后续日志自动带 channel_id"""
    structlog.contextvars.bind_contextvars(channel_id=channel_id)
