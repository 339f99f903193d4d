"""
structlog 配置

HTTP 请求日志带 trace_id，推送通道日志带 channel_id，Peer 调用日志带 peer，
都经 contextvars 合并进每一条事件。production 输出 JSON，其余环境输出彩色文本。
"""

import logging
import sys

import structlog


def _renderer(env: str) -> list:
    if env == "production":
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]


def setup_logging(env: str = "development", level: int = logging.INFO) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            *_renderer(env),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # uvicorn / httpx 走标准 logging
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
