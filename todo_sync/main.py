"""
FastAPI 应用主入口
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from prometheus_client import make_asgi_app

from todo_sync.api.health import router as health_router
from todo_sync.api.peers import router as peers_router
from todo_sync.api.tasks import router as tasks_router
from todo_sync.api.ws import router as ws_router
from todo_sync.cache.redis_client import redis_client
from todo_sync.config import Settings, get_settings
from todo_sync.observability.logging_config import setup_logging
from todo_sync.observability.metrics_middleware import MetricsMiddleware
from todo_sync.observability.request_logger import RequestLoggerMiddleware
from todo_sync.peers.client import PeerClient
from todo_sync.state import AppState
from todo_sync.todo.persistence import SnapshotStore

settings = get_settings()

# 初始化日志（在 import 时就生效）
setup_logging(env=settings.ENV)
log = structlog.get_logger()


def build_state(settings: Settings) -> AppState:
    """按配置组装 AppState：PERSIST_ENABLED=false 时纯内存运行"""
    snapshots = None
    if settings.PERSIST_ENABLED:
        snapshots = SnapshotStore(redis_client, key_prefix=settings.SNAPSHOT_KEY_PREFIX)
    return AppState(settings, snapshots=snapshots)


def create_app(
    state: AppState | None = None,
    peer_client: PeerClient | None = None,
) -> FastAPI:
    """测试时可注入预先组装好的 AppState / PeerClient"""
    app_state = state or build_state(settings)
    client = peer_client or PeerClient(
        timeout=app_state.settings.PEER_TIMEOUT,
        self_address=app_state.settings.SELF_ADDRESS,
    )

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        """应用生命周期：启动时预检 + 恢复快照，关闭时写最终快照"""
        log.info("应用启动", env=app_state.settings.ENV, app=app_state.settings.APP_NAME)

        # ── Warm-up：Fail Fast，持久化开启但 Redis 不可用时拒绝启动 ──
        if app_state.snapshots is not None:
            await app_state.snapshots.ping()
            log.info("Redis 连接正常")

        await app_state.startup()

        yield

        await app_state.shutdown()
        log.info("应用关闭，状态已落盘")

    application = FastAPI(
        title=app_state.settings.APP_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )
    application.state.todo = app_state
    application.state.peer_client = client

    # ── 中间件（执行顺序：从下往上注册，从上往下执行） ──
    application.add_middleware(RequestLoggerMiddleware)
    application.add_middleware(MetricsMiddleware)

    # ── Prometheus 指标端点 ──
    application.mount("/metrics", make_asgi_app())

    # ── 路由注册 ──
    application.include_router(health_router)
    application.include_router(tasks_router)
    application.include_router(ws_router)
    application.include_router(peers_router)

    return application


app = create_app()


def main() -> None:
    import uvicorn

    uvicorn.run("todo_sync.main:app", host="0.0.0.0", port=settings.APP_PORT)


if __name__ == "__main__":
    main()
