"""
健康检查接口：探活 + 快照后端状态
"""

import structlog
from fastapi import APIRouter, Depends

from todo_sync.api.deps import get_state
from todo_sync.state import AppState

router = APIRouter(tags=["健康检查"])
log = structlog.get_logger()


@router.get("/health")
async def health_check(state: AppState = Depends(get_state)):
    """健康检查：进程存活 + Redis 快照后端连通性"""
    status = {
        "status": "ok",
        "tasks": len(state.store),
        "channels": len(state.registry),
        "snapshot": "disabled",
    }

    if state.snapshots is not None:
        try:
            await state.snapshots.ping()
            status["snapshot"] = "ok"
        except Exception as e:
            status["snapshot"] = f"error: {e}"
            status["status"] = "degraded"
            log.error("Redis 健康检查失败", error=str(e))

    return status
