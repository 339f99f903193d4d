"""
Peer 接口

被调用面（任何远端实例都可调用，无鉴权）：
- POST /peer/share_tasks  {"request": str}     → 本地全部任务
- POST /peer/merge_tasks  {"tasks": [Task]}    → {"ok": true}，不向本地订阅者广播

本地发起面：
- GET  /peers                 — 已知 Peer 地址（仅供参考，不会被自动使用）
- POST /peers {"address"}     — 登记 Peer 地址
- POST /peers/pull {"address"} — 拉取远端任务并合并进本地
- POST /peers/push {"address"} — 把本地任务推给远端合并
"""

import structlog
from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from todo_sync.api.deps import get_peer_client, get_state
from todo_sync.errors import PeerError
from todo_sync.peers.client import PeerClient
from todo_sync.peers.service import PeerSync
from todo_sync.state import AppState
from todo_sync.todo.schemas import Task

router = APIRouter(tags=["Peer 同步"])
log = structlog.get_logger()


# ── 请求模型 ──


class ShareRequest(BaseModel):
    request: str = ""


class MergeRequest(BaseModel):
    tasks: list[Task]


class PeerAddress(BaseModel):
    address: str = Field(min_length=1)


def _caller(request: Request, x_peer_address: str | None) -> str:
    """调用方身份：优先取对端自报地址，否则取连接来源"""
    if x_peer_address:
        return x_peer_address
    return request.client.host if request.client else "unknown"


# ── 被调用面 ──


@router.post("/peer/share_tasks")
async def share_tasks(
    body: ShareRequest,
    request: Request,
    state: AppState = Depends(get_state),
    x_peer_address: str | None = Header(default=None),
):
    caller = _caller(request, x_peer_address)
    log.debug("收到 share 请求", caller=caller, request=body.request)
    tasks = await PeerSync(state).share(caller)
    return [t.model_dump() for t in tasks]


@router.post("/peer/merge_tasks")
async def merge_tasks(
    body: MergeRequest,
    request: Request,
    state: AppState = Depends(get_state),
    x_peer_address: str | None = Header(default=None),
):
    await PeerSync(state).merge(body.tasks, _caller(request, x_peer_address))
    return {"ok": True}


# ── 本地发起面 ──


@router.get("/peers")
async def list_peers(state: AppState = Depends(get_state)):
    return {"peers": list(state.peers)}


@router.post("/peers")
async def add_peer(body: PeerAddress, state: AppState = Depends(get_state)):
    async with state.lock:
        added = state.add_peer(body.address)
        if added:
            state.persist()
    log.info("登记 Peer", peer=body.address, added=added)
    return {"ok": True, "added": added, "peers": list(state.peers)}


@router.post("/peers/pull")
async def pull_from_peer(
    body: PeerAddress,
    state: AppState = Depends(get_state),
    client: PeerClient = Depends(get_peer_client),
):
    """网络调用在锁外进行，只有最后的 merge 持锁"""
    try:
        tasks = await client.fetch_tasks(body.address)
    except PeerError as e:
        return JSONResponse(content=str(e), status_code=502)
    await PeerSync(state).merge(tasks, body.address)
    return {"ok": True, "merged": len(tasks)}


@router.post("/peers/push")
async def push_to_peer(
    body: PeerAddress,
    state: AppState = Depends(get_state),
    client: PeerClient = Depends(get_peer_client),
):
    async with state.lock:
        tasks = state.store.list()
    try:
        await client.push_tasks(body.address, tasks)
    except PeerError as e:
        return JSONResponse(content=str(e), status_code=502)
    return {"ok": True, "pushed": len(tasks)}
