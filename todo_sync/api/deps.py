"""
FastAPI 依赖注入：从 app.state 取出进程唯一的 AppState / PeerClient
"""

from starlette.requests import HTTPConnection

from todo_sync.peers.client import PeerClient
from todo_sync.state import AppState


def get_state(conn: HTTPConnection) -> AppState:
    """HTTP 请求和 WebSocket 共用（HTTPConnection 是两者的基类）"""
    return conn.app.state.todo


def get_peer_client(conn: HTTPConnection) -> PeerClient:
    return conn.app.state.peer_client
