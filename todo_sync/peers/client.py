"""
Peer 客户端：调用远端实例的 /peer/share_tasks 和 /peer/merge_tasks

外部实例随时可能挂，每次调用整体受 timeout 限制（连接 + 发送 + 读完响应），
超时 / 网络错误 / 非 2xx / 响应解码失败统一转换为 PeerError。
调用发生在 AppState.lock 之外，远端卡住不会拖住本地事件处理。
"""

import asyncio

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from todo_sync.errors import PeerError
from todo_sync.observability.context import get_trace_id
from todo_sync.observability.metrics import PEER_CALL_TOTAL
from todo_sync.todo.schemas import Task

log = structlog.get_logger()

_tasks_adapter = TypeAdapter(list[Task])


class PeerClient:
    """远端 share / merge 的 HTTP 调用"""

    def __init__(
        self,
        timeout: float,
        self_address: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.self_address = self_address
        self.transport = transport  # 测试时注入 httpx.MockTransport

    def _headers(self) -> dict[str, str]:
        headers = {}
        if self.self_address:
            headers["X-Peer-Address"] = self.self_address
        trace_id = get_trace_id()
        if trace_id:
            headers["X-Trace-ID"] = trace_id
        return headers

    async def _send(self, url: str, payload: dict) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.post(url, json=payload, headers=self._headers())
            resp.raise_for_status()
            return resp

    async def _post(self, address: str, op: str, payload: dict) -> httpx.Response:
        url = f"{address.rstrip('/')}/peer/{op}"
        try:
            # httpx 的 timeout 只限制单次 connect / read / write，外层再加整体截止时间
            return await asyncio.wait_for(self._send(url, payload), timeout=self.timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            self._fail(op, address, e)
            raise PeerError(f"Peer {address} {op} 超时（{self.timeout}s）", cause=e) from e
        except httpx.HTTPStatusError as e:
            self._fail(op, address, e)
            raise PeerError(
                f"Peer {address} {op} 返回 {e.response.status_code}", cause=e
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self._fail(op, address, e)
            raise PeerError(f"Peer {address} {op} 调用失败: {e}", cause=e) from e

    def _fail(self, op: str, address: str, error: Exception) -> None:
        PEER_CALL_TOTAL.labels(op=op, direction="outbound", status="error").inc()
        log.warning("Peer 调用失败", op=op, peer=address, error=str(error))

    async def fetch_tasks(self, address: str, request: str = "") -> list[Task]:
        """拉取远端完整任务列表"""
        resp = await self._post(address, "share_tasks", {"request": request})
        try:
            tasks = _tasks_adapter.validate_json(resp.content)
        except ValidationError as e:
            self._fail("share_tasks", address, e)
            raise PeerError(f"Peer {address} share_tasks 响应无法解析", cause=e) from e
        PEER_CALL_TOTAL.labels(op="share_tasks", direction="outbound", status="success").inc()
        log.info("已从 Peer 拉取任务", peer=address, count=len(tasks))
        return tasks

    async def push_tasks(self, address: str, tasks: list[Task]) -> None:
        """把任务列表推给远端 merge"""
        await self._post(
            address,
            "merge_tasks",
            {"tasks": [t.model_dump() for t in tasks]},
        )
        PEER_CALL_TOTAL.labels(op="merge_tasks", direction="outbound", status="success").inc()
        log.info("已向 Peer 推送任务", peer=address, count=len(tasks))
