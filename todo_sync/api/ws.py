"""
/ws 推送通道

每个连接两个协程：
- 读协程（本 handler）：逐帧归类后交给 handle_frame，一次处理完一帧
- 写协程：消费该连接的出站队列写 socket，慢连接只会堵住自己

ASGI 服务器自己应答协议层 ping，应用层收不到；浏览器也发不出 ping 帧，
所以整帧内容恰好是 "ping" / "pong" 的文本帧按探活处理，回 ack。
"""

import asyncio
import contextlib

import structlog
from fastapi import APIRouter, WebSocket

from todo_sync.api.deps import get_state
from todo_sync.observability.context import bind_channel
from todo_sync.sync.handlers import FrameKind, connect, disconnect, handle_frame

router = APIRouter(tags=["推送通道"])
log = structlog.get_logger()

_PROBES = {"ping": FrameKind.PING, "pong": FrameKind.PONG}


def classify(message: dict) -> tuple[FrameKind, str | bytes | None]:
    """ASGI websocket 消息 → (FrameKind, 帧内容)"""
    if message["type"] == "websocket.disconnect":
        return FrameKind.CLOSE, None
    text = message.get("text")
    if text is not None:
        probe = _PROBES.get(text)
        if probe is not None:
            return probe, None
        return FrameKind.TEXT, text
    return FrameKind.BINARY, message.get("bytes")


async def _write_loop(websocket: WebSocket, queue: asyncio.Queue[str]) -> None:
    while True:
        frame = await queue.get()
        try:
            await websocket.send_text(frame)
        except Exception as e:
            # 写失败说明连接已断，注销由读协程收到 disconnect 后完成
            log.warning("推送写入失败，停止写协程", error=str(e))
            return


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    state = get_state(websocket)

    # 先登记再 accept：客户端握手完成时一定已在广播名单里
    channel_id, queue = await connect(state)
    bind_channel(channel_id)
    writer: asyncio.Task | None = None

    try:
        await websocket.accept()
        writer = asyncio.create_task(_write_loop(websocket, queue))
        while True:
            message = await websocket.receive()
            kind, data = classify(message)
            await handle_frame(state, channel_id, kind, data)
            if kind is FrameKind.CLOSE:
                break
    finally:
        if writer is not None:
            writer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await writer
        # 异常退出时也要注销；正常关闭路径已注销过，重复调用无副作用
        await disconnect(state, channel_id)
