"""
推送通道出站队列

每个订阅者一个有界 asyncio.Queue，由该连接自己的写协程消费并真正写 socket。
send() 只做 put_nowait，永远不阻塞：慢订阅者只会让自己的队列变满、丢帧，
不会拖住其他订阅者，也不会拖住下一个入站事件。
"""

import asyncio
import itertools

import structlog

from todo_sync.observability.metrics import BROADCAST_DROPPED_TOTAL

log = structlog.get_logger()


class ChannelOutbox:
    """channel id → 出站队列"""

    def __init__(self, maxsize: int = 256):
        self.maxsize = maxsize
        self._queues: dict[int, asyncio.Queue[str]] = {}
        self._ids = itertools.count(1)

    def open(self) -> tuple[int, asyncio.Queue[str]]:
        """分配新的 channel id 并创建出站队列"""
        channel_id = next(self._ids)
        queue: asyncio.Queue[str] = asyncio.Queue(maxsize=self.maxsize)
        self._queues[channel_id] = queue
        return channel_id, queue

    def close(self, channel_id: int) -> None:
        self._queues.pop(channel_id, None)

    def send(self, channel_id: int, frame: str) -> bool:
        """非阻塞投递，返回 False 表示本帧对该订阅者丢弃"""
        queue = self._queues.get(channel_id)
        if queue is None:
            BROADCAST_DROPPED_TOTAL.labels(reason="closed").inc()
            log.warning("订阅者出站队列不存在，丢帧", channel=channel_id)
            return False
        try:
            queue.put_nowait(frame)
        except asyncio.QueueFull:
            BROADCAST_DROPPED_TOTAL.labels(reason="queue_full").inc()
            log.warning("订阅者出站队列已满，丢帧", channel=channel_id, maxsize=self.maxsize)
            return False
        return True
