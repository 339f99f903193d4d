"""
状态快照 Redis 存储层

整体快照写在单个 Key（{prefix}:snapshot），无 TTL。

容错策略：
- load() 失败或快照损坏时：记录错误日志并返回空快照（服务照常启动）
- save() 失败时：记录错误日志并静默忽略（写入失败不影响变更结果）
- schedule() 触发后不等待，变更路径不会被 Redis 拖慢；flush() 在关闭时收尾
"""

import asyncio

import redis.asyncio as aioredis
import structlog
from pydantic import ValidationError

from todo_sync.cache.redis_client import RedisKeys
from todo_sync.todo.schemas import StateSnapshot

log = structlog.get_logger()


class SnapshotStore:
    """StateSnapshot 的 Redis 读写"""

    def __init__(self, redis: aioredis.Redis, key_prefix: str = "todo"):
        self.redis = redis
        self.key = RedisKeys.snapshot(key_prefix)
        self._latest: StateSnapshot | None = None
        self._writer: asyncio.Task | None = None

    async def ping(self) -> None:
        """启动预检：Redis 不可用直接抛错，拒绝启动"""
        await self.redis.ping()

    async def load(self) -> StateSnapshot:
        """读取快照，不存在 / Redis 不可用 / 内容损坏时返回空快照"""
        try:
            raw = await self.redis.get(self.key)
        except Exception as e:
            log.error("快照读取失败，降级为空状态", key=self.key, error=str(e))
            return StateSnapshot()
        if not raw:
            return StateSnapshot()
        try:
            return StateSnapshot.model_validate_json(raw)
        except ValidationError as e:
            log.error("快照内容损坏，降级为空状态", key=self.key, error=str(e))
            return StateSnapshot()

    async def save(self, snapshot: StateSnapshot) -> None:
        """覆盖写入快照，Redis 不可用时静默忽略"""
        try:
            await self.redis.set(self.key, snapshot.model_dump_json())
        except Exception as e:
            log.error(
                "快照写入失败，本次变更未持久化",
                key=self.key,
                tasks=len(snapshot.tasks),
                error=str(e),
            )

    def schedule(self, snapshot: StateSnapshot) -> None:
        """
        fire-and-forget 写入。

        只保留最新一份待写快照，由单个写入协程顺序落盘，
        旧快照不会覆盖新快照；连续变更会被合并成一次写入。
        """
        self._latest = snapshot
        if self._writer is None or self._writer.done():
            self._writer = asyncio.create_task(self._drain())

    async def _drain(self) -> None:
        while self._latest is not None:
            snapshot, self._latest = self._latest, None
            await self.save(snapshot)

    async def flush(self) -> None:
        """等待未完成的写入（关闭时调用）"""
        if self._writer is not None:
            await self._writer
