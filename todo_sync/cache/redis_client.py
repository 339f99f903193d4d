"""
Redis 客户端：连接池 + Key 统一管理
"""

import redis.asyncio as aioredis

from todo_sync.config import get_settings


class RedisKeys:
    """
    Redis Key 统一管理，避免散弹式硬编码
    命名规范：{前缀}:{资源类型}
    """

    # ── 状态快照 ──
    @staticmethod
    def snapshot(prefix: str) -> str:
        """任务列表 + Peer 地址列表的整体快照（无 TTL，进程重启后回读）"""
        return f"{prefix}:snapshot"


settings = get_settings()

# 连接池惰性建连：import 时不会触碰网络
redis_pool = aioredis.ConnectionPool.from_url(
    settings.REDIS_URL,
    max_connections=settings.REDIS_MAX_CONNECTIONS,
    decode_responses=True,
    socket_timeout=5,
    socket_connect_timeout=5,
    retry_on_timeout=True,
)

redis_client = aioredis.Redis(connection_pool=redis_pool)
