"""
全局配置模块：通过 pydantic-settings 读取 .env 环境变量
"""

from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用全局配置，从 .env 文件加载"""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Redis（快照持久化） ──
    REDIS_URL: str = "redis://127.0.0.1:6379/0"
    REDIS_MAX_CONNECTIONS: int = 10
    PERSIST_ENABLED: bool = True  # 关闭后纯内存运行，重启即丢失
    SNAPSHOT_KEY_PREFIX: str = "todo"  # 快照 Key 前缀，同一 Redis 部署多实例时区分

    # ── 推送通道 ──
    CHANNEL_QUEUE_SIZE: int = 256  # 单个订阅者的出站队列上限，满了丢帧

    # ── Peer 同步 ──
    PEER_TIMEOUT: float = 10.0  # 调用远端 share/merge 的超时（秒）
    SELF_ADDRESS: str = ""  # 本实例对外地址，作为 X-Peer-Address 发给远端

    # ── 应用 ──
    ENV: str = "development"  # development | production
    APP_NAME: str = "todo-sync"
    APP_PORT: int = 8000

    @model_validator(mode="after")
    def _check_limits(self) -> "Settings":
        """队列上限和超时必须为正数，否则广播或 Peer 调用会退化为永久阻塞/立即失败"""
        if self.CHANNEL_QUEUE_SIZE <= 0:
            raise ValueError("CHANNEL_QUEUE_SIZE 必须 > 0")
        if self.PEER_TIMEOUT <= 0:
            raise ValueError("PEER_TIMEOUT 必须 > 0")
        return self


@lru_cache
def get_settings() -> Settings:
    """单例获取配置（带缓存）"""
    return Settings()
