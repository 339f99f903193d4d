"""
Sync 模块：推送通道订阅者管理 + 事件协议 + 广播

入站帧处理见 todo_sync.sync.handlers（依赖 AppState，不在此处导出）。
"""

from todo_sync.sync.broadcaster import SyncBroadcaster
from todo_sync.sync.registry import ChannelRegistry

__all__ = ["ChannelRegistry", "SyncBroadcaster"]
