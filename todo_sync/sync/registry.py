"""
ChannelRegistry：当前在线的推送订阅者集合

只记录不透明的 channel id，不关心消息内容；
连接建立时登记，关闭/出错时注销。永不持久化。
"""

import structlog

from todo_sync.observability.metrics import CHANNELS_OPEN

log = structlog.get_logger()


class ChannelRegistry:
    """推送订阅者 id 集合，所有操作幂等、不抛错"""

    def __init__(self):
        self._channels: set[int] = set()

    def register(self, channel_id: int) -> None:
        if channel_id in self._channels:
            return
        self._channels.add(channel_id)
        CHANNELS_OPEN.set(len(self._channels))
        log.debug("订阅者已登记", channel=channel_id, total=len(self._channels))

    def unregister(self, channel_id: int) -> None:
        if channel_id not in self._channels:
            return
        self._channels.discard(channel_id)
        CHANNELS_OPEN.set(len(self._channels))
        log.debug("订阅者已注销", channel=channel_id, total=len(self._channels))

    def members(self) -> frozenset[int]:
        """当前成员快照，广播期间注册表变化不影响本轮遍历"""
        return frozenset(self._channels)

    def __contains__(self, channel_id: object) -> bool:
        return channel_id in self._channels

    def __len__(self) -> int:
        return len(self._channels)
