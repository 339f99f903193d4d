"""
Peers 模块：跨实例 share / merge 对账
"""

from todo_sync.peers.client import PeerClient
from todo_sync.peers.service import PeerSync

__all__ = ["PeerClient", "PeerSync"]
