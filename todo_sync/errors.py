"""
应用级异常

推送通道上的异常只记日志、静默丢弃；HTTP / Peer 路径上转换为结构化错误返回。
"""


class TodoSyncError(Exception):
    """所有业务异常的基类"""

    reason = "error"  # 指标 label / 日志字段


class EmptyText(TodoSyncError):
    """创建任务时 text 去除首尾空白后为空"""

    reason = "empty_text"

    def __init__(self) -> None:
        super().__init__("任务内容不能为空")


class NotFound(TodoSyncError):
    """toggle 引用了不存在的任务 id"""

    reason = "not_found"

    def __init__(self, task_id: str):
        super().__init__(f"任务 '{task_id}' 不存在")
        self.task_id = task_id


class MalformedMessage(TodoSyncError):
    """入站帧无法解码 / 不是 JSON 对象 / 字段缺失或类型错误"""

    reason = "malformed"


class UnknownAction(TodoSyncError):
    """JSON 结构合法，但 action 不在已注册的命令集合里"""

    reason = "unknown_action"

    def __init__(self, action: str):
        super().__init__(f"未知 action: {action}")
        self.action = action


class PeerError(TodoSyncError):
    """远端 Peer share/merge 调用失败（超时、网络、状态码、解码）"""

    reason = "peer_error"

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause
