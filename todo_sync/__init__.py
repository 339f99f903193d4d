"""
todo-sync：共享任务列表服务（HTTP 查询 + WebSocket 实时推送 + Peer 对账）
"""
