# tests/fakes.py

from __future__ import annotations

import asyncio
import json

import httpx


class FakeRedis:
    """
    In-memory stand-in for the handful of redis.asyncio calls SnapshotStore makes.

    Set ``fail = True`` to make every call raise, simulating an unreachable server.
    """

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.fail = False
        self.set_calls = 0

    def _check(self) -> None:
        if self.fail:
            raise ConnectionError("redis unavailable")

    async def ping(self) -> bool:
        self._check()
        return True

    async def get(self, key: str) -> str | None:
        self._check()
        return self.data.get(key)

    async def set(self, key: str, value: str) -> bool:
        self._check()
        self.set_calls += 1
        self.data[key] = value
        return True


def drain(queue: asyncio.Queue[str]) -> list[dict]:
    """Pop every frame currently queued for a channel, decoded."""
    frames = []
    while not queue.empty():
        frames.append(json.loads(queue.get_nowait()))
    return frames


class FakePeer:
    """
    Remote instance served through httpx.MockTransport.

    Records merge payloads; ``share_status`` / ``merge_status`` force error codes.
    """

    def __init__(self, tasks: list[dict] | None = None) -> None:
        self.tasks = tasks or []
        self.merged: list[list[dict]] = []
        self.headers: list[httpx.Headers] = []
        self.share_status = 200
        self.merge_status = 200
        self.share_body: bytes | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.headers.append(request.headers)
        if request.url.path == "/peer/share_tasks":
            if self.share_body is not None:
                return httpx.Response(self.share_status, content=self.share_body)
            return httpx.Response(self.share_status, json=self.tasks)
        if request.url.path == "/peer/merge_tasks":
            self.merged.append(json.loads(request.content)["tasks"])
            return httpx.Response(self.merge_status, json={"ok": True})
        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)
