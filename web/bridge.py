"""
ProgressBridge — 构建编排器与 Web UI 之间的进度消息桥接

职责：
  - 编排器通过 progress_callback() 得到的回调上报进度 → WebSocket 客户端实时读取
  - 同一构建连续重复的进度消息只记录一次
  - 维护最近的消息历史（条数有上限），供新连接的 WebSocket 客户端回放
"""
import asyncio
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Deque, Dict, List, Optional, Tuple

from config import settings

# 构建结束时上报的事件
TERMINAL_EVENTS = ("complete", "error")


@dataclass
class ProgressEvent:
    """单条进度消息"""

    build_id: str
    event: str                                     # preflight / phase / phase_error / complete / error
    message: str
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            "buildId": self.build_id,
            "event": self.event,
            "message": self.message,
            "timestamp": self.timestamp,
        }


class ProgressBridge:
    """连接编排器和 Web UI 的异步消息总线。"""

    def __init__(self, history_limit: Optional[int] = None) -> None:
        # 最近的消息历史
        self.events: Deque[ProgressEvent] = deque(
            maxlen=history_limit or settings.PROGRESS_HISTORY_LIMIT
        )
        # 进行中构建的最近一条消息（用于去重），构建结束后移除
        self._last: Dict[str, Tuple[str, str]] = {}
        # 已连接的 WebSocket 客户端
        self._subscribers: List[asyncio.Queue] = []

    # ------------------------------------------------------------------
    # 编排器 → Web UI
    # ------------------------------------------------------------------

    async def emit(self, build_id: str, event: str, message: str) -> bool:
        """发送一条进度消息；与该构建上一条完全相同时丢弃并返回 False。"""
        key = (event, message)
        if self._last.get(build_id) == key:
            return False
        if event in TERMINAL_EVENTS:
            self._last.pop(build_id, None)
        else:
            self._last[build_id] = key
        progress = ProgressEvent(build_id=build_id, event=event, message=message)
        self.events.append(progress)
        for sub_queue in self._subscribers:
            await sub_queue.put(progress)
        return True

    def progress_callback(self, build_id: str) -> Callable[[str, str], Awaitable[None]]:
        """返回绑定到某个构建的进度回调（签名与编排器的 progress 参数一致）。"""

        async def callback(event: str, message: str) -> None:
            await self.emit(build_id, event, message)

        return callback

    # ------------------------------------------------------------------
    # WebSocket 订阅管理
    # ------------------------------------------------------------------

    def subscribe(self) -> asyncio.Queue:
        """注册一个新的消息订阅者，返回其专属消息队列。"""
        q: asyncio.Queue = asyncio.Queue()
        self._subscribers.append(q)
        return q

    def unsubscribe(self, q: asyncio.Queue) -> None:
        if q in self._subscribers:
            self._subscribers.remove(q)

    # ------------------------------------------------------------------
    # 工具方法
    # ------------------------------------------------------------------

    def get_history(self, build_id: Optional[str] = None) -> List[dict]:
        """返回消息历史（可按构建过滤）。"""
        return [
            e.to_dict() for e in self.events
            if build_id is None or e.build_id == build_id
        ]

    def clear(self) -> None:
        self.events.clear()
        self._last.clear()
