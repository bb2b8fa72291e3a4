"""
构建会话存储 — 站点安装请求与“安装完成”信号之间的交接

会话从创建起就以 build_id 为键，之后绑定的站点 ID 只是附加索引，
因此无论通过哪个键读取都能拿到同一条记录。

生命周期：pending → applying → applied → cleaned
                         └→ failed → cleaned
只有 pending 状态的会话可以被认领，重复的完成信号不会重复应用结构。
"""
import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from messages.design_messages import FigmaAnalysis
from messages.plan_messages import BuildPlan
from messages.workflow_messages import BuildSummary, SessionState

logger = logging.getLogger(__name__)


@dataclass
class BuildSession:
    """一次排队的构建"""

    build_id: str
    site_name: str
    plan: BuildPlan
    analysis: Optional[FigmaAnalysis] = None
    site_id: Optional[str] = None
    state: SessionState = SessionState.PENDING
    summary: Optional[BuildSummary] = None
    error: Optional[str] = None
    created_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            "buildId": self.build_id,
            "siteName": self.site_name,
            "siteId": self.site_id,
            "state": self.state.value,
            "summary": self.summary.to_dict() if self.summary else None,
            "error": self.error,
        }


class BuildSessionStore:
    """进程内会话存储（单事件循环内使用）。"""

    def __init__(self) -> None:
        self._sessions: Dict[str, BuildSession] = {}
        self._by_site: Dict[str, str] = {}
        self._finished: Dict[str, asyncio.Event] = {}

    # ------------------------------------------------------------------
    # 写入与查询
    # ------------------------------------------------------------------

    def queue(
        self, site_name: str, plan: BuildPlan, analysis: Optional[FigmaAnalysis] = None
    ) -> BuildSession:
        """登记一次待应用的构建，返回带新 build_id 的会话。"""
        session = BuildSession(
            build_id=uuid.uuid4().hex, site_name=site_name, plan=plan, analysis=analysis
        )
        self._sessions[session.build_id] = session
        logger.info("[会话] 已排队 %s（站点 %s）", session.build_id, site_name)
        return session

    def bind_site(self, build_id: str, site_id: str) -> BuildSession:
        """站点创建后记录其 ID（可重复绑定同一 ID）。"""
        session = self._require(build_id)
        session.site_id = site_id
        self._by_site[site_id] = build_id
        return session

    def get(self, build_id: str) -> Optional[BuildSession]:
        return self._sessions.get(build_id)

    def find_by_site(self, site_id: str) -> Optional[BuildSession]:
        build_id = self._by_site.get(site_id)
        return self._sessions.get(build_id) if build_id else None

    def _require(self, build_id: str) -> BuildSession:
        session = self._sessions.get(build_id)
        if session is None:
            raise KeyError(f"未知的构建会话: {build_id}")
        return session

    # ------------------------------------------------------------------
    # 状态迁移
    # ------------------------------------------------------------------

    def claim(self, build_id: str) -> Optional[BuildSession]:
        """pending → applying。会话不存在或已被认领时返回 None。"""
        session = self._sessions.get(build_id)
        if session is None or session.state != SessionState.PENDING:
            return None
        session.state = SessionState.APPLYING
        return session

    def release(self, build_id: str) -> None:
        """applying → pending（认领后未能开始应用时退回）。"""
        session = self._require(build_id)
        if session.state == SessionState.APPLYING:
            session.state = SessionState.PENDING

    def mark_applied(self, build_id: str, summary: BuildSummary) -> None:
        session = self._require(build_id)
        session.state = SessionState.APPLIED
        session.summary = summary
        self._notify(build_id)

    def mark_failed(self, build_id: str, error: str) -> None:
        session = self._require(build_id)
        session.state = SessionState.FAILED
        session.error = error
        self._notify(build_id)

    def cleanup(self, build_id: str) -> None:
        """释放设计稿分析数据，保留会话记录供查询。"""
        session = self._sessions.get(build_id)
        if session is None or session.state == SessionState.CLEANED:
            return
        session.analysis = None
        session.state = SessionState.CLEANED
        self._notify(build_id)
        logger.info("[会话] 已清理 %s", build_id)

    # ------------------------------------------------------------------
    # 等待完成
    # ------------------------------------------------------------------

    def _event(self, build_id: str) -> asyncio.Event:
        if build_id not in self._finished:
            self._finished[build_id] = asyncio.Event()
        return self._finished[build_id]

    def _notify(self, build_id: str) -> None:
        self._event(build_id).set()

    async def wait_for_completion(self, build_id: str, timeout: float) -> bool:
        """等待完成信号被处理（applied 或 failed）。

        超时视为信号不会到来：清理会话并返回 False。
        """
        session = self._require(build_id)
        if session.state not in (SessionState.PENDING, SessionState.APPLYING):
            return session.summary is not None or session.error is not None
        try:
            await asyncio.wait_for(self._event(build_id).wait(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("[会话] %s 等待完成信号超时（%ss）", build_id, timeout)
            self.cleanup(build_id)
            return False
        return session.summary is not None or session.error is not None
