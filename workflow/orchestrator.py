"""
构建编排器 — 按阶段把构建计划应用到目标站点

5 个阶段（严格串行，后一阶段依赖前一阶段在站点上的副作用）：
  Phase 1: plugins           — 功能支柱 ready 且有插件
  Phase 2: content_structure — 内容支柱 ready 且有文章类型或页面
  Phase 3: design            — 设计支柱 ready
  Phase 4: source_pages      — 提供了设计稿分析且有页面
  Phase 5: source_patterns   — 提供了设计稿分析且有组件
没有设计稿分析时后两个阶段不出现在汇总中。

每个阶段独立捕获异常：失败记入汇总，后续阶段照常尝试。
只有预检失败（NotReadyError）会在任何阶段开始前中止整个构建。
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from config import settings
from messages.design_messages import FigmaAnalysis
from messages.plan_messages import BuildPlan, parse_build_plan
from messages.workflow_messages import BuildPhase, BuildSummary, ErrorInfo, PhaseName
from tools.site_tools import SiteHandle
from utils.errors import NotReadyError, PhaseError
from workflow import phases
from workflow.phases import BuildContext, resolve_tokens
from workflow.preflight import run_preflight_checks
from workflow.session_store import BuildSessionStore

logger = logging.getLogger(__name__)

PhaseRunner = Callable[[BuildContext], Awaitable[List[str]]]
ProgressCallback = Callable[[str, str], Awaitable[None]]

PHASE_LABELS = {
    PhaseName.PLUGINS: "安装插件",
    PhaseName.CONTENT_STRUCTURE: "内容结构",
    PhaseName.DESIGN: "主题设计",
    PhaseName.SOURCE_PAGES: "设计稿页面",
    PhaseName.SOURCE_PATTERNS: "设计稿组件模式",
}


def default_runners() -> Dict[PhaseName, PhaseRunner]:
    """阶段名 → 阶段实现。测试可替换其中任意一项。"""
    return {
        PhaseName.PLUGINS: phases.apply_plugins,
        PhaseName.CONTENT_STRUCTURE: phases.apply_content_structure,
        PhaseName.DESIGN: phases.apply_design,
        PhaseName.SOURCE_PAGES: phases.apply_source_pages,
        PhaseName.SOURCE_PATTERNS: phases.apply_source_patterns,
    }


class BuildOrchestrator:
    """一次构建的执行者。

    Args:
        site: 目标站点
        plan: 构建计划（BuildPlan 或原始字典，字典会先校验）
        figma_analysis: 设计稿分析结果，可选
        runners: 替换部分或全部阶段实现
        progress: 进度回调 async (event, message)
        db_timeout: 预检等待数据库的上限（秒）
    """

    def __init__(
        self,
        site: SiteHandle,
        plan: Any,
        figma_analysis: Optional[FigmaAnalysis] = None,
        runners: Optional[Dict[PhaseName, PhaseRunner]] = None,
        progress: Optional[ProgressCallback] = None,
        db_timeout: Optional[float] = None,
    ) -> None:
        # 结构错误在任何副作用之前抛出 ValidationError
        self.plan: BuildPlan = parse_build_plan(plan)
        self.site = site
        self.analysis = figma_analysis
        self.runners = {**default_runners(), **(runners or {})}
        self.progress = progress
        self.db_timeout = db_timeout

    # ------------------------------------------------------------------
    # 阶段规划
    # ------------------------------------------------------------------

    def planned_phases(self) -> List[Tuple[PhaseName, bool]]:
        """返回 (阶段名, 前置条件是否满足) 列表，顺序即执行顺序。"""
        plan = self.plan
        planned = [
            (PhaseName.PLUGINS,
             plan.features.status == "ready" and bool(plan.features.plugins)),
            (PhaseName.CONTENT_STRUCTURE,
             plan.content.status == "ready"
             and bool(plan.content.post_types or plan.content.pages)),
            (PhaseName.DESIGN, plan.design.status == "ready"),
        ]
        if self.analysis is not None:
            planned.append((PhaseName.SOURCE_PAGES, bool(self.analysis.pages)))
            planned.append((PhaseName.SOURCE_PATTERNS, bool(self.analysis.components)))
        return planned

    # ------------------------------------------------------------------
    # 执行
    # ------------------------------------------------------------------

    async def _emit(self, event: str, message: str) -> None:
        if self.progress is not None:
            await self.progress(event, message)

    async def run(self) -> BuildSummary:
        """执行预检与全部阶段，返回汇总。

        Raises:
            NotReadyError: 预检未通过（没有任何阶段运行）
        """
        logger.info("[构建] 开始构建站点 %s", self.site.name)
        await self._emit("preflight", "正在检查站点状态")
        try:
            await run_preflight_checks(self.site, self.db_timeout)
        except NotReadyError as e:
            await self._emit("error", str(e))
            raise

        ctx = BuildContext(
            site=self.site,
            plan=self.plan,
            analysis=self.analysis,
            tokens=resolve_tokens(self.plan, self.analysis),
        )
        planned = self.planned_phases()
        summary = BuildSummary(phases=[BuildPhase(name=name) for name, _ in planned])

        for index, (name, ready) in enumerate(planned, start=1):
            record = summary.get(name)
            label = PHASE_LABELS[name]
            if not ready:
                logger.info("[构建] Phase %d/%d %s: 前置条件不满足，跳过", index, len(planned), label)
                continue
            record.attempted = True
            logger.info("[构建] === Phase %d/%d: %s ===", index, len(planned), label)
            await self._emit("phase", f"Phase {index}/{len(planned)}: {label}")
            try:
                record.warnings = list(await self.runners[name](ctx))
                record.succeeded = True
                logger.info("[构建] ✓ %s 完成", label)
            except Exception as e:
                error = PhaseError(name.value, e)
                record.error = ErrorInfo.from_exception(error)
                logger.error("[构建] ✗ %s 失败: %s，继续后续阶段", label, error)
                await self._emit("phase_error", str(error))
            for warning in record.warnings:
                logger.warning("[构建] ⚠ %s: %s", label, warning)

        self._log_summary(summary)
        await self._emit("complete", summary.describe())
        return summary

    @staticmethod
    def _log_summary(summary: BuildSummary) -> None:
        logger.info(
            "[构建] 汇总: 尝试 %d, 成功 %d, 失败 %d | %s",
            summary.attempted_count,
            summary.succeeded_count,
            summary.failed_count,
            ", ".join(
                f"{p.name.value}={'✓' if p.succeeded else '✗'}"
                for p in summary.phases if p.attempted
            ) or "无阶段执行",
        )
        if summary.success:
            logger.info("[构建] %s", summary.describe())
        else:
            logger.warning("[构建] %s，站点为部分配置状态", summary.describe())


# ============================================================
# 完成信号处理
# ============================================================


async def apply_queued_build(
    store: BuildSessionStore,
    build_id: str,
    site: SiteHandle,
    progress: Optional[ProgressCallback] = None,
    settle_seconds: Optional[float] = None,
) -> Optional[BuildSummary]:
    """站点安装完成信号的处理函数。

    只有仍为 pending 的会话会被应用；重复信号直接返回 None。
    """
    session = store.claim(build_id)
    if session is None:
        logger.info("[构建] 会话 %s 不存在或已处理，忽略重复信号", build_id)
        return None

    store.bind_site(build_id, site.site_id)
    wait = settings.BUILD_SETTLE_SECONDS if settle_seconds is None else settle_seconds
    try:
        if wait > 0:
            await asyncio.sleep(wait)
        orchestrator = BuildOrchestrator(
            site, session.plan, figma_analysis=session.analysis, progress=progress
        )
        summary = await orchestrator.run()
    except asyncio.CancelledError:
        store.release(build_id)
        raise
    except Exception as e:
        store.mark_failed(build_id, f"{type(e).__name__}: {e}")
        store.cleanup(build_id)
        logger.error("[构建] 会话 %s 失败: %s", build_id, e)
        return None

    store.mark_applied(build_id, summary)
    store.cleanup(build_id)
    return summary
