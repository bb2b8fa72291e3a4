import asyncio

import pytest

from messages.design_messages import FigmaAnalysis, FigmaComponent, PageInfo, ShapeNode
from messages.plan_messages import parse_build_plan
from messages.workflow_messages import PhaseName, SessionState
from utils.errors import NotReadyError, ValidationError
from workflow.orchestrator import BuildOrchestrator, apply_queued_build
from workflow.preflight import check_site
from workflow.session_store import BuildSessionStore

FULL_PLAN = {
    "features": {"status": "ready", "plugins": [{"slug": "wordpress-seo"}]},
    "content": {"status": "ready", "pages": [{"title": "Home"}]},
    "design": {"status": "ready"},
}


def _recording_runners(order, failing=None):
    def runner(name):
        async def run(ctx):
            order.append(name)
            if name == failing:
                raise RuntimeError("runner exploded")
            return []
        return run

    return {name: runner(name) for name in PhaseName}


def test_failed_phase_does_not_stop_later_phases(site) -> None:
    order = []
    orchestrator = BuildOrchestrator(
        site, FULL_PLAN, runners=_recording_runners(order, failing=PhaseName.CONTENT_STRUCTURE),
    )
    summary = asyncio.run(orchestrator.run())

    assert order == [PhaseName.PLUGINS, PhaseName.CONTENT_STRUCTURE, PhaseName.DESIGN]
    assert [p.name for p in summary.phases] == order
    assert summary.failed_count == 1
    assert summary.succeeded_count == 2
    failed = summary.get(PhaseName.CONTENT_STRUCTURE)
    assert failed.error.type == "RuntimeError"
    assert "exploded" in failed.error.message
    assert summary.get(PhaseName.DESIGN).succeeded
    assert not summary.success


def test_source_phases_only_planned_with_analysis(site) -> None:
    page = PageInfo(id="1", name="Home", node=ShapeNode())
    analysis = FigmaAnalysis(file_key="K", file_name="F", pages=[page])
    order = []
    orchestrator = BuildOrchestrator(
        site, FULL_PLAN, figma_analysis=analysis, runners=_recording_runners(order),
    )
    summary = asyncio.run(orchestrator.run())

    assert len(summary.phases) == 5
    assert order[-1] == PhaseName.SOURCE_PAGES
    patterns = summary.get(PhaseName.SOURCE_PATTERNS)
    assert not patterns.attempted
    assert not patterns.failed
    assert summary.success


def test_unready_pillars_are_skipped(site) -> None:
    order = []
    plan = {"features": {"status": "ready", "plugins": []}, "design": {"status": "generating"}}
    summary = asyncio.run(BuildOrchestrator(site, plan, runners=_recording_runners(order)).run())
    assert order == []
    assert summary.attempted_count == 0
    assert summary.to_dict()["phases"]["plugins"] == {"attempted": False, "succeeded": False}


def test_preflight_failure_aborts_before_any_phase(make_site) -> None:
    site = make_site(status="stopped")
    order = []
    events = []

    async def progress(event, message):
        events.append(event)

    orchestrator = BuildOrchestrator(
        site, FULL_PLAN, runners=_recording_runners(order), progress=progress,
    )
    with pytest.raises(NotReadyError) as excinfo:
        asyncio.run(orchestrator.run())
    assert order == []
    assert events == ["preflight", "error"]
    assert "stopped" in excinfo.value.errors[0]


def test_progress_reports_each_phase(site) -> None:
    events = []

    async def progress(event, message):
        events.append((event, message))

    asyncio.run(BuildOrchestrator(
        site, FULL_PLAN, runners=_recording_runners([]), progress=progress,
    ).run())
    kinds = [e for e, _ in events]
    assert kinds == ["preflight", "phase", "phase", "phase", "complete"]
    assert events[1][1].startswith("Phase 1/3")


def test_invalid_plan_rejected_before_side_effects(site) -> None:
    with pytest.raises(ValidationError):
        BuildOrchestrator(site, {"design": {"theme": {"childThemeName": "../x"}}})
    assert site.calls == []


# ============================================================
# 预检
# ============================================================


def test_soft_preflight_failures_are_warnings(make_site) -> None:
    site = make_site(failures={("core", "is-installed"): "not yet"}, db_ready=False)
    result = asyncio.run(check_site(site, db_timeout=0.01))
    assert result.ready
    assert len(result.warnings) == 2


def test_missing_site_directory_is_hard_failure(make_site) -> None:
    site = make_site()
    site.app_path = site.app_path + "-missing"
    result = asyncio.run(check_site(site, db_timeout=0.01))
    assert not result.ready
    assert len(result.errors) == 1


# ============================================================
# 排队构建
# ============================================================


def test_queued_build_applies_once(site) -> None:
    async def scenario():
        store = BuildSessionStore()
        session = store.queue("demo", parse_build_plan({}))
        waiter = asyncio.create_task(store.wait_for_completion(session.build_id, timeout=5))
        await asyncio.sleep(0)
        first = await apply_queued_build(store, session.build_id, site, settle_seconds=0)
        second = await apply_queued_build(store, session.build_id, site, settle_seconds=0)
        return store, session, first, second, await waiter

    store, session, first, second, completed = asyncio.run(scenario())
    assert first is not None and first.success
    assert second is None
    assert completed
    assert session.state is SessionState.CLEANED
    assert session.summary is first
    assert store.find_by_site("site-1") is session


def test_queued_build_failure_is_recorded(make_site) -> None:
    site = make_site(status="stopped")

    async def scenario():
        store = BuildSessionStore()
        session = store.queue("demo", parse_build_plan({}))
        result = await apply_queued_build(store, session.build_id, site, settle_seconds=0)
        return session, result

    session, result = asyncio.run(scenario())
    assert result is None
    assert session.state is SessionState.CLEANED
    assert session.error.startswith("NotReadyError")
    assert session.summary is None


def test_design_failure_still_runs_source_phases(site) -> None:
    page = PageInfo(id="1", name="Home", node=ShapeNode())
    analysis = FigmaAnalysis(
        file_key="K", file_name="F", pages=[page], components=[FigmaComponent("1", "Card")],
    )
    order = []
    orchestrator = BuildOrchestrator(
        site, FULL_PLAN, figma_analysis=analysis,
        runners=_recording_runners(order, failing=PhaseName.DESIGN),
    )
    summary = asyncio.run(orchestrator.run())

    assert order[-2:] == [PhaseName.SOURCE_PAGES, PhaseName.SOURCE_PATTERNS]
    assert summary.failed_count == 1
    assert summary.get(PhaseName.SOURCE_PAGES).succeeded
    assert summary.get(PhaseName.SOURCE_PATTERNS).succeeded
