"""
FastAPI Web 应用 — 构建排队、安装完成信号与实时进度

路由：
  POST /api/builds                      → 登记一次构建（站点名 + 构建计划 + 可选 Figma 链接）
  POST /api/builds/{build_id}/installed → 站点安装完成信号（可重复发送，只应用一次）
  GET  /api/builds/{build_id}           → 构建状态与阶段汇总
  GET  /api/history                     → 进度消息历史
  WS   /ws                              → 进度消息实时推送
"""
import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from fastapi import BackgroundTasks, FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from extraction.figma_analysis import analyze_figma_url
from messages.plan_messages import parse_build_plan
from messages.workflow_messages import SessionState
from tools.site_tools import LocalWpSite, SiteHandle
from utils.errors import FigmaApiError, RateLimitError, ValidationError
from utils.validators import validate_identifier
from web.bridge import ProgressBridge
from workflow.orchestrator import apply_queued_build
from workflow.session_store import BuildSessionStore

logger = logging.getLogger(__name__)

SiteFactory = Callable[[str, Optional[str]], SiteHandle]


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BuildRequest(ApiModel):
    site_name: str
    plan: Dict[str, Any]
    figma_url: Optional[str] = None


class InstalledSignal(ApiModel):
    site_id: Optional[str] = None


def default_site_factory(site_name: str, site_id: Optional[str]) -> SiteHandle:
    return LocalWpSite(site_name, site_id=site_id)


def create_app(
    store: Optional[BuildSessionStore] = None,
    bridge: Optional[ProgressBridge] = None,
    site_factory: Optional[SiteFactory] = None,
    settle_seconds: Optional[float] = None,
) -> FastAPI:
    """创建应用实例（测试可注入会话存储、进度桥与站点工厂）。"""
    app = FastAPI(title="Figma 站点构建服务")
    app.state.store = store or BuildSessionStore()
    app.state.bridge = bridge or ProgressBridge()
    app.state.site_factory = site_factory or default_site_factory

    # ============================================================
    # HTTP 路由
    # ============================================================

    @app.post("/api/builds")
    async def queue_build(request: BuildRequest):
        """校验输入并登记构建；Figma 链接会在此时完成分析。"""
        try:
            validate_identifier(request.site_name, "站点名")
            plan = parse_build_plan(request.plan)
            analysis = (
                await asyncio.to_thread(analyze_figma_url, request.figma_url)
                if request.figma_url else None
            )
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except RateLimitError as e:
            logger.warning("[Web] Figma 限流，拒绝排队: %s", e)
            return JSONResponse(status_code=429, content={"error": e.to_dict()})
        except FigmaApiError as e:
            logger.warning("[Web] Figma 设计稿获取失败: %s", e)
            raise HTTPException(status_code=502, detail=str(e))

        session = app.state.store.queue(request.site_name, plan, analysis)
        return {"buildId": session.build_id, "state": session.state.value}

    @app.post("/api/builds/{build_id}/installed", status_code=202)
    async def site_installed(build_id: str, signal: InstalledSignal, background: BackgroundTasks):
        """安装完成信号。只有 pending 的会话会被安排应用。"""
        session = app.state.store.get(build_id)
        if session is None:
            raise HTTPException(status_code=404, detail=f"未知的构建: {build_id}")
        if session.state != SessionState.PENDING:
            return {"buildId": build_id, "accepted": False, "state": session.state.value}

        site = app.state.site_factory(session.site_name, signal.site_id)
        background.add_task(
            apply_queued_build,
            app.state.store,
            build_id,
            site,
            progress=app.state.bridge.progress_callback(build_id),
            settle_seconds=settle_seconds,
        )
        return {"buildId": build_id, "accepted": True, "state": session.state.value}

    @app.get("/api/builds/{build_id}")
    async def get_build(build_id: str):
        session = app.state.store.get(build_id)
        if session is None:
            raise HTTPException(status_code=404, detail=f"未知的构建: {build_id}")
        return session.to_dict()

    @app.get("/api/history")
    async def get_history(build_id: Optional[str] = None):
        return {"events": app.state.bridge.get_history(build_id)}

    # ============================================================
    # WebSocket 路由
    # ============================================================

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """回放历史后持续推送新的进度消息；客户端可发送 history 请求按构建回放。"""
        await websocket.accept()
        bridge: ProgressBridge = app.state.bridge
        sub_queue = bridge.subscribe()

        for event in bridge.get_history():
            await websocket.send_json(event)

        async def send_task():
            """持续从订阅队列读取新消息并推送到 WebSocket。"""
            try:
                while True:
                    event = await sub_queue.get()
                    await websocket.send_json(event.to_dict())
            except (WebSocketDisconnect, RuntimeError):
                pass

        async def receive_task():
            """接收客户端命令，断开时结束。"""
            try:
                while True:
                    parsed = await websocket.receive_json()
                    if isinstance(parsed, dict) and parsed.get("type") == "history":
                        for event in bridge.get_history(parsed.get("buildId")):
                            await websocket.send_json(event)
            except WebSocketDisconnect:
                pass

        # 并行运行发送和接收
        send = asyncio.create_task(send_task())
        receive = asyncio.create_task(receive_task())
        try:
            done, pending = await asyncio.wait(
                [send, receive], return_when=asyncio.FIRST_COMPLETED
            )
            for task in pending:
                task.cancel()
        finally:
            send.cancel()
            receive.cancel()
            bridge.unsubscribe(sub_queue)

    return app


app = create_app()
