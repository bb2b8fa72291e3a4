"""
Figma 设计稿 → WordPress 站点 — 命令行入口

支持以下运行模式：

  分析设计稿：
    python main.py analyze <figma链接>
    提取页面、设计令牌与组件，结果保存到 output/figma_analysis.json

  对话规划：
    python main.py plan
    与站点规划智能体对话，方案保存到 output/build_plan.json

  构建站点：
    python main.py build <站点名> <方案JSON文件> [--figma <链接>] [--site-id <ID>]

  Web 模式：
    python main.py --web [--port 8000]
"""
import argparse
import asyncio
import json
import logging
import os
import sys

# 将项目根目录添加到 Python 路径
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import settings

# ============================================================
# 日志配置
# ============================================================
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logging.getLogger("autogen_core").setLevel(logging.WARNING)


def _banner(title: str) -> None:
    print()
    print("=" * 60)
    print(f"  {title}")
    print("=" * 60)


# ============================================================
# analyze：设计稿分析
# ============================================================

def run_analyze(url: str) -> None:
    from extraction.figma_analysis import analyze_figma_url
    from tools.file_tools import save_output_json
    from utils.errors import SiteBuilderError

    _banner("Figma 设计稿分析")
    try:
        analysis = analyze_figma_url(url)
    except SiteBuilderError as e:
        print(f"[错误] {e}")
        sys.exit(1)

    summary = analysis.summary()
    path = save_output_json("figma_analysis.json", summary)
    print(f"  文件   : {analysis.file_name}")
    print(f"  页面   : {', '.join(summary['pages']) or '（无）'}")
    print(f"  组件   : {summary['components']}")
    print(f"  已保存 : {path}")


# ============================================================
# plan：对话规划
# ============================================================

async def run_plan() -> None:
    from agents.site_planner import SitePlanner, create_site_planner
    from config.model_client import create_model_client
    from tools.file_tools import save_output_json

    _banner("WordPress 站点规划（输入 exit 退出）")
    model_client = create_model_client()
    planner = SitePlanner(create_site_planner(model_client))
    try:
        text = "你好，我想建一个网站。"
        while True:
            turn = await planner.send_message(text)
            print(f"\n[规划] {turn.reply}\n")
            if turn.completed:
                path = save_output_json("build_plan.json", turn.plan.to_dict())
                print(f"[完成] 方案已保存: {path}")
                return
            text = input("你: ").strip()
            if text.lower() in ("exit", "quit"):
                print("[中断] 规划已取消。")
                return
    except (KeyboardInterrupt, EOFError):
        print("\n\n[中断] 用户取消了规划。")
    finally:
        await model_client.close()


# ============================================================
# build：应用构建计划
# ============================================================

async def run_build(site_name: str, plan_file: str, figma_url=None, site_id=None) -> None:
    from extraction.figma_analysis import analyze_figma_url
    from tools.file_tools import save_output_json
    from tools.site_tools import LocalWpSite
    from utils.errors import SiteBuilderError
    from workflow.orchestrator import BuildOrchestrator

    _banner(f"构建站点: {site_name}")
    try:
        with open(plan_file, "r", encoding="utf-8") as f:
            plan = json.load(f)
        analysis = analyze_figma_url(figma_url) if figma_url else None
        site = LocalWpSite(site_name, site_id=site_id)
        orchestrator = BuildOrchestrator(site, plan, figma_analysis=analysis)
        summary = await orchestrator.run()
    except (OSError, json.JSONDecodeError, SiteBuilderError) as e:
        print(f"[错误] {e}")
        sys.exit(1)

    path = save_output_json("build_summary.json", summary.to_dict())
    print(f"  {summary.describe()}")
    for phase in summary.phases:
        mark = "✓" if phase.succeeded else ("✗" if phase.failed else "-")
        print(f"  {mark} {phase.name.value}")
    print(f"  汇总已保存: {path}")
    if not summary.success:
        sys.exit(2)


# ============================================================
# Web 模式
# ============================================================

def run_web(port: int = 8000) -> None:
    """Web 模式入口：启动 FastAPI 服务。"""
    import uvicorn
    from web.app import app

    os.makedirs(settings.OUTPUT_DIR, exist_ok=True)
    _banner(f"站点构建服务 — http://localhost:{port}")
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")


# ============================================================
# 主入口
# ============================================================

def main():
    parser = argparse.ArgumentParser(
        description="Figma 设计稿 → WordPress 站点构建",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "示例:\n"
            "  python main.py analyze https://www.figma.com/design/xxx/...\n"
            "  python main.py plan\n"
            "  python main.py build my-site output/build_plan.json --figma https://...\n"
            "  python main.py --web --port 9000\n"
        ),
    )
    parser.add_argument("--web", action="store_true", help="启动 Web 服务模式")
    parser.add_argument("--port", type=int, default=8000, help="Web 模式端口号 (默认 8000)")
    sub = parser.add_subparsers(dest="command")

    analyze = sub.add_parser("analyze", help="分析 Figma 设计稿")
    analyze.add_argument("url", help="Figma 文件链接")

    sub.add_parser("plan", help="对话规划站点结构")

    build = sub.add_parser("build", help="把构建计划应用到本地站点")
    build.add_argument("site_name", help="本地站点名")
    build.add_argument("plan_file", help="构建计划 JSON 文件")
    build.add_argument("--figma", dest="figma_url", help="Figma 文件链接（可选）")
    build.add_argument("--site-id", dest="site_id", help="站点 ID（可选）")

    args = parser.parse_args()

    if args.web:
        run_web(port=args.port)
    elif args.command == "analyze":
        run_analyze(args.url)
    elif args.command == "plan":
        asyncio.run(run_plan())
    elif args.command == "build":
        asyncio.run(run_build(args.site_name, args.plan_file, args.figma_url, args.site_id))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
