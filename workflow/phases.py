"""
构建阶段实现 — 每个阶段把构建计划的一部分落到目标站点

  plugins           → 安装推荐插件，批量激活（失败时逐个激活）
  content_structure → 文章类型 mu-plugin、ACF 字段组 JSON、页面
  design            → 基础主题 + 子主题（style.css / functions.php / theme.json）并激活
  source_pages      → 设计稿页面 → 区块标记 → WordPress 页面，首页设为静态首页
  source_patterns   → 设计稿组件 → 区块模式注册文件

阶段函数只抛出异常表示“本阶段失败”，单项失败（某个插件、某个页面）记为警告。
"""
import logging
import os
import tempfile
from dataclasses import dataclass, field
from typing import List, Optional

from extraction.component_classifier import classify_components
from extraction.page_detector import is_homepage
from extraction.section_classifier import SectionClassifier
from generators.content_files import (
    STRUCTURES_PLUGIN_SLUG,
    build_field_groups,
    render_field_group,
    render_structures_plugin,
)
from generators.page_blocks import render_page
from generators.pattern_files import (
    PATTERNS_FILE,
    generate_patterns,
    patterns_include_statement,
    render_patterns_php,
)
from generators.theme_files import render_functions_php, render_style_css, render_theme_json
from messages.design_messages import DesignTokens, FigmaAnalysis, PageInfo
from messages.plan_messages import BuildPlan
from tools.file_tools import append_once, read_file, write_file
from tools.site_tools import SiteHandle
from utils.errors import CommandError
from utils.validators import sanitize_for_wordpress, sanitize_name, sanitize_slug

logger = logging.getLogger(__name__)


@dataclass
class BuildContext:
    """一次构建共享的输入（阶段之间只通过站点上的副作用传递状态）"""

    site: SiteHandle
    plan: BuildPlan
    analysis: Optional[FigmaAnalysis] = None
    tokens: DesignTokens = field(default_factory=DesignTokens)

    @property
    def child_theme(self) -> str:
        return self.plan.design.theme.child_theme_name

    @property
    def child_theme_dir(self) -> str:
        return f"themes/{self.child_theme}"


def resolve_tokens(plan: BuildPlan, analysis: Optional[FigmaAnalysis]) -> DesignTokens:
    """设计令牌来源：设计稿分析 > 计划中的 designTokens > 默认值。"""
    if analysis is not None:
        return analysis.design_tokens
    raw = plan.design.theme.design_tokens
    if raw:
        return DesignTokens.from_dict(raw)
    return DesignTokens.defaults()


# ============================================================
# Phase 1: 插件
# ============================================================


async def apply_plugins(ctx: BuildContext) -> List[str]:
    warnings: List[str] = []
    installed: List[str] = []
    for plugin in ctx.plan.features.plugins:
        try:
            await ctx.site.run_cli(["plugin", "install", plugin.slug])
            installed.append(plugin.slug)
            logger.info("[插件] 已安装 %s (%s)", plugin.name or plugin.slug, plugin.slug)
        except CommandError as e:
            if "Plugin not found" in e.stderr:
                warnings.append(f"插件 {plugin.slug} 不在 WordPress.org 仓库中（可能是付费插件）")
            else:
                warnings.append(f"插件 {plugin.slug} 安装失败: {e}")

    if not installed:
        return warnings

    try:
        await ctx.site.run_cli(["plugin", "activate", *installed])
        logger.info("[插件] 已批量激活 %d 个插件", len(installed))
    except CommandError as e:
        logger.warning("[插件] 批量激活失败，改为逐个激活: %s", e)
        for slug in installed:
            try:
                await ctx.site.run_cli(["plugin", "activate", slug])
            except CommandError:
                warnings.append(f"插件 {slug} 激活失败，已跳过")
    return warnings


# ============================================================
# Phase 2: 内容结构
# ============================================================


async def apply_content_structure(ctx: BuildContext) -> List[str]:
    warnings: List[str] = []
    content = ctx.plan.content
    wp_content = ctx.site.wp_content

    if content.post_types:
        path = write_file(
            wp_content,
            f"mu-plugins/{STRUCTURES_PLUGIN_SLUG}.php",
            render_structures_plugin(content.post_types),
        )
        logger.info("[内容结构] 已写入 mu-plugin: %s", path)
        await ctx.site.run_cli(["rewrite", "flush"])

        # ACF 默认从当前主题的 acf-json 目录加载
        if ctx.plan.design.status == "ready":
            acf_dir = f"{ctx.child_theme_dir}/acf-json"
        else:
            acf_dir = "acf-json"
            warnings.append("未生成子主题，ACF 字段组写入 wp-content/acf-json（需自定义加载路径）")
        for filename, group in build_field_groups(content.post_types).items():
            write_file(wp_content, f"{acf_dir}/{filename}", render_field_group(group))
            logger.info("[内容结构] 字段组 %s", filename)

    for page in content.pages:
        title = sanitize_name(page.title)
        slug = sanitize_slug(page.slug)
        args = [
            "post", "create", "--post_type=page",
            f"--post_title={title}", f"--post_name={slug}", "--post_status=publish",
        ]
        if page.content:
            args.append(f"--post_content={sanitize_for_wordpress(page.content)}")
        try:
            await ctx.site.run_cli(args)
            logger.info("[内容结构] 已创建页面 %s (/%s)", title, slug)
        except CommandError as e:
            warnings.append(f"页面 {title} 创建失败: {e}")
    return warnings


# ============================================================
# Phase 3: 设计 / 主题
# ============================================================


async def apply_design(ctx: BuildContext) -> List[str]:
    theme = ctx.plan.design.theme
    wp_content = ctx.site.wp_content

    await ctx.site.run_cli(["theme", "install", theme.base])
    logger.info("[设计] 基础主题 %s 已安装", theme.base)

    write_file(
        wp_content, f"{ctx.child_theme_dir}/style.css",
        render_style_css(theme.child_theme_name, theme.base, ctx.tokens),
    )
    write_file(
        wp_content, f"{ctx.child_theme_dir}/functions.php",
        render_functions_php(theme.child_theme_name),
    )
    write_file(wp_content, f"{ctx.child_theme_dir}/theme.json", render_theme_json(ctx.tokens))
    logger.info("[设计] 子主题 %s 文件已生成", theme.child_theme_name)

    await ctx.site.run_cli(["theme", "activate", theme.child_theme_name])
    logger.info("[设计] 子主题 %s 已激活", theme.child_theme_name)
    return []


# ============================================================
# Phase 4: 设计稿页面
# ============================================================


def _homepage_index(pages: List[PageInfo]) -> int:
    """显式命名为首页的页面优先，否则第一个页面。"""
    for index, page in enumerate(pages):
        if index > 0 and is_homepage(page, index):
            return index
    return 0


async def _create_page_from_file(site: SiteHandle, title: str, slug: str, content: str) -> str:
    fd, temp_path = tempfile.mkstemp(prefix="wp-page-", suffix=".html")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        return await site.run_cli([
            "post", "create", temp_path, "--post_type=page",
            f"--post_title={title}", f"--post_name={slug}",
            "--post_status=publish", "--porcelain",
        ])
    finally:
        os.remove(temp_path)


async def apply_source_pages(ctx: BuildContext) -> List[str]:
    warnings: List[str] = []
    pages = ctx.analysis.pages if ctx.analysis else []
    classifier = SectionClassifier()
    home_index = _homepage_index(pages)

    for index, page in enumerate(pages):
        sections = classifier.identify_sections(page.children)
        markup = sanitize_for_wordpress(render_page(sections, ctx.tokens))
        title = sanitize_name(page.name) or f"Page {index + 1}"
        slug = sanitize_slug(title) or f"page-{index + 1}"
        try:
            page_id = (await _create_page_from_file(ctx.site, title, slug, markup)).strip()
        except CommandError as e:
            warnings.append(f"设计稿页面 {title} 创建失败: {e}")
            continue
        logger.info("[设计稿页面] %s (ID: %s, %d 个区块)", title, page_id, len(sections))

        if index == home_index and page_id:
            await ctx.site.run_cli(["option", "update", "show_on_front", "page"])
            await ctx.site.run_cli(["option", "update", "page_on_front", page_id])
            logger.info("[设计稿页面] %s 设为首页", title)
    return warnings


# ============================================================
# Phase 5: 设计稿组件模式
# ============================================================


async def apply_source_patterns(ctx: BuildContext) -> List[str]:
    components = ctx.analysis.components if ctx.analysis else []
    patterns = generate_patterns(classify_components(components), ctx.tokens)
    if not patterns:
        return ["没有可转换为区块模式的组件"]

    wp_content = ctx.site.wp_content
    functions_file = f"{ctx.child_theme_dir}/functions.php"
    php = render_patterns_php(patterns)

    # 子主题存在时随主题加载，否则作为 mu-plugin 加载
    if read_file(wp_content, functions_file) is not None:
        path = write_file(wp_content, f"{ctx.child_theme_dir}/{PATTERNS_FILE}", php)
        if append_once(wp_content, functions_file, patterns_include_statement(), PATTERNS_FILE):
            logger.info("[组件模式] functions.php 已引入 %s", PATTERNS_FILE)
    else:
        path = write_file(wp_content, f"mu-plugins/{PATTERNS_FILE}", php)
    logger.info("[组件模式] 已注册 %d 个区块模式: %s", len(patterns), path)
    return []
