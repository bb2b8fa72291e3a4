"""
构建前预检 — 决定整个构建是否可以开始

  硬失败（errors，阻止构建）：站点未运行、站点目录不存在
  软警告（warnings，不阻止）：WP-CLI 暂不可用、数据库在限定时间内未就绪
"""
import asyncio
import logging
import os
from typing import Optional

from config import settings
from messages.workflow_messages import PreflightResult
from tools.site_tools import STATUS_RUNNING, SiteHandle
from utils.errors import NotReadyError

logger = logging.getLogger(__name__)


async def check_site(site: SiteHandle, db_timeout: Optional[float] = None) -> PreflightResult:
    """执行全部检查并返回结果（不抛异常）。"""
    result = PreflightResult()
    timeout = settings.PREFLIGHT_DB_TIMEOUT if db_timeout is None else db_timeout

    # 1. 站点运行状态
    try:
        status = await site.get_status()
        if status == STATUS_RUNNING:
            logger.info("[预检] ✓ 站点正在运行")
        else:
            result.errors.append(f"站点未运行（状态: {status}），请先启动站点")
    except Exception as e:
        result.errors.append(f"无法获取站点状态: {e}")

    # 2. 站点目录
    if site.app_path and os.path.isdir(site.app_path):
        logger.info("[预检] ✓ 站点目录存在")
    else:
        result.errors.append(f"站点目录不存在: {site.app_path}")

    # 3. WP-CLI（站点刚创建时可能尚不可用）
    try:
        await site.run_cli(["core", "is-installed"])
        logger.info("[预检] ✓ WP-CLI 可用")
    except Exception as e:
        result.warnings.append(f"WP-CLI 检查未通过（站点初始化期间属正常）: {e}")

    # 4. 数据库（有上限的等待）
    try:
        await asyncio.wait_for(site.wait_for_database(), timeout=timeout)
        logger.info("[预检] ✓ 数据库就绪")
    except asyncio.TimeoutError:
        result.warnings.append(f"数据库在 {timeout}s 内未就绪，继续尝试构建")
    except Exception as e:
        result.warnings.append(f"无法确认数据库状态: {e}")

    for warning in result.warnings:
        logger.warning("[预检] ⚠ %s", warning)
    return result


async def run_preflight_checks(
    site: SiteHandle, db_timeout: Optional[float] = None
) -> PreflightResult:
    """预检闸门。

    Raises:
        NotReadyError: 任一硬检查失败
    """
    result = await check_site(site, db_timeout)
    if not result.ready:
        for error in result.errors:
            logger.error("[预检] ✗ %s", error)
        raise NotReadyError(result.errors, result.warnings)
    logger.info("[预检] 全部硬检查通过（%d 条警告）", len(result.warnings))
    return result
