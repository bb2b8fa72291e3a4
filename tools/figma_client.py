"""
Figma REST API 客户端

职责：
  - 从 Figma 链接中提取 file_key（file / design / proto / board 四种路径）
  - 获取文件节点树、样式、组件
  - 429 限流时按 Retry-After 有限次重试（等待时间有上限），用尽后抛出 RateLimitError
  - 样式 / 组件为次要接口：非 200 响应或网络错误降级为空结果
  - 令牌缺失、文件获取失败或网络错误抛出 FigmaApiError

需要配置 FIGMA_API_KEY 环境变量或在 config/settings.py 中设置。
"""
import logging
import re
import time
from typing import Any, Callable, Dict, Optional

import requests

from config import settings
from utils.errors import FigmaApiError, RateLimitError
from utils.retry import compute_backoff

logger = logging.getLogger(__name__)

FILE_KEY_PATTERN = re.compile(r"figma\.com/(?:file|design|proto|board)/([a-zA-Z0-9]+)")


def extract_file_key(link: str) -> Optional[str]:
    """从 Figma URL 中提取 file_key；不是 Figma 链接时返回 None。"""
    match = FILE_KEY_PATTERN.search(link or "")
    return match.group(1) if match else None


class FigmaClient:
    """同步 Figma API 客户端（请求严格串行）。"""

    def __init__(
        self,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        base_url: Optional[str] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.token = token if token is not None else settings.FIGMA_API_KEY
        if not self.token:
            raise FigmaApiError(
                "FIGMA_API_KEY 未配置！\n"
                "请设置环境变量 FIGMA_API_KEY 或在 config/settings.py 中配置。\n"
                "获取方式: https://help.figma.com/hc/en-us/articles/8085703771159"
            )
        self.session = session or requests.Session()
        self.base_url = (base_url or settings.FIGMA_API_BASE).rstrip("/")
        self._sleep = sleep

    # ------------------------------------------------------------------
    # 接口
    # ------------------------------------------------------------------

    def get_file(self, file_key: str) -> Dict[str, Any]:
        """获取完整文件（含 document 节点树）。"""
        response = self._request(f"/files/{file_key}", settings.FIGMA_MAX_RETRIES)
        if not response.ok:
            raise FigmaApiError(
                f"获取 Figma 文件 {file_key} 失败 ({response.status_code})", response.status_code
            )
        return response.json()

    def get_styles(self, file_key: str) -> Dict[str, Any]:
        response = self._secondary_request(f"/files/{file_key}/styles")
        if response is None:
            return {"meta": {"styles": []}}
        if not response.ok:
            logger.warning("[Figma API] 获取样式失败 (%s)，按空结果处理", response.status_code)
            return {"meta": {"styles": []}}
        return response.json()

    def get_components(self, file_key: str) -> Dict[str, Any]:
        response = self._secondary_request(f"/files/{file_key}/components")
        if response is None:
            return {"meta": {"components": []}}
        if not response.ok:
            logger.warning("[Figma API] 获取组件失败 (%s)，按空结果处理", response.status_code)
            return {"meta": {"components": []}}
        return response.json()

    # ------------------------------------------------------------------
    # 内部：带限流重试的 GET
    # ------------------------------------------------------------------

    def _request(self, path: str, max_retries: int) -> requests.Response:
        url = f"{self.base_url}{path}"
        headers = {"X-Figma-Token": self.token}
        attempt = 0
        while True:
            try:
                response = self.session.get(
                    url, headers=headers, timeout=settings.FIGMA_REQUEST_TIMEOUT
                )
            except requests.RequestException as e:
                raise FigmaApiError(f"Figma API 请求失败: {e}") from e
            if response.status_code != 429:
                return response

            wait = compute_backoff(
                response.headers.get("Retry-After"),
                default=settings.FIGMA_DEFAULT_RETRY_AFTER,
                cap=settings.FIGMA_MAX_RETRY_WAIT,
            )
            if attempt >= max_retries:
                raise self._rate_limit_error(response)
            attempt += 1
            logger.warning(
                "[Figma API] %s 被限流，%ss 后进行第 %d/%d 次重试", path, wait, attempt, max_retries
            )
            self._sleep(wait)

    def _secondary_request(self, path: str) -> Optional[requests.Response]:
        """次要接口：网络错误视为无结果，限流仍按 RateLimitError 抛出。"""
        try:
            return self._request(path, settings.FIGMA_SECONDARY_MAX_RETRIES)
        except FigmaApiError as e:
            logger.warning("[Figma API] %s 请求失败，按空结果处理: %s", path, e)
            return None

    @staticmethod
    def _rate_limit_error(response: requests.Response) -> RateLimitError:
        retry_after = compute_backoff(
            response.headers.get("Retry-After"),
            default=settings.FIGMA_DEFAULT_RETRY_AFTER,
            cap=float("inf"),
        )
        plan_tier = response.headers.get("X-Figma-Plan-Tier")
        upgrade_link = response.headers.get("X-Figma-Upgrade-Link")
        message = f"Figma API 请求受限，请在 {int(retry_after)} 秒后重试"
        if plan_tier:
            message += f"（当前套餐: {plan_tier}）"
        return RateLimitError(
            message,
            retry_after=retry_after,
            plan_tier=plan_tier,
            rate_limit_type=response.headers.get("X-Figma-Rate-Limit-Type"),
            upgrade_link=upgrade_link,
        )
