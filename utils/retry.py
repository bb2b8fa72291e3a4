"""
限流重试辅助函数

Figma HTTP 客户端与模型客户端共用：
  - 根据服务端 Retry-After 计算等待时间（带上限）
  - 判断异常是否为 429 限流
"""
from typing import Optional, Union


def compute_backoff(
    retry_after: Optional[Union[str, float, int]],
    default: float,
    cap: float,
) -> float:
    """计算下一次重试前的等待秒数。

    Args:
        retry_after: 服务端返回的 Retry-After 值（可能为字符串或缺失）
        default: 缺失或无法解析时使用的默认值
        cap: 等待上限，保证交互响应性

    Returns:
        实际等待秒数，范围 [0, cap]
    """
    seconds = default
    if retry_after is not None:
        try:
            seconds = float(retry_after)
        except (TypeError, ValueError):
            seconds = default
    if seconds < 0:
        seconds = 0
    return min(seconds, cap)


def is_rate_limit_error(error: BaseException) -> bool:
    """判断异常是否为 429 限流错误。"""
    # openai.RateLimitError
    if "RateLimitError" in type(error).__name__:
        return True
    status = getattr(error, "status_code", None)
    if status == 429:
        return True
    # 兜底：检查错误信息
    error_str = str(error).lower()
    return "429" in error_str or "rate limit" in error_str


def retry_after_from(error: BaseException) -> Optional[str]:
    """尽量从 SDK 异常携带的响应头中读取 Retry-After。"""
    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None)
    if headers is None:
        return None
    try:
        return headers.get("retry-after")
    except AttributeError:
        return None
