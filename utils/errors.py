"""
错误类型 — 构建流程中可区分的失败种类

传播策略：
  - ValidationError / NotReadyError：终止当前操作
  - RateLimitError：自动重试到上限后向用户抛出（携带重试时间与套餐信息）
  - PhaseError：在单个阶段内记录，不影响后续阶段
  - ParseFailure：表示“模型尚未给出结构”，不作为应用错误记录
  - CommandError：站点命令失败，在阶段内部成为 PhaseError 的原因
"""
from typing import List, Optional


class SiteBuilderError(Exception):
    """所有构建错误的基类。"""


class ValidationError(SiteBuilderError):
    """输入结构不合法（在任何副作用之前拒绝）。"""


class RateLimitError(SiteBuilderError):
    """外部接口限流，重试已用尽。"""

    def __init__(
        self,
        message: str,
        retry_after: float,
        plan_tier: Optional[str] = None,
        rate_limit_type: Optional[str] = None,
        upgrade_link: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.retry_after = retry_after
        self.plan_tier = plan_tier
        self.rate_limit_type = rate_limit_type
        self.upgrade_link = upgrade_link

    def to_dict(self) -> dict:
        return {
            "message": str(self),
            "retry_after": self.retry_after,
            "plan_tier": self.plan_tier,
            "rate_limit_type": self.rate_limit_type,
            "upgrade_link": self.upgrade_link,
        }


class NotReadyError(SiteBuilderError):
    """预检未通过，整个构建在任何阶段运行前中止。"""

    def __init__(self, errors: List[str], warnings: Optional[List[str]] = None) -> None:
        super().__init__("站点未就绪: " + "; ".join(errors))
        self.errors = list(errors)
        self.warnings = list(warnings or [])


class PhaseError(SiteBuilderError):
    """单个构建阶段内部的异常（只在汇总中体现）。"""

    def __init__(self, phase: str, cause: BaseException) -> None:
        super().__init__(f"{phase}: {type(cause).__name__}: {cause}")
        self.phase = phase
        self.cause = cause


class FigmaApiError(SiteBuilderError):
    """Figma API 不可用：未配置令牌、文件不存在 / 无权限或网络错误。"""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseFailure(SiteBuilderError):
    """未能从模型输出中恢复出 JSON 结构。"""


class CommandError(SiteBuilderError):
    """站点命令（WP-CLI）执行失败：非零退出码或超时。"""

    def __init__(self, args: List[str], returncode: Optional[int], stderr: str = "") -> None:
        detail = stderr.strip() or ("超时" if returncode is None else f"退出码 {returncode}")
        super().__init__(f"wp {' '.join(args[:2])} 执行失败: {detail}")
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr
