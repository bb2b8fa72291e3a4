"""
工作流控制数据类 — 构建阶段、阶段结果、预检结果、会话状态，与执行逻辑解耦
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any


class PhaseName(Enum):
    """构建阶段枚举（顺序即执行顺序）"""

    PLUGINS = "plugins"
    CONTENT_STRUCTURE = "content_structure"
    DESIGN = "design"
    SOURCE_PAGES = "source_pages"
    SOURCE_PATTERNS = "source_patterns"


class SessionState(Enum):
    """构建会话生命周期：pending → applying → applied → cleaned（或 failed）"""

    PENDING = "pending"
    APPLYING = "applying"
    APPLIED = "applied"
    FAILED = "failed"
    CLEANED = "cleaned"


@dataclass
class ErrorInfo:
    """阶段错误摘要"""

    type: str
    message: str

    @classmethod
    def from_exception(cls, error: BaseException) -> "ErrorInfo":
        cause = getattr(error, "cause", None) or error
        return cls(type=type(cause).__name__, message=str(cause))

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type, "message": self.message}


@dataclass
class BuildPhase:
    """单个阶段的执行记录"""

    name: PhaseName
    attempted: bool = False
    succeeded: bool = False
    error: Optional[ErrorInfo] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.attempted and not self.succeeded

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"attempted": self.attempted, "succeeded": self.succeeded}
        if self.error is not None:
            result["error"] = self.error.to_dict()
        if self.warnings:
            result["warnings"] = list(self.warnings)
        return result


@dataclass
class BuildSummary:
    """一次构建的汇总：{阶段名 → {attempted, succeeded, error?}} + 总体结果"""

    phases: List[BuildPhase] = field(default_factory=list)

    def get(self, name: PhaseName) -> Optional[BuildPhase]:
        for phase in self.phases:
            if phase.name == name:
                return phase
        return None

    @property
    def attempted_count(self) -> int:
        return sum(1 for p in self.phases if p.attempted)

    @property
    def succeeded_count(self) -> int:
        return sum(1 for p in self.phases if p.succeeded)

    @property
    def failed_count(self) -> int:
        return sum(1 for p in self.phases if p.failed)

    @property
    def success(self) -> bool:
        return self.failed_count == 0

    def describe(self) -> str:
        if self.success:
            return f"构建完成（{self.succeeded_count}/{self.attempted_count} 个阶段成功）"
        return f"构建完成，{self.failed_count} 个阶段失败"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phases": {p.name.value: p.to_dict() for p in self.phases},
            "attempted": self.attempted_count,
            "succeeded": self.succeeded_count,
            "failed": self.failed_count,
            "success": self.success,
        }


@dataclass
class PreflightResult:
    """预检结果：errors 为硬失败，warnings 不阻塞构建"""

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ready(self) -> bool:
        return not self.errors
