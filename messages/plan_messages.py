"""
构建计划数据模型 — 模型输出的站点结构（内容 / 设计 / 功能三大支柱）

使用 pydantic 校验：字段接受 camelCase（模型原样输出）或 snake_case。
任何结构错误在产生副作用之前以 ValidationError 拒绝。
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from config import settings
from utils.errors import ValidationError
from utils.validators import IDENTIFIER_PATTERN, sanitize_name, sanitize_slug

PillarStatus = Literal["pending", "generating", "ready", "applied", "error"]


class PlanModel(BaseModel):
    """所有计划模型的公共配置"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _slug_field(value: Any) -> str:
    slug = sanitize_slug(str(value or ""))
    if not slug:
        raise ValueError("slug 不能为空")
    return slug


# ============================================================
# 功能支柱
# ============================================================


class PluginRecommendation(PlanModel):
    slug: str
    name: str = ""
    reason: str = ""
    required: bool = True
    confidence: int = 85

    check_slug = field_validator("slug", mode="before")(_slug_field)


class FeaturesPillar(PlanModel):
    status: PillarStatus = "pending"
    plugins: List[PluginRecommendation] = Field(default_factory=list)


# ============================================================
# 内容支柱
# ============================================================


class ContentField(PlanModel):
    name: str
    type: str = "text"
    label: str = ""
    required: bool = False
    instructions: str = ""

    @model_validator(mode="after")
    def default_label(self) -> "ContentField":
        if not self.label:
            self.label = self.name.replace("_", " ").title()
        return self


class Taxonomy(PlanModel):
    name: str
    slug: str
    hierarchical: bool = False
    post_types: List[str] = Field(default_factory=list)

    check_slug = field_validator("slug", mode="before")(_slug_field)


class ContentType(PlanModel):
    name: str
    slug: str
    description: str = ""
    fields: List[ContentField] = Field(default_factory=list)
    taxonomies: List[Taxonomy] = Field(default_factory=list)
    supports: List[str] = Field(default_factory=lambda: ["title", "editor", "thumbnail"])
    icon: str = "dashicons-admin-post"

    check_slug = field_validator("slug", mode="before")(_slug_field)

    @field_validator("slug")
    @classmethod
    def post_type_length(cls, value: str) -> str:
        # WordPress 文章类型名最长 20 字符
        if len(value) > 20:
            raise ValueError("文章类型 slug 不能超过 20 个字符")
        return value

    @field_validator("name", mode="before")
    @classmethod
    def clean_name(cls, value: Any) -> str:
        return sanitize_name(str(value or ""))


class PageStructure(PlanModel):
    title: str
    slug: str = ""
    template: Optional[str] = None
    content: str = ""

    @model_validator(mode="after")
    def default_slug(self) -> "PageStructure":
        self.slug = sanitize_slug(self.slug or self.title)
        if not self.slug:
            raise ValueError(f"无法从页面标题生成 slug: {self.title!r}")
        return self


class ContentPillar(PlanModel):
    status: PillarStatus = "pending"
    post_types: List[ContentType] = Field(default_factory=list)
    pages: List[PageStructure] = Field(default_factory=list)


# ============================================================
# 设计支柱
# ============================================================


class ThemeConfig(PlanModel):
    base: str = settings.DEFAULT_BASE_THEME
    child_theme_name: str = settings.DEFAULT_CHILD_THEME
    design_tokens: Optional[Dict[str, Any]] = None
    customizations: List[str] = Field(default_factory=list)

    @field_validator("child_theme_name")
    @classmethod
    def safe_theme_name(cls, value: str) -> str:
        # 子主题名会成为 themes/ 下的目录名
        if not IDENTIFIER_PATTERN.match(value):
            raise ValueError(f"子主题名不合法: {value!r}")
        return value

    @field_validator("base")
    @classmethod
    def safe_base(cls, value: str) -> str:
        if not IDENTIFIER_PATTERN.match(value):
            raise ValueError(f"基础主题名不合法: {value!r}")
        return value


class DesignPillar(PlanModel):
    status: PillarStatus = "pending"
    theme: ThemeConfig = Field(default_factory=ThemeConfig)


# ============================================================
# 完整计划
# ============================================================


class BuildPlan(PlanModel):
    content: ContentPillar = Field(default_factory=ContentPillar)
    design: DesignPillar = Field(default_factory=DesignPillar)
    features: FeaturesPillar = Field(default_factory=FeaturesPillar)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def parse_build_plan(data: Any) -> BuildPlan:
    """校验并构建 BuildPlan。

    Raises:
        ValidationError: 结构不合法
    """
    if isinstance(data, BuildPlan):
        return data
    if not isinstance(data, dict):
        raise ValidationError(f"构建计划必须是 JSON 对象，实际为 {type(data).__name__}")
    try:
        return BuildPlan.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"构建计划结构不合法: {e}") from e
