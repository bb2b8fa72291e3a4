"""
模型客户端工厂 — 带限流重试的 OpenAI 兼容客户端

当模型返回 429 (Rate Limit) 时，按服务端 Retry-After（或默认值）等待后重试，
重试次数与单次等待时间均有上限；用尽后抛出 RateLimitError 交给上层提示用户。
"""
import asyncio
import logging
from typing import Any, AsyncGenerator, Literal, Mapping, Optional, Sequence, Union

from pydantic import BaseModel

from autogen_core import CancellationToken
from autogen_core.models import (
    ChatCompletionClient,
    CreateResult,
    LLMMessage,
    ModelInfo,
    RequestUsage,
)
from autogen_core.tools import Tool, ToolSchema
from autogen_ext.models.openai import OpenAIChatCompletionClient

from config import settings
from utils.errors import RateLimitError
from utils.retry import compute_backoff, is_rate_limit_error, retry_after_from

logger = logging.getLogger(__name__)


# ============================================================
# 限流重试包装器
# ============================================================


class RetryingChatCompletionClient(ChatCompletionClient):
    """包装一个 ChatCompletionClient，429 限流时有限次重试。

    特性：
      - 最多重试 max_retries 次，每次等待 min(Retry-After, max_wait) 秒
      - 重试用尽后抛出 RateLimitError（携带 retry_after）
      - 非限流错误直接抛出
      - 对外暴露的接口与 ChatCompletionClient 完全一致
    """

    # ComponentBase 要求的类型配置
    component_type = "model"
    component_config_schema = BaseModel
    component_provider_override = None

    def __init__(
        self,
        client: ChatCompletionClient,
        model_name: str,
        max_retries: int = 2,
        retry_wait_seconds: float = 10,
        max_wait_seconds: float = 30,
        sleep=asyncio.sleep,
    ) -> None:
        self._client = client
        self._model_name = model_name
        self._max_retries = max_retries
        self._retry_wait_seconds = retry_wait_seconds
        self._max_wait_seconds = max_wait_seconds
        self._sleep = sleep

    # ------------------------------------------------------------------
    # 核心方法：create（带重试逻辑）
    # ------------------------------------------------------------------

    async def create(
        self,
        messages: Sequence[LLMMessage],
        *,
        tools: Sequence[Tool | ToolSchema] = [],
        tool_choice: Tool | Literal["auto", "required", "none"] = "auto",
        json_output: Optional[bool | type[BaseModel]] = None,
        extra_create_args: Mapping[str, Any] = {},
        cancellation_token: Optional[CancellationToken] = None,
    ) -> CreateResult:
        """调用 LLM 生成回复，429 时等待后重试。"""
        attempt = 0
        while True:
            try:
                return await self._client.create(
                    messages,
                    tools=tools,
                    tool_choice=tool_choice,
                    json_output=json_output,
                    extra_create_args=extra_create_args,
                    cancellation_token=cancellation_token,
                )
            except Exception as e:
                if not is_rate_limit_error(e):
                    # 非限流错误直接抛出
                    raise
                wait = compute_backoff(
                    retry_after_from(e),
                    default=self._retry_wait_seconds,
                    cap=self._max_wait_seconds,
                )
                if attempt >= self._max_retries:
                    raise RateLimitError(
                        f"模型 {self._model_name} 请求受限，请稍后再试",
                        retry_after=wait,
                    ) from e
                attempt += 1
                logger.warning(
                    "[模型限流] %s 返回 429，%ss 后进行第 %d/%d 次重试",
                    self._model_name, wait, attempt, self._max_retries,
                )
                await self._sleep(wait)

    # ------------------------------------------------------------------
    # create_stream（不重试，直接转发）
    # ------------------------------------------------------------------

    def create_stream(
        self,
        messages: Sequence[LLMMessage],
        *,
        tools: Sequence[Tool | ToolSchema] = [],
        tool_choice: Tool | Literal["auto", "required", "none"] = "auto",
        json_output: Optional[bool | type[BaseModel]] = None,
        extra_create_args: Mapping[str, Any] = {},
        cancellation_token: Optional[CancellationToken] = None,
    ) -> AsyncGenerator[Union[str, CreateResult], None]:
        return self._client.create_stream(
            messages,
            tools=tools,
            tool_choice=tool_choice,
            json_output=json_output,
            extra_create_args=extra_create_args,
            cancellation_token=cancellation_token,
        )

    # ------------------------------------------------------------------
    # 委托方法：转发到底层客户端
    # ------------------------------------------------------------------

    def count_tokens(
        self,
        messages: Sequence[LLMMessage],
        *,
        tools: Sequence[Tool | ToolSchema] = [],
    ) -> int:
        return self._client.count_tokens(messages, tools=tools)

    def remaining_tokens(
        self,
        messages: Sequence[LLMMessage],
        *,
        tools: Sequence[Tool | ToolSchema] = [],
    ) -> int:
        return self._client.remaining_tokens(messages, tools=tools)

    @property
    def capabilities(self) -> Any:
        return self._client.capabilities

    @property
    def model_info(self) -> ModelInfo:
        return self._client.model_info

    def actual_usage(self) -> RequestUsage:
        return self._client.actual_usage()

    def total_usage(self) -> RequestUsage:
        return self._client.total_usage()

    async def close(self) -> None:
        await self._client.close()

    # ------------------------------------------------------------------
    # ComponentBase 必要方法（包装器不需要序列化）
    # ------------------------------------------------------------------

    def _to_config(self) -> BaseModel:
        return BaseModel()

    @classmethod
    def _from_config(cls, config: BaseModel) -> "RetryingChatCompletionClient":
        raise NotImplementedError("RetryingChatCompletionClient 不支持从配置反序列化")


# ============================================================
# 工厂函数
# ============================================================


def create_model_client() -> RetryingChatCompletionClient:
    """根据 settings 中的模型配置创建带限流重试的模型客户端。

    Returns:
        RetryingChatCompletionClient 实例（兼容 ChatCompletionClient 接口）
    """
    client = OpenAIChatCompletionClient(
        model=settings.MODEL_NAME,
        base_url=settings.MODEL_BASE_URL,
        api_key=settings.MODEL_API_KEY,
        temperature=settings.MODEL_TEMPERATURE,
        model_info={
            "vision": False,
            "function_calling": False,
            "json_output": True,
            "structured_output": False,
            "family": settings.MODEL_FAMILY,
        },
    )
    logger.info("[模型] 已加载 %s", settings.MODEL_NAME)

    return RetryingChatCompletionClient(
        client=client,
        model_name=settings.MODEL_NAME,
        max_retries=settings.MODEL_MAX_RETRIES,
        retry_wait_seconds=settings.MODEL_RETRY_WAIT_SECONDS,
        max_wait_seconds=settings.MODEL_MAX_RETRY_WAIT,
    )
