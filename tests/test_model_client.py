import asyncio
from types import SimpleNamespace

import pytest

from config.model_client import RetryingChatCompletionClient
from utils.errors import RateLimitError
from utils.retry import compute_backoff, is_rate_limit_error, retry_after_from


class TooManyRequests(Exception):
    status_code = 429

    def __init__(self, retry_after=None) -> None:
        super().__init__("too many requests")
        headers = {"retry-after": retry_after} if retry_after is not None else {}
        self.response = SimpleNamespace(headers=headers)


class ScriptedClient:
    """按顺序返回结果或抛出异常的假模型客户端。"""

    def __init__(self, outcomes) -> None:
        self.outcomes = list(outcomes)
        self.calls = 0

    async def create(self, messages, **kwargs):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _wrap(inner, sleeps, **kwargs) -> RetryingChatCompletionClient:
    async def fake_sleep(seconds):
        sleeps.append(seconds)

    return RetryingChatCompletionClient(inner, "test-model", sleep=fake_sleep, **kwargs)


def test_rate_limited_call_is_retried() -> None:
    sleeps = []
    inner = ScriptedClient([TooManyRequests("3"), TooManyRequests(), "ok"])
    client = _wrap(inner, sleeps, retry_wait_seconds=10)
    assert asyncio.run(client.create([])) == "ok"
    assert sleeps == [3.0, 10]
    assert inner.calls == 3


def test_exhausted_retries_raise_rate_limit_error() -> None:
    sleeps = []
    inner = ScriptedClient([TooManyRequests("120")] * 3)
    client = _wrap(inner, sleeps, max_retries=1, max_wait_seconds=30)
    with pytest.raises(RateLimitError) as excinfo:
        asyncio.run(client.create([]))
    assert excinfo.value.retry_after == 30
    assert sleeps == [30]
    assert inner.calls == 2


def test_other_errors_propagate_immediately() -> None:
    sleeps = []
    inner = ScriptedClient([ValueError("bad request")])
    with pytest.raises(ValueError):
        asyncio.run(_wrap(inner, sleeps).create([]))
    assert sleeps == []


def test_backoff_helpers() -> None:
    assert compute_backoff("abc", default=7, cap=30) == 7
    assert compute_backoff(-5, default=7, cap=30) == 0
    assert compute_backoff(90, default=7, cap=30) == 30
    assert is_rate_limit_error(TooManyRequests())
    assert is_rate_limit_error(RuntimeError("Rate limit reached"))
    assert not is_rate_limit_error(RuntimeError("boom"))
    assert retry_after_from(TooManyRequests("12")) == "12"
    assert retry_after_from(RuntimeError("x")) is None
