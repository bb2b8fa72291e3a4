import asyncio
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from tools.site_tools import STATUS_RUNNING, SiteHandle
from utils.errors import CommandError


class FakeSite(SiteHandle):
    """在临时目录上模拟站点：记录全部 WP-CLI 调用，可按命令前缀注入失败。"""

    def __init__(
        self,
        root,
        name: str = "demo",
        site_id: str = "site-1",
        status: str = STATUS_RUNNING,
        failures: Optional[Dict[Tuple[str, ...], str]] = None,
        db_ready: bool = True,
    ) -> None:
        app_path = os.path.join(str(root), name)
        os.makedirs(os.path.join(app_path, "app", "public", "wp-content"), exist_ok=True)
        super().__init__(site_id, name, app_path)
        self.status = status
        self.failures = dict(failures or {})
        self.db_ready = db_ready
        self.calls: List[List[str]] = []
        self.page_files: List[Tuple[str, bool]] = []

    async def get_status(self) -> str:
        return self.status

    async def execute(self, args: List[str]) -> str:
        self.calls.append(list(args))
        for prefix, stderr in self.failures.items():
            if tuple(args[:len(prefix)]) == prefix:
                raise CommandError(args, 1, stderr)
        if args[:2] == ["post", "create"] and "--porcelain" in args:
            self.page_files.append((args[2], os.path.exists(args[2])))
            return str(100 + len(self.page_files))
        return ""

    async def wait_for_database(self) -> None:
        if not self.db_ready:
            await asyncio.Event().wait()

    def cli_calls(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.calls if tuple(c[:len(prefix)]) == prefix]


@pytest.fixture
def site(tmp_path) -> FakeSite:
    return FakeSite(tmp_path)


@pytest.fixture
def make_site(tmp_path):
    def factory(**kwargs) -> FakeSite:
        return FakeSite(tmp_path, **kwargs)

    return factory
