"""
目标站点适配 — 构建流程通过 SiteHandle 访问 WordPress 站点

SiteHandle 只描述构建需要的能力：
  - 站点状态（是否运行）
  - 站点目录（app/public/wp-content）
  - 执行 WP-CLI 命令（先过白名单）
  - 等待数据库就绪

LocalWpSite 是默认实现：在本机站点目录上通过子进程调用 wp 命令。
"""
import asyncio
import logging
import os
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from config import settings
from utils.errors import CommandError
from utils.validators import resolve_site_path, validate_cli_command

logger = logging.getLogger(__name__)

STATUS_RUNNING = "running"
STATUS_STOPPED = "stopped"


class SiteHandle(ABC):
    """构建目标站点的最小接口。子类实现 get_status / execute / wait_for_database。"""

    def __init__(self, site_id: str, name: str, app_path: str) -> None:
        self.site_id = site_id
        self.name = name
        self.app_path = app_path

    @property
    def public_dir(self) -> str:
        return os.path.join(self.app_path, "app", "public")

    @property
    def wp_content(self) -> str:
        return os.path.join(self.public_dir, "wp-content")

    @abstractmethod
    async def get_status(self) -> str:
        """返回 STATUS_RUNNING 或 STATUS_STOPPED。"""

    @abstractmethod
    async def execute(self, args: List[str]) -> str:
        """执行已通过白名单校验的命令，返回标准输出。"""

    @abstractmethod
    async def wait_for_database(self) -> None:
        """阻塞直到数据库可用（调用方负责超时）。"""

    async def run_cli(self, args: Sequence[str]) -> str:
        """校验并执行一条 WP-CLI 命令。

        Raises:
            ValidationError: 命令不在白名单内
            CommandError: 命令执行失败
        """
        checked = validate_cli_command(args)
        logger.debug("[WP-CLI] %s: wp %s", self.name, " ".join(checked))
        return await self.execute(checked)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class LocalWpSite(SiteHandle):
    """本机 WordPress 站点：目录位于 SITES_ROOT/<站点名>，命令经 wp 子进程执行。"""

    def __init__(
        self,
        name: str,
        site_id: Optional[str] = None,
        sites_root: Optional[str] = None,
        binary: Optional[str] = None,
        timeout: float = settings.WP_CLI_TIMEOUT,
        poll_interval: float = 1.0,
    ) -> None:
        app_path = resolve_site_path(sites_root or settings.SITES_ROOT, name)
        super().__init__(site_id or name, name, app_path)
        self.binary = binary or settings.WP_CLI_BINARY
        self.timeout = timeout
        self.poll_interval = poll_interval

    async def execute(self, args: List[str]) -> str:
        process = await asyncio.create_subprocess_exec(
            self.binary, *args, f"--path={self.public_dir}",
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise CommandError(args, None)
        if process.returncode != 0:
            raise CommandError(args, process.returncode, stderr.decode("utf-8", "replace"))
        return stdout.decode("utf-8", "replace").strip()

    async def get_status(self) -> str:
        if not os.path.isdir(self.public_dir):
            return STATUS_STOPPED
        try:
            await self.run_cli(["core", "version"])
        except (CommandError, OSError):
            return STATUS_STOPPED
        return STATUS_RUNNING

    async def wait_for_database(self) -> None:
        while True:
            try:
                await self.run_cli(["db", "check"])
                return
            except CommandError:
                await asyncio.sleep(self.poll_interval)
