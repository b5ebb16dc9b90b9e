"""依赖源码拉取器

职责:
- 按解析后的版本把依赖源码拉取到暂存目录
- 两种状态: 目标不存在 → 完整 clone/下载；已存在 → 原地更新
- Git 仓库与 zip 归档两种来源

目标目录已存在即视为上次 install 中断留下的暂存，原地更新后继续，
因此 install 在 fetch 与 cleanup 之间崩溃后可以直接重跑。
"""

from __future__ import annotations

import logging
import shutil
import urllib.error
import urllib.request
import zipfile
from pathlib import Path, PurePosixPath
from typing import Protocol

from tegen.core.exceptions import FetchError, ValidationError
from tegen.utils.net import join_url, validate_url_scheme
from tegen.utils.shell import CommandExecutor, CommandResult, get_executor

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    """源码拉取协议"""

    def fetch(self, name: str, version: str, destination: Path) -> None:
        """把 name@version 拉取到 destination，失败抛 FetchError"""
        ...


class GitFetcher:
    """Git 仓库来源 - 仓库地址为 <base_url>/<name>.git"""

    def __init__(
        self,
        base_url: str,
        executor: CommandExecutor | None = None,
        git: str = "git",
    ) -> None:
        self.base_url = base_url
        self._executor = executor
        self.git = git

    @property
    def executor(self) -> CommandExecutor:
        return self._executor or get_executor()

    def repo_url(self, name: str) -> str:
        return f"{join_url(self.base_url, name)}.git"

    def fetch(self, name: str, version: str, destination: Path) -> None:
        url = self.repo_url(name)
        if (destination / ".git").is_dir():
            logger.info("更新已暂存的源码: %s@%s -> %s", name, version, destination)
            self._update(version, destination)
        else:
            if destination.exists():
                # 非 git 目录（归档残留或损坏的 clone），重新拉取
                logger.warning("暂存目录不是 git 仓库，重新 clone: %s", destination)
                shutil.rmtree(destination, ignore_errors=True)
            logger.info("clone: %s@%s -> %s", url, version, destination)
            self._clone(url, version, destination)

    def _clone(self, url: str, version: str, destination: Path) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        r = self._git(
            ["clone", "--depth", "1", "--branch", version, url, str(destination)],
            cwd=destination.parent,
        )
        if r.success:
            return
        logger.debug("浅 clone 失败，回退完整 clone: %s", r.stderr.strip()[:300])
        # 回退: 完整 clone + checkout（version 可能是 commit SHA）
        shutil.rmtree(destination, ignore_errors=True)
        self._run(["clone", url, str(destination)], cwd=destination.parent, what="git clone")
        self._run(["checkout", version], cwd=destination, what="git checkout")

    def _update(self, version: str, destination: Path) -> None:
        """fetch 远端最新状态并切换到目标版本（等价于 checkout + pull）"""
        self._run(["fetch", "--depth", "1", "origin", version], cwd=destination, what="git fetch")
        self._run(["checkout", "--force", "FETCH_HEAD"], cwd=destination, what="git checkout")

    def _git(self, args: list[str], cwd: Path) -> CommandResult:
        return self.executor.execute([self.git, *args], cwd=cwd)

    def _run(self, args: list[str], cwd: Path, what: str) -> CommandResult:
        r = self._git(args, cwd)
        if not r.success:
            raise FetchError(
                f"{what} 失败 (rc={r.returncode}): {r.stderr.strip()[:300]}"
            )
        return r


class ArchiveFetcher:
    """zip 归档来源 - <base_url>/<name>/archive/refs/heads/<version>.zip"""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url

    def archive_url(self, name: str, version: str) -> str:
        return join_url(self.base_url, name, "archive/refs/heads", f"{version}.zip")

    def fetch(self, name: str, version: str, destination: Path) -> None:
        url = self.archive_url(name, version)
        try:
            validate_url_scheme(url, context=f"dep download {name}")
        except ValidationError as e:
            raise FetchError(str(e), cause=e) from e

        destination.parent.mkdir(parents=True, exist_ok=True)
        archive = destination.parent / f"{name}.zip"
        logger.info("下载: %s", url)
        try:
            urllib.request.urlretrieve(url, str(archive))  # nosec B310
        except (urllib.error.HTTPError, urllib.error.URLError, OSError) as e:
            archive.unlink(missing_ok=True)
            raise FetchError(f"下载失败: {url} - {e}", cause=e) from e

        try:
            if destination.exists():
                # 旧版本的文件不能留到新版本的集成里
                logger.info("暂存目录已存在，清空后重新解压: %s", destination)
                shutil.rmtree(destination)
            extracted = self._extract(archive, destination)
        except (zipfile.BadZipFile, OSError) as e:
            raise FetchError(f"解压失败: {archive} - {e}", cause=e) from e
        finally:
            archive.unlink(missing_ok=True)
        logger.info("已解压 %d 个文件 -> %s", extracted, destination)

    @staticmethod
    def _extract(archive: Path, destination: Path) -> int:
        """解压并去掉归档中唯一的顶层目录（如 widgets-linux/），返回文件数"""
        with zipfile.ZipFile(archive) as zf:
            members = [m for m in zf.infolist() if not m.is_dir()]
            tops = {PurePosixPath(m.filename).parts[0] for m in members}
            strip = len(tops) == 1 and all(
                len(PurePosixPath(m.filename).parts) > 1 for m in members
            )
            root = destination.resolve()
            for m in members:
                parts = PurePosixPath(m.filename).parts[1 if strip else 0:]
                target = destination.joinpath(*parts)
                if not target.resolve().is_relative_to(root):
                    raise zipfile.BadZipFile(f"归档包含越界路径: {m.filename}")
                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(m) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
            return len(members)


def create_fetcher(
    method: str, base_url: str,
    executor: CommandExecutor | None = None, git: str = "git",
) -> Fetcher:
    """按配置的 fetch_method 构造拉取器"""
    if method == "archive":
        return ArchiveFetcher(base_url)
    if method == "git":
        return GitFetcher(base_url, executor=executor, git=git)
    raise ValidationError(f"不支持的拉取方式: {method}")
