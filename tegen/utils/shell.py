"""Shell 命令执行工具 - 统一子进程调用

通过 CommandExecutor 协议抽象子进程执行，git 拉取与 cmake 构建都经由此处，
测试时注入假执行器即可，无需 patch subprocess。
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from tegen.core.exceptions import ExternalToolError

logger = logging.getLogger(__name__)


# =========================================================================
# 命令执行结果
# =========================================================================

@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）"""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


# =========================================================================
# 命令执行器协议
# =========================================================================

class CommandExecutor(Protocol):
    """命令执行器协议 - 抽象子进程调用

    capture=False 时子进程输出直接透传到终端（build / run 使用），
    返回结果中的 stdout/stderr 为空串。
    """

    def execute(
        self,
        args: list[str],
        *,
        cwd: str | Path = ".",
        env: dict[str, str] | None = None,
        capture: bool = True,
    ) -> CommandResult:
        """执行命令并返回结果"""
        ...


# =========================================================================
# 默认实现: 本地执行器
# =========================================================================

class LocalExecutor:
    """本地子进程执行器（默认实现），不经过 shell，参数含空格也安全"""

    def execute(
        self,
        args: list[str],
        *,
        cwd: str | Path = ".",
        env: dict[str, str] | None = None,
        capture: bool = True,
    ) -> CommandResult:
        logger.debug("执行: %s (cwd=%s)", " ".join(args), cwd)
        try:
            r = subprocess.run(
                args, capture_output=capture, text=True,
                cwd=str(cwd), env=env, check=False,
            )
        except FileNotFoundError as e:
            # 可执行文件不存在，统一映射为 127
            return CommandResult(returncode=127, stdout="", stderr=str(e))
        return CommandResult(
            returncode=r.returncode,
            stdout=r.stdout or "",
            stderr=r.stderr or "",
        )


# =========================================================================
# 全局默认执行器（可替换）
# =========================================================================

_default_executor: CommandExecutor = LocalExecutor()


def get_executor() -> CommandExecutor:
    """获取全局默认命令执行器"""
    return _default_executor


def set_executor(executor: CommandExecutor) -> None:
    """替换全局默认命令执行器（用于测试）"""
    global _default_executor  # noqa: PLW0603
    _default_executor = executor


# =========================================================================
# 便捷函数
# =========================================================================

def run_cmd(
    args: list[str], *, cwd: str | Path = ".",
    env: dict[str, str] | None = None,
    label: str = "cmd",
    capture: bool = True,
    executor: CommandExecutor | None = None,
) -> CommandResult:
    """执行命令，失败抛 ExternalToolError（携带退出码与工具自身的诊断输出）

    Args:
        args: 命令参数列表
        cwd: 工作目录
        env: 环境变量（不传则继承当前进程）
        label: 日志与错误信息中的标签
        capture: 是否捕获输出
        executor: 指定执行器，默认使用全局执行器
    """
    logger.info("  %s: %s (cwd=%s)", label, " ".join(args), cwd)
    r = (executor or get_executor()).execute(args, cwd=cwd, env=env, capture=capture)
    if not r.success:
        detail = (r.stderr or r.stdout).strip()[:500]
        message = f"{label}失败 (rc={r.returncode})"
        if detail:
            message = f"{message}: {detail}"
        raise ExternalToolError(message, returncode=r.returncode, stderr=r.stderr)
    return r
