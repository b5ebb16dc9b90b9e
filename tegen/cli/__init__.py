"""tegen 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
项目根目录在入口解析一次，之后通过 ServiceContainer 显式传递。
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import NoReturn

import click

from tegen import __version__
from tegen.core.config import init_config
from tegen.core.exceptions import TegenError
from tegen.services.container import ServiceContainer
from tegen.utils.logger import setup_logging

logger = logging.getLogger(__name__)

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _svc(ctx: click.Context) -> ServiceContainer:
    """获取当前调用的服务容器"""
    return ctx.find_object(ServiceContainer)  # type: ignore[return-value]


def fail(message: str) -> NoReturn:
    """输出错误信息到 stderr 并以退出码 1 结束"""
    click.echo(f"错误: {message}", err=True)
    raise SystemExit(1)


def fail_on(exc: TegenError) -> NoReturn:
    fail(f"[{exc.code}] {exc}")


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__)
@click.option(
    "--project-dir", "-C", default=".",
    type=click.Path(file_okay=False, path_type=Path),
    help="项目根目录（默认当前目录）",
)
@click.option("--verbose", "-v", is_flag=True, help="输出调试日志")
@click.pass_context
def main(ctx: click.Context, project_dir: Path, verbose: bool) -> None:
    """tegen - C/C++ 项目依赖管理与构建工具"""
    setup_logging(
        level="DEBUG" if verbose else os.getenv("TEGEN_LOG_LEVEL", "WARNING"),
        json_output=os.getenv("TEGEN_LOG_JSON", "") == "1",
    )
    if isinstance(ctx.obj, ServiceContainer):
        # 调用方（测试）已注入容器
        return
    project_root = project_dir.resolve()
    try:
        config = init_config(project_root)
    except (TegenError, ValueError, OSError) as e:
        fail(f"加载配置失败: {e}")
    logger.debug("项目根目录: %s, 有效配置: %s", project_root, config.to_dict())
    ctx.obj = ServiceContainer(project_root, config=config)


# 注册各领域子命令
from tegen.cli.cmd_deps import register as _reg_deps  # noqa: E402
from tegen.cli.cmd_build import register as _reg_build  # noqa: E402

_reg_deps(main)
_reg_build(main)
