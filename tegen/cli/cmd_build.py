"""CLI - 构建与运行命令（透传给 CMake）"""

from __future__ import annotations

import click

from tegen.cli import _svc, fail_on
from tegen.core.exceptions import TegenError


def register(group: click.Group) -> None:
    group.add_command(build)
    group.add_command(run)


@click.command()
@click.pass_context
def build(ctx: click.Context) -> None:
    """使用 CMake 配置并编译项目"""
    svc = _svc(ctx)
    click.echo("正在构建项目...")
    try:
        out = svc.build.build()
    except TegenError as e:
        fail_on(e)
    click.echo(f"构建完成，产物位于 {out}")


@click.command(context_settings={"ignore_unknown_options": True})
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run(ctx: click.Context, args: tuple[str, ...]) -> None:
    """运行构建产物，额外参数原样传给程序"""
    try:
        _svc(ctx).build.run(args)
    except TegenError as e:
        fail_on(e)
