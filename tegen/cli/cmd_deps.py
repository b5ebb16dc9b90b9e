"""CLI - 项目初始化与依赖管理命令"""

from __future__ import annotations

from pathlib import Path

import click

from tegen.cli import _svc, fail, fail_on
from tegen.core.exceptions import TegenError
from tegen.core.models import MANIFEST_DEFAULTS, InstallReport, Manifest


def register(group: click.Group) -> None:
    group.add_command(init)
    group.add_command(install)
    group.add_command(list_deps)


@click.command()
@click.option("--yes", "-y", is_flag=True, help="全部使用默认值，不提示输入")
@click.pass_context
def init(ctx: click.Context, yes: bool) -> None:
    """在项目目录初始化 TegenConfig.json 与 CMake 项目骨架"""
    svc = _svc(ctx)
    if svc.manifest.exists():
        click.echo(f"{svc.manifest.path.name} 已存在于 {svc.project_root}，未做改动。")
        return

    values = dict(MANIFEST_DEFAULTS)
    if not yes:
        values["name"] = click.prompt("项目名称", default=values["name"])
        values["version"] = click.prompt("项目版本", default=values["version"])
        values["author"] = click.prompt("作者", default=values["author"])
        values["license"] = click.prompt("许可证", default=values["license"])
        values["description"] = click.prompt("项目描述", default=values["description"])

    try:
        result = svc.project.init(Manifest(**values))
    except (TegenError, OSError) as e:
        fail(f"初始化失败: {e}")

    click.echo(f"已在 {svc.project_root} 初始化项目 {result.manifest.name}:")
    for path in result.files:
        click.echo(f"  - {Path(path).relative_to(svc.project_root).as_posix()}")
    click.echo("")
    click.echo("构建需要本机已安装 CMake (https://cmake.org/download/)。")
    click.echo("  tegen install <依赖名> [版本]   安装依赖")
    click.echo("  tegen build                    配置并编译")
    click.echo("  tegen run                      运行构建产物")


def _progress(done: int, total: int, path: Path) -> None:
    click.echo(f"\r  [{done}/{total}] {path.name}", nl=done == total, err=True)


def _print_report(report: InstallReport) -> None:
    if report.already_installed:
        click.echo(f"依赖 {report.name} 已安装，版本 {report.resolved_version}。")
        return
    click.echo(
        f"依赖 {report.name} 安装成功 (版本 {report.resolved_version}): "
        f"{len(report.headers)} 个头文件, {len(report.libraries)} 个库文件"
    )
    if not report.patched:
        click.echo("  构建描述中已存在该依赖的配置块，未重复追加。")
    for w in report.warnings:
        click.echo(f"警告: {w}", err=True)


@click.command()
@click.argument("name")
@click.argument("version", required=False)
@click.pass_context
def install(ctx: click.Context, name: str, version: str | None) -> None:
    """安装依赖并写入 TegenConfig.json（不指定版本时使用平台默认分支）"""
    svc = _svc(ctx)
    svc.integrator.on_progress = _progress
    report = svc.installer.install(name, version)
    if not report.success:
        err = report.error
        fail(str(err) if err else f"依赖 {name} 安装失败")
    _print_report(report)


@click.command(name="list")
@click.pass_context
def list_deps(ctx: click.Context) -> None:
    """列出 TegenConfig.json 中的所有依赖"""
    try:
        deps = _svc(ctx).project.list_dependencies()
    except TegenError as e:
        fail_on(e)
    if not deps:
        click.echo("未安装任何依赖。")
        return
    click.echo("依赖:")
    for name, ver in deps.items():
        click.echo(f"  - {name}: {ver}")
