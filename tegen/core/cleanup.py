"""暂存目录清理

先递归放宽权限（Windows 上 git 对象文件为只读），再删除；
删除不掉的残留只记录为警告，不影响 install 的成功结果。
"""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
import stat
from pathlib import Path

logger = logging.getLogger(__name__)

_WRITABLE = stat.S_IRWXU


def _relax_permissions(root: Path) -> None:
    if os.path.islink(root):
        return
    for dirpath, dirnames, filenames in os.walk(root):
        for entry in (*dirnames, *filenames):
            p = os.path.join(dirpath, entry)
            if os.path.islink(p):
                # chmod 会作用到链接目标，目标可能在暂存目录之外
                continue
            try:
                os.chmod(p, os.stat(p).st_mode | _WRITABLE)
            except OSError:
                # 交给 rmtree 的 onexc 再试一次
                continue
    with contextlib.suppress(OSError):
        os.chmod(root, os.stat(root).st_mode | _WRITABLE)


def remove_staging(staging_dir: Path, staging_root: Path | None = None) -> list[str]:
    """尽力删除暂存目录，返回警告信息列表（空列表表示完全清理）

    目录不存在视为已清理。给出 staging_root 时，暂存根删空后一并删除。
    """
    warnings: list[str] = []
    if not staging_dir.exists():
        return warnings

    _relax_permissions(staging_dir)

    def _on_error(func, path, exc) -> None:  # type: ignore[no-untyped-def]
        try:
            if not os.path.islink(path):
                os.chmod(path, stat.S_IWRITE | _WRITABLE)
            func(path)
        except OSError as e:
            warnings.append(f"无法删除 {path}: {e}")

    shutil.rmtree(staging_dir, onexc=_on_error)
    if staging_dir.exists() and not warnings:
        warnings.append(f"暂存目录未能完全删除: {staging_dir}")

    if staging_root is not None:
        try:
            if staging_root.is_dir() and not any(staging_root.iterdir()):
                staging_root.rmdir()
        except OSError as e:
            warnings.append(f"无法删除暂存根目录 {staging_root}: {e}")

    for w in warnings:
        logger.warning("清理警告: %s", w)
    if not warnings:
        logger.info("  已清理暂存目录: %s", staging_dir)
    return warnings
