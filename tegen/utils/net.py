"""网络工具 - 下载地址校验"""

from __future__ import annotations

from urllib.parse import urlparse

from tegen.core.exceptions import ValidationError

_ALLOWED_SCHEMES = frozenset(("http", "https"))


def validate_url_scheme(url: str, *, context: str = "") -> None:
    """校验 URL 仅使用 http/https，防止 file:// 等非预期协议访问

    Raises:
        ValidationError: URL scheme 不在白名单内或缺少主机名
    """
    parsed = urlparse(url)
    label = f" ({context})" if context else ""
    if parsed.scheme not in _ALLOWED_SCHEMES:
        raise ValidationError(
            f"不允许的 URL 协议 '{parsed.scheme}'{label}，"
            f"仅支持 http/https: {url}"
        )
    if not parsed.netloc:
        raise ValidationError(f"URL 缺少主机名{label}: {url}")


def join_url(base: str, *parts: str) -> str:
    """拼接 URL 路径段，忽略多余的斜杠"""
    segments = [base.rstrip("/")]
    segments.extend(p.strip("/") for p in parts if p.strip("/"))
    return "/".join(segments)
