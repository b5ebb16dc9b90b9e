"""统一异常体系

所有业务异常继承 TegenError，携带错误类别 code 与底层原因 cause。
安装流水线在边界处把异常转换为 StepError 值，CLI 据此输出友好提示。
"""

from __future__ import annotations


class TegenError(Exception):
    """框架基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConfigError(TegenError):
    """配置文件或清单内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(TegenError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"


class ManifestMissingError(TegenError):
    """项目清单不存在，需要先执行 init"""

    code = "MANIFEST_MISSING"


class FetchError(TegenError):
    """依赖源码拉取失败（网络、版本不存在、仓库不存在）"""

    code = "FETCH_ERROR"


class WorkspaceError(TegenError):
    """目录或文件创建失败、权限不足"""

    code = "IO_ERROR"


class IntegrationError(TegenError):
    """头文件或库文件集成失败"""

    code = "INTEGRATION_ERROR"


class ExternalToolError(TegenError):
    """外部构建工具或可执行程序返回非零"""

    code = "EXTERNAL_TOOL_ERROR"

    def __init__(
        self, message: str, returncode: int | None = None,
        stderr: str = "", cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.returncode = returncode
        self.stderr = stderr


CLEANUP_WARNING = "CLEANUP_WARNING"
