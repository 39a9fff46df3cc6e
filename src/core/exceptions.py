# -*- coding: utf-8 -*-
"""
自定义异常类
按阶段细分异常类型，便于命令行给出有针对性的提示
"""

from pathlib import Path
from typing import Optional, Dict, Any


class SharpenerError(Exception):
    """Sharpener 基础异常类"""

    error_code: str = "INTERNAL_ERROR"
    hint: Optional[str] = None

    def __init__(
        self,
        message: str = "发生内部错误",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典格式（用于日志记录）"""
        return {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


# ==================== 配置相关异常 ====================

class ConfigError(SharpenerError):
    """配置错误基类"""
    error_code = "CONFIG_ERROR"
    hint = "请运行 `sharpener config <token>` 重新生成配置"


class ConfigNotFoundError(ConfigError):
    """配置文件无法打开"""
    error_code = "CONFIG_NOT_FOUND"

    def __init__(self, path: Path, reason: str = ""):
        super().__init__(f"无法打开配置文件 {path}: {reason}", {"path": str(path)})


class ConfigParseError(ConfigError):
    """配置文件内容无效"""
    error_code = "CONFIG_PARSE_ERROR"

    def __init__(self, reason: str):
        super().__init__(f"配置文件无效: {reason}")


class ConfigWriteError(ConfigError):
    """配置文件写入失败"""
    error_code = "CONFIG_WRITE_ERROR"
    hint = None

    def __init__(self, path: Path, reason: str):
        super().__init__(f"写入配置文件 {path} 失败: {reason}", {"path": str(path)})


class InvalidTokenError(ConfigError):
    """CLI token 无法作为请求头使用"""
    error_code = "INVALID_TOKEN"

    def __init__(self, message: str = "CLI token 无效"):
        super().__init__(message)


class NotAuthenticatedError(ConfigError):
    """需要访问服务器的命令没有可用的已认证客户端"""
    error_code = "NOT_AUTHENTICATED"

    def __init__(self, message: str = "该命令需要已认证的提交客户端"):
        super().__init__(message)


class MissingMetaError(ConfigError):
    """当前目录及其所有上级目录中都没有可用的元数据"""
    error_code = "MISSING_META"
    hint = "请确认当前位于 `sharpener download` 创建的练习目录中"

    def __init__(self, start: Optional[Path] = None):
        super().__init__(
            "未找到练习元数据",
            {"start": str(start)} if start is not None else None
        )


# ==================== 网络 / API 相关异常 ====================

class ServerRequestError(SharpenerError):
    """无法完成对服务器的请求（连接、TLS、DNS、超时）"""
    error_code = "SERVER_REQUEST_ERROR"

    def __init__(self, reason: str, url: str = ""):
        super().__init__(f"无法完成对 Sharpener 服务器的请求: {reason}", {"url": url})


class InvalidAPIResponseError(SharpenerError):
    """HTTP 状态码与约定不符"""
    error_code = "INVALID_API_RESPONSE"

    def __init__(self, expected: int, received: int, url: str = ""):
        self.expected = expected
        self.received = received
        super().__init__(
            f"服务器响应无效: 期望 {expected}，实际 {received}",
            {"expected": expected, "received": received, "url": url}
        )


class ParseSubmissionResponseError(SharpenerError):
    """服务器返回的提交数据无法解析"""
    error_code = "PARSE_SUBMISSION_RESPONSE"

    def __init__(self, reason: str):
        super().__init__(f"无法解析服务器返回的提交数据: {reason}")


class InvalidForfeitError(SharpenerError):
    """放弃失败：没有可替换的练习"""
    error_code = "INVALID_FORFEIT"

    def __init__(self, message: str = "无法放弃当前练习：没有可用于替换的练习"):
        super().__init__(message)


# ==================== 文件系统相关异常 ====================

class InstallError(SharpenerError):
    """练习安装错误基类"""
    error_code = "INSTALL_ERROR"


class ExerciseDownloadError(InstallError):
    """练习压缩包下载失败"""
    error_code = "EXERCISE_DOWNLOAD_ERROR"

    def __init__(self, url: str, reason: str):
        super().__init__(f"无法下载练习: {reason}", {"url": url})


class UnpackArchiveError(InstallError):
    """练习压缩包解压失败"""
    error_code = "UNPACK_ARCHIVE_ERROR"

    def __init__(self, reason: str):
        super().__init__(f"无法解压练习: {reason}")


class MetaFileError(SharpenerError):
    """元数据文件错误基类"""
    error_code = "META_FILE_ERROR"

    def __init__(self, message: str, path: Path):
        super().__init__(message, {"path": str(path)})


class OpenMetaFileError(MetaFileError):
    """元数据文件无法打开"""
    error_code = "OPEN_META_FILE"

    def __init__(self, path: Path, reason: str):
        super().__init__(f"无法打开练习元数据 {path}: {reason}", path)


class ParseMetaFileError(MetaFileError):
    """元数据文件内容无效"""
    error_code = "PARSE_META_FILE"

    def __init__(self, path: Path, reason: str):
        super().__init__(f"无法加载练习元数据 {path}: {reason}", path)


class WriteMetaFileError(MetaFileError):
    """元数据文件写入失败"""
    error_code = "WRITE_META_FILE"

    def __init__(self, path: Path, reason: str):
        super().__init__(f"无法写入练习元数据 {path}: {reason}", path)


class ChecksumReadError(SharpenerError):
    """测试文件无法读取，无法计算校验和"""
    error_code = "CHECKSUM_READ_ERROR"

    def __init__(self, path: Path, reason: str):
        super().__init__(f"无法读取测试文件 {path}: {reason}", {"path": str(path)})


class SolutionFileError(SharpenerError):
    """解答文件无法读取"""
    error_code = "SOLUTION_FILE_ERROR"

    def __init__(self, path: Path, reason: str):
        super().__init__(f"无法读取解答文件 {path}: {reason}", {"path": str(path)})


# ==================== 领域规则相关异常 ====================

class DomainError(SharpenerError):
    """领域规则错误基类"""
    error_code = "DOMAIN_ERROR"


class MissingSubmissionTokenError(DomainError):
    """元数据中没有关联的提交令牌"""
    error_code = "MISSING_SUBMISSION_TOKEN"
    hint = "请使用 `sharpener download <token>` 重新下载该练习"

    def __init__(self, exercise: str = ""):
        super().__init__(
            f"练习 {exercise or '(未知)'} 尚未关联提交令牌",
            {"exercise": exercise}
        )


class UnsupportedLanguageError(DomainError):
    """遇到无法识别的语言"""
    error_code = "UNSUPPORTED_LANGUAGE"
    hint = "可能需要先升级 sharpener 命令行工具"

    def __init__(self, language: str):
        super().__init__(f"不支持的语言 \"{language}\"", {"language": language})


# ==================== 测试执行相关异常 ====================

class TestCommandError(SharpenerError):
    """测试命令无法启动"""
    __test__ = False
    error_code = "TEST_COMMAND_ERROR"

    def __init__(self, command: str, reason: str):
        super().__init__(f"无法运行测试命令 {command}: {reason}", {"command": command})


class TestOutputDecodeError(SharpenerError):
    """测试输出不是合法的 UTF-8"""
    __test__ = False
    error_code = "TEST_OUTPUT_DECODE_ERROR"

    def __init__(self, reason: str):
        super().__init__(f"测试输出不是合法的 UTF-8 文本: {reason}")
