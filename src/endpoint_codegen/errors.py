"""Error types raised by the extraction, prompt and generation pipeline.

Every error carries a short user-facing message so callers (CLI, session)
can surface it inline and keep going.
"""


class CodegenError(Exception):
    """Base class for all recoverable endpoint-codegen errors."""

    default_message = "操作失败。"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class EmptyInputError(CodegenError):
    default_message = "JSON输入不能为空。"


class ParseError(CodegenError):
    default_message = "无效的JSON格式。请检查输入。"


class EditError(CodegenError):
    default_message = "无法编辑该字段。"


class TemplateNotFoundError(CodegenError):
    default_message = "找不到提示词模板。"


class MissingCredentialError(CodegenError):
    default_message = "请先设置您的Gemini API密钥。"


class AuthError(CodegenError):
    """The LLM provider rejected the stored credential."""

    default_message = "API密钥无效或已过期，请重新设置密钥。"


class GenerationError(CodegenError):
    default_message = "生成代码失败。请检查您的网络连接。"


class GenerationInProgressError(CodegenError):
    default_message = "代码正在生成中，请稍候。"


class ValidationError(CodegenError):
    """Rejected user input in the credential configuration."""

    default_message = "API密钥不能为空。"


class ConfigFileError(CodegenError):
    """The config file exists but cannot be read as a YAML mapping."""

    default_message = "配置文件格式错误，请修复后重试。"
