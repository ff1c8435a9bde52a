"""异常定义模块。

本模块定义了 skosprobe 项目中使用的所有自定义异常类，
采用层级化设计便于异常捕获和处理。
"""

from skosprobe.models.results import AppError, ErrorCode


class SkosProbeError(Exception):
    """skosprobe 基础异常类。

    所有 skosprobe 自定义异常的基类，可用于统一捕获所有项目异常。
    """

    pass


class ConfigurationError(SkosProbeError):
    """配置相关异常。

    当配置项缺失、格式错误或验证失败时抛出。
    """

    pass


class SparqlError(SkosProbeError):
    """SPARQL 请求失败异常。

    在内部各层之间传递已分类的 AppError，到达边界时再转换为错误值。
    """

    def __init__(self, error: AppError):
        self.error = error
        message = f"{error.code}: {error.message}"
        if error.details:
            message = f"{message} ({error.details})"
        super().__init__(message)

    @property
    def code(self) -> ErrorCode:
        """错误类型。"""
        return self.error.code


class QueryCancelledError(SkosProbeError):
    """查询被外部取消信号中止时抛出。"""

    def __init__(self, message: str = "Query cancelled"):
        super().__init__(message)


class CurationError(SkosProbeError):
    """端点整理相关异常。

    当整理目录缺少输入配置或输入格式错误时抛出。
    """

    pass

