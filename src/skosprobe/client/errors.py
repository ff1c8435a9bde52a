"""错误分类。

将 HTTP 状态码与底层异常映射为 AppError，供重试策略判断是否继续。
"""

import httpx

from skosprobe.exceptions import SparqlError
from skosprobe.models.results import AppError, ErrorCode

CORS_MARKERS = ("cors", "cross-origin")


def error_from_status(status: int, reason: str) -> AppError:
    """将非 2xx 状态码映射为 AppError。

    Args:
        status: HTTP 状态码。
        reason: 状态描述。

    Returns:
        分类后的错误值。
    """
    match status:
        case 400:
            return AppError(code=ErrorCode.QUERY_ERROR, message="Invalid SPARQL query")
        case 401:
            return AppError(code=ErrorCode.AUTH_REQUIRED, message="Authentication required")
        case 403:
            return AppError(code=ErrorCode.AUTH_FAILED, message="Access denied. Check credentials.")
        case 404:
            return AppError(code=ErrorCode.NOT_FOUND, message="Endpoint not found")
        case 408:
            return AppError(code=ErrorCode.TIMEOUT, message="Request timed out")
        case _ if 500 <= status < 600:
            return AppError(code=ErrorCode.SERVER_ERROR, message=f"Server error: {reason}")
        case _:
            return AppError(code=ErrorCode.UNKNOWN, message=f"HTTP {status}: {reason}")


def classify_exception(exc: BaseException) -> AppError:
    """将一次尝试中抛出的异常分类为 AppError。

    Args:
        exc: 尝试过程中抛出的异常。

    Returns:
        分类后的错误值。
    """
    if isinstance(exc, SparqlError):
        return exc.error
    if isinstance(exc, (TimeoutError, httpx.TimeoutException)):
        return AppError(code=ErrorCode.TIMEOUT, message="Request timed out")
    if isinstance(exc, httpx.TransportError):
        text = str(exc)
        if any(marker in text.lower() for marker in CORS_MARKERS):
            return AppError(
                code=ErrorCode.CORS_BLOCKED,
                message="CORS error: Endpoint does not allow browser access",
                details="The endpoint needs to enable CORS headers",
            )
        return AppError(code=ErrorCode.NETWORK_ERROR, message="Network error", details=text or None)
    return AppError(code=ErrorCode.UNKNOWN, message="Unknown error", details=str(exc) or None)


def is_retryable(error: AppError) -> bool:
    """认证错误不重试，其余错误均消耗一次重试机会。"""
    return not error.code.is_auth_error
