"""SPARQL 客户端模块。

提供查询执行器、可复用的重试策略与错误分类。
"""

from skosprobe.client.errors import classify_exception, error_from_status, is_retryable
from skosprobe.client.executor import RdfFormat, SparqlExecutor
from skosprobe.client.retry import RetryPolicy

__all__ = [
    "RdfFormat",
    "RetryPolicy",
    "SparqlExecutor",
    "classify_exception",
    "error_from_status",
    "is_retryable",
]
