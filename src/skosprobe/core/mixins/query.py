"""探测查询 Mixin。"""

from skosprobe.core.base import BaseProber
from skosprobe.exceptions import SparqlError
from skosprobe.models.endpoint import EndpointDescriptor
from skosprobe.models.results import AppError, ErrorCode, QueryResult, Term
from skosprobe.utils.sparql import with_prefixes


def _unexpected(details: str) -> SparqlError:
    return SparqlError(
        AppError(code=ErrorCode.INVALID_RESPONSE, message="Unexpected response format", details=details)
    )


def parse_flag(term: Term | None) -> bool:
    """宽松解析布尔绑定。

    不同存储将布尔值序列化为 "true"/"false" 或 "1"/"0"。
    """
    if term is None:
        return False
    return term.value.strip().lower() in ("true", "1")


class QueryMixin(BaseProber):
    """探测查询 Mixin。

    所有探测查询都经过前缀注入，并使用降低的重试预算以便快速失败。
    """

    async def _query(self, endpoint: EndpointDescriptor, query: str) -> QueryResult:
        """以探测重试预算执行查询。

        Raises:
            SparqlError: 查询失败时抛出。
        """
        return await self.executor.execute(
            endpoint,
            with_prefixes(query),
            timeout_ms=self.config.probe_timeout_ms,
            retries=self.config.probe_retries,
            cancel_event=self.cancel_event,
            accept_xml=self.config.accept_xml,
        )

    async def _ask(self, endpoint: EndpointDescriptor, query: str) -> bool:
        """执行 ASK 查询。

        Raises:
            SparqlError: 查询失败或结果不是布尔值时抛出。
        """
        result = await self._query(endpoint, query)
        if result.boolean is None:
            raise _unexpected("Expected an ASK result")
        return result.boolean

    async def _count(self, endpoint: EndpointDescriptor, query: str, variable: str = "count") -> int:
        """执行单行 COUNT 查询。

        Raises:
            SparqlError: 查询失败或结果中没有可解析的整数时抛出。
        """
        result = await self._query(endpoint, query)
        values = result.values(variable)
        if not values:
            raise _unexpected(f"Missing ?{variable} binding")
        try:
            return int(values[0])
        except ValueError as e:
            raise _unexpected(f"Non-integer ?{variable}: {values[0]!r}") from e
