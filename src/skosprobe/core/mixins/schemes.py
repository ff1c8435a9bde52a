"""概念方案探测 Mixin。"""

from pydantic import BaseModel, Field

from skosprobe.core.mixins.query import QueryMixin
from skosprobe.exceptions import SparqlError
from skosprobe.logger import logger
from skosprobe.models.endpoint import EndpointDescriptor

SCHEME_COUNT_QUERY = """
SELECT (COUNT(DISTINCT ?scheme) AS ?count)
WHERE { ?scheme a skos:ConceptScheme }
"""


def scheme_list_query(limit: int, *, distinct: bool = True) -> str:
    """概念方案 URI 查询。"""
    modifier = "DISTINCT " if distinct else ""
    return f"""
SELECT {modifier}?scheme
WHERE {{ ?scheme a skos:ConceptScheme }}
LIMIT {limit}
"""


class SchemeSummary(BaseModel):
    """概念方案探测结果。

    Attributes:
        uris: 保存的方案 URI，至多 cap 个。
        count: 方案数量；受限时为已知下界。
        limited: 是否存在未保存的方案。
    """

    uris: list[str] = Field(default_factory=list)
    count: int = 0
    limited: bool = False


class SchemeMixin(QueryMixin):
    """概念方案探测 Mixin。

    先计数再获取；部分存储上 COUNT(DISTINCT) 会超时，此时退回
    LIMIT cap + 1 的原始行获取并在客户端去重。
    """

    async def detect_schemes(self, endpoint: EndpointDescriptor) -> SchemeSummary | None:
        """探测概念方案。

        Args:
            endpoint: 目标端点。

        Returns:
            方案探测结果；所有查询都失败时返回 None。
        """
        cap = self.config.max_stored_schemes
        try:
            total = await self._count(endpoint, SCHEME_COUNT_QUERY)
        except SparqlError as e:
            logger.warning(f"Scheme count failed, fetching raw rows instead: {e}")
            return await self._fetch_schemes_raw(endpoint, cap)

        if total == 0:
            return SchemeSummary()

        try:
            result = await self._query(endpoint, scheme_list_query(cap))
        except SparqlError as e:
            logger.warning(f"Scheme fetch failed after count: {e}")
            return await self._fetch_schemes_raw(endpoint, cap)

        uris = list(dict.fromkeys(result.values("scheme")))[:cap]
        count = max(total, len(uris))
        return SchemeSummary(uris=uris, count=count, limited=count > len(uris))

    async def _fetch_schemes_raw(self, endpoint: EndpointDescriptor, cap: int) -> SchemeSummary | None:
        """获取 cap + 1 行原始结果并在客户端去重。"""
        try:
            result = await self._query(endpoint, scheme_list_query(cap + 1, distinct=False))
        except SparqlError as e:
            logger.warning(f"Scheme enumeration failed: {e}")
            return None

        rows = result.values("scheme")
        unique = list(dict.fromkeys(rows))
        limited = len(rows) > cap
        stored = unique[:cap]
        if limited:
            return SchemeSummary(uris=stored, count=max(len(unique), cap + 1), limited=True)
        return SchemeSummary(uris=stored, count=len(stored), limited=False)
