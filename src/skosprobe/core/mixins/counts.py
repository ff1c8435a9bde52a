"""资源计数 Mixin。"""

from skosprobe.core.mixins.query import QueryMixin
from skosprobe.exceptions import SparqlError
from skosprobe.logger import logger
from skosprobe.models.endpoint import EndpointDescriptor


def count_query(rdf_type: str) -> str:
    """某类资源的去重计数查询。"""
    return f"""
SELECT (COUNT(DISTINCT ?x) AS ?count)
WHERE {{ ?x a {rdf_type} }}
"""


class CountMixin(QueryMixin):
    """资源计数 Mixin。

    计数失败返回 None 而不是 0，下游必须区分“为零”与“未能计数”。
    """

    async def _count_type(self, endpoint: EndpointDescriptor, rdf_type: str) -> int | None:
        try:
            return await self._count(endpoint, count_query(rdf_type))
        except SparqlError as e:
            logger.warning(f"Counting {rdf_type} failed: {e}")
            return None

    async def count_concepts(self, endpoint: EndpointDescriptor) -> int | None:
        """统计 skos:Concept 数量。"""
        return await self._count_type(endpoint, "skos:Concept")

    async def count_collections(self, endpoint: EndpointDescriptor) -> int | None:
        """统计 skos:Collection 数量。"""
        return await self._count_type(endpoint, "skos:Collection")

    async def count_ordered_collections(self, endpoint: EndpointDescriptor) -> int | None:
        """统计 skos:OrderedCollection 数量。"""
        return await self._count_type(endpoint, "skos:OrderedCollection")
