"""命名图探测 Mixin。

图检测采用三步链：
1. ASK GRAPH 判断是否支持命名图；
2. 按图分组计数（GROUP BY ?g），只保留 IRI 图名；
3. 聚合失败时退回 SELECT DISTINCT ?g。
第 2、3 步都请求 cap + 1 行，用于区分“恰好 cap 个”与“超过 cap 个”。
"""

from pydantic import BaseModel

from skosprobe.core.mixins.query import QueryMixin
from skosprobe.exceptions import SparqlError
from skosprobe.logger import logger
from skosprobe.models.endpoint import EndpointDescriptor
from skosprobe.models.results import QueryResult

NAMED_GRAPHS_QUERY = "ASK { GRAPH ?g { ?s ?p ?o } }"

SKOS_GRAPH_PATTERN = """
    GRAPH ?g {
      { ?s a skos:ConceptScheme }
      UNION
      { ?s a skos:Concept ; skos:prefLabel ?label }
    }
    FILTER(isIRI(?g))"""


class SkosGraphs(BaseModel):
    """SKOS 命名图枚举结果。

    Attributes:
        count: 图数量；超过上限时为 cap + 1，表示“至少这么多”。
        uris: 图 URI 列表；超过上限时为 None。
    """

    count: int
    uris: list[str] | None = None

    @property
    def limited(self) -> bool:
        """是否因超过上限而丢弃了 URI 列表。"""
        return self.uris is None


def skos_graphs_count_query(limit: int) -> str:
    """按图分组计数的 SKOS 图查询。"""
    return f"""
SELECT ?g (COUNT(*) AS ?triples)
WHERE {{{SKOS_GRAPH_PATTERN}
}}
GROUP BY ?g
LIMIT {limit}
"""


def skos_graphs_list_query(limit: int) -> str:
    """不依赖聚合的 SKOS 图查询。"""
    return f"""
SELECT DISTINCT ?g
WHERE {{{SKOS_GRAPH_PATTERN}
}}
LIMIT {limit}
"""


class GraphMixin(QueryMixin):
    """命名图探测 Mixin。"""

    async def detect_named_graphs(self, endpoint: EndpointDescriptor) -> bool | None:
        """探测端点是否支持 GRAPH 查询。

        Args:
            endpoint: 目标端点。

        Returns:
            ASK 结果；查询本身失败（端点未实现 GRAPH）时返回 None。
        """
        try:
            return await self._ask(endpoint, NAMED_GRAPHS_QUERY)
        except SparqlError as e:
            logger.warning(f"Named graph probe failed: {e}")
            return None

    async def detect_skos_graphs(self, endpoint: EndpointDescriptor) -> SkosGraphs | None:
        """枚举包含 SKOS 数据的命名图。

        应仅在命名图探测返回 True 后调用。

        Args:
            endpoint: 目标端点。

        Returns:
            图枚举结果；两种查询都失败时返回 None。
        """
        cap = self.config.max_skos_graphs
        grouped: QueryResult | None = None
        try:
            grouped = await self._query(endpoint, skos_graphs_count_query(cap + 1))
        except SparqlError as e:
            logger.warning(f"Grouped SKOS graph query failed, falling back to DISTINCT: {e}")
        else:
            if grouped.rows:
                return self._summarize_graphs(grouped, cap)
            logger.info("Grouped SKOS graph query returned no graphs, retrying with DISTINCT")

        try:
            result = await self._query(endpoint, skos_graphs_list_query(cap + 1))
        except SparqlError as e:
            logger.warning(f"SKOS graph enumeration failed: {e}")
            if grouped is None:
                return None
            result = grouped
        return self._summarize_graphs(result, cap)

    @staticmethod
    def _summarize_graphs(result: QueryResult, cap: int) -> SkosGraphs:
        uris = list(dict.fromkeys(result.values("g")))
        if len(uris) > cap:
            return SkosGraphs(count=len(uris), uris=None)
        return SkosGraphs(count=len(uris), uris=uris)
