"""关系谓词探测 Mixin。"""

from skosprobe.core.mixins.query import QueryMixin, parse_flag
from skosprobe.exceptions import SparqlError
from skosprobe.logger import logger
from skosprobe.models.analysis import RelationshipCapabilities
from skosprobe.models.endpoint import EndpointDescriptor

RELATIONSHIP_PATTERNS: dict[str, str] = {
    "hasInScheme": "?c a skos:Concept . ?c skos:inScheme ?x",
    "hasTopConceptOf": "?c skos:topConceptOf ?x",
    "hasHasTopConcept": "?s skos:hasTopConcept ?x",
    "hasBroader": "?c skos:broader ?x",
    "hasNarrower": "?c skos:narrower ?x",
    "hasBroaderTransitive": "?c skos:broaderTransitive ?x",
    "hasNarrowerTransitive": "?c skos:narrowerTransitive ?x",
}


def relationships_query() -> str:
    """七个 EXISTS 投影组成的单条关系探测查询。"""
    projections = "\n  ".join(
        f"(EXISTS {{ {pattern} }} AS ?{name})" for name, pattern in RELATIONSHIP_PATTERNS.items()
    )
    return f"SELECT\n  {projections}\nWHERE {{}}"


class RelationshipMixin(QueryMixin):
    """关系谓词探测 Mixin。

    每个标志只表示“数据集中至少存在一条该谓词的三元组”。
    """

    async def detect_relationships(self, endpoint: EndpointDescriptor) -> RelationshipCapabilities | None:
        """探测七个 SKOS 关系谓词是否存在。

        Args:
            endpoint: 目标端点。

        Returns:
            关系能力；查询失败或没有结果行时返回 None。
        """
        try:
            result = await self._query(endpoint, relationships_query())
        except SparqlError as e:
            logger.warning(f"Relationship probe failed: {e}")
            return None

        if not result.rows:
            logger.warning("Relationship probe returned no rows")
            return None
        row = result.rows[0]
        return RelationshipCapabilities.model_validate(
            {name: parse_flag(row.get(name)) for name in RELATIONSHIP_PATTERNS}
        )
