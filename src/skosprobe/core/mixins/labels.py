"""标签谓词探测 Mixin。"""

from skosprobe.core.mixins.query import QueryMixin, parse_flag
from skosprobe.exceptions import SparqlError
from skosprobe.logger import logger
from skosprobe.models.analysis import LabelPredicateCapabilities, LabelPredicates, ResourceKind
from skosprobe.models.endpoint import EndpointDescriptor

RESOURCE_TYPES: dict[ResourceKind, str] = {
    "concept": "skos:Concept",
    "scheme": "skos:ConceptScheme",
    "collection": "skos:Collection",
}

LABEL_PREDICATES: dict[str, str] = {
    "prefLabel": "skos:prefLabel",
    "xlPrefLabel": "skosxl:prefLabel/skosxl:literalForm",
    "dctTitle": "dct:title",
    "dcTitle": "dc:title",
    "rdfsLabel": "rdfs:label",
}


def label_predicates_query(kind: ResourceKind) -> str:
    """某类资源的五路 EXISTS 标签谓词探测查询。"""
    rdf_type = RESOURCE_TYPES[kind]
    projections = "\n  ".join(
        f"(EXISTS {{ ?r a {rdf_type} . ?r {path} ?l }} AS ?{name})"
        for name, path in LABEL_PREDICATES.items()
    )
    return f"SELECT\n  {projections}\nWHERE {{}}"


class LabelMixin(QueryMixin):
    """标签谓词探测 Mixin。"""

    async def detect_label_predicates(
        self,
        endpoint: EndpointDescriptor,
        kind: ResourceKind,
    ) -> LabelPredicateCapabilities | None:
        """探测某类资源可用的标签谓词。

        Args:
            endpoint: 目标端点。
            kind: 资源类型，concept、scheme 或 collection。

        Returns:
            标签谓词能力；查询失败时返回 None。
        """
        try:
            result = await self._query(endpoint, label_predicates_query(kind))
        except SparqlError as e:
            logger.warning(f"Label predicate probe for {kind} failed: {e}")
            return None

        if not result.rows:
            return None
        row = result.rows[0]
        return LabelPredicateCapabilities.model_validate(
            {name: parse_flag(row.get(name)) for name in LABEL_PREDICATES}
        )

    async def detect_all_label_predicates(self, endpoint: EndpointDescriptor) -> LabelPredicates:
        """依次探测概念、方案与集合的标签谓词。"""
        found = {}
        for kind in RESOURCE_TYPES:
            found[kind] = await self.detect_label_predicates(endpoint, kind)
        return LabelPredicates(**found)
