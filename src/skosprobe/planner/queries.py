"""能力感知的查询构建器。

QueryPlanner 绑定一份能力快照（实时分析或持久化快照均可，也可以缺失），
按调用选择片段策略并生成完整查询。是否执行查询由调用方决定。
"""

from skosprobe.models.analysis import AnalysisResult, LabelPredicateCapabilities, ResourceKind
from skosprobe.planner.fragments import (
    collection_member_fragment,
    scheme_binding,
    scheme_membership_fragment,
    top_concept_pattern,
)
from skosprobe.planner.labels import label_union_clause
from skosprobe.planner.strategy import MembershipStrategy, choose_strategy
from skosprobe.utils.sparql import iri, with_prefixes


class QueryPlanner:
    """自适应查询规划器。

    Attributes:
        analysis: 能力快照，None 表示尚未分析。

    Example:
        ```python
        planner = QueryPlanner(analysis)
        query = planner.scheme_members_query("http://example.org/scheme", page_size=100)
        strategy = planner.strategy_for("http://example.org/scheme")
        ```
    """

    def __init__(self, analysis: AnalysisResult | None = None) -> None:
        self.analysis = analysis

    @property
    def _relationships(self):
        return self.analysis.relationships if self.analysis else None

    def _label_capabilities(self, kind: ResourceKind) -> LabelPredicateCapabilities | None:
        if self.analysis is None:
            return None
        return self.analysis.label_predicates.for_kind(kind)

    def _include_in_scheme(self) -> bool:
        rel = self._relationships
        return rel is None or rel.has_in_scheme

    def strategy_for(
        self,
        scheme_uri: str | None = None,
        prefer: MembershipStrategy | None = None,
    ) -> MembershipStrategy:
        """为一次调用选择成员关系策略。"""
        return choose_strategy(self.analysis, scheme_uri, prefer)

    def label_clause(self, var: str, kind: ResourceKind = "concept") -> str:
        """某类资源的能力感知标签子句。"""
        return label_union_clause(var, self._label_capabilities(kind))

    def scheme_members_query(
        self,
        scheme_uri: str,
        page_size: int = 100,
        offset: int = 0,
        prefer: MembershipStrategy | None = None,
    ) -> str:
        """方案内概念的分页查询（多取一行用于判断是否还有下一页）。"""
        strategy = self.strategy_for(scheme_uri, prefer)
        membership = scheme_membership_fragment(
            "?concept",
            strategy,
            include_in_scheme=self._include_in_scheme(),
        )
        return with_prefixes(f"""
SELECT DISTINCT ?concept
WHERE {{
  {scheme_binding(scheme_uri)}
  ?concept a skos:Concept .
  {{
    {membership}
  }}
}}
ORDER BY ?concept
LIMIT {page_size + 1}
OFFSET {offset}
""")

    def top_concepts_query(self, scheme_uri: str, page_size: int = 100, offset: int = 0) -> str:
        """方案顶层概念的分页查询。

        顶层概念来自 topConceptOf / hasTopConcept；缺失时退回
        “属于方案且没有任何上位概念”的概念。
        """
        return with_prefixes(f"""
SELECT ?concept ?label ?labelLang ?labelType ?notation ?narrowerCount
WHERE {{
  {{
    SELECT DISTINCT ?concept (COUNT(DISTINCT ?narrower) AS ?narrowerCount)
    WHERE {{
      {scheme_binding(scheme_uri)}
      {{
        ?concept a skos:Concept .
        {top_concept_pattern("?concept")}
      }}
      UNION
      {{
        ?concept a skos:Concept .
        ?concept skos:inScheme ?scheme .
        FILTER NOT EXISTS {{ ?concept skos:broader ?broader }}
        FILTER NOT EXISTS {{ ?parent skos:narrower ?concept }}
      }}
      OPTIONAL {{
        {{ ?narrower skos:broader ?concept }}
        UNION
        {{ ?concept skos:narrower ?narrower }}
      }}
    }}
    GROUP BY ?concept
    ORDER BY ?concept
    LIMIT {page_size + 1}
    OFFSET {offset}
  }}
  OPTIONAL {{ ?concept skos:notation ?notation }}
  OPTIONAL {{
    {self.label_clause("?concept", "concept")}
  }}
}}
""")

    def children_query(self, parent_uri: str, page_size: int = 100, offset: int = 0) -> str:
        """子概念的分页查询（broader 或反向 narrower）。"""
        parent = iri(parent_uri)
        return with_prefixes(f"""
SELECT ?concept ?label ?labelLang ?labelType ?notation ?narrowerCount
WHERE {{
  {{
    SELECT DISTINCT ?concept (COUNT(DISTINCT ?narrower) AS ?narrowerCount)
    WHERE {{
      {{ ?concept skos:broader {parent} }}
      UNION
      {{ {parent} skos:narrower ?concept }}
      OPTIONAL {{
        {{ ?narrower skos:broader ?concept }}
        UNION
        {{ ?concept skos:narrower ?narrower }}
      }}
    }}
    GROUP BY ?concept
    ORDER BY ?concept
    LIMIT {page_size + 1}
    OFFSET {offset}
  }}
  OPTIONAL {{ ?concept skos:notation ?notation }}
  OPTIONAL {{
    {self.label_clause("?concept", "concept")}
  }}
}}
""")

    def collections_query(
        self,
        scheme_uri: str,
        prefer: MembershipStrategy | None = None,
    ) -> str | None:
        """方案内有成员的集合查询。

        Returns:
            查询文本；快照明确表明没有任何可用的成员关系谓词时返回 None。
        """
        rel = self._relationships
        if rel is not None and not (
            rel.has_in_scheme
            or rel.has_top_concept_of
            or rel.has_has_top_concept
        ):
            return None

        strategy = self.strategy_for(scheme_uri, prefer)
        members = collection_member_fragment(
            "?collection",
            strategy,
            include_in_scheme=self._include_in_scheme(),
        )
        return with_prefixes(f"""
SELECT DISTINCT ?collection ?label ?labelLang ?labelType ?notation ?hasParentCollection ?hasChildCollections
WHERE {{
  ?collection a skos:Collection .
  {{
    SELECT DISTINCT ?collection WHERE {{
      {scheme_binding(scheme_uri)}
      {members}
    }}
  }}
  BIND(EXISTS {{
    ?parentCol a skos:Collection .
    ?parentCol skos:member ?collection .
  }} AS ?hasParentCollection)
  BIND(EXISTS {{
    ?collection skos:member ?childCol .
    ?childCol a skos:Collection .
  }} AS ?hasChildCollections)
  OPTIONAL {{
    {self.label_clause("?collection", "collection")}
  }}
  OPTIONAL {{ ?collection skos:notation ?notation }}
}}
ORDER BY ?collection
""")

    def child_collections_query(self, parent_uri: str) -> str:
        """嵌套子集合查询。"""
        parent = iri(parent_uri)
        return with_prefixes(f"""
SELECT DISTINCT ?collection ?label ?labelLang ?labelType ?notation ?hasChildCollections
WHERE {{
  {parent} skos:member ?collection .
  ?collection a skos:Collection .
  BIND(EXISTS {{
    ?collection skos:member ?childCol .
    ?childCol a skos:Collection .
  }} AS ?hasChildCollections)
  OPTIONAL {{
    {self.label_clause("?collection", "collection")}
  }}
  OPTIONAL {{ ?collection skos:notation ?notation }}
}}
ORDER BY ?collection
""")

    def orphan_concepts_query(
        self,
        page_size: int = 100,
        offset: int = 0,
        *,
        prefilter_direct_links: bool = False,
    ) -> str | None:
        """孤立概念查询：没有任何可发现路径通往任一方案的概念。

        只为快照中存在的关系谓词生成 UNION 分支。

        Args:
            page_size: 每页数量。
            offset: 分页偏移。
            prefilter_direct_links: 是否先在子查询中排除直接关联方案的概念。

        Returns:
            查询文本；没有关系能力快照或没有任何可用分支时返回 None。
        """
        rel = self._relationships
        if rel is None:
            return None

        branches = []
        candidate_filters = []
        direct = [
            (rel.has_in_scheme, "?concept skos:inScheme ?scheme ."),
            (rel.has_has_top_concept, "?scheme skos:hasTopConcept ?concept ."),
            (rel.has_top_concept_of, "?concept skos:topConceptOf ?scheme ."),
        ]
        for present, pattern in direct:
            if not present:
                continue
            if prefilter_direct_links:
                candidate_filters.append(f"FILTER NOT EXISTS {{ {pattern} }}")
            else:
                branches.append(f"{{ {pattern} }}")

        tops = []
        if rel.has_has_top_concept:
            tops.append("?scheme skos:hasTopConcept ?top .")
        if rel.has_top_concept_of:
            tops.append("?top skos:topConceptOf ?scheme .")
        descents = []
        if rel.has_narrower_transitive:
            descents.append("?top skos:narrowerTransitive ?concept .")
        if rel.has_broader_transitive:
            descents.append("?concept skos:broaderTransitive ?top .")
        if rel.has_narrower:
            descents.append("?top skos:narrower+ ?concept .")
        if rel.has_broader:
            descents.append("?concept skos:broader+ ?top .")
        for descent in descents:
            for top in tops:
                branches.append(f"{{ {top} {descent} }}")

        if candidate_filters:
            filters = "\n      ".join(candidate_filters)
            candidates = f"""{{
    SELECT DISTINCT ?concept
    WHERE {{
      ?concept a skos:Concept .
      {filters}
    }}
  }}"""
        else:
            candidates = "?concept a skos:Concept ."

        if not branches:
            if not candidate_filters:
                return None
            exclusion = ""
        else:
            union = "\n    UNION\n    ".join(branches)
            exclusion = f"FILTER NOT EXISTS {{\n    {union}\n  }}"

        return with_prefixes(f"""
SELECT DISTINCT ?concept
WHERE {{
  {candidates}
  {exclusion}
}}
ORDER BY ?concept
LIMIT {page_size}
OFFSET {offset}
""")

    def orphan_collections_query(self, page_size: int = 100, offset: int = 0) -> str | None:
        """孤立集合查询：没有任何成员能通往方案的集合。

        Returns:
            查询文本；没有关系能力快照或没有任何可用分支时返回 None。
        """
        rel = self._relationships
        if rel is None:
            return None

        branches = []
        if rel.has_in_scheme:
            branches.append("{ ?concept skos:inScheme ?scheme . }")
        if rel.has_top_concept_of:
            branches.append("{ ?concept skos:topConceptOf ?scheme . }")
        if rel.has_has_top_concept:
            branches.append("{ ?scheme skos:hasTopConcept ?concept . }")

        ascent = None
        if rel.has_broader_transitive:
            ascent = "skos:broaderTransitive"
        elif rel.has_broader:
            ascent = "skos:broader+"
        if ascent is not None:
            if rel.has_top_concept_of:
                branches.append(f"{{ ?concept {ascent} ?top . ?top skos:topConceptOf ?scheme . }}")
            if rel.has_has_top_concept:
                branches.append(f"{{ ?concept {ascent} ?top . ?scheme skos:hasTopConcept ?top . }}")

        if not branches:
            return None

        union = "\n    UNION\n    ".join(branches)
        return with_prefixes(f"""
SELECT DISTINCT ?collection
WHERE {{
  ?collection a skos:Collection .
  FILTER NOT EXISTS {{
    ?collection skos:member ?concept .
    {union}
  }}
}}
ORDER BY ?collection
LIMIT {page_size}
OFFSET {offset}
""")

    def find_scheme_query(
        self,
        concept_uri: str,
        prefer: MembershipStrategy | None = None,
    ) -> str:
        """查找概念所属方案的查询。"""
        concept = iri(concept_uri)
        strategy = self.strategy_for(None, prefer)
        membership = scheme_membership_fragment(
            concept,
            strategy,
            top_var="?ancestor",
            include_in_scheme=self._include_in_scheme(),
        )
        return with_prefixes(f"""
SELECT DISTINCT ?scheme
WHERE {{
  {{
    {membership}
  }}
  ?scheme a skos:ConceptScheme .
}}
LIMIT 10
""")
