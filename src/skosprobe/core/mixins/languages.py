"""语言检测 Mixin。

两种扩展策略：
- 已知 SKOS 命名图时，按批（VALUES ?g）依次聚合，单批失败只丢弃该批；
- 否则发出一条不分图的聚合查询，可选用 GRAPH ?g 包裹以避免跨图重复计数。
两者结果为空时（通常意味着上游超时而非真的没有语言），
退回到有界抽样：只统计前 N 个概念的 prefLabel。
"""

from collections import Counter

from skosprobe.constants import is_valid_language_code
from skosprobe.core.mixins.query import QueryMixin
from skosprobe.exceptions import SparqlError
from skosprobe.logger import logger
from skosprobe.models.analysis import LanguageCount
from skosprobe.models.endpoint import EndpointDescriptor
from skosprobe.models.results import QueryResult
from skosprobe.utils.sparql import values_clause

UNGRAPHED_LABEL_PATTERN = """?concept a skos:Concept .
    {
      ?concept skos:prefLabel|skos:altLabel|skos:hiddenLabel|skos:definition|skos:scopeNote ?label .
    } UNION {
      ?concept skosxl:prefLabel/skosxl:literalForm ?label .
    } UNION {
      ?concept skosxl:altLabel/skosxl:literalForm ?label .
    }
    BIND(LANG(?label) AS ?lang)
    FILTER(?lang != "")"""


def batched_languages_query(graph_uris: list[str]) -> str:
    """一批命名图内的语言统计查询。"""
    return f"""
SELECT ?lang (COUNT(*) AS ?count)
WHERE {{
  {values_clause("?g", graph_uris)}
  GRAPH ?g {{
    {{ ?concept skos:prefLabel ?label }}
    UNION
    {{ ?concept skosxl:prefLabel/skosxl:literalForm ?label }}
    FILTER(LANG(?label) != "")
    BIND(LANG(?label) AS ?lang)
  }}
}}
GROUP BY ?lang
"""


def ungraphed_languages_query(scope_graphs: bool = False) -> str:
    """不分图的语言统计查询。"""
    pattern = UNGRAPHED_LABEL_PATTERN
    if scope_graphs:
        pattern = f"GRAPH ?g {{\n    {pattern}\n  }}"
    return f"""
SELECT ?lang (COUNT(?label) AS ?count)
WHERE {{
  {pattern}
}}
GROUP BY ?lang
ORDER BY DESC(?count)
"""


def sampled_languages_query(sample_size: int) -> str:
    """有界抽样的语言统计查询。"""
    return f"""
SELECT ?lang (COUNT(*) AS ?count)
WHERE {{
  {{
    SELECT ?concept WHERE {{ ?concept a skos:Concept }} LIMIT {sample_size}
  }}
  ?concept skos:prefLabel ?label .
  BIND(LANG(?label) AS ?lang)
  FILTER(?lang != "")
}}
GROUP BY ?lang
ORDER BY DESC(?count)
"""


def _counts_from(result: QueryResult) -> Counter[str]:
    counts: Counter[str] = Counter()
    for row in result.rows:
        lang, count = row.get("lang"), row.get("count")
        if lang is None or count is None:
            continue
        try:
            counts[lang.value] += int(count.value)
        except ValueError:
            logger.debug(f"Skipping non-integer language count {count.value!r}")
    return counts


def normalize_languages(counts: Counter[str], limit: int) -> list[LanguageCount]:
    """过滤非法语言代码，按数量降序排序并截断。

    Args:
        counts: 语言代码到数量的计数。
        limit: 保留数量上限。

    Returns:
        规范化后的语言统计。
    """
    valid = [(lang, n) for lang, n in counts.items() if is_valid_language_code(lang)]
    valid.sort(key=lambda item: (-item[1], item[0]))
    return [LanguageCount(lang=lang, count=n) for lang, n in valid[:limit]]


def generate_language_priorities(languages: list[LanguageCount]) -> list[str]:
    """生成语言优先级。

    保持数量顺序，若 en 存在但不在首位则移到首位。

    Args:
        languages: 按数量降序的语言统计。

    Returns:
        语言代码列表，是输入语言代码的一个排列。
    """
    langs = [item.lang for item in languages]
    if "en" in langs and langs.index("en") > 0:
        langs.remove("en")
        langs.insert(0, "en")
    return langs


class LanguageMixin(QueryMixin):
    """语言检测 Mixin。"""

    async def detect_languages(
        self,
        endpoint: EndpointDescriptor,
        *,
        graph_uris: list[str] | None = None,
        batch_size: int | None = None,
        scope_graphs: bool = False,
    ) -> list[LanguageCount]:
        """检测端点标签使用的语言。

        Args:
            endpoint: 目标端点。
            graph_uris: 已知的 SKOS 命名图，非空时使用分批策略。
            batch_size: 每批的图数量，默认取配置。
            scope_graphs: 不分图查询时是否用 GRAPH ?g 包裹。

        Returns:
            规范化后的语言统计，全部失败时返回空列表。
        """
        if graph_uris:
            counts = await self.detect_languages_batched(
                endpoint,
                graph_uris,
                batch_size or self.config.language_batch_size,
            )
        else:
            counts = await self.detect_languages_ungraphed(endpoint, scope_graphs=scope_graphs)

        if not counts and self.config.language_sampling:
            logger.info("Language detection returned nothing, retrying with a bounded sample")
            counts = await self.detect_languages_sampled(endpoint, self.config.language_sample_size)

        return normalize_languages(counts, self.config.max_languages)

    async def detect_languages_batched(
        self,
        endpoint: EndpointDescriptor,
        graph_uris: list[str],
        batch_size: int,
    ) -> Counter[str]:
        """按批依次统计命名图内的语言。

        批次严格顺序执行；单批失败只贡献空结果。
        """
        totals: Counter[str] = Counter()
        batches = [graph_uris[i : i + batch_size] for i in range(0, len(graph_uris), batch_size)]
        for index, batch in enumerate(batches, start=1):
            try:
                result = await self._query(endpoint, batched_languages_query(batch))
            except SparqlError as e:
                logger.warning(f"Language batch {index}/{len(batches)} failed: {e}")
                continue
            totals.update(_counts_from(result))
        return totals

    async def detect_languages_ungraphed(
        self,
        endpoint: EndpointDescriptor,
        *,
        scope_graphs: bool = False,
    ) -> Counter[str]:
        """不分图统计语言，失败时返回空计数。"""
        try:
            result = await self._query(endpoint, ungraphed_languages_query(scope_graphs))
        except SparqlError as e:
            logger.warning(f"Language detection failed: {e}")
            return Counter()
        return _counts_from(result)

    async def detect_languages_sampled(self, endpoint: EndpointDescriptor, sample_size: int) -> Counter[str]:
        """在前 sample_size 个概念上统计 prefLabel 语言，失败时返回空计数。"""
        try:
            result = await self._query(endpoint, sampled_languages_query(sample_size))
        except SparqlError as e:
            logger.warning(f"Sampled language detection failed: {e}")
            return Counter()
        return _counts_from(result)
