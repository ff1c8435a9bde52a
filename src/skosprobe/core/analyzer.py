"""能力分析流水线。

将探测组合为一条严格有序的线性流水线：每个阶段接收上一阶段产出的
AnalysisDraft 并返回新的草稿，最后生成不可变的 AnalysisResult。
唯一的致命条件是 SKOS 内容探测明确返回 False。
"""

import time
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field

from skosprobe.constants import StepCallback
from skosprobe.core.engine import EndpointProber
from skosprobe.core.mixins.graphs import SkosGraphs
from skosprobe.core.mixins.schemes import SchemeSummary
from skosprobe.logger import logger
from skosprobe.models.analysis import (
    AnalysisResult,
    LabelPredicates,
    LanguageCount,
    RelationshipCapabilities,
)
from skosprobe.models.endpoint import EndpointDescriptor

ANALYSIS_STEPS = (
    "JSON results",
    "SKOS content",
    "Named graphs",
    "SKOS graphs",
    "Concept schemes",
    "Concepts",
    "Collections",
    "Ordered collections",
    "Relationships",
    "Label predicates",
    "Languages",
)

SKIPPED = "-"
FAILED = "error"


class AnalysisDraft(BaseModel):
    """分析过程中逐阶段累积的部分结果。"""

    model_config = ConfigDict(frozen=True)

    has_skos_content: bool | None = None
    supports_json_results: bool | None = None
    supports_named_graphs: bool | None = None
    skos_graphs: SkosGraphs | None = None
    schemes: SchemeSummary | None = None
    total_concepts: int | None = None
    total_collections: int | None = None
    total_ordered_collections: int | None = None
    relationships: RelationshipCapabilities | None = None
    label_predicates: LabelPredicates = Field(default_factory=LabelPredicates)
    languages: list[LanguageCount] = Field(default_factory=list)

    def finalize(self) -> AnalysisResult:
        """生成不可变的分析结果。"""
        graphs = self.skos_graphs
        schemes = self.schemes
        return AnalysisResult(
            has_skos_content=self.has_skos_content,
            supports_json_results=self.supports_json_results,
            supports_named_graphs=self.supports_named_graphs,
            skos_graph_count=graphs.count if graphs else None,
            skos_graph_uris=graphs.uris if graphs else None,
            scheme_uris=schemes.uris if schemes else [],
            scheme_count=schemes.count if schemes else None,
            schemes_limited=schemes.limited if schemes else False,
            total_concepts=self.total_concepts,
            total_collections=self.total_collections,
            total_ordered_collections=self.total_ordered_collections,
            relationships=self.relationships,
            label_predicates=self.label_predicates,
            languages=self.languages,
        )


def _yes_no(value: bool | None) -> str:
    if value is None:
        return FAILED
    return "yes" if value else "no"


def _number(value: int | None) -> str:
    return FAILED if value is None else f"{value:,}"


class _StepReporter:
    """单次分析内的步骤计数与回调分发。"""

    def __init__(self, callback: StepCallback | None) -> None:
        self._callback = callback
        self._step = 0

    def report(self, name: str, duration_ms: float, formatted: str) -> None:
        self._step += 1
        logger.debug(f"[{self._step}/{len(ANALYSIS_STEPS)}] {name}: {formatted}")
        if self._callback is None:
            return
        try:
            self._callback(self._step, len(ANALYSIS_STEPS), name, duration_ms, formatted)
        except Exception as e:
            logger.warning(f"Step callback raised for '{name}': {e}")

    async def run[T](
        self,
        name: str,
        probe: Callable[[], Awaitable[T]],
        formatter: Callable[[T], str],
    ) -> T:
        start = time.perf_counter()
        value = await probe()
        self.report(name, (time.perf_counter() - start) * 1000, formatter(value))
        return value

    def skip(self, name: str) -> None:
        self.report(name, 0, SKIPPED)


class CapabilityAnalyzer:
    """端点能力分析器。

    不持有任何端点相关的缓存；每次 analyze 都产生新的 AnalysisResult。

    Attributes:
        prober: 端点能力探测器。

    Example:
        ```python
        analyzer = CapabilityAnalyzer(prober, on_step=print_step)
        analysis = await analyzer.analyze(endpoint)
        if analysis is None:
            print("No SKOS content")
        ```
    """

    def __init__(self, prober: EndpointProber, on_step: StepCallback | None = None) -> None:
        """初始化分析器。

        Args:
            prober: 端点能力探测器。
            on_step: 进度回调 ``(step, total, name, duration_ms, result)``，仅用于观察。
        """
        self.prober = prober
        self._on_step = on_step

    async def analyze(self, endpoint: EndpointDescriptor) -> AnalysisResult | None:
        """分析端点能力。

        Args:
            endpoint: 目标端点。

        Returns:
            能力快照；SKOS 内容探测明确返回 False 时返回 None。
        """
        logger.info(f"Analyzing {endpoint.url}")
        steps = _StepReporter(self._on_step)
        draft = AnalysisDraft()

        draft = await self._stage_json(endpoint, draft, steps)
        draft = await self._stage_skos_content(endpoint, draft, steps)
        if draft.has_skos_content is False:
            logger.info(f"No SKOS content found at {endpoint.url}")
            return None

        draft = await self._stage_named_graphs(endpoint, draft, steps)
        draft = await self._stage_skos_graphs(endpoint, draft, steps)
        draft = await self._stage_schemes(endpoint, draft, steps)
        draft = await self._stage_counts(endpoint, draft, steps)
        draft = await self._stage_relationships(endpoint, draft, steps)
        draft = await self._stage_label_predicates(endpoint, draft, steps)
        draft = await self._stage_languages(endpoint, draft, steps)

        result = draft.finalize()
        logger.info(
            f"Analysis complete: {result.scheme_count} schemes, "
            f"{result.total_concepts} concepts, {len(result.languages)} languages"
        )
        return result

    async def _stage_json(self, endpoint, draft: AnalysisDraft, steps: _StepReporter) -> AnalysisDraft:
        value = await steps.run(
            "JSON results", lambda: self.prober.detect_json_support(endpoint), _yes_no
        )
        return draft.model_copy(update={"supports_json_results": value})

    async def _stage_skos_content(self, endpoint, draft: AnalysisDraft, steps: _StepReporter) -> AnalysisDraft:
        value = await steps.run(
            "SKOS content", lambda: self.prober.check_skos_content(endpoint), _yes_no
        )
        return draft.model_copy(update={"has_skos_content": value})

    async def _stage_named_graphs(self, endpoint, draft: AnalysisDraft, steps: _StepReporter) -> AnalysisDraft:
        value = await steps.run(
            "Named graphs", lambda: self.prober.detect_named_graphs(endpoint), _yes_no
        )
        return draft.model_copy(update={"supports_named_graphs": value})

    async def _stage_skos_graphs(self, endpoint, draft: AnalysisDraft, steps: _StepReporter) -> AnalysisDraft:
        if draft.supports_named_graphs is not True:
            steps.skip("SKOS graphs")
            return draft
        graphs = await steps.run(
            "SKOS graphs",
            lambda: self.prober.detect_skos_graphs(endpoint),
            lambda r: FAILED if r is None else _number(r.count),
        )
        return draft.model_copy(update={"skos_graphs": graphs})

    async def _stage_schemes(self, endpoint, draft: AnalysisDraft, steps: _StepReporter) -> AnalysisDraft:
        schemes = await steps.run(
            "Concept schemes",
            lambda: self.prober.detect_schemes(endpoint),
            lambda r: FAILED if r is None else _number(r.count),
        )
        return draft.model_copy(update={"schemes": schemes})

    async def _stage_counts(self, endpoint, draft: AnalysisDraft, steps: _StepReporter) -> AnalysisDraft:
        concepts = await steps.run("Concepts", lambda: self.prober.count_concepts(endpoint), _number)
        collections = await steps.run(
            "Collections", lambda: self.prober.count_collections(endpoint), _number
        )
        ordered = await steps.run(
            "Ordered collections", lambda: self.prober.count_ordered_collections(endpoint), _number
        )
        return draft.model_copy(
            update={
                "total_concepts": concepts,
                "total_collections": collections,
                "total_ordered_collections": ordered,
            }
        )

    async def _stage_relationships(self, endpoint, draft: AnalysisDraft, steps: _StepReporter) -> AnalysisDraft:
        relationships = await steps.run(
            "Relationships",
            lambda: self.prober.detect_relationships(endpoint),
            lambda r: FAILED if r is None else f"{r.count_present()}/7",
        )
        return draft.model_copy(update={"relationships": relationships})

    async def _stage_label_predicates(self, endpoint, draft: AnalysisDraft, steps: _StepReporter) -> AnalysisDraft:
        def describe(predicates: LabelPredicates) -> str:
            kinds = [predicates.concept, predicates.scheme, predicates.collection]
            known = sum(1 for caps in kinds if caps is not None)
            return FAILED if known == 0 else f"{known}/3"

        predicates = await steps.run(
            "Label predicates",
            lambda: self.prober.detect_all_label_predicates(endpoint),
            describe,
        )
        return draft.model_copy(update={"label_predicates": predicates})

    async def _stage_languages(self, endpoint, draft: AnalysisDraft, steps: _StepReporter) -> AnalysisDraft:
        graph_uris = draft.skos_graphs.uris if draft.skos_graphs else None
        scope_graphs = (
            not graph_uris
            and draft.supports_named_graphs is True
            and self.prober.config.scope_languages_to_graphs
        )
        languages = await steps.run(
            "Languages",
            lambda: self.prober.detect_languages(
                endpoint,
                graph_uris=graph_uris,
                scope_graphs=scope_graphs,
            ),
            lambda r: str(len(r)),
        )
        return draft.model_copy(update={"languages": languages})
