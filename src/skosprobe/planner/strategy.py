"""成员关系策略选择。

直接谓词策略只在能力快照明确证明四个谓词都存在时使用；
任何缺失、未知或不完整的情况都选择属性路径回退策略。
对不支持的谓词生成查询会静默返回零结果，比慢但正确的查询更糟。
"""

from enum import StrEnum

from skosprobe.logger import logger
from skosprobe.models.analysis import AnalysisResult, Tristate
from skosprobe.utils.sparql import scheme_uri_variants


class MembershipStrategy(StrEnum):
    """方案成员关系片段策略。"""

    DIRECT = "direct"
    PATH = "path"


def direct_flags(analysis: AnalysisResult | None) -> dict[str, Tristate]:
    """直接谓词策略依赖的四个关系标志（三值）。"""
    rel = analysis.relationships if analysis else None
    return {
        "hasTopConceptOf": Tristate.of(rel.has_top_concept_of if rel else None),
        "hasHasTopConcept": Tristate.of(rel.has_has_top_concept if rel else None),
        "hasBroaderTransitive": Tristate.of(rel.has_broader_transitive if rel else None),
        "hasNarrowerTransitive": Tristate.of(rel.has_narrower_transitive if rel else None),
    }


def _scheme_is_known(analysis: AnalysisResult, scheme_uri: str) -> bool:
    if analysis.schemes_limited:
        return True
    known = set(analysis.scheme_uris)
    return any(variant in known for variant in scheme_uri_variants(scheme_uri))


def can_use_direct(analysis: AnalysisResult | None, scheme_uri: str | None = None) -> bool:
    """判断能力快照是否足以安全使用直接谓词策略。

    Args:
        analysis: 能力快照，可能缺失或不完整。
        scheme_uri: 目标概念方案。

    Returns:
        所有条件都被明确证明时返回 True。
    """
    if analysis is None:
        return False

    for flag in direct_flags(analysis).values():
        match flag:
            case Tristate.TRUE:
                continue
            case Tristate.FALSE | Tristate.UNKNOWN:
                return False

    if not analysis.scheme_count or not (analysis.scheme_uris or analysis.schemes_limited):
        return False
    if scheme_uri is not None and not _scheme_is_known(analysis, scheme_uri):
        return False
    return True


def choose_strategy(
    analysis: AnalysisResult | None,
    scheme_uri: str | None = None,
    prefer: MembershipStrategy | None = None,
) -> MembershipStrategy:
    """为一次调用选择成员关系策略。

    Args:
        analysis: 能力快照。
        scheme_uri: 目标概念方案。
        prefer: 调用方偏好；请求 DIRECT 但不安全时降级为 PATH。

    Returns:
        选定的策略。
    """
    if prefer is MembershipStrategy.PATH:
        return MembershipStrategy.PATH
    if can_use_direct(analysis, scheme_uri):
        return MembershipStrategy.DIRECT
    if prefer is MembershipStrategy.DIRECT:
        logger.debug(f"Direct strategy requested for {scheme_uri} but capabilities are insufficient")
    return MembershipStrategy.PATH
