"""端点能力探测器。"""

from skosprobe.core.mixins import (
    ContentMixin,
    CountMixin,
    GraphMixin,
    LabelMixin,
    LanguageMixin,
    RelationshipMixin,
    SchemeMixin,
)


class EndpointProber(
    ContentMixin,
    GraphMixin,
    SchemeMixin,
    CountMixin,
    RelationshipMixin,
    LabelMixin,
    LanguageMixin,
):
    """端点能力探测器。

    通过多继承聚合所有探测能力，每个探测都是独立的 ``async (endpoint) -> T``。
    探测失败时返回文档约定的中性值（None、空列表），不会抛出 SparqlError。

    MRO 顺序对应分析流水线中的阶段：
    1. ContentMixin - JSON 结果支持、SKOS 内容
    2. GraphMixin - 命名图支持、SKOS 命名图枚举
    3. SchemeMixin - 概念方案
    4. CountMixin - 概念、集合、有序集合计数
    5. RelationshipMixin - 关系谓词
    6. LabelMixin - 标签谓词
    7. LanguageMixin - 语言检测

    Example:
        ```python
        async with SparqlExecutor() as executor:
            prober = EndpointProber(executor)
            if await prober.check_skos_content(endpoint):
                schemes = await prober.detect_schemes(endpoint)
        ```
    """
