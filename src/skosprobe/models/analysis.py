"""端点能力分析模型定义。

本模块定义能力探测产出的数据模型：
- Tristate: 显式三值逻辑（真/假/未知）
- RelationshipCapabilities: 七个 SKOS 关系谓词是否存在
- LabelPredicateCapabilities: 各资源类型可用的标签谓词
- AnalysisResult: 端点能力快照，可序列化为 JSON 并原样回读
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Literal, Self

import orjson
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

type ResourceKind = Literal["concept", "scheme", "collection"]


class Tristate(Enum):
    """三值逻辑。

    UNKNOWN 表示探测查询本身失败，不能等同于 FALSE。
    """

    TRUE = "true"
    FALSE = "false"
    UNKNOWN = "unknown"

    @classmethod
    def of(cls, value: bool | None) -> "Tristate":
        """将可空布尔值转换为三值。

        Args:
            value: True、False 或 None。

        Returns:
            对应的 Tristate 成员。
        """
        if value is None:
            return cls.UNKNOWN
        return cls.TRUE if value else cls.FALSE


class _SnapshotModel(BaseModel):
    """快照模型基类：不可变，JSON 字段使用 camelCase。"""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class RelationshipCapabilities(_SnapshotModel):
    """SKOS 关系谓词存在性。

    每个字段表示数据集中至少存在一条使用该谓词的三元组。
    """

    has_in_scheme: bool = False
    has_top_concept_of: bool = False
    has_has_top_concept: bool = False
    has_broader: bool = False
    has_narrower: bool = False
    has_broader_transitive: bool = False
    has_narrower_transitive: bool = False

    def count_present(self) -> int:
        """存在的谓词数量。"""
        return sum(1 for value in self.model_dump().values() if value)


class LabelPredicateCapabilities(_SnapshotModel):
    """某类资源可用的标签谓词。"""

    pref_label: bool = False
    xl_pref_label: bool = False
    dct_title: bool = False
    dc_title: bool = False
    rdfs_label: bool = False

    def any_present(self) -> bool:
        """是否至少存在一种标签谓词。"""
        return any(self.model_dump().values())


class LabelPredicates(_SnapshotModel):
    """按资源类型划分的标签谓词能力。"""

    concept: LabelPredicateCapabilities | None = None
    scheme: LabelPredicateCapabilities | None = None
    collection: LabelPredicateCapabilities | None = None

    def for_kind(self, kind: ResourceKind) -> LabelPredicateCapabilities | None:
        """获取某类资源的标签谓词能力。"""
        return getattr(self, kind)


class LanguageCount(_SnapshotModel):
    """语言标签及其出现次数。"""

    lang: str
    count: int


class AnalysisResult(_SnapshotModel):
    """端点能力快照。

    由一次完整分析产生，之后作为不可变数据交给调用方。
    同一结构既可由实时探测生成，也可从持久化的 JSON 快照读入。

    Attributes:
        has_skos_content: 是否存在 SKOS 内容，None 表示探测失败。
        supports_json_results: 是否返回 SPARQL JSON 结果。
        supports_named_graphs: 是否支持 GRAPH 查询，None 表示未知。
        skos_graph_count: 含 SKOS 数据的命名图数量。
        skos_graph_uris: 命名图 URI 列表，超过上限时为 None。
        scheme_uris: 已保存的概念方案 URI。
        scheme_count: 概念方案数量，None 表示探测失败。
        schemes_limited: 是否存在未保存的概念方案。
        total_concepts: 概念数量。
        total_collections: 集合数量。
        total_ordered_collections: 有序集合数量。
        relationships: 关系谓词能力。
        label_predicates: 标签谓词能力。
        languages: 语言统计，按数量降序。
        analyzed_at: 分析时间。
    """

    has_skos_content: bool | None = True
    supports_json_results: bool | None = None
    supports_named_graphs: bool | None = None
    skos_graph_count: int | None = None
    skos_graph_uris: list[str] | None = None
    scheme_uris: list[str] = Field(default_factory=list)
    scheme_count: int | None = None
    schemes_limited: bool = False
    total_concepts: int | None = None
    total_collections: int | None = None
    total_ordered_collections: int | None = None
    relationships: RelationshipCapabilities | None = None
    label_predicates: LabelPredicates = Field(default_factory=LabelPredicates)
    languages: list[LanguageCount] = Field(default_factory=list)
    analyzed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def check_invariants(self) -> Self:
        """校验快照不变式。

        Raises:
            ValueError: 图数量与 URI 列表不一致，或方案数量与 URI 列表不一致时抛出。
        """
        if self.skos_graph_uris is not None and len(self.skos_graph_uris) != self.skos_graph_count:
            raise ValueError("skosGraphUris must have exactly skosGraphCount entries")

        if self.scheme_count is None:
            if self.scheme_uris or self.schemes_limited:
                raise ValueError("schemeUris and schemesLimited require a known schemeCount")
            return self

        stored = len(self.scheme_uris)
        if stored > self.scheme_count:
            raise ValueError("schemeUris cannot hold more entries than schemeCount")
        if (stored == self.scheme_count) == self.schemes_limited:
            raise ValueError("schemesLimited must be true exactly when schemeUris is truncated")
        return self

    @property
    def named_graphs(self) -> Tristate:
        """命名图支持的三值表示。"""
        return Tristate.of(self.supports_named_graphs)

    def to_json(self) -> bytes:
        """序列化为 camelCase JSON 快照。"""
        return orjson.dumps(
            self.model_dump(mode="json", by_alias=True),
            option=orjson.OPT_INDENT_2,
        )

    @classmethod
    def from_json(cls, data: str | bytes) -> "AnalysisResult":
        """从 JSON 快照读入。

        Args:
            data: JSON 文本。

        Returns:
            校验通过的 AnalysisResult。
        """
        return cls.model_validate(orjson.loads(data))
