"""端点整理数据模型。"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from skosprobe.models.analysis import AnalysisResult


class CurationInput(BaseModel):
    """整理目录的输入配置（input/config.json）。

    Attributes:
        name: 端点名称。
        url: SPARQL 端点地址。
        description: 可选描述。
    """

    name: str
    url: str
    description: str | None = None


class CuratedEndpoint(BaseModel):
    """整理输出（output/endpoint.json）。"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    url: str
    description: str | None = None
    analysis: AnalysisResult
    suggested_language_priorities: list[str] = Field(default_factory=list)


class ValidationReport(BaseModel):
    """单个整理输出的校验结果。"""

    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class CurationSummary(BaseModel):
    """批量整理汇总。"""

    curated: list[str] = Field(default_factory=list)
    no_content: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)


class MergeSummary(BaseModel):
    """合并结果汇总。

    Attributes:
        written: 写入的端点名称，按名称排序。
        skipped: 跳过的目录及原因。
        has_errors: 是否存在校验失败或格式错误的输出。
    """

    written: list[str] = Field(default_factory=list)
    skipped: dict[str, list[str]] = Field(default_factory=dict)
    has_errors: bool = False
