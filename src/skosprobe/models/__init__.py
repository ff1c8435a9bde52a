"""数据模型模块。"""

from skosprobe.models.analysis import (
    AnalysisResult,
    LabelPredicateCapabilities,
    LabelPredicates,
    LanguageCount,
    RelationshipCapabilities,
    ResourceKind,
    Tristate,
)
from skosprobe.models.endpoint import (
    ApiKeyAuth,
    BasicAuth,
    BearerAuth,
    EndpointAuth,
    EndpointDescriptor,
    NoAuth,
)
from skosprobe.models.results import (
    AppError,
    ConnectionTestResult,
    ErrorCode,
    QueryOutcome,
    QueryResult,
    Row,
    Term,
)

__all__ = [
    "AnalysisResult",
    "ApiKeyAuth",
    "AppError",
    "BasicAuth",
    "BearerAuth",
    "ConnectionTestResult",
    "EndpointAuth",
    "EndpointDescriptor",
    "ErrorCode",
    "LabelPredicateCapabilities",
    "LabelPredicates",
    "LanguageCount",
    "NoAuth",
    "QueryOutcome",
    "QueryResult",
    "RelationshipCapabilities",
    "ResourceKind",
    "Row",
    "Term",
    "Tristate",
]
