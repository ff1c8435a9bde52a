"""查询结果与错误模型定义。

本模块定义 SPARQL 查询执行的结果数据模型：
- Term / Row: 单个 RDF 项与一行绑定
- QueryResult: SELECT 绑定或 ASK 布尔值
- AppError: 已分类的错误值，供调用方渲染
- QueryOutcome: 在边界处以值的形式返回结果或错误
"""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Literal, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ErrorCode(StrEnum):
    """错误类型枚举。"""

    QUERY_ERROR = "QUERY_ERROR"
    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_FAILED = "AUTH_FAILED"
    NOT_FOUND = "NOT_FOUND"
    TIMEOUT = "TIMEOUT"
    SERVER_ERROR = "SERVER_ERROR"
    CORS_BLOCKED = "CORS_BLOCKED"
    NETWORK_ERROR = "NETWORK_ERROR"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    UNKNOWN = "UNKNOWN"

    @property
    def is_auth_error(self) -> bool:
        """是否为认证类错误（重试无意义）。"""
        return self in (ErrorCode.AUTH_REQUIRED, ErrorCode.AUTH_FAILED)


class AppError(BaseModel):
    """已分类的应用错误。

    Attributes:
        code: 错误类型。
        message: 面向用户的错误描述。
        details: 可选的技术细节。
        timestamp: 错误产生时间（UTC）。
    """

    model_config = ConfigDict(frozen=True)

    code: ErrorCode
    message: str
    details: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class Term(BaseModel):
    """RDF 项。

    Attributes:
        kind: 项类型，uri、literal 或 bnode。
        value: 词法值。
        lang: 语言标签（仅字面量）。
        datatype: 数据类型 IRI（仅字面量）。
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["uri", "literal", "bnode"]
    value: str
    lang: str | None = None
    datatype: str | None = None


type Row = dict[str, Term]


class QueryResult(BaseModel):
    """SPARQL 查询结果。

    bindings 与 boolean 二者恰好其一存在：SELECT 返回绑定行，ASK 返回布尔值。

    Attributes:
        variables: 结果变量名列表。
        bindings: SELECT 结果行。
        boolean: ASK 结果。
        source_format: 响应的序列化格式。
    """

    variables: list[str] = Field(default_factory=list)
    bindings: list[dict[str, Term]] | None = None
    boolean: bool | None = None
    source_format: Literal["json", "xml"] = "json"

    @model_validator(mode="after")
    def check_shape(self) -> Self:
        """确保 bindings 与 boolean 恰好其一存在。"""
        if (self.bindings is None) == (self.boolean is None):
            raise ValueError("QueryResult must carry exactly one of bindings or boolean")
        return self

    @property
    def is_ask(self) -> bool:
        """是否为 ASK 结果。"""
        return self.boolean is not None

    @property
    def rows(self) -> list[dict[str, Term]]:
        """SELECT 结果行，ASK 结果返回空列表。"""
        return self.bindings or []

    def values(self, variable: str) -> list[str]:
        """提取某个变量在所有行中的值（跳过未绑定行）。

        Args:
            variable: 变量名（不含 ?）。

        Returns:
            变量值列表，保持结果顺序。
        """
        return [row[variable].value for row in self.rows if variable in row]


class QueryOutcome(BaseModel):
    """边界处的查询结果：成功结果或错误值。"""

    result: QueryResult | None = None
    error: AppError | None = None

    @property
    def ok(self) -> bool:
        """查询是否成功。"""
        return self.error is None


class ConnectionTestResult(BaseModel):
    """连接测试结果。

    Attributes:
        success: 是否连接成功。
        error: 失败时的错误值。
        response_time_ms: 请求耗时（毫秒）。
    """

    success: bool
    error: AppError | None = None
    response_time_ms: int | None = None
