"""端点描述模型定义。"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from skosprobe.constants import DEFAULT_API_KEY_HEADER


class NoAuth(BaseModel):
    """无认证。"""

    model_config = ConfigDict(frozen=True)

    type: Literal["none"] = "none"


class BasicAuth(BaseModel):
    """HTTP Basic 认证。"""

    model_config = ConfigDict(frozen=True)

    type: Literal["basic"] = "basic"
    username: str
    password: str


class BearerAuth(BaseModel):
    """Bearer Token 认证。"""

    model_config = ConfigDict(frozen=True)

    type: Literal["bearer"] = "bearer"
    token: str


class ApiKeyAuth(BaseModel):
    """API Key 认证。

    Attributes:
        api_key: 密钥值。
        header_name: 携带密钥的请求头名称，默认为 X-API-Key。
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["apikey"] = "apikey"
    api_key: str
    header_name: str = DEFAULT_API_KEY_HEADER


EndpointAuth = Annotated[
    NoAuth | BasicAuth | BearerAuth | ApiKeyAuth,
    Field(discriminator="type"),
]


class EndpointDescriptor(BaseModel):
    """SPARQL 端点描述。

    每次请求都只读取该描述，核心逻辑从不修改它。

    Attributes:
        url: 端点地址。
        auth: 认证方式，默认无认证。
        name: 可选的显示名称。

    Example:
        ```python
        endpoint = EndpointDescriptor(
            url="https://vocabs.example.org/sparql",
            auth=BasicAuth(username="reader", password="secret"),
        )
        ```
    """

    model_config = ConfigDict(frozen=True)

    url: str
    auth: EndpointAuth = Field(default_factory=NoAuth)
    name: str | None = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """验证端点地址。

        Args:
            v: 待验证的地址。

        Returns:
            去除首尾空白后的地址。

        Raises:
            ValueError: 地址为空或不是 http(s) 地址时抛出。
        """
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("url must be an http(s) URL")
        return v
