"""测试配置和共享 fixtures。"""

from collections.abc import Callable
from urllib.parse import parse_qs

import httpx
import orjson
import pytest

from skosprobe.client.executor import SparqlExecutor
from skosprobe.config import ExecutorConfig, ProbeConfig
from skosprobe.constants import SPARQL_JSON_MEDIA_TYPE, SPARQL_XML_MEDIA_TYPE
from skosprobe.core.engine import EndpointProber
from skosprobe.models.endpoint import EndpointDescriptor

ENDPOINT_URL = "https://vocabs.example.org/sparql"

type Responder = Callable[[httpx.Request], httpx.Response]


def _term(value: str | int | bool) -> dict[str, str]:
    if isinstance(value, bool):
        return {"type": "literal", "value": "true" if value else "false"}
    if isinstance(value, int):
        return {
            "type": "typed-literal",
            "value": str(value),
            "datatype": "http://www.w3.org/2001/XMLSchema#integer",
        }
    if value.startswith(("http://", "https://")):
        return {"type": "uri", "value": value}
    return {"type": "literal", "value": value}


def select_body(variables: list[str], rows: list[dict]) -> bytes:
    """构建 SPARQL JSON SELECT 响应体。"""
    bindings = [{name: _term(value) for name, value in row.items()} for row in rows]
    return orjson.dumps({"head": {"vars": variables}, "results": {"bindings": bindings}})


class FakeEndpoint:
    """按查询文本路由的脚本化 SPARQL 端点。

    每条路由以查询中的一段标记文本匹配，按注册顺序取第一个命中者；
    同一路由注册多个响应时依次返回，最后一个响应重复使用。
    未命中任何路由的查询返回 500。
    """

    def __init__(self) -> None:
        self.routes: list[tuple[str, list[Responder]]] = []
        self.requests: list[httpx.Request] = []
        self.queries: list[str] = []

    def on(self, marker: str, *responders: Responder) -> "FakeEndpoint":
        self.routes.append((marker, list(responders)))
        return self

    @staticmethod
    def select_responder(variables: list[str], rows: list[dict]) -> Responder:
        body = select_body(variables, rows)
        return lambda request: httpx.Response(
            200, content=body, headers={"content-type": SPARQL_JSON_MEDIA_TYPE}
        )

    @staticmethod
    def status_responder(code: int) -> Responder:
        return lambda request: httpx.Response(code)

    def select(self, marker: str, variables: list[str], rows: list[dict]) -> "FakeEndpoint":
        return self.on(marker, self.select_responder(variables, rows))

    def ask(self, marker: str, value: bool) -> "FakeEndpoint":
        body = orjson.dumps({"head": {}, "boolean": value})
        return self.on(
            marker,
            lambda request: httpx.Response(
                200, content=body, headers={"content-type": SPARQL_JSON_MEDIA_TYPE}
            ),
        )

    def xml(self, marker: str, body: str) -> "FakeEndpoint":
        return self.on(
            marker,
            lambda request: httpx.Response(
                200, content=body.encode(), headers={"content-type": SPARQL_XML_MEDIA_TYPE}
            ),
        )

    def status(self, marker: str, code: int) -> "FakeEndpoint":
        return self.on(marker, self.status_responder(code))

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        query = parse_qs(request.content.decode()).get("query", [""])[0]
        self.queries.append(query)
        for marker, responders in self.routes:
            if marker in query:
                responder = responders.pop(0) if len(responders) > 1 else responders[0]
                return responder(request)
        return httpx.Response(500)

    def queries_matching(self, marker: str) -> list[str]:
        return [q for q in self.queries if marker in q]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))


class RecordedSleep:
    """记录退避时长而不真正休眠。"""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def fake_endpoint():
    """脚本化 SPARQL 端点。"""
    return FakeEndpoint()


@pytest.fixture
def endpoint():
    """测试端点描述。"""
    return EndpointDescriptor(url=ENDPOINT_URL, name="Example vocabularies")


@pytest.fixture
def sleeps():
    """记录退避时长的休眠函数。"""
    return RecordedSleep()


@pytest.fixture
def executor(fake_endpoint, sleeps):
    """连接到脚本化端点的执行器。"""
    return SparqlExecutor(ExecutorConfig(), client=fake_endpoint.client(), sleep=sleeps)


@pytest.fixture
def prober(executor):
    """不重试的探测器，每个失败探测只发出一次请求。"""
    return EndpointProber(executor, ProbeConfig(probe_retries=0))
