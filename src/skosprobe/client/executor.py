"""SPARQL 查询执行器。

每次调用都是一次无状态的 HTTP 请求/响应：表单编码的 POST、
认证头、单次尝试超时、外部取消信号、错误分类与指数退避重试。
"""

import asyncio
import time
from collections.abc import Awaitable
from typing import Literal, Self

import httpx

from skosprobe.client.auth import build_auth_headers
from skosprobe.client.errors import classify_exception, error_from_status, is_retryable
from skosprobe.client.parsing import parse_results
from skosprobe.client.retry import RetryPolicy, Sleep
from skosprobe.config import ExecutorConfig
from skosprobe.constants import (
    FORM_MEDIA_TYPE,
    RDF_ACCEPT_HEADERS,
    SPARQL_JSON_MEDIA_TYPE,
    SPARQL_XML_MEDIA_TYPE,
)
from skosprobe.exceptions import QueryCancelledError, SparqlError
from skosprobe.logger import logger
from skosprobe.models.endpoint import EndpointDescriptor
from skosprobe.models.results import ConnectionTestResult, QueryOutcome, QueryResult
from skosprobe.utils.sparql import iri

type RdfFormat = Literal["turtle", "jsonld", "ntriples", "rdfxml"]

CONNECTION_TEST_QUERY = "SELECT * WHERE { ?s ?p ?o } LIMIT 1"


class SparqlExecutor:
    """SPARQL 查询执行器。

    可作为异步上下文管理器使用；未传入 client 时自行创建并在关闭时释放。

    Attributes:
        config: 默认执行策略。

    Example:
        ```python
        async with SparqlExecutor() as executor:
            result = await executor.execute(endpoint, "ASK { ?s ?p ?o }")
            outcome = await executor.try_execute(endpoint, query, retries=0)
        ```
    """

    def __init__(
        self,
        config: ExecutorConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """初始化执行器。

        Args:
            config: 执行配置，默认使用 ExecutorConfig()。
            client: 复用的 httpx 客户端。
            sleep: 退避休眠函数，测试时可注入。
        """
        self.config = config or ExecutorConfig()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            follow_redirects=True,
            timeout=self.config.timeout_ms / 1000,
        )
        self._sleep = sleep

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """关闭自行创建的 HTTP 客户端。"""
        if self._owns_client:
            await self._client.aclose()

    def _policy(self, retries: int | None, retry_delay_ms: int | None) -> RetryPolicy:
        return RetryPolicy(
            retries=self.config.retries if retries is None else retries,
            base_delay_ms=self.config.retry_delay_ms if retry_delay_ms is None else retry_delay_ms,
            classify=classify_exception,
            should_retry=is_retryable,
            sleep=self._sleep,
        )

    async def _attempt[T](
        self,
        work: Awaitable[T],
        timeout_ms: int,
        cancel_event: asyncio.Event | None,
    ) -> T:
        """在单次尝试超时与外部取消信号之一触发前执行请求。"""
        async with asyncio.timeout(timeout_ms / 1000):
            if cancel_event is None:
                return await work

            task = asyncio.ensure_future(work)
            waiter = asyncio.ensure_future(cancel_event.wait())
            try:
                await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                for pending in (task, waiter):
                    if not pending.done():
                        pending.cancel()
            if task.done() and not task.cancelled():
                return task.result()
            raise QueryCancelledError()

    async def _post(
        self,
        endpoint: EndpointDescriptor,
        query: str,
        accept: str,
        timeout_ms: int,
    ) -> httpx.Response:
        """发送表单编码的 POST，httpx 超时与单次尝试超时一致。"""
        headers = {
            "Accept": accept,
            "Content-Type": FORM_MEDIA_TYPE,
            **build_auth_headers(endpoint.auth),
        }
        response = await self._client.post(
            endpoint.url,
            data={"query": query},
            headers=headers,
            timeout=timeout_ms / 1000,
        )
        if not response.is_success:
            raise SparqlError(error_from_status(response.status_code, response.reason_phrase))
        return response

    async def execute(
        self,
        endpoint: EndpointDescriptor,
        query: str,
        *,
        timeout_ms: int | None = None,
        retries: int | None = None,
        retry_delay_ms: int | None = None,
        cancel_event: asyncio.Event | None = None,
        accept_xml: bool = False,
    ) -> QueryResult:
        """执行 SPARQL 查询。

        Args:
            endpoint: 目标端点。
            query: SPARQL 查询文本。
            timeout_ms: 单次尝试超时（毫秒）。
            retries: 重试次数。
            retry_delay_ms: 退避基础延迟（毫秒）。
            cancel_event: 外部取消信号。
            accept_xml: 是否同时接受 SPARQL XML 结果。

        Returns:
            查询结果。

        Raises:
            SparqlError: 请求失败且不可重试或重试耗尽时抛出。
            QueryCancelledError: 被外部取消时抛出。
        """
        accept = SPARQL_JSON_MEDIA_TYPE
        if accept_xml:
            accept = f"{SPARQL_JSON_MEDIA_TYPE}, {SPARQL_XML_MEDIA_TYPE};q=0.9"
        timeout = self.config.timeout_ms if timeout_ms is None else timeout_ms

        async def once(attempt: int) -> QueryResult:
            logger.debug(f"SPARQL attempt {attempt} -> {endpoint.url}")
            request = self._post(endpoint, query, accept, timeout)
            response = await self._attempt(request, timeout, cancel_event)
            result = parse_results(
                response.content,
                response.headers.get("content-type", ""),
                accept_xml=accept_xml,
            )
            logger.debug(f"Query successful: {len(result.rows)} results")
            return result

        return await self._policy(retries, retry_delay_ms).run(once, cancel_event=cancel_event)

    async def try_execute(
        self,
        endpoint: EndpointDescriptor,
        query: str,
        **options,
    ) -> QueryOutcome:
        """执行查询并以值的形式返回结果或错误。

        取消不属于查询失败，QueryCancelledError 仍会抛出。

        Args:
            endpoint: 目标端点。
            query: SPARQL 查询文本。
            **options: 传递给 execute 的执行选项。

        Returns:
            包含结果或 AppError 的 QueryOutcome。
        """
        try:
            result = await self.execute(endpoint, query, **options)
        except SparqlError as e:
            logger.error(f"Query failed: {e}")
            return QueryOutcome(error=e.error)
        return QueryOutcome(result=result)

    async def fetch_raw_rdf(
        self,
        endpoint: EndpointDescriptor,
        resource_uri: str,
        rdf_format: RdfFormat = "turtle",
        *,
        timeout_ms: int | None = None,
        retries: int | None = None,
        retry_delay_ms: int | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> str:
        """以指定 RDF 序列化获取资源的全部出边三元组。

        Args:
            endpoint: 目标端点。
            resource_uri: 资源 URI。
            rdf_format: turtle、jsonld、ntriples 或 rdfxml。

        Returns:
            响应体文本。

        Raises:
            SparqlError: 请求失败且不可重试或重试耗尽时抛出。
            QueryCancelledError: 被外部取消时抛出。
        """
        subject = iri(resource_uri)
        query = f"CONSTRUCT {{ {subject} ?p ?o }} WHERE {{ {subject} ?p ?o }}"
        accept = RDF_ACCEPT_HEADERS[rdf_format]
        timeout = self.config.timeout_ms if timeout_ms is None else timeout_ms

        async def once(attempt: int) -> str:
            logger.debug(f"Raw RDF attempt {attempt} ({rdf_format}) -> {endpoint.url}")
            request = self._post(endpoint, query, accept, timeout)
            response = await self._attempt(request, timeout, cancel_event)
            return response.text

        return await self._policy(retries, retry_delay_ms).run(once, cancel_event=cancel_event)

    async def test_connection(self, endpoint: EndpointDescriptor) -> ConnectionTestResult:
        """测试端点连通性。

        使用较短超时且不重试。

        Args:
            endpoint: 目标端点。

        Returns:
            连接测试结果，包含耗时。
        """
        start = time.perf_counter()
        try:
            await self.execute(
                endpoint,
                CONNECTION_TEST_QUERY,
                timeout_ms=self.config.test_timeout_ms,
                retries=0,
            )
        except SparqlError as e:
            logger.warning(f"Connection test failed for {endpoint.url}: {e}")
            return ConnectionTestResult(
                success=False,
                error=e.error,
                response_time_ms=int((time.perf_counter() - start) * 1000),
            )
        return ConnectionTestResult(
            success=True,
            response_time_ms=int((time.perf_counter() - start) * 1000),
        )
