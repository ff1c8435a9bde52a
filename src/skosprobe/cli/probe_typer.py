"""ProbeTyper - 将端点探测能力暴露为 CLI 命令。"""

import asyncio
import json
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import httpx
import orjson
import typer
from pydantic import ValidationError

from skosprobe import __version__
from skosprobe.client.executor import SparqlExecutor
from skosprobe.config import AppConfig
from skosprobe.constants import DEFAULT_API_KEY_HEADER, RDF_ACCEPT_HEADERS
from skosprobe.core.analyzer import CapabilityAnalyzer
from skosprobe.core.engine import EndpointProber
from skosprobe.curation import curate, curate_all, merge_endpoints
from skosprobe.exceptions import ConfigurationError, CurationError, SparqlError
from skosprobe.models.analysis import AnalysisResult
from skosprobe.models.endpoint import (
    ApiKeyAuth,
    BasicAuth,
    BearerAuth,
    EndpointAuth,
    EndpointDescriptor,
    NoAuth,
)
from skosprobe.models.results import QueryResult
from skosprobe.planner import MembershipStrategy, QueryPlanner

PLAN_KINDS = ("members", "top", "collections", "orphans", "orphan-collections")


def _run_async(coro: Any) -> Any:
    """在同步环境中运行异步协程。

    Args:
        coro: 异步协程对象。

    Returns:
        协程执行结果。
    """
    return asyncio.run(coro)


def _print_step(step: int, total: int, name: str, duration_ms: float, result: str) -> None:
    typer.echo(f"[{step}/{total}] {name}: {result} ({duration_ms:.0f} ms)", err=True)


def _result_to_json(result: QueryResult) -> str:
    if result.is_ask:
        payload: Any = {"boolean": result.boolean}
    else:
        payload = [{var: term.value for var, term in row.items()} for row in result.rows]
    return json.dumps(payload, ensure_ascii=False, indent=2)


def _fail(message: str) -> typer.Exit:
    typer.echo(message, err=True)
    return typer.Exit(code=1)


class ProbeTyper(typer.Typer):
    """skosprobe CLI 工具类。

    继承 typer.Typer，组合 SparqlExecutor、CapabilityAnalyzer 与 QueryPlanner。

    职责：
    - CLI 命令注册与解析
    - 全局选项处理（配置文件、日志级别、认证）
    - 为每条命令创建并释放执行器

    全局选项：
    - --config, -c: 配置文件路径
    - --log-level: 覆盖配置中的日志级别
    - --user/--password, --token, --api-key/--api-key-header: 端点认证

    Example:
        ```bash
        skosprobe test https://vocabs.example.org/sparql
        skosprobe analyze https://vocabs.example.org/sparql -o snapshot.json
        skosprobe plan snapshot.json http://example.org/scheme --kind members
        skosprobe --token secret query https://vocabs.example.org/sparql "ASK { ?s ?p ?o }"
        ```
    """

    def __init__(
        self,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
        **kwargs: Any,
    ) -> None:
        """初始化 ProbeTyper。

        Args:
            client_factory: 创建 httpx 客户端的工厂，默认由执行器自行创建。
            **kwargs: 传递给 typer.Typer 的参数。
        """
        super().__init__(**kwargs)
        self._client_factory = client_factory
        self._config: AppConfig | None = None
        self._auth: EndpointAuth = NoAuth()
        self._register_callback()
        self._register_commands()

    @property
    def config(self) -> AppConfig:
        """当前应用配置。

        Raises:
            RuntimeError: 如果 callback 尚未加载配置。
        """
        if self._config is None:
            raise RuntimeError("config not initialized, callback was not called")
        return self._config

    def _endpoint(self, url: str) -> EndpointDescriptor:
        try:
            return EndpointDescriptor(url=url, auth=self._auth)
        except ValidationError as e:
            raise typer.BadParameter(f"Invalid endpoint URL: {url}") from e

    @asynccontextmanager
    async def _executor(self) -> AsyncIterator[SparqlExecutor]:
        if self._client_factory is None:
            async with SparqlExecutor(self.config.executor) as executor:
                yield executor
            return
        async with self._client_factory() as client:
            yield SparqlExecutor(self.config.executor, client=client)

    def _register_callback(self) -> None:
        """注册全局回调（处理配置、日志与认证选项）。"""

        @self.callback()
        def main(
            config_path: Path | None = typer.Option(
                None,
                "--config",
                "-c",
                help="配置文件路径，默认为 ./skosprobe.yaml",
            ),
            log_level: str | None = typer.Option(None, "--log-level", help="日志级别"),
            user: str | None = typer.Option(None, "--user", help="Basic 认证用户名"),
            password: str = typer.Option("", "--password", help="Basic 认证密码"),
            token: str | None = typer.Option(None, "--token", help="Bearer Token"),
            api_key: str | None = typer.Option(None, "--api-key", help="API Key"),
            api_key_header: str = typer.Option(
                DEFAULT_API_KEY_HEADER,
                "--api-key-header",
                help="携带 API Key 的请求头",
            ),
        ) -> None:
            """SPARQL 端点能力探测与自适应查询规划。

            加载配置、配置日志并确定端点认证方式。
            """
            try:
                config = AppConfig.from_yaml(config_path)
                if log_level is not None:
                    config = AppConfig(
                        executor=config.executor,
                        probe=config.probe,
                        log_level=log_level,
                    )
            except ConfigurationError as e:
                raise _fail(str(e)) from e
            except ValidationError as e:
                raise typer.BadParameter(f"Invalid log level: {log_level}") from e
            self._config = config

            from skosprobe.logger import setup_logging

            setup_logging(config.log_level)

            if token:
                self._auth = BearerAuth(token=token)
            elif api_key:
                self._auth = ApiKeyAuth(api_key=api_key, header_name=api_key_header)
            elif user:
                self._auth = BasicAuth(username=user, password=password)
            else:
                self._auth = NoAuth()

    def _register_commands(self) -> None:
        """注册 CLI 命令。"""
        self._register_version_command()
        self._register_query_command()
        self._register_test_command()
        self._register_analyze_command()
        self._register_raw_command()
        self._register_plan_command()
        self._register_curation_commands()

    def _register_version_command(self) -> None:
        """注册 version 命令。"""

        @self.command()
        def version() -> None:
            """显示版本信息。"""
            typer.echo(f"skosprobe v{__version__}")

    def _register_query_command(self) -> None:
        """注册 query 命令。"""

        @self.command()
        def query(
            url: str = typer.Argument(..., help="SPARQL 端点地址"),
            text: str | None = typer.Argument(None, help="SPARQL 查询文本"),
            file: Path | None = typer.Option(None, "--file", "-f", help="从文件读取查询"),
            xml: bool = typer.Option(False, "--xml", help="同时接受 SPARQL XML 结果"),
        ) -> None:
            """执行 SPARQL 查询并以 JSON 输出结果。"""
            if file is not None:
                text = file.read_text(encoding="utf-8")
            if not text:
                raise typer.BadParameter("Provide a query or --file")
            endpoint = self._endpoint(url)

            async def _query() -> QueryResult:
                async with self._executor() as executor:
                    return await executor.execute(endpoint, text, accept_xml=xml)

            try:
                result = _run_async(_query())
            except SparqlError as e:
                raise _fail(str(e)) from e
            typer.echo(_result_to_json(result))

    def _register_test_command(self) -> None:
        """注册 test 命令。"""

        @self.command("test")
        def test_connection(
            url: str = typer.Argument(..., help="SPARQL 端点地址"),
        ) -> None:
            """测试端点连通性。"""
            endpoint = self._endpoint(url)

            async def _test():
                async with self._executor() as executor:
                    return await executor.test_connection(endpoint)

            result = _run_async(_test())
            if not result.success:
                raise _fail(f"FAILED: {result.error.code}: {result.error.message}")
            typer.echo(f"OK ({result.response_time_ms} ms)")

    def _register_analyze_command(self) -> None:
        """注册 analyze 命令。"""

        @self.command()
        def analyze(
            url: str = typer.Argument(..., help="SPARQL 端点地址"),
            output: Path | None = typer.Option(
                None,
                "--output",
                "-o",
                help="快照输出文件，默认输出到标准输出",
            ),
        ) -> None:
            """分析端点的 SKOS 能力并输出快照。

            进度逐步输出到标准错误；端点没有 SKOS 内容时以非零状态退出。
            """
            endpoint = self._endpoint(url)

            async def _analyze() -> AnalysisResult | None:
                async with self._executor() as executor:
                    prober = EndpointProber(executor, self.config.probe)
                    return await CapabilityAnalyzer(prober, on_step=_print_step).analyze(endpoint)

            analysis = _run_async(_analyze())
            if analysis is None:
                raise _fail("No SKOS content found")
            if output is None:
                typer.echo(analysis.to_json().decode())
            else:
                output.write_bytes(analysis.to_json())
                typer.echo(f"Snapshot written to {output}", err=True)

    def _register_raw_command(self) -> None:
        """注册 raw 命令。"""

        @self.command()
        def raw(
            url: str = typer.Argument(..., help="SPARQL 端点地址"),
            resource: str = typer.Argument(..., help="资源 URI"),
            rdf_format: str = typer.Option(
                "turtle",
                "--format",
                "-f",
                help="turtle, jsonld, ntriples 或 rdfxml",
            ),
        ) -> None:
            """获取资源的原始 RDF 描述。"""
            if rdf_format not in RDF_ACCEPT_HEADERS:
                raise typer.BadParameter(f"Unsupported format: {rdf_format}")
            endpoint = self._endpoint(url)

            async def _raw() -> str:
                async with self._executor() as executor:
                    return await executor.fetch_raw_rdf(endpoint, resource, rdf_format)

            try:
                text = _run_async(_raw())
            except (SparqlError, ValueError) as e:
                raise _fail(str(e)) from e
            typer.echo(text)

    def _register_plan_command(self) -> None:
        """注册 plan 命令。"""

        @self.command()
        def plan(
            snapshot: Path = typer.Argument(..., help="分析快照或整理输出文件"),
            scheme: str = typer.Argument(..., help="概念方案 URI"),
            strategy: MembershipStrategy | None = typer.Option(
                None,
                "--strategy",
                "-s",
                help="首选策略：direct 或 path",
            ),
            kind: str = typer.Option(
                "members",
                "--kind",
                "-k",
                help="members, top, collections, orphans 或 orphan-collections",
            ),
        ) -> None:
            """根据能力快照生成查询，不访问端点。

            实际采用的策略输出到标准错误，查询文本输出到标准输出。
            """
            if kind not in PLAN_KINDS:
                raise typer.BadParameter(f"Unsupported kind: {kind}")
            try:
                data = orjson.loads(snapshot.read_bytes())
                if isinstance(data, dict) and "analysis" in data:
                    data = data["analysis"]
                analysis = AnalysisResult.model_validate(data)
            except (OSError, orjson.JSONDecodeError, ValidationError) as e:
                raise _fail(f"Invalid snapshot {snapshot}: {e}") from e

            planner = QueryPlanner(analysis)
            typer.echo(f"strategy: {planner.strategy_for(scheme, strategy)}", err=True)
            match kind:
                case "members":
                    text = planner.scheme_members_query(scheme, prefer=strategy)
                case "top":
                    text = planner.top_concepts_query(scheme)
                case "collections":
                    text = planner.collections_query(scheme, prefer=strategy)
                case "orphans":
                    text = planner.orphan_concepts_query()
                case _:
                    text = planner.orphan_collections_query()
            if text is None:
                raise _fail(f"No {kind} query is possible for this endpoint")
            typer.echo(text)

    def _register_curation_commands(self) -> None:
        """注册整理相关命令。"""
        self._register_curate_command()
        self._register_curate_all_command()
        self._register_merge_command()

    def _register_curate_command(self) -> None:
        """注册 curate 命令。"""

        @self.command("curate")
        def curate_one(
            directory: Path = typer.Argument(..., help="端点目录"),
        ) -> None:
            """整理单个端点目录，写入 output/endpoint.json。"""

            async def _curate():
                async with self._executor() as executor:
                    return await curate(
                        directory,
                        executor,
                        probe_config=self.config.probe,
                        on_step=_print_step,
                    )

            try:
                curated = _run_async(_curate())
            except CurationError as e:
                raise _fail(str(e)) from e
            if curated is None:
                raise _fail("No SKOS content found")
            typer.echo(f"Curated {curated.name}")

    def _register_curate_all_command(self) -> None:
        """注册 curate-all 命令。"""

        @self.command("curate-all")
        def curate_everything(
            root: Path = typer.Argument(..., help="整理根目录"),
        ) -> None:
            """依次整理根目录下的所有端点目录。"""

            async def _curate_all():
                async with self._executor() as executor:
                    return await curate_all(
                        root,
                        executor,
                        probe_config=self.config.probe,
                        on_step=_print_step,
                        on_endpoint=lambda d: typer.echo(f"== {d.name}", err=True),
                    )

            try:
                summary = _run_async(_curate_all())
            except CurationError as e:
                raise _fail(str(e)) from e
            typer.echo(json.dumps(summary.model_dump(), ensure_ascii=False, indent=2))
            if summary.failed:
                raise typer.Exit(code=1)

    def _register_merge_command(self) -> None:
        """注册 merge 命令。"""

        @self.command()
        def merge(
            root: Path = typer.Argument(..., help="整理根目录"),
            output: Path = typer.Argument(..., help="合并输出文件"),
        ) -> None:
            """合并所有端点的整理输出为一个 JSON 数组。"""
            try:
                summary = _run_async(merge_endpoints(root, output))
            except CurationError as e:
                raise _fail(str(e)) from e
            typer.echo(json.dumps(summary.model_dump(), ensure_ascii=False, indent=2))
            if summary.has_errors:
                raise typer.Exit(code=1)
