"""CLI 测试。"""

import orjson
import pytest
from typer.testing import CliRunner

from skosprobe.cli import ProbeTyper
from skosprobe.core.mixins.content import JSON_PROBE_QUERY, SKOS_CONTENT_QUERY

ENDPOINT_URL = "https://vocabs.example.org/sparql"
SCHEME = "http://example.org/scheme/animals"

CONFIG = """
executor:
  retries: 0
probe:
  probe_retries: 0
log_level: ERROR
"""

runner = CliRunner()


@pytest.fixture
def cli(fake_endpoint, tmp_path, monkeypatch):
    """连接到脚本化端点的 CLI，使用不重试的配置。"""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "skosprobe.yaml").write_text(CONFIG)
    return ProbeTyper(client_factory=fake_endpoint.client)


class TestCLICommands:
    """CLI 命令测试。"""

    def test_version_command(self, cli):
        """测试版本命令。"""
        result = runner.invoke(cli, ["version"])

        assert result.exit_code == 0
        assert "skosprobe v" in result.stdout

    def test_help_command(self, cli):
        """测试帮助命令。"""
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("query", "test", "analyze", "plan", "merge"):
            assert command in result.stdout

    def test_invalid_config(self, cli, tmp_path):
        (tmp_path / "broken.yaml").write_text("executor: [unclosed")

        result = runner.invoke(cli, ["-c", str(tmp_path / "broken.yaml"), "version"])

        assert result.exit_code == 1


class TestQueryCommand:
    """查询命令测试。"""

    def test_select(self, cli, fake_endpoint):
        fake_endpoint.select("?s ?p ?o", ["s"], [{"s": "http://example.org/a"}])

        result = runner.invoke(cli, ["query", ENDPOINT_URL, "SELECT ?s WHERE { ?s ?p ?o }"])

        assert result.exit_code == 0
        assert '"s": "http://example.org/a"' in result.stdout

    def test_ask_from_file(self, cli, fake_endpoint, tmp_path):
        fake_endpoint.ask("ASK", True)
        query_file = tmp_path / "query.rq"
        query_file.write_text("ASK { ?s ?p ?o }")

        result = runner.invoke(cli, ["query", ENDPOINT_URL, "--file", str(query_file)])

        assert result.exit_code == 0
        assert '"boolean": true' in result.stdout

    def test_token_is_sent(self, cli, fake_endpoint):
        fake_endpoint.ask("ASK", True)

        result = runner.invoke(cli, ["--token", "secret", "query", ENDPOINT_URL, "ASK {}"])

        assert result.exit_code == 0
        assert fake_endpoint.requests[0].headers["authorization"] == "Bearer secret"

    def test_failure_exits_non_zero(self, cli, fake_endpoint):
        fake_endpoint.status("ASK", 401)

        result = runner.invoke(cli, ["query", ENDPOINT_URL, "ASK {}"])

        assert result.exit_code == 1

    def test_missing_query(self, cli):
        result = runner.invoke(cli, ["query", ENDPOINT_URL])
        assert result.exit_code != 0

    def test_invalid_url(self, cli):
        result = runner.invoke(cli, ["query", "not-a-url", "ASK {}"])
        assert result.exit_code != 0


class TestConnectionCommand:
    """连接测试命令测试。"""

    def test_ok(self, cli, fake_endpoint):
        fake_endpoint.select(JSON_PROBE_QUERY, ["s", "p", "o"], [])

        result = runner.invoke(cli, ["test", ENDPOINT_URL])

        assert result.exit_code == 0
        assert "OK (" in result.stdout

    def test_failed(self, cli, fake_endpoint):
        fake_endpoint.status(JSON_PROBE_QUERY, 401)

        result = runner.invoke(cli, ["test", ENDPOINT_URL])

        assert result.exit_code == 1
        assert "FAILED" in result.output


class TestAnalyzeAndPlan:
    """分析与规划命令测试。"""

    def test_analyze_writes_snapshot_then_plan(self, cli, fake_endpoint, tmp_path):
        """测试分析写出快照后可离线生成查询。"""
        fake_endpoint.select(JSON_PROBE_QUERY, ["s", "p", "o"], [])
        fake_endpoint.ask(SKOS_CONTENT_QUERY, True)
        snapshot = tmp_path / "snapshot.json"

        result = runner.invoke(cli, ["analyze", ENDPOINT_URL, "-o", str(snapshot)])

        assert result.exit_code == 0
        assert "[11/11]" in result.output
        data = orjson.loads(snapshot.read_bytes())
        assert data["hasSkosContent"] is True
        assert data["relationships"] is None

        result = runner.invoke(cli, ["plan", str(snapshot), SCHEME])

        assert result.exit_code == 0
        assert "strategy: path" in result.output
        assert f"<{SCHEME}>" in result.stdout
        assert "(skos:broader|^skos:narrower)+" in result.stdout

    def test_analyze_without_skos_content(self, cli, fake_endpoint):
        fake_endpoint.select(JSON_PROBE_QUERY, ["s", "p", "o"], [])
        fake_endpoint.ask(SKOS_CONTENT_QUERY, False)

        result = runner.invoke(cli, ["analyze", ENDPOINT_URL])

        assert result.exit_code == 1
        assert "No SKOS content found" in result.output

    def test_plan_orphans_impossible(self, cli, tmp_path):
        snapshot = tmp_path / "snapshot.json"
        snapshot.write_text('{"hasSkosContent": true}')

        result = runner.invoke(cli, ["plan", str(snapshot), SCHEME, "--kind", "orphans"])

        assert result.exit_code == 1
        assert "No orphans query is possible" in result.output

    def test_plan_from_curated_file(self, cli, tmp_path):
        curated = tmp_path / "endpoint.json"
        curated.write_text('{"name": "Example", "analysis": {"hasSkosContent": true}}')

        result = runner.invoke(cli, ["plan", str(curated), SCHEME, "--kind", "top"])

        assert result.exit_code == 0
        assert "skos:topConceptOf" in result.stdout

    def test_plan_invalid_snapshot(self, cli, tmp_path):
        snapshot = tmp_path / "snapshot.json"
        snapshot.write_text("{broken")

        result = runner.invoke(cli, ["plan", str(snapshot), SCHEME])

        assert result.exit_code == 1


class TestMergeCommand:
    """合并命令测试。"""

    def test_merge(self, cli, tmp_path):
        root = tmp_path / "endpoints"
        output_dir = root / "alpha" / "output"
        output_dir.mkdir(parents=True)
        record = {
            "name": "Alpha",
            "url": ENDPOINT_URL,
            "analysis": {"hasSkosContent": True},
            "suggestedLanguagePriorities": ["en"],
        }
        (output_dir / "endpoint.json").write_bytes(orjson.dumps(record))
        merged = tmp_path / "merged.json"

        result = runner.invoke(cli, ["merge", str(root), str(merged)])

        assert result.exit_code == 0
        assert '"Alpha"' in result.stdout
        assert orjson.loads(merged.read_bytes()) == [record]

    def test_merge_missing_root(self, cli, tmp_path):
        result = runner.invoke(cli, ["merge", str(tmp_path / "missing"), str(tmp_path / "out.json")])
        assert result.exit_code == 1
