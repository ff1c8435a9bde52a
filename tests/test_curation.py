"""端点整理与合并测试。"""

import orjson
import pytest

from skosprobe.config import ProbeConfig
from skosprobe.core.mixins.content import JSON_PROBE_QUERY, SKOS_CONTENT_QUERY
from skosprobe.curation import (
    curate,
    curate_all,
    merge_endpoints,
    read_input_config,
    validate_endpoint,
)
from skosprobe.exceptions import CurationError

NO_RETRY = ProbeConfig(probe_retries=0)


def make_endpoint_dir(root, name, config):
    directory = root / name
    (directory / "input").mkdir(parents=True)
    content = config if isinstance(config, str) else orjson.dumps(config).decode()
    (directory / "input" / "config.json").write_text(content)
    return directory


def write_curated(root, name, data):
    directory = root / name
    (directory / "output").mkdir(parents=True)
    content = data if isinstance(data, str) else orjson.dumps(data).decode()
    (directory / "output" / "endpoint.json").write_text(content)
    return directory


def curated_record(name, **overrides):
    record = {
        "name": name,
        "url": f"https://{name.lower()}.example.org/sparql",
        "analysis": {"hasSkosContent": True},
        "suggestedLanguagePriorities": ["en"],
    }
    record.update(overrides)
    return record


def script_minimal_endpoint(fake, *, has_skos=True):
    fake.select(JSON_PROBE_QUERY, ["s", "p", "o"], [])
    fake.ask(SKOS_CONTENT_QUERY, has_skos)
    fake.select("COUNT(?label)", ["lang", "count"], [{"lang": "de", "count": 9}, {"lang": "en", "count": 4}])


class TestReadInputConfig:
    """输入配置读取测试。"""

    @pytest.mark.asyncio
    async def test_valid_config(self, tmp_path):
        directory = make_endpoint_dir(
            tmp_path, "agrovoc", {"name": "AGROVOC", "url": "https://agrovoc.example.org/sparql"}
        )

        config = await read_input_config(directory)

        assert config.name == "AGROVOC"
        assert config.description is None

    @pytest.mark.asyncio
    async def test_missing_config(self, tmp_path):
        with pytest.raises(CurationError, match="Missing"):
            await read_input_config(tmp_path)

    @pytest.mark.asyncio
    async def test_invalid_json(self, tmp_path):
        directory = make_endpoint_dir(tmp_path, "broken", "{not json")
        with pytest.raises(CurationError, match="Invalid JSON"):
            await read_input_config(directory)

    @pytest.mark.asyncio
    async def test_missing_fields(self, tmp_path):
        directory = make_endpoint_dir(tmp_path, "partial", {"name": "Partial"})
        with pytest.raises(CurationError, match="Invalid input config"):
            await read_input_config(directory)


class TestCurate:
    """单端点整理测试。"""

    @pytest.mark.asyncio
    async def test_writes_camel_case_output(self, tmp_path, executor, fake_endpoint):
        """测试整理结果以 camelCase 写入 output/endpoint.json。"""
        script_minimal_endpoint(fake_endpoint)
        directory = make_endpoint_dir(
            tmp_path,
            "example",
            {"name": "Example", "url": "https://vocabs.example.org/sparql", "description": "Test"},
        )

        curated = await curate(directory, executor, probe_config=NO_RETRY)

        assert curated.suggested_language_priorities == ["en", "de"]
        data = orjson.loads((directory / "output" / "endpoint.json").read_bytes())
        assert data["name"] == "Example"
        assert data["description"] == "Test"
        assert data["suggestedLanguagePriorities"] == ["en", "de"]
        assert data["analysis"]["hasSkosContent"] is True
        assert data["analysis"]["supportsJsonResults"] is True
        assert validate_endpoint(data).valid

    @pytest.mark.asyncio
    async def test_no_skos_content_writes_nothing(self, tmp_path, executor, fake_endpoint):
        script_minimal_endpoint(fake_endpoint, has_skos=False)
        directory = make_endpoint_dir(
            tmp_path, "empty", {"name": "Empty", "url": "https://vocabs.example.org/sparql"}
        )

        assert await curate(directory, executor, probe_config=NO_RETRY) is None
        assert not (directory / "output").exists()

    @pytest.mark.asyncio
    async def test_invalid_url(self, tmp_path, executor):
        directory = make_endpoint_dir(tmp_path, "bad", {"name": "Bad", "url": "ftp://example.org"})
        with pytest.raises(CurationError, match="Invalid endpoint url"):
            await curate(directory, executor, probe_config=NO_RETRY)


class TestCurateAll:
    """批量整理测试。"""

    @pytest.mark.asyncio
    async def test_skips_and_isolates_failures(self, tmp_path, executor, fake_endpoint):
        """测试跳过非端点目录，单个失败不影响其余端点。"""
        script_minimal_endpoint(fake_endpoint)
        make_endpoint_dir(tmp_path, "alpha", {"name": "Alpha", "url": "https://vocabs.example.org/sparql"})
        make_endpoint_dir(tmp_path, "broken", "{not json")
        make_endpoint_dir(tmp_path, "_template", {"name": "T", "url": "https://vocabs.example.org/sparql"})
        make_endpoint_dir(tmp_path, ".hidden", {"name": "H", "url": "https://vocabs.example.org/sparql"})
        (tmp_path / "no-config").mkdir()
        visited = []

        summary = await curate_all(tmp_path, executor, probe_config=NO_RETRY, on_endpoint=visited.append)

        assert summary.curated == ["alpha"]
        assert list(summary.failed) == ["broken"]
        assert summary.no_content == []
        assert [p.name for p in visited] == ["alpha", "broken"]
        assert (tmp_path / "alpha" / "output" / "endpoint.json").exists()
        assert not (tmp_path / "_template" / "output").exists()

    @pytest.mark.asyncio
    async def test_missing_root(self, tmp_path, executor):
        with pytest.raises(CurationError):
            await curate_all(tmp_path / "missing", executor)


class TestValidateEndpoint:
    """整理输出校验测试。"""

    def test_valid(self):
        report = validate_endpoint(curated_record("Alpha"))
        assert report.valid
        assert report.errors == []
        assert report.warnings == []

    def test_not_an_object(self):
        report = validate_endpoint(["a"])
        assert not report.valid
        assert report.errors == ["File does not contain a valid JSON object"]

    def test_missing_fields(self):
        report = validate_endpoint({"name": "Alpha"})
        assert "Missing required field: url" in report.errors
        assert "Missing required field: analysis" in report.errors
        assert "Missing required field: suggestedLanguagePriorities" in report.errors

    def test_type_errors(self):
        report = validate_endpoint(
            curated_record("Alpha", url=42, description=1, suggestedLanguagePriorities=["en", 3])
        )
        assert 'Field "url" must be a string' in report.errors
        assert 'Field "description" must be a string if provided' in report.errors
        assert 'Field "suggestedLanguagePriorities" must contain only strings' in report.errors

    def test_missing_has_skos_content_is_a_warning(self):
        report = validate_endpoint(curated_record("Alpha", analysis={}))
        assert report.valid
        assert report.warnings == ['Field "analysis.hasSkosContent" is missing']


class TestMergeEndpoints:
    """整理输出合并测试。"""

    @pytest.mark.asyncio
    async def test_merge_sorted_by_name(self, tmp_path):
        write_curated(tmp_path, "c", curated_record("charlie"))
        write_curated(tmp_path, "a", curated_record("Bravo"))
        write_curated(tmp_path, "b", curated_record("alpha"))
        output = tmp_path / "_merged" / "endpoints.json"

        summary = await merge_endpoints(tmp_path, output)

        assert summary.written == ["alpha", "Bravo", "charlie"]
        assert not summary.has_errors
        assert [item["name"] for item in orjson.loads(output.read_bytes())] == summary.written

    @pytest.mark.asyncio
    async def test_missing_output_is_skipped_without_error(self, tmp_path):
        write_curated(tmp_path, "alpha", curated_record("Alpha"))
        (tmp_path / "pending").mkdir()

        summary = await merge_endpoints(tmp_path, tmp_path / "endpoints.json")

        assert summary.written == ["Alpha"]
        assert summary.skipped == {"pending": ["No output/endpoint.json found"]}
        assert not summary.has_errors

    @pytest.mark.asyncio
    async def test_invalid_outputs_set_error_flag(self, tmp_path):
        write_curated(tmp_path, "alpha", curated_record("Alpha"))
        write_curated(tmp_path, "syntax", "{broken")
        write_curated(tmp_path, "fields", {"name": "Fields"})

        summary = await merge_endpoints(tmp_path, tmp_path / "endpoints.json")

        assert summary.written == ["Alpha"]
        assert summary.skipped["syntax"] == ["Invalid JSON syntax"]
        assert "Missing required field: url" in summary.skipped["fields"]
        assert summary.has_errors

    @pytest.mark.asyncio
    async def test_no_valid_endpoints(self, tmp_path):
        write_curated(tmp_path, "syntax", "{broken")
        output = tmp_path / "endpoints.json"

        with pytest.raises(CurationError, match="No valid endpoints found"):
            await merge_endpoints(tmp_path, output)
        assert not output.exists()

    @pytest.mark.asyncio
    async def test_no_endpoint_directories(self, tmp_path):
        (tmp_path / "_shared").mkdir()
        with pytest.raises(CurationError, match="No endpoint directories"):
            await merge_endpoints(tmp_path, tmp_path / "endpoints.json")
