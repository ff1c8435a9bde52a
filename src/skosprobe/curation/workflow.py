"""端点整理工作流。

每个端点目录包含 input/config.json；整理会分析端点并将能力快照
与建议的语言优先级写入 output/endpoint.json，供部署时直接使用而无需实时探测。
"""

from collections.abc import Callable
from pathlib import Path

import orjson
from pydantic import ValidationError

from skosprobe.client.executor import SparqlExecutor
from skosprobe.config import ProbeConfig
from skosprobe.constants import CURATION_INPUT_FILE, CURATION_OUTPUT_FILE, StepCallback
from skosprobe.core.analyzer import CapabilityAnalyzer
from skosprobe.core.engine import EndpointProber
from skosprobe.core.mixins.languages import generate_language_priorities
from skosprobe.curation.models import CuratedEndpoint, CurationInput, CurationSummary
from skosprobe.exceptions import CurationError
from skosprobe.logger import logger
from skosprobe.models.endpoint import EndpointDescriptor
from skosprobe.utils.file_ops import dir_exists, file_exists, list_subdirs, read_json, write_json


def is_endpoint_dir(path: Path) -> bool:
    """以 _ 或 . 开头的目录不是端点目录。"""
    return not path.name.startswith(("_", "."))


async def read_input_config(directory: Path) -> CurationInput:
    """读取端点目录的输入配置。

    Args:
        directory: 端点目录。

    Returns:
        输入配置。

    Raises:
        CurationError: 配置缺失、不是合法 JSON 或字段校验失败时抛出。
    """
    config_path = directory / CURATION_INPUT_FILE
    if not await file_exists(config_path):
        raise CurationError(f"Missing {CURATION_INPUT_FILE} in {directory}")
    try:
        data = await read_json(config_path)
        return CurationInput.model_validate(data)
    except orjson.JSONDecodeError as e:
        raise CurationError(f"Invalid JSON in {config_path}: {e}") from e
    except ValidationError as e:
        raise CurationError(f"Invalid input config {config_path}: {e}") from e


async def write_output(directory: Path, curated: CuratedEndpoint) -> Path:
    """原子写入 output/endpoint.json。

    Returns:
        写入的文件路径。
    """
    output_path = directory / CURATION_OUTPUT_FILE
    await write_json(output_path, curated.model_dump(mode="json", by_alias=True))
    return output_path


async def curate(
    directory: Path,
    executor: SparqlExecutor,
    *,
    probe_config: ProbeConfig | None = None,
    on_step: StepCallback | None = None,
) -> CuratedEndpoint | None:
    """整理单个端点目录。

    Args:
        directory: 端点目录。
        executor: SPARQL 查询执行器。
        probe_config: 探测配置。
        on_step: 分析进度回调。

    Returns:
        整理结果；端点没有 SKOS 内容时返回 None 且不写文件。

    Raises:
        CurationError: 输入配置无效时抛出。
    """
    config = await read_input_config(directory)
    try:
        endpoint = EndpointDescriptor(url=config.url, name=config.name)
    except ValidationError as e:
        raise CurationError(f"Invalid endpoint url for {config.name}: {config.url}") from e

    analyzer = CapabilityAnalyzer(EndpointProber(executor, probe_config), on_step=on_step)
    analysis = await analyzer.analyze(endpoint)
    if analysis is None:
        logger.warning(f"No SKOS content found for {config.name}, nothing written")
        return None

    curated = CuratedEndpoint(
        name=config.name,
        url=config.url,
        description=config.description,
        analysis=analysis,
        suggested_language_priorities=generate_language_priorities(analysis.languages),
    )
    output_path = await write_output(directory, curated)
    logger.info(f"Wrote {output_path}")
    return curated


async def curate_all(
    root: Path,
    executor: SparqlExecutor,
    *,
    probe_config: ProbeConfig | None = None,
    on_step: StepCallback | None = None,
    on_endpoint: Callable[[Path], None] | None = None,
) -> CurationSummary:
    """依次整理根目录下的所有端点目录。

    单个端点失败只记录在汇总中，不影响其余端点。

    Args:
        root: 整理根目录。
        executor: SPARQL 查询执行器。
        probe_config: 探测配置。
        on_step: 分析进度回调。
        on_endpoint: 开始处理某个目录前的回调。

    Returns:
        批量整理汇总。

    Raises:
        CurationError: 根目录不存在时抛出。
    """
    if not await dir_exists(root):
        raise CurationError(f"Curation root not found: {root}")

    summary = CurationSummary()
    for directory in await list_subdirs(root):
        if not is_endpoint_dir(directory):
            continue
        if not await file_exists(directory / CURATION_INPUT_FILE):
            logger.debug(f"Skipping {directory.name}: no {CURATION_INPUT_FILE}")
            continue

        if on_endpoint is not None:
            on_endpoint(directory)
        try:
            curated = await curate(directory, executor, probe_config=probe_config, on_step=on_step)
        except (CurationError, OSError) as e:
            logger.error(f"Curation failed for {directory.name}: {e}")
            summary.failed[directory.name] = str(e)
            continue

        if curated is None:
            summary.no_content.append(directory.name)
        else:
            summary.curated.append(directory.name)
    return summary
