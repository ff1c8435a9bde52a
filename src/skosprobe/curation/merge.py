"""整理输出合并。

收集各端点目录的 output/endpoint.json，校验后按名称排序写入单个 JSON 数组。
"""

from pathlib import Path
from typing import Any

import orjson
from jsonschema import Draft7Validator
from jsonschema import ValidationError as JsonSchemaError

from skosprobe.constants import CURATION_OUTPUT_FILE
from skosprobe.curation.models import MergeSummary, ValidationReport
from skosprobe.curation.workflow import is_endpoint_dir
from skosprobe.exceptions import CurationError
from skosprobe.logger import logger
from skosprobe.utils.file_ops import dir_exists, file_exists, list_subdirs, read_json, write_json

REQUIRED_FIELDS = ("name", "url", "analysis", "suggestedLanguagePriorities")

ENDPOINT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": list(REQUIRED_FIELDS),
    "properties": {
        "name": {"type": "string"},
        "url": {"type": "string"},
        "description": {"type": ["string", "null"]},
        "analysis": {"type": "object"},
        "suggestedLanguagePriorities": {"type": "array", "items": {"type": "string"}},
    },
}

TYPE_MESSAGES = {
    "name": 'Field "name" must be a string',
    "url": 'Field "url" must be a string',
    "description": 'Field "description" must be a string if provided',
    "analysis": 'Field "analysis" must be an object',
    "suggestedLanguagePriorities": 'Field "suggestedLanguagePriorities" must be an array',
}

_validator = Draft7Validator(ENDPOINT_SCHEMA)


def _error_messages(error: JsonSchemaError) -> list[str]:
    """将 jsonschema 错误转换为可读的错误信息。"""
    if error.validator == "required":
        return [
            f"Missing required field: {key}"
            for key in error.validator_value
            if key not in error.instance
        ]
    path = list(error.absolute_path)
    if len(path) > 1:
        return [f'Field "{path[0]}" must contain only strings']
    return [TYPE_MESSAGES.get(path[0], error.message)]


def validate_endpoint(data: Any) -> ValidationReport:
    """校验单个整理输出。

    Args:
        data: 解析后的 JSON 值。

    Returns:
        校验结果，包含错误与警告。
    """
    if not isinstance(data, dict):
        return ValidationReport(valid=False, errors=["File does not contain a valid JSON object"])

    errors: dict[str, None] = {}
    for error in _validator.iter_errors(data):
        errors.update(dict.fromkeys(_error_messages(error)))

    warnings: list[str] = []
    analysis = data.get("analysis")
    if isinstance(analysis, dict) and "hasSkosContent" not in analysis:
        warnings.append('Field "analysis.hasSkosContent" is missing')

    return ValidationReport(valid=not errors, errors=list(errors), warnings=warnings)


async def merge_endpoints(root: Path, output_path: Path) -> MergeSummary:
    """合并根目录下所有有效的整理输出。

    Args:
        root: 整理根目录。
        output_path: 合并结果文件。

    Returns:
        合并汇总。

    Raises:
        CurationError: 根目录不存在、没有端点目录或没有任何有效输出时抛出。
    """
    if not await dir_exists(root):
        raise CurationError(f"Curation root not found: {root}")
    directories = [d for d in await list_subdirs(root) if is_endpoint_dir(d)]
    if not directories:
        raise CurationError(f"No endpoint directories found in {root}")

    summary = MergeSummary()
    endpoints: list[dict[str, Any]] = []

    for directory in directories:
        output_file = directory / CURATION_OUTPUT_FILE
        if not await file_exists(output_file):
            logger.warning(f"{directory.name}: no {CURATION_OUTPUT_FILE}, skipped")
            summary.skipped[directory.name] = [f"No {CURATION_OUTPUT_FILE} found"]
            continue

        try:
            data = await read_json(output_file)
        except orjson.JSONDecodeError:
            logger.error(f"{directory.name}: invalid JSON syntax, skipped")
            summary.skipped[directory.name] = ["Invalid JSON syntax"]
            summary.has_errors = True
            continue

        report = validate_endpoint(data)
        for warning in report.warnings:
            logger.warning(f"{directory.name}: {warning}")
        if not report.valid:
            for error in report.errors:
                logger.error(f"{directory.name}: {error}")
            summary.skipped[directory.name] = report.errors
            summary.has_errors = True
            continue

        endpoints.append(data)

    if not endpoints:
        raise CurationError("No valid endpoints found")

    endpoints.sort(key=lambda item: item["name"].casefold())
    await write_json(output_path, endpoints)
    summary.written = [item["name"] for item in endpoints]
    logger.info(f"Wrote {len(endpoints)} endpoints to {output_path}")
    return summary
