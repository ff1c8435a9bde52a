"""配置管理模块。

本模块负责管理 skosprobe 的运行配置，包括：
- 查询执行策略（超时、重试、退避）
- 能力探测策略（重试预算、各类上限、语言检测）
- 日志级别配置
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from skosprobe.constants import (
    CONFIG_FILE_NAME,
    CONNECTION_TEST_TIMEOUT_MS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_RETRIES,
    DEFAULT_RETRY_DELAY_MS,
    DEFAULT_TIMEOUT_MS,
    LANGUAGE_BATCH_SIZE,
    LANGUAGE_SAMPLE_SIZE,
    MAX_LANGUAGES,
    MAX_SKOS_GRAPHS,
    MAX_STORED_SCHEMES,
    PROBE_RETRIES,
    PROBE_TIMEOUT_MS,
    VALID_LOG_LEVELS,
)
from skosprobe.exceptions import ConfigurationError


class ExecutorConfig(BaseModel):
    """查询执行配置。

    Attributes:
        timeout_ms: 单次请求超时（毫秒），默认 60 秒。
        retries: 失败后的重试次数，默认 3 次。
        retry_delay_ms: 指数退避的基础延迟（毫秒）。
        test_timeout_ms: 连接测试的超时（毫秒），默认 10 秒。
    """

    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    retries: int = Field(default=DEFAULT_RETRIES, ge=0)
    retry_delay_ms: int = Field(default=DEFAULT_RETRY_DELAY_MS, ge=0)
    test_timeout_ms: int = Field(default=CONNECTION_TEST_TIMEOUT_MS, gt=0)


class ProbeConfig(BaseModel):
    """能力探测配置。

    探测需要快速失败，因此重试预算低于交互式查询。

    Attributes:
        probe_retries: 每个探测查询的重试次数。
        probe_timeout_ms: 每个探测查询的超时（毫秒）。
        accept_xml: 是否接受 SPARQL XML 结果（兼容只返回 XML 的存储）。
        max_skos_graphs: 保存 SKOS 命名图 URI 的上限。
        max_stored_schemes: 保存概念方案 URI 的上限。
        language_batch_size: 按图分批统计语言时每批的图数量。
        language_sample_size: 抽样统计语言时的概念数上限。
        language_sampling: 常规统计为空时是否启用抽样回退。
        max_languages: 保留的语言数量上限。
        scope_languages_to_graphs: 未知图分区时是否用 GRAPH ?g 包裹语言统计。
    """

    probe_retries: int = Field(default=PROBE_RETRIES, ge=0)
    probe_timeout_ms: int = Field(default=PROBE_TIMEOUT_MS, gt=0)
    accept_xml: bool = True
    max_skos_graphs: int = Field(default=MAX_SKOS_GRAPHS, gt=0)
    max_stored_schemes: int = Field(default=MAX_STORED_SCHEMES, gt=0)
    language_batch_size: int = Field(default=LANGUAGE_BATCH_SIZE, gt=0)
    language_sample_size: int = Field(default=LANGUAGE_SAMPLE_SIZE, gt=0)
    language_sampling: bool = True
    max_languages: int = Field(default=MAX_LANGUAGES, gt=0)
    scope_languages_to_graphs: bool = False


class AppConfig(BaseModel):
    """应用配置模型。

    Attributes:
        executor: 查询执行配置。
        probe: 能力探测配置。
        log_level: 日志级别，默认为 INFO。
    """

    executor: ExecutorConfig = Field(default_factory=ExecutorConfig)
    probe: ProbeConfig = Field(default_factory=ProbeConfig)
    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """验证日志级别。

        Args:
            v: 待验证的日志级别字符串。

        Returns:
            验证通过的大写日志级别。

        Raises:
            ValueError: 日志级别无效时抛出。
        """
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {list(VALID_LOG_LEVELS)}")
        return v_upper

    @classmethod
    def from_yaml(cls, config_path: Path | None = None) -> "AppConfig":
        """从 YAML 配置文件加载配置。

        Args:
            config_path: 配置文件路径，默认为当前目录下的 skosprobe.yaml。

        Returns:
            加载的 AppConfig 实例，若配置文件不存在则返回默认配置。

        Raises:
            ConfigurationError: 配置文件格式错误或校验失败时抛出。
        """
        path = config_path or Path(CONFIG_FILE_NAME)
        if not path.exists():
            return cls()

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        try:
            return cls(
                executor=ExecutorConfig(**(data.get("executor") or {})),
                probe=ProbeConfig(**(data.get("probe") or {})),
                log_level=data.get("log_level", DEFAULT_LOG_LEVEL),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid config in {path}: {e}") from e
