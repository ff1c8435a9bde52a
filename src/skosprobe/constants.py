"""全局常量定义模块。

本模块定义了 skosprobe 项目中使用的所有全局常量，包括：
- 查询执行默认策略（超时、重试、退避）
- 能力探测上限
- SPARQL 前缀与内容协商
- 日志级别配置
"""

import re
from collections.abc import Callable

DEFAULT_TIMEOUT_MS = 60_000
DEFAULT_RETRIES = 3
DEFAULT_RETRY_DELAY_MS = 1_000
CONNECTION_TEST_TIMEOUT_MS = 10_000

PROBE_RETRIES = 1
PROBE_TIMEOUT_MS = 60_000

MAX_SKOS_GRAPHS = 500
MAX_STORED_SCHEMES = 200
LANGUAGE_BATCH_SIZE = 10
LANGUAGE_SAMPLE_SIZE = 100_000
MAX_LANGUAGES = 50

DEFAULT_API_KEY_HEADER = "X-API-Key"
DEFAULT_LOG_LEVEL = "INFO"
CONFIG_FILE_NAME = "skosprobe.yaml"

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

SPARQL_JSON_MEDIA_TYPE = "application/sparql-results+json"
SPARQL_XML_MEDIA_TYPE = "application/sparql-results+xml"
FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"

RDF_ACCEPT_HEADERS: dict[str, str] = {
    "turtle": "text/turtle",
    "jsonld": "application/ld+json",
    "ntriples": "application/n-triples",
    "rdfxml": "application/rdf+xml",
}

SPARQL_PREFIXES = """PREFIX skos: <http://www.w3.org/2004/02/skos/core#>
PREFIX skosxl: <http://www.w3.org/2008/05/skos-xl#>
PREFIX dct: <http://purl.org/dc/terms/>
PREFIX dc: <http://purl.org/dc/elements/1.1/>
PREFIX rdfs: <http://www.w3.org/2000/01/rdf-schema#>
PREFIX rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#>
PREFIX owl: <http://www.w3.org/2002/07/owl#>
PREFIX cc: <http://creativecommons.org/ns#>"""

LANGUAGE_CODE_PATTERN = re.compile(r"^[a-z]{2,3}$")

CURATION_INPUT_FILE = "input/config.json"
CURATION_OUTPUT_FILE = "output/endpoint.json"

type StepCallback = Callable[[int, int, str, float, str], None]


def is_valid_language_code(lang: str) -> bool:
    """判断语言标签是否为 2-3 位小写字母代码。

    Args:
        lang: 待校验的语言标签。

    Returns:
        合法时返回 True。
    """
    return bool(LANGUAGE_CODE_PATTERN.match(lang))
