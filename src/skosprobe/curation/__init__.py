"""端点整理模块。

离线分析端点并生成可部署的能力快照，替代运行时的实时探测。
"""

from skosprobe.curation.merge import merge_endpoints, validate_endpoint
from skosprobe.curation.models import CuratedEndpoint, CurationInput, CurationSummary, MergeSummary
from skosprobe.curation.workflow import curate, curate_all, read_input_config

__all__ = [
    "CuratedEndpoint",
    "CurationInput",
    "CurationSummary",
    "MergeSummary",
    "curate",
    "curate_all",
    "merge_endpoints",
    "read_input_config",
    "validate_endpoint",
]
