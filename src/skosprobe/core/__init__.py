"""能力探测与分析核心模块。"""

from skosprobe.core.analyzer import ANALYSIS_STEPS, AnalysisDraft, CapabilityAnalyzer
from skosprobe.core.base import BaseProber
from skosprobe.core.engine import EndpointProber
from skosprobe.core.mixins import generate_language_priorities

__all__ = [
    "ANALYSIS_STEPS",
    "AnalysisDraft",
    "BaseProber",
    "CapabilityAnalyzer",
    "EndpointProber",
    "generate_language_priorities",
]
