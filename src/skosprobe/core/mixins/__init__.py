"""能力探测 Mixin 模块。"""

from skosprobe.core.mixins.content import ContentMixin
from skosprobe.core.mixins.counts import CountMixin
from skosprobe.core.mixins.graphs import GraphMixin, SkosGraphs
from skosprobe.core.mixins.labels import LabelMixin
from skosprobe.core.mixins.languages import LanguageMixin, generate_language_priorities
from skosprobe.core.mixins.query import QueryMixin
from skosprobe.core.mixins.relationships import RelationshipMixin
from skosprobe.core.mixins.schemes import SchemeMixin, SchemeSummary

__all__ = [
    "ContentMixin",
    "CountMixin",
    "GraphMixin",
    "LabelMixin",
    "LanguageMixin",
    "QueryMixin",
    "RelationshipMixin",
    "SchemeMixin",
    "SchemeSummary",
    "SkosGraphs",
    "generate_language_priorities",
]
