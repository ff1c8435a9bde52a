"""自适应查询规划模块。

根据能力快照为逻辑操作选择 SPARQL 片段策略，并构建完整查询。
"""

from skosprobe.planner.fragments import (
    collection_member_fragment,
    scheme_binding,
    scheme_membership_fragment,
)
from skosprobe.planner.labels import label_union_clause
from skosprobe.planner.queries import QueryPlanner
from skosprobe.planner.strategy import MembershipStrategy, can_use_direct, choose_strategy

__all__ = [
    "MembershipStrategy",
    "QueryPlanner",
    "can_use_direct",
    "choose_strategy",
    "collection_member_fragment",
    "label_union_clause",
    "scheme_binding",
    "scheme_membership_fragment",
]
