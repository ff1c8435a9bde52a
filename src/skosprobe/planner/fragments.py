"""SPARQL 片段构建。

同一个逻辑约束（“资源属于方案 S”）对应两种片段：
直接谓词片段只使用可索引的显式谓词，属性路径片段适用于任何合规存储。
方案 URI 通过 VALUES 绑定其尾部斜杠变体，以容忍数据中的斜杠不一致。
"""

from skosprobe.planner.strategy import MembershipStrategy
from skosprobe.utils.sparql import scheme_uri_variants, values_clause

HIERARCHY_PATH = "(skos:broader|^skos:narrower)+"


def scheme_binding(scheme_uri: str, scheme_var: str = "?scheme") -> str:
    """将方案 URI 及其斜杠变体绑定到变量。"""
    return values_clause(scheme_var, scheme_uri_variants(scheme_uri))


def top_concept_pattern(var: str, scheme_var: str = "?scheme") -> str:
    """var 是 scheme_var 的顶层概念（两个方向的谓词之一）。"""
    return f"{{ {var} skos:topConceptOf {scheme_var} }} UNION {{ {scheme_var} skos:hasTopConcept {var} }}"


def scheme_membership_fragment(
    var: str,
    strategy: MembershipStrategy,
    *,
    scheme_var: str = "?scheme",
    top_var: str | None = None,
    include_in_scheme: bool = False,
) -> str:
    """构建“var 属于 scheme_var”的 UNION 片段。

    Args:
        var: 资源变量（含 ?）。
        strategy: 直接谓词或属性路径策略。
        scheme_var: 方案变量。
        top_var: 顶层概念变量，默认为 var 加 Top 后缀。
        include_in_scheme: 是否加入 skos:inScheme 分支。

    Returns:
        可直接放入 WHERE 的片段。
    """
    top = top_var or f"{var}Top"
    branches = []
    if include_in_scheme:
        branches.append(f"{{ {var} skos:inScheme {scheme_var} }}")
    branches.append(f"{{ {var} skos:topConceptOf {scheme_var} }}")
    branches.append(f"{{ {scheme_var} skos:hasTopConcept {var} }}")

    top_of_scheme = top_concept_pattern(top, scheme_var)
    match strategy:
        case MembershipStrategy.DIRECT:
            branches.append(f"{{ {var} skos:broaderTransitive {top} . {top_of_scheme} }}")
            branches.append(f"{{ {top} skos:narrowerTransitive {var} . {top_of_scheme} }}")
        case MembershipStrategy.PATH:
            branches.append(f"{{ {var} {HIERARCHY_PATH} {top} . {top_of_scheme} }}")

    return "\n    UNION\n    ".join(branches)


def collection_member_fragment(
    collection_var: str,
    strategy: MembershipStrategy,
    *,
    member_var: str = "?memberConcept",
    scheme_var: str = "?scheme",
    include_in_scheme: bool = False,
) -> str:
    """构建“集合至少有一个成员属于方案”的片段。"""
    membership = scheme_membership_fragment(
        member_var,
        strategy,
        scheme_var=scheme_var,
        include_in_scheme=include_in_scheme,
    )
    return f"{collection_var} skos:member {member_var} .\n    {membership}"
