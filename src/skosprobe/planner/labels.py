"""能力感知的标签解析子句。"""

from skosprobe.models.analysis import LabelPredicateCapabilities

LABEL_PRIORITY: list[tuple[str, str, str]] = [
    ("prefLabel", "pref_label", "skos:prefLabel"),
    ("xlPrefLabel", "xl_pref_label", "skosxl:prefLabel/skosxl:literalForm"),
    ("dctTitle", "dct_title", "dct:title"),
    ("dcTitle", "dc_title", "dc:title"),
    ("rdfsLabel", "rdfs_label", "rdfs:label"),
]


def label_union_clause(var: str, capabilities: LabelPredicateCapabilities | None = None) -> str:
    """构建带优先级标记的标签 UNION 子句。

    每个分支绑定 ?label 并以 ?labelType 标记来源，顺序即优先级：
    prefLabel > xlPrefLabel > dctTitle > dcTitle > rdfsLabel。
    能力未知或没有任何已知谓词时输出全部五个分支。

    Args:
        var: 资源变量（含 ?）。
        capabilities: 该类资源的标签谓词能力。

    Returns:
        放入 OPTIONAL 的子句，同时绑定 ?labelLang。
    """
    selected = LABEL_PRIORITY
    if capabilities is not None and capabilities.any_present():
        selected = [item for item in LABEL_PRIORITY if getattr(capabilities, item[1])]

    branches = [
        f'{{\n      {var} {path} ?label .\n      BIND("{tag}" AS ?labelType)\n    }}'
        for tag, _, path in selected
    ]
    return " UNION ".join(branches) + "\n    BIND(LANG(?label) AS ?labelLang)"
