"""SPARQL 字符串工具。

查询一律作为不透明字符串处理，这里只提供模板拼接所需的纯函数。
"""

from skosprobe.constants import SPARQL_PREFIXES


def with_prefixes(query: str) -> str:
    """为查询补充标准前缀声明。

    若查询（去除首尾空白后）已以 PREFIX 开头（不区分大小写），则原样返回。

    Args:
        query: SPARQL 查询文本。

    Returns:
        带前缀声明的查询文本。
    """
    if query.strip().upper().startswith("PREFIX"):
        return query
    return f"{SPARQL_PREFIXES}\n{query}"


def iri(uri: str) -> str:
    """将 URI 包裹为 SPARQL IRI 引用。

    Raises:
        ValueError: URI 含有 IRI 中不允许的字符时抛出。
    """
    if any(ch in uri for ch in '<>"{}|^`\\ \n\t'):
        raise ValueError(f"Invalid IRI: {uri!r}")
    return f"<{uri}>"


def scheme_uri_variants(uri: str) -> list[str]:
    """返回 URI 及其尾部斜杠变体。

    部分数据集中 inScheme 等谓词引用的方案 URI 与方案本身的 URI 相差一个尾部斜杠。

    Args:
        uri: 概念方案 URI。

    Returns:
        去重后的 URI 变体列表，原始 URI 在前。
    """
    if uri.endswith("/"):
        twin = uri.rstrip("/")
    else:
        twin = f"{uri}/"
    return [uri, twin] if twin and twin != uri else [uri]


def values_clause(variable: str, uris: list[str]) -> str:
    """构建 VALUES 子句。

    Args:
        variable: 变量名（含 ?）。
        uris: 绑定的 URI 列表。

    Returns:
        形如 ``VALUES ?g { <a> <b> }`` 的子句。
    """
    return f"VALUES {variable} {{ {' '.join(iri(u) for u in uris)} }}"
