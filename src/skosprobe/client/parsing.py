"""SPARQL 结果解析。

JSON 结果使用 orjson 解析；只返回 XML 的存储由 rdflib 解析。
"""

import io

import orjson
from rdflib import BNode, Literal, URIRef
from rdflib.query import Result

from skosprobe.exceptions import SparqlError
from skosprobe.models.results import AppError, ErrorCode, QueryResult, Term

_JSON_KINDS = {"uri": "uri", "literal": "literal", "typed-literal": "literal", "bnode": "bnode"}


def _invalid(message: str, details: str | None = None) -> SparqlError:
    return SparqlError(AppError(code=ErrorCode.INVALID_RESPONSE, message=message, details=details))


def parse_json_results(content: bytes) -> QueryResult:
    """解析 application/sparql-results+json。

    Args:
        content: 响应体。

    Returns:
        解析后的查询结果。

    Raises:
        SparqlError: 响应不是合法的 SPARQL JSON 结果时抛出（INVALID_RESPONSE）。
    """
    try:
        data = orjson.loads(content)
    except orjson.JSONDecodeError as e:
        raise _invalid("Unexpected response format", f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise _invalid("Unexpected response format", "Expected a JSON object")

    variables = list(data.get("head", {}).get("vars", []))
    if "boolean" in data:
        return QueryResult(variables=variables, boolean=bool(data["boolean"]))

    raw_bindings = data.get("results", {}).get("bindings")
    if not isinstance(raw_bindings, list):
        raise _invalid("Unexpected response format", "Missing results.bindings")

    bindings = []
    for raw_row in raw_bindings:
        row = {}
        for name, cell in raw_row.items():
            kind = _JSON_KINDS.get(cell.get("type", ""))
            if kind is None:
                continue
            row[name] = Term(
                kind=kind,
                value=cell.get("value", ""),
                lang=cell.get("xml:lang"),
                datatype=cell.get("datatype"),
            )
        bindings.append(row)
    return QueryResult(variables=variables, bindings=bindings)


def _term_from_node(node) -> Term | None:
    if isinstance(node, URIRef):
        return Term(kind="uri", value=str(node))
    if isinstance(node, BNode):
        return Term(kind="bnode", value=str(node))
    if isinstance(node, Literal):
        return Term(
            kind="literal",
            value=str(node),
            lang=node.language,
            datatype=str(node.datatype) if node.datatype else None,
        )
    return None


def parse_xml_results(content: bytes) -> QueryResult:
    """解析 application/sparql-results+xml。

    Raises:
        SparqlError: 响应不是合法的 SPARQL XML 结果时抛出（INVALID_RESPONSE）。
    """
    try:
        result = Result.parse(io.BytesIO(content), format="xml")
    except Exception as e:
        raise _invalid("Unexpected response format", f"Invalid SPARQL XML: {e}") from e

    if result.type == "ASK":
        return QueryResult(boolean=bool(result.askAnswer), source_format="xml")

    variables = [str(var) for var in (result.vars or [])]
    bindings = []
    for binding in result.bindings:
        row = {}
        for var, node in binding.items():
            term = _term_from_node(node)
            if term is not None:
                row[str(var)] = term
        bindings.append(row)
    return QueryResult(variables=variables, bindings=bindings, source_format="xml")


def parse_results(content: bytes, content_type: str, *, accept_xml: bool = False) -> QueryResult:
    """按内容类型解析 SPARQL 结果。

    Args:
        content: 响应体。
        content_type: 响应的 Content-Type。
        accept_xml: 是否接受 XML 结果。

    Returns:
        解析后的查询结果。

    Raises:
        SparqlError: 内容类型不被接受或内容无法解析时抛出（INVALID_RESPONSE）。
    """
    lowered = content_type.lower()
    if "json" in lowered:
        return parse_json_results(content)
    if accept_xml and "xml" in lowered:
        return parse_xml_results(content)
    raise _invalid("Unexpected response format", f"Expected JSON, got: {content_type}")
