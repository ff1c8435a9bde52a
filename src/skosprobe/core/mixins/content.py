"""内容探测 Mixin。"""

from skosprobe.core.mixins.query import QueryMixin
from skosprobe.exceptions import SparqlError
from skosprobe.logger import logger
from skosprobe.models.endpoint import EndpointDescriptor
from skosprobe.models.results import ErrorCode

JSON_PROBE_QUERY = "SELECT * WHERE { ?s ?p ?o } LIMIT 1"
SKOS_CONTENT_QUERY = """
ASK {
  { ?s a skos:Concept }
  UNION
  { ?s a skos:ConceptScheme }
}
"""


class ContentMixin(QueryMixin):
    """内容探测 Mixin。

    负责判断端点是否返回 SPARQL JSON 结果以及是否存在 SKOS 内容。
    """

    async def detect_json_support(self, endpoint: EndpointDescriptor) -> bool | None:
        """探测端点是否返回 SPARQL JSON 结果。

        仅接受 JSON：返回非 JSON 内容时判定为不支持。

        Args:
            endpoint: 目标端点。

        Returns:
            支持返回 True，返回其他格式时返回 False，查询失败时返回 None。
        """
        try:
            await self.executor.execute(
                endpoint,
                JSON_PROBE_QUERY,
                timeout_ms=self.config.probe_timeout_ms,
                retries=self.config.probe_retries,
                cancel_event=self.cancel_event,
            )
        except SparqlError as e:
            if e.code == ErrorCode.INVALID_RESPONSE:
                return False
            logger.warning(f"JSON support probe failed: {e}")
            return None
        return True

    async def check_skos_content(self, endpoint: EndpointDescriptor) -> bool | None:
        """探测端点是否包含 SKOS 概念或概念方案。

        Args:
            endpoint: 目标端点。

        Returns:
            ASK 结果，查询失败时返回 None。
        """
        try:
            return await self._ask(endpoint, SKOS_CONTENT_QUERY)
        except SparqlError as e:
            logger.warning(f"SKOS content probe failed: {e}")
            return None
