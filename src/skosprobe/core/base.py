"""能力探测器抽象基类。"""

import asyncio
from abc import ABC, abstractmethod

from skosprobe.client.executor import SparqlExecutor
from skosprobe.config import ProbeConfig
from skosprobe.models.endpoint import EndpointDescriptor
from skosprobe.models.results import QueryResult


class BaseProber(ABC):
    """能力探测器抽象基类。

    只保存执行器与探测配置，定义查询接口。
    具体探测由各 Mixin 提供。

    Attributes:
        executor: SPARQL 查询执行器。
        config: 探测配置。
        cancel_event: 外部取消信号，作用于所有探测查询。
    """

    def __init__(
        self,
        executor: SparqlExecutor,
        config: ProbeConfig | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        """初始化探测器基类。

        Args:
            executor: SPARQL 查询执行器。
            config: 探测配置，默认使用 ProbeConfig()。
            cancel_event: 外部取消信号。
        """
        self._executor = executor
        self._config = config or ProbeConfig()
        self.cancel_event = cancel_event

    @property
    def executor(self) -> SparqlExecutor:
        """SPARQL 查询执行器。"""
        return self._executor

    @property
    def config(self) -> ProbeConfig:
        """探测配置。"""
        return self._config

    @abstractmethod
    async def _query(self, endpoint: EndpointDescriptor, query: str) -> QueryResult:
        """以探测重试预算执行查询。"""
        ...
