"""重试策略。

RetryPolicy 是唯一的重试循环实现：按分类器将异常映射为 AppError，
按重试谓词决定是否继续，并在两次尝试之间执行可被取消的指数退避。
交互式查询与能力探测复用同一策略，只是参数不同。
"""

import asyncio
from collections.abc import Awaitable, Callable

from skosprobe.exceptions import QueryCancelledError, SparqlError
from skosprobe.logger import logger
from skosprobe.models.results import AppError, ErrorCode

type Classifier = Callable[[BaseException], AppError]
type RetryPredicate = Callable[[AppError], bool]
type Sleep = Callable[[float], Awaitable[None]]


def raise_if_cancelled(cancel_event: asyncio.Event | None) -> None:
    """若取消信号已触发则抛出 QueryCancelledError。"""
    if cancel_event is not None and cancel_event.is_set():
        raise QueryCancelledError()


class RetryPolicy:
    """带错误分类的重试组合子。

    共进行 retries + 1 次尝试；第 n 次失败后等待 base_delay_ms * 2^(n-1) 毫秒。

    Attributes:
        retries: 重试次数。
        base_delay_ms: 基础延迟（毫秒）。

    Example:
        ```python
        policy = RetryPolicy(
            retries=3,
            base_delay_ms=1000,
            classify=classify_exception,
            should_retry=is_retryable,
        )
        result = await policy.run(lambda attempt: send_once(), cancel_event=event)
        ```
    """

    def __init__(
        self,
        *,
        retries: int,
        base_delay_ms: int,
        classify: Classifier,
        should_retry: RetryPredicate,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """初始化重试策略。

        Args:
            retries: 重试次数，必须非负。
            base_delay_ms: 指数退避的基础延迟（毫秒）。
            classify: 异常分类器。
            should_retry: 判断错误是否值得重试。
            sleep: 休眠函数（秒），测试时可注入。
        """
        if retries < 0:
            raise ValueError("retries must be non-negative")
        self.retries = retries
        self.base_delay_ms = base_delay_ms
        self._classify = classify
        self._should_retry = should_retry
        self._sleep = sleep

    def delay_for(self, attempt: int) -> int:
        """第 attempt 次（从 1 开始）失败后的退避延迟（毫秒）。"""
        return self.base_delay_ms * 2 ** (attempt - 1)

    async def run[T](
        self,
        operation: Callable[[int], Awaitable[T]],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> T:
        """执行操作并按策略重试。

        Args:
            operation: 接收尝试序号（从 1 开始）的异步操作。
            cancel_event: 外部取消信号。

        Returns:
            操作的返回值。

        Raises:
            SparqlError: 错误不可重试或重试耗尽时抛出，携带最后一次分类的错误。
            QueryCancelledError: 取消信号在尝试前、尝试中或退避中触发时抛出。
        """
        last_error: AppError | None = None
        last_exc: BaseException | None = None
        total = self.retries + 1

        for attempt in range(1, total + 1):
            raise_if_cancelled(cancel_event)
            try:
                return await operation(attempt)
            except QueryCancelledError:
                raise
            except Exception as e:
                error = self._classify(e)
                last_error, last_exc = error, e
                if not self._should_retry(error):
                    logger.debug(f"Attempt {attempt}/{total} failed with {error.code}, not retrying")
                    raise SparqlError(error) from e
                logger.warning(f"Attempt {attempt}/{total} failed: {error.code} {error.message}")

            if attempt < total:
                delay_ms = self.delay_for(attempt)
                logger.debug(f"Retrying in {delay_ms}ms")
                await self._backoff(delay_ms, cancel_event)

        if last_error is None:
            last_error = AppError(code=ErrorCode.UNKNOWN, message="Request failed after retries")
        raise SparqlError(last_error) from last_exc

    async def _backoff(self, delay_ms: int, cancel_event: asyncio.Event | None) -> None:
        """可被取消的退避休眠。"""
        if cancel_event is None:
            await self._sleep(delay_ms / 1000)
            return

        sleeper = asyncio.ensure_future(self._sleep(delay_ms / 1000))
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (sleeper, waiter):
                if not task.done():
                    task.cancel()
        raise_if_cancelled(cancel_event)
