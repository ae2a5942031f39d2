# salesprogram/services/batch.py
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, Iterable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class BatchFailure(Generic[T]):
    item: T
    error: Exception


@dataclass
class BatchResult(Generic[T, R]):
    total: int
    succeeded: List[R] = field(default_factory=list)
    failed: List[BatchFailure[T]] = field(default_factory=list)
    cancelled: bool = False

    @property
    def attempted(self) -> int:
        return len(self.succeeded) + len(self.failed)


async def run_sequential(
    items: Iterable[T],
    operation: Callable[[T], Awaitable[R]],
    delay: float = 0.0,
    stop: Optional[asyncio.Event] = None,
    describe: Callable[[Any], str] = repr,
) -> BatchResult[T, R]:
    """
    Run `operation` over `items` strictly one at a time.

    The store rate-limits bursts, so each call is awaited before the next
    starts and `delay` seconds pass between calls. A failing item is
    recorded and the loop moves on. Setting `stop` ends the run before
    the next item; what was done so far is returned with `cancelled=True`.
    """
    items = list(items)
    result = BatchResult(total=len(items))

    for index, item in enumerate(items):
        if index and delay:
            await asyncio.sleep(delay)
        if stop is not None and stop.is_set():
            logger.warning("Batch stopped after %s of %s items", index, len(items))
            result.cancelled = True
            break

        logger.info("Processing %s/%s: %s", index + 1, len(items), describe(item))
        try:
            outcome = await operation(item)
        except Exception as exc:
            logger.error("Error processing %s: %s", describe(item), exc)
            result.failed.append(BatchFailure(item=item, error=exc))
        else:
            result.succeeded.append(outcome)

    logger.info(
        "Batch finished: %s succeeded, %s failed, %s total",
        len(result.succeeded), len(result.failed), result.total,
    )
    return result
