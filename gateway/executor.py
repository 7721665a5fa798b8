"""
Handler Chain Executor

Runs an inbound text through the registered handler chain and forwards
the replies to the reply dispatcher.

Flow per event:
  registry (in order) → fullmatch → handler replies → drop empty → dispatcher

Rules:
- A failing handler is logged with the correlation id and skipped
- Only a reply-dispatch failure aborts the event
- Replies of handler N are dispatched before replies of handler N+1
- No ordering across distinct events
"""

import asyncio
import logging
from contextlib import aclosing
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from .context import RequestContext, bind_logger
from .dispatcher import ReplyDispatcher
from .registry import HandlerRegistry

logger = logging.getLogger(__name__)


@dataclass
class _WorkItem:
    ctx: RequestContext
    text: str
    started: Optional[asyncio.Future] = None


async def _iterate(result) -> AsyncIterator:
    # Handlers normally return async generators; plain iterables are accepted too.
    if hasattr(result, "__aiter__"):
        async for item in result:
            yield item
    else:
        for item in result:
            yield item


class HandlerChainExecutor:
    """
    Bounded worker pool over the handler chain.

    `workers` coroutines consume an asyncio queue; submission never spawns
    a task per event.
    """

    def __init__(
        self,
        registry: HandlerRegistry,
        dispatcher: Optional[ReplyDispatcher] = None,
        workers: int = 4,
    ):
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self._registry = registry
        self._dispatcher = dispatcher
        self._size = workers
        self._queue: Optional[asyncio.Queue] = None
        self._workers: list[asyncio.Task] = []
        self._accepting = False

    # ========================================================================
    # HANDLER CHAIN
    # ========================================================================

    async def dispatch(self, ctx: RequestContext, text: str) -> AsyncIterator[str]:
        """
        Lazily yield the replies of every handler whose pattern fully matches.

        Handlers are attempted in registry order. A handler that raises is
        logged and skipped; replies it yielded before failing are kept.
        """
        log = bind_logger(logger, ctx)

        for spec in self._registry.handlers():
            match = spec.pattern.fullmatch(text)
            if match is None:
                continue

            try:
                async with aclosing(_iterate(spec.handle(ctx, text, match))) as replies:
                    async for reply in replies:
                        if reply:
                            yield reply
            except Exception as e:
                log.error(
                    f"Handler {spec.name or spec.pattern.pattern} failed, skipping: {e}",
                    exc_info=True,
                    extra={"handler": spec.name},
                )

    # ========================================================================
    # WORK POOL
    # ========================================================================

    @property
    def running(self) -> bool:
        return self._accepting and bool(self._workers)

    @property
    def pending(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0

    async def start(self) -> None:
        """Spawn the worker coroutines on the running loop."""
        if self._workers:
            return
        self._queue = asyncio.Queue()
        self._accepting = True
        self._workers = [
            asyncio.create_task(self._worker(), name=f"executor-worker-{i}")
            for i in range(self._size)
        ]
        logger.info(f"Handler executor started with {self._size} worker(s)")

    def submit(self, ctx: RequestContext, text: str) -> bool:
        """
        Hand (ctx, text) to the pool without waiting.

        Returns:
            False if the executor is not accepting work (event dropped)
        """
        if not self._accepting or self._queue is None:
            bind_logger(logger, ctx).warning("Executor not accepting work, event dropped")
            return False
        self._queue.put_nowait(_WorkItem(ctx, text))
        return True

    async def submit_and_wait(self, ctx: RequestContext, text: str) -> bool:
        """Like submit, but returns only once a worker has started the event."""
        if not self._accepting or self._queue is None:
            bind_logger(logger, ctx).warning("Executor not accepting work, event dropped")
            return False
        started = asyncio.get_running_loop().create_future()
        self._queue.put_nowait(_WorkItem(ctx, text, started))
        await started
        return True

    async def shutdown(self, drain_timeout: Optional[float] = None) -> None:
        """Stop accepting work, drain queued events, then stop the workers."""
        self._accepting = False
        if self._queue is not None and self._workers:
            try:
                await asyncio.wait_for(self._queue.join(), timeout=drain_timeout)
            except asyncio.TimeoutError:
                logger.warning(f"Executor drain timed out with {self.pending} event(s) pending")

        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info("Handler executor stopped")

    async def _worker(self) -> None:
        while True:
            item = await self._queue.get()
            try:
                if item.started is not None and not item.started.done():
                    item.started.set_result(None)
                await self._process(item.ctx, item.text)
            finally:
                self._queue.task_done()

    async def _process(self, ctx: RequestContext, text: str) -> None:
        log = bind_logger(logger, ctx)
        log.debug(f"Received text<{text}> from {ctx.platform.value}<{ctx.reply_target}>")

        sent = 0
        try:
            async with aclosing(self.dispatch(ctx, text)) as replies:
                async for reply in replies:
                    if self._dispatcher is None:
                        raise RuntimeError("No reply dispatcher configured")
                    await self._dispatcher.dispatch(ctx, reply)
                    sent += 1
        except Exception as e:
            log.error(f"Failed to handle text<{text}>: {e}", exc_info=True)
            return

        if sent:
            log.info(f"Replied to text<{text}> with {sent} message(s)")
