"""
Fixed-interval scheduling of source pipelines.

Each source gets its own asyncio task: run a cycle, sleep the interval,
repeat. Tasks are independent, so cycles of different sources can overlap.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from .pipeline import CycleReport, SourcePipeline

logger = logging.getLogger(__name__)


class Scheduler:
    def __init__(
        self,
        pipelines: List[SourcePipeline],
        interval_seconds: float = 300.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.pipelines = pipelines
        self.interval_seconds = interval_seconds
        self._sleep = sleep

    def report_period_mismatches(self) -> None:
        # Source.period is declared in minutes but cycles run on the shared interval.
        for pipeline in self.pipelines:
            source = pipeline.source
            if source.period * 60 != self.interval_seconds:
                logger.warning(
                    f"{source.name} declares a {source.period} minute period; "
                    f"running every {self.interval_seconds:g} seconds instead",
                    extra={"source": source.key.value},
                )

    async def run_cycle(self, pipeline: SourcePipeline) -> Optional[CycleReport]:
        """Run one cycle, logging unexpected errors instead of raising them."""
        try:
            return await pipeline.run_once()
        except Exception:
            logger.exception(f"Unexpected error in {pipeline.source.name} cycle")
            return None

    async def run_source(self, pipeline: SourcePipeline, cycles: Optional[int] = None) -> None:
        """Repeat cycles for one source; ``cycles=None`` means forever."""
        done = 0
        while cycles is None or done < cycles:
            await self.run_cycle(pipeline)
            done += 1
            if cycles is None or done < cycles:
                await self._sleep(self.interval_seconds)

    async def run_all_once(self) -> List[Optional[CycleReport]]:
        return list(await asyncio.gather(*(self.run_cycle(p) for p in self.pipelines)))

    async def run(self) -> None:
        if not self.pipelines:
            logger.warning("No active sources to schedule")
            return
        self.report_period_mismatches()
        logger.info(f"Scheduling {len(self.pipelines)} sources every {self.interval_seconds:g} seconds")
        tasks = [
            asyncio.create_task(self.run_source(p), name=f"source-{p.source.key.value}")
            for p in self.pipelines
        ]
        try:
            await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                task.cancel()
