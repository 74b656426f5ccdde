import time

from utils.logger_utils import get_logger

logger = get_logger("Async Base Job")


class AsyncBaseJob(object):
    name = "job"

    async def run(self):
        started_at = time.monotonic()
        logger.info(f"Starting {self.name}")
        try:
            await self._start()
            await self._execute()
        finally:
            await self._end()
            logger.info(f"{self.name} finished after {time.monotonic() - started_at:.1f}s")

    async def _start(self):
        pass

    async def _execute(self):
        pass

    async def _end(self):
        pass
