import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from .broker import RestConsumer, RestProvider, make_client
from .errors import ForwardError, ReceiveError, RecordError
from .schemas import WorkerStatsResponse
from .settings import Settings, settings
from .transform import Transformer

logger = logging.getLogger(__name__)


@dataclass
class WorkerStats:
    running: bool = False
    forwarded: int = 0
    dropped: int = 0
    failed: int = 0
    last_error: Optional[str] = None

    def snapshot(self) -> WorkerStatsResponse:
        return WorkerStatsResponse(
            running=self.running,
            forwarded=self.forwarded,
            dropped=self.dropped,
            failed=self.failed,
            last_error=self.last_error,
        )


async def run_worker(
    transformer: Transformer,
    stats: WorkerStats,
    *,
    backoff_seconds: float = 10.0,
    max_consecutive_failures: int = 5,
) -> None:
    """
    Move messages one at a time until cancelled.

    Bad records are dropped and the loop carries on. Broker failures back off
    and are retried by the next read; after max_consecutive_failures in a row
    the last one is raised to the caller.
    """
    consecutive = 0
    stats.running = True
    try:
        while True:
            try:
                await transformer.get_message()
            except RecordError as e:
                stats.dropped += 1
                stats.last_error = f"{e.error_code}: {e}"
                logger.warning("dropping record: %s", e)
                continue
            except (ReceiveError, ForwardError) as e:
                consecutive += 1
                stats.failed += 1
                stats.last_error = f"{e.error_code}: {e}"
                logger.exception("failed to move message (%d in a row)", consecutive)
                if consecutive >= max_consecutive_failures:
                    raise
                await asyncio.sleep(backoff_seconds)
                continue

            consecutive = 0
            stats.forwarded += 1
    finally:
        stats.running = False


async def serve(cfg: Settings, stats: WorkerStats) -> None:
    async with make_client(cfg) as client:
        transformer = Transformer(
            RestConsumer.from_settings(client, cfg),
            RestProvider.from_settings(client, cfg),
        )
        logger.info("Starting transform service: %s -> %s", cfg.consumer_topic, cfg.provider_topic)
        await run_worker(
            transformer,
            stats,
            backoff_seconds=cfg.error_backoff_seconds,
            max_consecutive_failures=cfg.max_consecutive_failures,
        )


def main() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(serve(settings, WorkerStats()))
    except KeyboardInterrupt:
        logger.info("transform service stopped")


if __name__ == "__main__":
    main()
