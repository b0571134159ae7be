import asyncio
import logging
from typing import Optional

from fastapi import FastAPI, HTTPException

from .errors import MalformedRecord
from .reports import build_report
from .schemas import PreviewRequest, TypedReport, WorkerStatsResponse
from .settings import settings
from .worker import WorkerStats, serve

logger = logging.getLogger(__name__)

app = FastAPI(title="Storm Report Transformer", version="0.3.0")

worker_stats = WorkerStats()


def start_worker() -> Optional[asyncio.Task]:
    if not settings.worker_enabled:
        logger.info("worker disabled, serving HTTP endpoints only")
        return None
    return asyncio.get_running_loop().create_task(serve(settings, worker_stats))


def _worker_done(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is None:
        logger.warning("transform worker exited")
        return
    worker_stats.running = False
    worker_stats.last_error = f"{getattr(exc, 'error_code', type(exc).__name__)}: {exc}"
    logger.error("transform worker stopped", exc_info=exc)


@app.on_event("startup")
async def _startup():
    task = start_worker()
    if task is not None:
        task.add_done_callback(_worker_done)
    app.state.worker = task


@app.on_event("shutdown")
async def _shutdown():
    task = getattr(app.state, "worker", None)
    if task is None:
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    except Exception as e:
        # already reported by _worker_done
        logger.info("worker had stopped before shutdown: %s", e)


@app.get("/health")
def health():
    task = getattr(app.state, "worker", None)
    if task is not None and task.done():
        raise HTTPException(status_code=503, detail="Transform worker is not running.")
    return {"ok": True}


@app.get("/stats", response_model=WorkerStatsResponse)
def stats():
    return worker_stats.snapshot()


@app.post("/preview")
def preview(req: PreviewRequest) -> TypedReport:
    try:
        return build_report(req.report_type, req.line.encode("utf-8"))
    except MalformedRecord as e:
        raise HTTPException(status_code=400, detail=str(e))
