"""
FastAPI application exposing poller health and manual controls.
"""

from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from mail2ledger import __version__
from mail2ledger.config import settings
from mail2ledger.core.errors import StateError
from mail2ledger.core.logging import configure_logging, get_logger
from mail2ledger.processors.poller import Poller
from mail2ledger.scheduler import start_scheduler, stop_scheduler

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    configure_logging(settings.log_level, settings.log_json)
    log.info("application_starting")

    if getattr(app.state, "poller", None) is None:
        app.state.poller = Poller()

    if settings.scheduler_enabled:
        start_scheduler(app.state.poller)
    else:
        log.info("scheduler_disabled", reason="use POST /poll to run cycles")

    yield

    if settings.scheduler_enabled:
        stop_scheduler()
    app.state.poller.ledger.close()
    log.info("application_stopped")


app = FastAPI(
    title="mail2ledger",
    description="Bank alert email to ledger sync",
    version=__version__,
    lifespan=lifespan,
)


# Response Models

class CursorResponse(BaseModel):
    last_message_id: str = ""
    disposed_ahead: list[str] = []


def _poller(request: Request) -> Poller:
    return request.app.state.poller


# Endpoints

@app.get("/health")
async def health():
    """Liveness check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/status", response_class=PlainTextResponse)
async def status(request: Request):
    """
    Pipeline health.

    500 with the reason when the token could not be refreshed or the
    last cycle aborted, since the pipeline is stalled until fixed.
    """
    health = _poller(request).health
    if not health.healthy:
        return PlainTextResponse(health.reason, status_code=500)
    return PlainTextResponse("ok")


@app.get("/cursor", response_model=CursorResponse)
async def get_cursor(request: Request):
    """Currently persisted cursor."""
    try:
        cursor = _poller(request).store.load()
    except StateError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return CursorResponse(
        last_message_id=cursor.last_processed_id,
        disposed_ahead=sorted(cursor.disposed_ahead),
    )


@app.post("/poll")
async def trigger_poll(request: Request, background_tasks: BackgroundTasks):
    """
    Run one poll cycle now.

    Runs in background to avoid timeout. Skipped if a cycle is already running.
    """
    background_tasks.add_task(_poller(request).process)
    return {"status": "poll_started"}


def run():
    """Entry point: serve the API and run the scheduler."""
    import uvicorn

    uvicorn.run(app, host=settings.listen_host, port=settings.listen_port)


# Run with: uvicorn mail2ledger.main:app --host 0.0.0.0 --port 8999
