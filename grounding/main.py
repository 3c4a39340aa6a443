import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from grounding.api.routes import router as api_router
from grounding.config import public_settings, settings, setup_logging
from grounding.engine import get_engine

logger = setup_logging()


def _log_startup_ingestion(task: asyncio.Future) -> None:
    if task.cancelled():
        return
    if task.exception() is not None:
        logger.error("Startup ingestion failed", extra={"error": str(task.exception())})
    else:
        logger.info("Startup ingestion finished", extra={"status": task.result().status.state.value})


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting")
    logger.info("Loaded settings: %s", public_settings())
    if settings.ingest_on_startup:
        engine = get_engine()
        # Runs in the background; requests are served by the fallback tiers meanwhile.
        app.state.startup_ingestion = asyncio.ensure_future(engine.ingest())
        app.state.startup_ingestion.add_done_callback(_log_startup_ingestion)
    yield


app = FastAPI(title="BNN Grounding Engine", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error", extra={"path": request.url.path})
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(api_router)
