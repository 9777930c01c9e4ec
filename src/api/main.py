import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import state
from api.metrics import REQUESTS_TOTAL, REQUEST_LATENCY_SECONDS
from api.routers import ops, tasks
from llm.llm_client import get_provider
from storage import db
from storage.task_store import InMemoryTaskStore, PostgresTaskStore
from taskboard import config, errors

# Logging configuration
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Taskboard API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(tasks.router)
app.include_router(ops.router)


def _observe_request(request: Request, status: int, start: float) -> None:
    # Route templates only; unmatched paths share one label.
    route = request.scope.get("route")
    endpoint = route.path if route is not None else "unmatched"
    REQUESTS_TOTAL.labels(endpoint=endpoint, status=str(status)).inc()
    REQUEST_LATENCY_SECONDS.labels(endpoint=endpoint).observe(time.time() - start)


@app.middleware("http")
async def record_request_metrics(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
    except Exception:
        # Unhandled errors become a 500 outside this middleware.
        _observe_request(request, 500, start)
        raise

    _observe_request(request, response.status_code, start)
    return response


@app.exception_handler(errors.TaskError)
async def task_error_handler(request: Request, exc: errors.TaskError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": f"Invalid value for {field}: {message}" if field else message},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": str(exc)},
    )


@app.on_event("startup")
async def startup() -> None:
    if config.TASK_STORE == "memory":
        logger.info("Using in-memory task store")
        state.task_store = InMemoryTaskStore()
    else:
        # No storage, no service: let the failure stop the process.
        try:
            await db.init_db_pool()
            await db.init_schema()
        except Exception:
            logger.critical("Unable to connect to the task database, shutting down")
            raise
        state.task_store = PostgresTaskStore()

    try:
        state.llm_provider = get_provider()
        logger.info(f"Transcript extraction provider: {state.llm_provider.name}")
    except Exception as e:
        logger.warning(f"Extraction provider unavailable, transcripts will use the fallback parser: {e}")


@app.on_event("shutdown")
async def shutdown() -> None:
    if config.TASK_STORE != "memory":
        await db.close_db_pool()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
