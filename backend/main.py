from fastapi import FastAPI, Request, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
import json
import logging
import time
import uuid

from api_health import router as health_router
from api_neo4j import router as neo4j_router
from config import CORS_ALLOWED_ORIGINS, LOG_LEVEL
from db_neo4j import GraphStoreUnavailable, close_driver
from middleware_timeout import TimeoutMiddleware
from models.graph import DataContractViolation
from services_expansion import MissingSeedNode

# Configure logging
logging.basicConfig(level=LOG_LEVEL, format="%(message)s")
logger = logging.getLogger("wilhelm")


def structured_log_line(payload: dict) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    The Neo4j driver is created on first use and closed on shutdown.
    """
    yield
    close_driver()


app = FastAPI(
    title="Wilhelm Backend",
    description="Backend API for a vocabulary knowledge graph stored in Neo4j.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(TimeoutMiddleware)

app.include_router(health_router)
app.include_router(neo4j_router)


@app.middleware("http")
async def request_observability(request: Request, call_next):
    start = time.perf_counter()
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    request.state.request_id = request_id

    response = None
    try:
        response = await call_next(request)
    finally:
        latency_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            structured_log_line(
                {
                    "event": "request",
                    "request_id": request_id,
                    "route": request.url.path,
                    "method": request.method,
                    "status": response.status_code if response is not None else 500,
                    "latency_ms": latency_ms,
                }
            )
        )

    response.headers["x-request-id"] = request_id
    return response


# Centralized error handling
@app.exception_handler(GraphStoreUnavailable)
async def graph_store_unavailable_handler(request: Request, exc: GraphStoreUnavailable):
    """The database is down or rejected our credentials; callers may retry."""
    logger.error(
        f"Graph database unavailable on {request.method} {request.url.path}: {exc}",
        extra={"method": request.method, "path": request.url.path},
    )
    return JSONResponse(status_code=503, content={"detail": "Graph database unavailable"})


@app.exception_handler(DataContractViolation)
async def data_contract_violation_handler(request: Request, exc: DataContractViolation):
    """A database record lacks an attribute this service requires. Not retryable."""
    logger.error(
        f"Data contract violation on {request.method} {request.url.path}: {exc}",
        extra={"method": request.method, "path": request.url.path},
    )
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(MissingSeedNode)
async def missing_seed_node_handler(request: Request, exc: MissingSeedNode):
    logger.error(
        f"Seed node missing on {request.method} {request.url.path}: {exc}",
        extra={"method": request.method, "path": request.url.path, "label": exc.label},
    )
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Handle HTTP exceptions (4xx, 5xx).
    Logs the error with appropriate level and returns JSON response.
    """
    # Log 4xx errors at WARNING level, 5xx at ERROR level
    if exc.status_code >= 500:
        logger.error(
            f"HTTP {exc.status_code} error on {request.method} {request.url.path}",
            extra={
                "status_code": exc.status_code,
                "method": request.method,
                "path": request.url.path,
                "detail": exc.detail,
            },
        )
    else:
        logger.warning(
            f"HTTP {exc.status_code} error on {request.method} {request.url.path}: {exc.detail}",
            extra={
                "status_code": exc.status_code,
                "method": request.method,
                "path": request.url.path,
                "detail": exc.detail,
            },
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handle request validation errors (422).
    These are client errors, so log at WARNING level.
    """
    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "errors": exc.errors(),
        },
    )
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors()},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler for unhandled exceptions.
    Logs full stack trace but returns sanitized error message to client.
    """
    logger.exception(
        f"Unhandled exception on {request.method} {request.url.path}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
        },
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


@app.get("/")
def read_root():
    return {"status": "ok", "message": "Wilhelm backend is running"}
