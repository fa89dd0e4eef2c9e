"""Entry point for the upload server."""

import time
import uuid
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from common.constants import INDEX_PATH
from common.logging_config import setup_logging
from server import config, service_locator
from server.blob_store import BlobStoreAdapter
from server.cleanup_task import SessionSweeper
from server.exceptions import (
    BlobUploadFailedError,
    ConfigurationError,
    DownloadNotAllowedError,
    GroupExistsError,
    IncompleteUploadError,
    InvalidChunkError,
    InvalidPasswordError,
    InvalidPayloadError,
    MetadataConflictError,
    MetadataStoreError,
    PasswordRequiredError,
    RecordExistsError,
    RecordNotFoundError,
    SessionNotFoundError,
    ShelfException
)
from server.github_client import GitHubClient
from server.repositories.content_store import GitHubContentStore, InMemoryContentStore
from server.routes.action_routes import router as action_router
from server.routes.catalog_routes import router as catalog_router
from server.routes.release_routes import router as release_router
from server.routes.upload_routes import router as upload_router
from server.schemas.common import ErrorResponse
from server.sessions import ChunkSessionManager

logger = setup_logging('server')


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Upload server starting up (catalog backend: {config.STORAGE_BACKEND})")

    github = GitHubClient()
    if config.STORAGE_BACKEND == "memory":
        content_store = InMemoryContentStore()
    else:
        content_store = GitHubContentStore(github)

    session_manager = ChunkSessionManager(ttl_seconds=config.SESSION_TTL)
    service_locator.set_content_store(content_store)
    service_locator.set_blob_store(BlobStoreAdapter(github))
    service_locator.set_session_manager(session_manager)

    sweeper = SessionSweeper(session_manager, config.SESSION_SWEEP_INTERVAL)
    await sweeper.start()

    yield

    logger.info("Upload server shutting down...")
    await sweeper.stop()
    await content_store.close()
    await github.close()


app = FastAPI(
    title="AssetShelf Upload Server",
    description="Chunked uploads to release assets with a sharded JSON catalog",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Tag each request with an id (the caller's X-Request-ID when present)
    and log method, path, status and latency.
    """
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    request.state.request_id = request_id
    started = time.perf_counter()

    response = await call_next(request)

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"in {elapsed_ms:.1f}ms [request_id={request_id}]"
    )
    response.headers["X-Request-ID"] = request_id
    return response


def error_response(status_code: int, exc: Exception, code: str, **extra) -> JSONResponse:
    content = ErrorResponse(error=str(exc), code=code).model_dump()
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def request_id_of(request: Request) -> str:
    return getattr(request.state, 'request_id', 'unknown')


@app.exception_handler(SessionNotFoundError)
async def session_not_found_handler(request: Request, exc: SessionNotFoundError):
    logger.warning(f"Session not found: {exc} [request_id={request_id_of(request)}] path={request.url.path}")
    return error_response(status.HTTP_404_NOT_FOUND, exc, "SESSION_NOT_FOUND")


@app.exception_handler(IncompleteUploadError)
async def incomplete_upload_handler(request: Request, exc: IncompleteUploadError):
    logger.warning(f"Incomplete upload: {exc} [request_id={request_id_of(request)}] path={request.url.path}")
    return error_response(
        status.HTTP_400_BAD_REQUEST, exc, "INCOMPLETE_UPLOAD", missingChunks=exc.missing
    )


@app.exception_handler(InvalidChunkError)
async def invalid_chunk_handler(request: Request, exc: InvalidChunkError):
    logger.warning(f"Invalid chunk: {exc} [request_id={request_id_of(request)}] path={request.url.path}")
    return error_response(status.HTTP_400_BAD_REQUEST, exc, "INVALID_CHUNK")


@app.exception_handler(InvalidPayloadError)
async def invalid_payload_handler(request: Request, exc: InvalidPayloadError):
    logger.warning(f"Invalid payload: {exc} [request_id={request_id_of(request)}] path={request.url.path}")
    return error_response(status.HTTP_400_BAD_REQUEST, exc, "INVALID_PAYLOAD")


@app.exception_handler(BlobUploadFailedError)
async def blob_upload_failed_handler(request: Request, exc: BlobUploadFailedError):
    logger.error(
        f"Blob store failure: {exc} upstream_status={exc.status_code} "
        f"[request_id={request_id_of(request)}] path={request.url.path}"
    )
    return error_response(
        status.HTTP_502_BAD_GATEWAY, exc, "BLOB_UPLOAD_FAILED", upstreamStatus=exc.status_code
    )


@app.exception_handler(MetadataConflictError)
async def metadata_conflict_handler(request: Request, exc: MetadataConflictError):
    logger.error(f"Metadata conflict: {exc} [request_id={request_id_of(request)}] path={request.url.path}")
    return error_response(status.HTTP_409_CONFLICT, exc, "METADATA_CONFLICT")


@app.exception_handler(MetadataStoreError)
async def metadata_store_handler(request: Request, exc: MetadataStoreError):
    logger.error(
        f"Metadata store error: {exc} [request_id={request_id_of(request)}] path={request.url.path}",
        exc_info=True
    )
    return error_response(status.HTTP_502_BAD_GATEWAY, exc, "METADATA_STORE_ERROR")


@app.exception_handler(RecordNotFoundError)
async def record_not_found_handler(request: Request, exc: RecordNotFoundError):
    logger.warning(f"Not found: {exc} [request_id={request_id_of(request)}] path={request.url.path}")
    return error_response(status.HTTP_404_NOT_FOUND, exc, "NOT_FOUND")


@app.exception_handler(RecordExistsError)
async def record_exists_handler(request: Request, exc: RecordExistsError):
    logger.warning(f"Record exists: {exc} [request_id={request_id_of(request)}] path={request.url.path}")
    return error_response(status.HTTP_409_CONFLICT, exc, "RECORD_EXISTS")


@app.exception_handler(GroupExistsError)
async def group_exists_handler(request: Request, exc: GroupExistsError):
    logger.warning(f"Group exists: {exc} [request_id={request_id_of(request)}] path={request.url.path}")
    return error_response(status.HTTP_409_CONFLICT, exc, "GROUP_EXISTS")


@app.exception_handler(PasswordRequiredError)
async def password_required_handler(request: Request, exc: PasswordRequiredError):
    logger.info(f"Password required [request_id={request_id_of(request)}] path={request.url.path}")
    return error_response(status.HTTP_403_FORBIDDEN, exc, "PASSWORD_REQUIRED", requiresPassword=True)


@app.exception_handler(InvalidPasswordError)
async def invalid_password_handler(request: Request, exc: InvalidPasswordError):
    logger.warning(f"Invalid password [request_id={request_id_of(request)}] path={request.url.path}")
    return error_response(status.HTTP_403_FORBIDDEN, exc, "INVALID_PASSWORD", requiresPassword=True)


@app.exception_handler(DownloadNotAllowedError)
async def download_not_allowed_handler(request: Request, exc: DownloadNotAllowedError):
    logger.warning(f"Download refused: {exc} [request_id={request_id_of(request)}] path={request.url.path}")
    return error_response(status.HTTP_400_BAD_REQUEST, exc, "DOWNLOAD_NOT_ALLOWED")


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"Configuration error: {exc} [request_id={request_id_of(request)}] path={request.url.path}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc, "CONFIGURATION_ERROR")


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error [request_id={request_id_of(request)}] path={request.url.path}")
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Request validation failed",
        "VALIDATION_ERROR",
        details=errors,
    )


@app.exception_handler(ShelfException)
async def shelf_exception_handler(request: Request, exc: ShelfException):
    logger.error(
        f"Unhandled shelf exception: {exc} [request_id={request_id_of(request)}] path={request.url.path}",
        exc_info=True
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc, "INTERNAL_ERROR")


app.include_router(upload_router)
app.include_router(release_router)
app.include_router(catalog_router)
app.include_router(action_router)


@app.get("/")
async def root():
    return {"message": "AssetShelf Upload Server", "status": "running"}


@app.get("/health")
async def health_check():
    """Liveness probe; no backend is contacted."""
    return {"status": "healthy", "service": "server"}


@app.get("/ready")
async def ready_check():
    """
    Readiness probe: the catalog backend must answer a read of the shard
    index. Also reports how many upload sessions are open.
    """
    try:
        await service_locator.get_content_store().read(INDEX_PATH)
    except (RuntimeError, ShelfException, httpx.HTTPError) as e:
        catalog_status = f"error: {e}"
    else:
        catalog_status = "ok"

    body = {
        "ready": catalog_status == "ok",
        "catalog": catalog_status,
        "activeSessions": await service_locator.get_session_manager().active_count(),
    }
    code = status.HTTP_200_OK if body["ready"] else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=body)


def main() -> None:
    """Run the server under uvicorn."""
    uvicorn.run("server.main:app", host=config.SERVER_HOST, port=config.SERVER_PORT)


if __name__ == "__main__":
    main()
