"""
SkillVector HTTP API: search, upload, listing and health over the shared runtime.
Run: uvicorn skillvector.app:app  (or python run_app.py)
"""

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, File, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from skillvector.config import PEOPLE_LIMIT_DEFAULT, SEARCH_LIMIT_DEFAULT, load_settings
from skillvector.errors import FileValidationError, ProviderError, VectorIndexError
from skillvector.runtime import SearchRuntime, build_runtime
from skillvector.schemas.ingestion import IngestionOutcome, SourceFile
from skillvector.services.file_intake import parse_data_type, validate_file_content, validate_file_type
from skillvector.services.profile_payload import person_from_payload, source_from_payload
from skillvector.utils.logger import get_logger, set_package_level

logger = get_logger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error(status_code: int, error: str, details: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "details": details, "timestamp": _now()},
    )


def _upload_message(outcome: IngestionOutcome) -> str:
    if outcome.already_exists:
        return f"{outcome.file_name} already processed: all profiles already exist"
    return (
        f"Processed {outcome.file_name}: {outcome.stored_count} stored, "
        f"{outcome.duplicate_count} duplicate(s), {outcome.invalid_count} invalid"
    )


def create_app(runtime: Optional[SearchRuntime] = None) -> FastAPI:
    """
    Build the API. A prebuilt runtime (tests) is used as-is; otherwise one is
    bound from the environment when the app starts.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        rt = runtime
        if rt is None:
            settings = load_settings()
            set_package_level(settings.log_level)
            rt = build_runtime(settings)
        app.state.runtime = rt
        app.state.started_at = time.monotonic()
        await rt.start()
        logger.info("SkillVector API ready: %s", rt.describe())
        try:
            yield
        finally:
            await rt.close()

    app = FastAPI(
        title="SkillVector API",
        description="Semantic people search over ingested professional profiles",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.exception_handler(ProviderError)
    async def _provider_error(request: Request, exc: ProviderError) -> JSONResponse:
        logger.error("Provider failure on %s: %s", request.url.path, exc)
        return _error(502, "Upstream provider failed", str(exc))

    @app.exception_handler(VectorIndexError)
    async def _index_error(request: Request, exc: VectorIndexError) -> JSONResponse:
        logger.error("Vector index failure on %s: %s", request.url.path, exc)
        return _error(503, "Vector index unavailable", str(exc))

    @app.exception_handler(RequestValidationError)
    async def _request_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        problems = []
        for err in exc.errors():
            location = ".".join(str(part) for part in err.get("loc", ()))
            problems.append(f"{location}: {err.get('msg', 'invalid')}")
        logger.warning("Rejected request to %s: %s", request.url.path, problems)
        return _error(400, "Invalid request parameters", "; ".join(problems))

    @app.exception_handler(FileValidationError)
    async def _file_error(request: Request, exc: FileValidationError) -> JSONResponse:
        logger.warning("Rejected upload: %s", exc)
        return _error(400, "Invalid file", str(exc))

    @app.get("/search")
    async def search(
        request: Request,
        query: Optional[str] = None,
        limit: int = SEARCH_LIMIT_DEFAULT,
        offset: int = 0,
    ):
        if not (query or "").strip():
            return _error(400, "Query parameter is required", "Provide ?query=<text>")
        rt: SearchRuntime = request.app.state.runtime
        page = await rt.search.search(query.strip(), limit=limit, offset=offset)
        people = [person_from_payload(r.payload, r.relevance_score) for r in page.results]
        sources = [source_from_payload(r.payload, r.relevance_score) for r in page.results]
        return {
            "success": True,
            "query": query.strip(),
            "answer": page.summary,
            "people": people,
            "sources": sources,
            "total": page.total,
            "limit": page.limit,
            "offset": page.offset,
            "hasMore": page.has_more,
            "timestamp": _now(),
        }

    @app.post("/upload")
    async def upload(
        request: Request,
        declared_type: str = Query(..., alias="type", description="csv, json or text"),
        file: UploadFile = File(...),
    ):
        data_type = validate_file_type(parse_data_type(declared_type), file.filename or "")
        raw = await file.read()
        try:
            content = raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FileValidationError(f"File is not UTF-8 text: {e}") from e
        validate_file_content(data_type, content)

        rt: SearchRuntime = request.app.state.runtime
        outcome = await rt.ingestion.ingest(
            SourceFile(name=file.filename or "upload", data_type=data_type, content=content)
        )
        return {
            "success": True,
            "message": _upload_message(outcome),
            "data": {
                "fileName": outcome.file_name,
                "dataType": outcome.data_type.value,
                "alreadyExists": outcome.already_exists,
                "storedInQdrant": outcome.stored_in_qdrant,
                "storedCount": outcome.stored_count,
                "duplicateCount": outcome.duplicate_count,
                "invalidCount": outcome.invalid_count,
                "processedData": outcome.processed_data,
            },
        }

    @app.get("/people")
    async def people(request: Request, limit: int = PEOPLE_LIMIT_DEFAULT):
        rt: SearchRuntime = request.app.state.runtime
        records = await rt.search.list_people(limit)
        listed = [person_from_payload(r.payload) for r in records]
        return {"success": True, "count": len(listed), "people": listed}

    @app.get("/health")
    async def health(request: Request):
        rt: SearchRuntime = request.app.state.runtime
        index_ok = await rt.index.ping()
        return {
            "status": "ok" if index_ok else "degraded",
            "services": {
                "vectorIndex": "connected" if index_ok else "unreachable",
                "embedding": rt.embedder.name,
                "languageModel": rt.llm.name if rt.llm else "unconfigured",
            },
            "timestamp": _now(),
            "uptime": round(time.monotonic() - request.app.state.started_at, 3),
        }

    return app


app = create_app()
