"""FastAPI application entrypoint for deadlint service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

try:  # pragma: no cover - optional dependency
    from fastapi import Depends, FastAPI
    from fastapi.responses import JSONResponse
    from pydantic import BaseModel

    _FASTAPI_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - service mode optional
    FastAPI = None  # type: ignore[assignment]
    Depends = None  # type: ignore[assignment]
    JSONResponse = None  # type: ignore[assignment]
    BaseModel = object  # type: ignore[assignment]
    _FASTAPI_AVAILABLE = False

from ..errors import DeadlintError
from ..orchestrator import Orchestrator, ScanOutcome
from ..reporting import relative_report_dict


class ScanRequest(BaseModel):
    path: str
    entry: Optional[List[str]] = None
    exclude: Optional[List[str]] = None


class DeadExportItem(BaseModel):
    file: str
    exportName: str


class DeadCssClassItem(BaseModel):
    file: str
    className: str


class ScanResponse(BaseModel):
    root: str
    filesScanned: int
    entries: List[str]
    warnings: List[str]
    deadFiles: List[str]
    deadExports: List[DeadExportItem]
    deadCssClasses: List[DeadCssClassItem]


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def _scan_response(outcome: ScanOutcome) -> ScanResponse:
    payload: Dict[str, Any] = relative_report_dict(outcome.report, outcome.root)
    return ScanResponse(
        root=str(outcome.root),
        filesScanned=outcome.files_scanned,
        entries=[outcome.relative(identity) for identity in outcome.entries],
        warnings=list(outcome.warnings),
        deadFiles=payload["deadFiles"],
        deadExports=[DeadExportItem(**item) for item in payload["deadExports"]],
        deadCssClasses=[DeadCssClassItem(**item) for item in payload["deadCssClasses"]],
    )


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing deadlint scans."""

    if not _FASTAPI_AVAILABLE:  # pragma: no cover - validated via unit tests
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install deadlint[service]`."
        )

    app = FastAPI(title="deadlint Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        # Lazy-instantiate per request to keep state predictable.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/scan", response_model=ScanResponse)
    async def scan_project(
        payload: ScanRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> ScanResponse:
        def _run_scan() -> ScanOutcome:
            return orchestrator.run_scan(
                payload.path, entries=payload.entry, excludes=payload.exclude
            )

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:  # pragma: no cover
            outcome = _run_scan()
        else:
            outcome = await loop.run_in_executor(None, _run_scan)
        return _scan_response(outcome)

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(
        _: Any, exc: FileNotFoundError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NotADirectoryError)
    async def not_a_directory_handler(
        _: Any, exc: NotADirectoryError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(DeadlintError)
    async def deadlint_error_handler(
        _: Any, exc: DeadlintError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    if not _FASTAPI_AVAILABLE:
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install deadlint[service]`."
        )

    try:
        import uvicorn
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "uvicorn is required to run the service. Install it with `pip install uvicorn`."
        ) from exc

    app = create_app()
    uvicorn.run(app, host=host, port=port)
