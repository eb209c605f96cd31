"""FastAPI application factory."""
from __future__ import annotations
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel
from tippool.logging import logger
from tippool.domain.exceptions import (
    ConflictError, InvalidInputError, NotFoundError, ProviderError,
)


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        from tippool.infra.db.engine import engine  # triggers pragmas + mapper registration
        from tippool.infra.db.schema_compat import ensure_schema_compat
        if engine.dialect.name == "sqlite" and engine.url.database:
            Path(engine.url.database).parent.mkdir(parents=True, exist_ok=True)
        SQLModel.metadata.create_all(engine)
        ensure_schema_compat(engine)
        logger.info("Database ready")
        yield

    app = FastAPI(
        title="Tip Pool API",
        version="0.3.0",
        lifespan=lifespan,
    )

    # Import routers inside create_app() to avoid circular imports at module load time
    from tippool.api.routers.cuts import router as cuts_router
    from tippool.api.routers.settlement import router as settlement_router
    from tippool.api.routers.payees import router as payees_router
    from tippool.api.routers.imports import router as imports_router

    app.include_router(cuts_router)
    app.include_router(settlement_router)
    app.include_router(payees_router)
    app.include_router(imports_router)

    @app.exception_handler(NotFoundError)
    def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.message})

    @app.exception_handler(ConflictError)
    def _conflict(request: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": exc.message})

    @app.exception_handler(InvalidInputError)
    def _invalid_input(request: Request, exc: InvalidInputError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.message})

    @app.exception_handler(ProviderError)
    def _provider(request: Request, exc: ProviderError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": exc.message})

    @app.get("/health", tags=["ops"])
    def health() -> dict:
        return {"status": "ok"}

    return app
