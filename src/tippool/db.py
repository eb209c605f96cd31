"""Engine singleton, created once at import."""
from __future__ import annotations
from sqlmodel import SQLModel, create_engine
from tippool.config import settings


def _make_engine(url: str):
    connect_args = {}
    if url.startswith("sqlite"):
        # Sessions are opened and committed from FastAPI's threadpool.
        connect_args["check_same_thread"] = False
    return create_engine(url, echo=False, connect_args=connect_args)


engine = _make_engine(settings.DATABASE_URL)


def init_db() -> None:
    """Create every table and apply additive compatibility upgrades."""
    import tippool.models  # noqa: F401
    from tippool.infra.db.schema_compat import ensure_schema_compat

    if settings.DATABASE_URL.startswith("sqlite"):
        settings.data_dir.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(engine)
    ensure_schema_compat(engine)
