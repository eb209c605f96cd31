"""Re-export the singleton engine from tippool.db and register SQLite pragmas."""
from sqlalchemy import event
from tippool.db import engine          # singleton; created once at tippool.db import
import tippool.models  # noqa: F401   # registers the cut, allocation and payee mappers


def _set_sqlite_pragmas(dbapi_conn, _):
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA journal_mode=WAL")
    cur.execute("PRAGMA synchronous=NORMAL")
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()


if engine.dialect.name == "sqlite":
    event.listen(engine, "connect", _set_sqlite_pragmas)

__all__ = ["engine"]
