import os
import sys
import typer
from pathlib import Path
from tippool.config import settings
from tippool.logging import logger, get_run_id

app = typer.Typer(no_args_is_help=True)

@app.callback()
def main():
    """
    Tip pool CLI.
    """
    pass

@app.command(name="doctor")
def doctor():
    """
    Check system configuration and environment health.
    """
    logger.info("Running doctor check...")

    failures: list[str] = []
    passed = 0

    print("\n🩺 Tip Pool Doctor\n")

    # ── Check 1: Environment / Interpreter ──────────────────────────────────
    print("[Environment]")
    print(f"  Python: {sys.version.split()[0]}")
    print(f"  Prefix: {sys.prefix}")
    print(f"  Run ID: {get_run_id()}")
    passed += 1

    # ── Check 2: Payout provider key ─────────────────────────────────────────
    print("\n[Configuration]")
    key_ok = bool(
        settings.STRIPE_SECRET_KEY and settings.STRIPE_SECRET_KEY.get_secret_value()
    )
    if key_ok:
        print("  STRIPE_SECRET_KEY:           ✅ Set")
        passed += 1
    else:
        print("  STRIPE_SECRET_KEY:           ❌ Missing")
        failures.append("STRIPE_SECRET_KEY is not set; add it to .env")

    print(f"  CURRENCY:                    {settings.CURRENCY}")
    print(f"  ROSTER_DELIMITER:            {settings.ROSTER_DELIMITER!r}")
    print(f"  SETTLEMENT_MAX_WORKERS:      {settings.SETTLEMENT_MAX_WORKERS}")

    # ── Check 3: Settlement worker count ─────────────────────────────────────
    if settings.SETTLEMENT_MAX_WORKERS >= 1:
        passed += 1
    else:
        failures.append("SETTLEMENT_MAX_WORKERS must be at least 1")

    # ── Check 4: Data directory ──────────────────────────────────────────────
    print("\n[Data Directory]")
    data_dir = settings.data_dir
    if data_dir.exists() and data_dir.is_dir():
        print(f"  {str(data_dir) + '/':<28} ✅ Found: {data_dir.absolute()}")
        passed += 1
    else:
        print(f"  {str(data_dir) + '/':<28} ❌ Missing: {data_dir.absolute()}")
        failures.append(f"{data_dir}/ directory not found; run `tippool db init`")

    # ── Check 5: DB file / directory writability ─────────────────────────────
    print("\n[Database]")
    if not settings.DATABASE_URL.startswith("sqlite:///"):
        print(f"  {settings.DATABASE_URL.split('://')[0]:<28} ⚠️  Skipped (not SQLite)")
    else:
        db_file = Path(settings.DATABASE_URL[len("sqlite:///"):])
        if db_file.exists():
            if os.access(db_file, os.W_OK):
                print(f"  {str(db_file):<28} ✅ Exists and writable")
                passed += 1
            else:
                print(f"  {str(db_file):<28} ❌ Exists but NOT writable")
                failures.append(f"{db_file} exists but is not writable; check file permissions")
        elif data_dir.exists():
            if os.access(data_dir, os.W_OK):
                print(f"  {str(db_file):<28} ✅ Does not exist yet; {data_dir}/ is writable")
                passed += 1
            else:
                print(f"  {str(db_file):<28} ❌ {data_dir}/ is not writable")
                failures.append(f"{data_dir}/ is not writable; db init cannot create {db_file.name}")
        else:
            print(f"  {str(db_file):<28} ⚠️  Skipped ({data_dir}/ missing)")

    # ── Summary ──────────────────────────────────────────────────────────────
    total = passed + len(failures)
    print(f"\n{'─' * 50}")
    if failures:
        print(f"Result: {passed}/{total} checks passed\n")
        for msg in failures:
            print(f"  ❌ {msg}")
        print()
        raise typer.Exit(code=1)
    else:
        print(f"Result: {passed}/{total} checks passed, all good ✅")
        print()


db_app = typer.Typer(help="Database management commands.")
app.add_typer(db_app, name="db")

@db_app.command("init")
def init():
    """Initialize the database tables."""
    from tippool.db import init_db
    try:
        init_db()
        logger.info("Database initialized successfully.")
        print("✅ Database initialized.")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        print(f"❌ Failed: {e}")
        raise typer.Exit(code=1)


@app.command("import-cuts")
def import_cuts(
    path: Path | None = typer.Argument(None, help="Local CSV export of the cuts sheet"),
    url: str | None = typer.Option(None, help="Published CSV URL (defaults to CUTS_CSV_URL)"),
):
    """Upsert cuts from the cuts sheet CSV."""
    from tippool.db import init_db
    from tippool.infra.db.uow import UnitOfWork
    from tippool.services.import_service import ImportService, fetch_csv_text

    source = url or settings.CUTS_CSV_URL
    if path is None and not source:
        print("❌ Provide a CSV path, --url, or set CUTS_CSV_URL in .env")
        raise typer.Exit(code=1)

    init_db()
    try:
        text = path.read_text(encoding="utf-8-sig") if path is not None else fetch_csv_text(source)
    except Exception as e:
        logger.error(f"Could not read cuts CSV: {e}")
        print(f"❌ Failed: {e}")
        raise typer.Exit(code=1)

    with UnitOfWork() as uow:
        summary = ImportService(uow).import_csv(text)

    print(
        f"✅ Imported cuts: {summary.created} created, {summary.updated} updated, "
        f"{summary.unchanged} unchanged"
    )
    for err in summary.errors:
        print(f"  ⚠️  row {err.row} ({err.code or '?'}): {err.error}")


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1"),
    port: int = typer.Option(8787),
):
    """Run the HTTP API."""
    import uvicorn
    from tippool.api.app import create_app

    uvicorn.run(create_app(), host=host, port=port)

if __name__ == "__main__":
    app()
