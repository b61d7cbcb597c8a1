from pathlib import Path
from typing import Dict, Optional
import logging
import aiosqlite

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


async def connect(db_path: str, pragmas: Optional[Dict[str, str]] = None) -> aiosqlite.Connection:
    """Open an aiosqlite connection for a store.

    - Disables implicit transactions; stores issue `BEGIN IMMEDIATE` themselves.
    - Sets `row_factory` to `aiosqlite.Row` for named access.
    - Uses DELETE journal mode (the Pi runs the DB on an SD card / bind mount).
    - Applies any additional PRAGMA settings supplied in `pragmas`.

    Returns an open connection; caller is responsible for closing it.
    """
    # Writers wait up to 30s for the other store's lock
    conn = await aiosqlite.connect(
        db_path,
        timeout=30.0,
        isolation_level=None,
    )
    conn.row_factory = aiosqlite.Row

    await conn.execute("PRAGMA journal_mode=DELETE")
    await conn.execute("PRAGMA foreign_keys = ON")
    if pragmas:
        for k, v in pragmas.items():
            await conn.execute(f"PRAGMA {k} = {v}")
    return conn


def _split_statements(sql: str) -> list[str]:
    # Remove SQL comments and split by semicolon
    statements = []
    current = []
    for line in sql.split('\n'):
        if '--' in line:
            line = line[:line.index('--')]
        line = line.strip()
        if line:
            current.append(line)
            if line.endswith(';'):
                stmt = ' '.join(current).rstrip(';').strip()
                if stmt:
                    statements.append(stmt)
                current = []
    return statements


async def init_db(db_path: str, schema_path: Optional[str] = None) -> None:
    """Apply the SQL schema to a SQLite database file.

    If `schema_path` is not provided this function uses `schema.sql` next to
    this module (i.e. `db/schema.sql`). The schema only uses
    `CREATE ... IF NOT EXISTS`, so applying it to an existing file is safe.
    """
    schema_file = Path(schema_path) if schema_path else SCHEMA_PATH

    if not schema_file.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_file}")

    conn = await connect(db_path)
    try:
        for statement in _split_statements(schema_file.read_text()):
            await conn.execute(statement)
    finally:
        await conn.close()


async def ensure_db(db_path: str, schema_path: Optional[str] = None) -> None:
    """Create the database file if needed and make sure every table exists."""
    db_file = Path(db_path)
    if db_file.parent and not db_file.parent.exists():
        db_file.parent.mkdir(parents=True, exist_ok=True)
    if not db_file.exists():
        logger.info(f"[DB] Creating database at {db_path}")
    await init_db(db_path, schema_path)
