from __future__ import annotations

from functools import lru_cache
from pathlib import Path

SQL_DIR = Path(__file__).with_name("sql")


@lru_cache(maxsize=None)
def load_sql(name: str) -> str:
    """Read one statement from the bundled sql/ directory."""
    path = SQL_DIR / name
    if not path.is_file():
        available = ", ".join(sorted(item.name for item in SQL_DIR.glob("*.sql")))
        raise FileNotFoundError(f"unknown sql file '{name}', available: {available}")
    return path.read_text(encoding="utf-8").strip()
