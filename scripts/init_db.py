from __future__ import annotations
from pathlib import Path
from sqlalchemy import text
from hoursdash.db.connection import get_engine
from hoursdash.utils.logging import configure_logging
import logging

def main() -> None:
    configure_logging()
    log = logging.getLogger("init_db")
    engine = get_engine()
    schema_path = Path(__file__).resolve().parents[1] / "src" / "hoursdash" / "db" / "schema.sql"
    sql = schema_path.read_text(encoding="utf-8")
    with engine.begin() as conn:
        for statement in (s.strip() for s in sql.split(";")):
            if statement:
                conn.execute(text(statement))
    log.info("customers schema applied from %s", schema_path.name)

if __name__ == "__main__":
    main()
