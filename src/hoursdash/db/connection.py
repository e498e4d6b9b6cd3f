from __future__ import annotations
import os
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

load_dotenv()

def build_db_url() -> str:
    # DATABASE_URL wins over the discrete DB_* variables
    url = os.getenv("DATABASE_URL", "").strip()
    if url:
        return url
    host = os.getenv("DB_HOST", "localhost")
    port = os.getenv("DB_PORT", "5432")
    name = os.getenv("DB_NAME", "hoursdash")
    user = os.getenv("DB_USER", "hoursdash")
    pwd = os.getenv("DB_PASSWORD", "hoursdash")
    return f"postgresql+psycopg://{user}:{pwd}@{host}:{port}/{name}"

def get_engine(url: str | None = None) -> Engine:
    echo = os.getenv("SQL_ECHO", "").lower() in {"1", "true", "yes"}
    return create_engine(url or build_db_url(), future=True, pool_pre_ping=True, echo=echo)
