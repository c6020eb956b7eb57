# geoanchor/Controller/deps.py

from typing import Generator
from sqlalchemy.orm import Session
from geoanchor.DB.session import SessionLocal


def get_DB() -> Generator[Session, None, None]:
    DB = SessionLocal()
    try:
        yield DB
    finally:
        DB.close()
