from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

# Load .env file (DATABASE_URL lives there)
load_dotenv()

Base = declarative_base()


def create_db_engine(database_url: str | None = None, **kwargs) -> Engine:
    """
    Build an engine for the bulletin database.

    Falls back to DATABASE_URL from settings when no URL is given.
    """
    if database_url is None:
        from bulletin_archiver.config import get_settings

        database_url = get_settings().DATABASE_URL

    kwargs.setdefault("future", True)
    kwargs.setdefault("echo", False)  # set True if you want to see SQL in terminal
    return create_engine(database_url, **kwargs)


def init_db(engine: Engine) -> None:
    """
    Import models and create tables if they don't exist.
    The tables belong to the bulletin application; this keeps local dev and tests sane.
    """
    from bulletin_archiver import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
