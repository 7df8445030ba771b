# marketplace/data/database.py
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from marketplace.utils.settings import DATABASE_URL

Base = declarative_base()


def make_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        #timeout = ile sqlite czeka na zwolnienie blokady zapisu przez inna transakcje
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": 30},
        )

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(url, pool_pre_ping=True, pool_size=20, max_overflow=10)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


engine = make_engine(DATABASE_URL)
SessionLocal = make_session_factory(engine)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Jednostka pracy: commit gdy blok przejdzie, rollback przy dowolnym wyjatku.
    Polaczenie zwalnia get_db (close sesji) niezaleznie od wyniku.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def init_db(bind: Engine | None = None) -> None:
    #import modeli rejestruje tabele w Base.metadata
    import marketplace.data.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
