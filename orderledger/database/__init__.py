from orderledger.database.base import Base
from orderledger.database.engine import build_engine, engine
from orderledger.database.session import SessionLocal, get_db, transaction


def init_db(bind=None) -> None:
    from orderledger.models import import_all_models

    import_all_models()
    Base.metadata.create_all(bind=bind or engine)


__all__ = ["Base", "SessionLocal", "build_engine", "engine", "get_db", "init_db", "transaction"]
