from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool


Base = declarative_base()


def create_session_factory(database_url: str, echo: bool = False) -> sessionmaker:
    engine_options = {"echo": echo}
    if database_url.startswith("sqlite"):
        engine_options["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # In-memory databases live on a single shared connection.
            engine_options["poolclass"] = StaticPool
    engine = create_engine(database_url, **engine_options)

    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )


def init_schema(engine: Engine) -> None:
    # Table modules register themselves on Base when imported.
    from aspirelink.models import assignment, cohort, contact, mentoring_session, registration, user  # noqa: F401

    Base.metadata.create_all(bind=engine)
