from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine

from contact_api.config.settings import Settings


def build_async_engine(app_settings: Settings) -> AsyncEngine:
    """Creates the async engine (the connection pool) for the given settings."""
    return create_async_engine(
        app_settings.DATABASE_URL,
        echo=app_settings.DEBUG,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Creates a session factory bound to ``engine``."""
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
        class_=AsyncSession,
    )
