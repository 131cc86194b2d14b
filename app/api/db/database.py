from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from app.api.core.config import PROJECT_ROOT, settings

SQLITE_FILENAME = "helpdesk.sqlite3"


def get_db_url() -> str:
    """
    Build the async database URL from settings.

    ``DB_TYPE=sqlite`` keeps the database file at the project root; any
    other value connects to PostgreSQL through asyncpg.
    """
    if settings.DB_TYPE == "sqlite":
        return f"sqlite+aiosqlite:///{PROJECT_ROOT / SQLITE_FILENAME}"

    return (
        f"postgresql+asyncpg://{settings.DB_USER}:{settings.DB_PASS}"
        f"@{settings.DB_HOST}:{settings.DB_PORT}/{settings.DB_NAME}"
    )


DATABASE_URL = get_db_url()

engine = create_async_engine(DATABASE_URL, echo=settings.DB_ECHO)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = SQLModel


async def get_db():
    """Yield a session, committing when the request succeeds and rolling back otherwise."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
