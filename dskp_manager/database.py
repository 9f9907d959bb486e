from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from dskp_manager.config import Config

# SQL echo only outside production, and only when asked for
engine = create_async_engine(
    Config.DATABASE_URL,
    echo=Config.DB_ECHO and Config.ENV != "PRODUCTION",
    pool_pre_ping=True,
)

SessionLocal = async_sessionmaker(autoflush=False, bind=engine, class_=AsyncSession)

class Base(DeclarativeBase):
    pass

async def get_db():
    """One session per request for the subjects/DSKP routes."""
    async with SessionLocal() as session:
        yield session

async def init_db(bind=None):
    """Create the classes, subjects and dskp_items tables on ``bind`` (the app engine by default)."""
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
