from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from shift_scheduler.core.config import get_settings

settings = get_settings()
engine = create_async_engine(settings.database_url, future=True, echo=False)
async_session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
