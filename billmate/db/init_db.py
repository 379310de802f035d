import logging
from billmate.core.database import engine, async_session_maker
from billmate.db.base import Base
from billmate.models import *  # Import all models
from billmate.services.system.setting_service import SettingService

logger = logging.getLogger(__name__)

async def create_tables():
    """Create all database tables"""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("✅ Database tables created successfully")

    except Exception as e:
        logger.error(f"❌ Error creating tables: {str(e)}")
        raise

async def init_db():
    """Initialize the database"""
    try:
        await create_tables()

        async with async_session_maker() as session:
            await SettingService(session).initialize_settings()

        logger.info("✅ Database initialized successfully")

    except Exception as e:
        logger.error(f"❌ Database initialization failed: {str(e)}")
        raise
