"""MongoDB connection and Beanie document registration."""
from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient

from daycare.config import settings
from daycare.models import AttendanceDay, Child, DailyReport, ThemeConfig


_client = None


async def db_startup():
    """Connect to MongoDB and initialize Beanie ODM."""
    global _client
    _client = AsyncIOMotorClient(settings.mongodb_url, serverSelectionTimeoutMS=5000)
    # Fail fast on startup rather than on the first request
    await _client.admin.command("ping")
    await init_beanie(
        database=_client[settings.mongodb_db_name],
        document_models=[
            Child,
            AttendanceDay,
            DailyReport,
            ThemeConfig,
        ],
    )


async def db_shutdown():
    """Close MongoDB connection."""
    global _client
    if _client:
        _client.close()
        _client = None
