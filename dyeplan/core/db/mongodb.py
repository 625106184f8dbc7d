import logging

from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie

from dyeplan.core.setting import config
from dyeplan.core.models.production.dyeing_plan import DyeingPlanDocument
from dyeplan.core.models.production.machine_schedule import MachineScheduleDocument

logger = logging.getLogger(__name__)

motor_client = None


async def connect_to_mongo():
    global motor_client

    # tz_aware so stored timestamps come back as aware UTC datetimes
    motor_client = AsyncIOMotorClient(str(config.MONGODB_URL), tz_aware=True)

    # Initialize Beanie with the database and the list of document models
    await init_beanie(
        database=motor_client[config.DATABASE_NAME],
        document_models=[
            DyeingPlanDocument,
            MachineScheduleDocument,
        ]
    )
    logger.info(f"Successfully connected to MongoDB at {config.DATABASE_NAME}")


async def close_mongo_connection():
    global motor_client
    if motor_client:
        motor_client.close()
        motor_client = None
    logger.info("Closed MongoDB connection")
