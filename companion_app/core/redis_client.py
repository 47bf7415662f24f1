import redis.asyncio as redis
from companion_app.core.config import settings
from loguru import logger

_redis_client: redis.Redis = None


async def get_redis_client() -> redis.Redis:
    if _redis_client is None:
        logger.error("Redis client not initialized")
        raise ConnectionError("Redis client not initialized")
    return _redis_client


async def init_redis_client():
    """Connects to the chat memory store. Chat stays unavailable if this fails."""
    global _redis_client
    client = redis.Redis(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        db=settings.REDIS_DB,
        decode_responses=True,
    )
    try:
        await client.ping()
    except Exception as e:
        logger.error(f"Failed to connect to redis at {settings.REDIS_HOST}:{settings.REDIS_PORT}: {e}")
        await client.aclose()
        _redis_client = None
        return
    _redis_client = client
    logger.info("Redis client succesfully initialized and connected")


async def close_redis_client():
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        logger.info("Redis connection is closed")
    _redis_client = None
