import logging
import redis
from typing import Optional
from app.config.database import settings

logger = logging.getLogger("redis")


class RedisConfig:
    """Lazily created Redis client backing assistant conversations"""

    def __init__(
        self,
        host: str = settings.redis_host,
        port: int = settings.redis_port,
        password: Optional[str] = settings.redis_password,
        db: int = settings.redis_db
    ):
        self.host = host
        self.port = port
        self.password = password or None
        self.db = db
        self._pool: Optional[redis.ConnectionPool] = None
        self._client: Optional[redis.Redis] = None

    def get_client(self) -> redis.Redis:
        if self._client is None:
            self._pool = redis.ConnectionPool(
                host=self.host,
                port=self.port,
                password=self.password,
                db=self.db,
                max_connections=settings.redis_max_connections,
                socket_timeout=settings.redis_socket_timeout,
                socket_connect_timeout=settings.redis_socket_timeout,
                decode_responses=True
            )
            self._client = redis.Redis(connection_pool=self._pool)
            logger.info(f"Redis client configured for {self.host}:{self.port}/{self.db}")
        return self._client

    def close(self):
        if self._client is not None:
            self._client.close()
            self._client = None
        if self._pool is not None:
            self._pool.disconnect()
            self._pool = None


redis_config = RedisConfig()


def get_redis_client() -> redis.Redis:
    """Dependency injection for Redis client"""
    return redis_config.get_client()


def check_redis(client: redis.Redis) -> bool:
    try:
        return bool(client.ping())
    except redis.RedisError as e:
        logger.warning(f"Redis health check failed: {e}")
        return False
