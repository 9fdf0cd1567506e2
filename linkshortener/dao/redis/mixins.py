"""Redis connection setup shared by Redis-backed DAOs

Building a DAO never fails because Redis is down. The connection is checked
once with PING and the outcome is kept on `reachable`; an unreachable Redis
is logged and then surfaces per operation (reads degrade to an empty
collection, writes raise DataStoreError).

Example:
    >>> class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    ...     pass
    ...
    >>> dao = ShortURLRedisDAO(redis_host='redis.internal', prefix='linkshortener:prod')
    >>> dao.reachable
    True
"""

import logging
from typing import Optional

import redis

from linkshortener.dao.redis.redis_key_schema import RedisKeySchema
from linkshortener.dao.redis.helpers import redis_location


logger = logging.getLogger(__name__)


def build_redis_client(
    host: str = 'localhost',
    port: int = 6379,
    db: int = 0,
    decode_responses: bool = True,
    username: Optional[str] = None,
    password: Optional[str] = None,
) -> redis.Redis:
    # AppConfig documents may carry port/db as strings
    return redis.Redis(
        host=host,
        port=int(port),
        db=int(db),
        decode_responses=decode_responses,
        username=username,
        password=password,
    )


class RedisClientMixin:
    """Attach a Redis client and the key schema to a DAO.

    Attributes:
        redis (redis.Redis):
            Client used by the DAO; either given or built from `redis_*` options.
        keys (RedisKeySchema):
            Key names under the DAO's prefix.
        reachable (bool):
            Whether Redis answered the PING issued on construction.
    """

    def __init__(
        self,
        redis_host: Optional[str] = 'localhost',
        redis_port: Optional[int] = 6379,
        redis_db: Optional[int] = 0,
        redis_decode_responses: Optional[bool] = True,
        redis_username: Optional[str] = None,
        redis_password: Optional[str] = None,
        redis_client: Optional[redis.Redis] = None,
        prefix: Optional[str] = None,
    ):
        if redis_client is None:
            redis_client = build_redis_client(
                redis_host,
                redis_port,
                redis_db,
                redis_decode_responses,
                redis_username,
                redis_password,
            )

        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)
        self.reachable = self.ping()

    def ping(self) -> bool:
        """PING Redis. Connectivity problems are logged and reported as False."""
        try:
            return bool(self.redis.ping())
        except redis.exceptions.RedisError:
            logger.warning(
                'Redis is unreachable. Reads will see an empty collection and writes will fail.',
                extra={'redis': redis_location(self.redis)},
            )
            return False
