"""Data Access Object (DAO) implementation for persisting short URLs in Redis

The whole collection lives under a single key as one JSON array, e.g.:

    <app>:<env>:url_shortener_data  ->  '[{"id": "...", "shortcode": "abc123", ...}]'

Responsibilities:
    - Load the whole collection, degrading to an empty one on any read failure;
    - Overwrite the whole collection with a single SET;
    - Raise appropriate DAO exceptions when a write fails.

Classes:
    ShortURLRedisDAO:
        DAO for loading and saving ShortURLModel collections in a Redis datastore.

Example:
    >>> from linkshortener.dao.redis import ShortURLRedisDAO

    >>> dao = ShortURLRedisDAO(prefix="linkshortener:dev")
    >>> dao.load_all()
    []
    >>> dao.save_all([short_url])
    <ShortURLRedisDAO>
    >>> dao.load_all()[0].shortcode
    'abc123'
"""

import json
import logging

import redis
from beartype import beartype

from linkshortener.models import ShortURLModel
from linkshortener.dao.base import ShortURLBaseDAO
from linkshortener.dao.redis.mixins import RedisClientMixin
from linkshortener.dao.redis.helpers import handle_redis_connection_error
from linkshortener.dao.exceptions import DataStoreError


logger = logging.getLogger(__name__)


class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    """Redis-based Data Access Object (DAO) for the short URL collection

    This class implements the ShortURLBaseDAO interface using Redis as a data store.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Methods:
        load_all(**kwargs) -> list[ShortURLModel]:
            Load every stored short URL. Returns [] when the key is absent,
            the payload is corrupt, or Redis is unreachable.

        save_all(records: list[ShortURLModel], **kwargs) -> ShortURLRedisDAO:
            Serialize and store the whole collection with one SET.
            Raises DataStoreError when Redis is unreachable or rejects the write.
    """

    @beartype
    def load_all(self, **kwargs) -> list[ShortURLModel]:
        """Load the stored short URL collection

        NOTE: read failures are never raised. A reader always gets a usable
              (possibly empty) collection, so a broken payload or an unreachable
              Redis only ever shows up in the logs.

        Returns:
            list[ShortURLModel]:
                Stored records in insertion order.

        Example:
            >>> dao.load_all()
            [ShortURLModel(id='...', shortcode='abc123', ...)]
        """
        key = self.keys.urls_key()

        try:
            payload = self.redis.get(key)
        except redis.exceptions.RedisError:
            logger.exception('Failed to read short URL collection from Redis.', extra={'key': key})
            return []

        if payload is None:
            return []

        try:
            data = json.loads(payload)
            return [ShortURLModel.from_dict(item) for item in data]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError):
            logger.error('Stored short URL collection is corrupt. Treating it as empty.', extra={'key': key})
            return []

    @handle_redis_connection_error
    @beartype
    def save_all(self, records: list[ShortURLModel], **kwargs) -> 'ShortURLRedisDAO':
        """Overwrite the stored short URL collection

        The collection is serialized up front and written with a single SET,
        so an interrupted save leaves the previous collection untouched.

        Args:
            records (list[ShortURLModel]):
                The complete collection to store.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            ShortURLRedisDAO: self (for method chaining)

        Raises:
            DataStoreError:
                If Redis is unreachable or rejects the write (e.g. maxmemory reached).

        Example:
            >>> dao.save_all([short_url])
            <ShortURLRedisDAO>
        """
        key = self.keys.urls_key()
        payload = json.dumps([record.to_dict() for record in records])

        try:
            self.redis.set(key, payload)
        except redis.exceptions.ResponseError as e:
            raise DataStoreError(f'Redis rejected write of {len(records)} short URLs ({e}).') from e

        logger.debug('Saved short URL collection.', extra={'key': key, 'count': len(records)})
        return self
