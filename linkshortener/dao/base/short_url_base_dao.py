"""Abstract base class for ShortURL data access objects (DAOs).

The whole short URL collection is persisted as a single document. Callers
always perform a full read-modify-write: `load_all()`, build a new list,
`save_all()`. Snapshots returned by `load_all()` are never assumed to be
current after another write.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from linkshortener.dao.redis import ShortURLRedisDAO

        >>> dao = ShortURLRedisDAO(prefix='linkshortener:dev')
        >>> records = dao.load_all()
        >>> dao.save_all([*records, new_record])
"""

from abc import ABC, abstractmethod

from linkshortener.models import ShortURLModel


class ShortURLBaseDAO(ABC):
    """Interface for ShortURL data access objects (DAOs).

    Methods:
        load_all(**kwargs) -> list[ShortURLModel]:
            Load the whole collection. Never raises: an absent, corrupt or
            unreachable collection is reported as an empty list.

        save_all(records: list[ShortURLModel], **kwargs) -> ShortURLBaseDAO:
            Overwrite the whole collection in a single write.
            Raises DataStoreError on connection or write failure.

    Subclassing:
        Datastore-specific implementations (e.g., ShortURLRedisDAO) must
        extend this class and implement all abstract methods.
    """

    @abstractmethod
    def load_all(self, **kwargs) -> list[ShortURLModel]:
        """Load every stored ShortURLModel.

        Args:
            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            list[ShortURLModel]: stored records in insertion order, [] on any read failure.
        """
        pass

    @abstractmethod
    def save_all(self, records: list[ShortURLModel], **kwargs) -> 'ShortURLBaseDAO':
        """Replace the stored collection with `records`.

        Args:
            records (list[ShortURLModel]):
                The complete new collection.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            ShortURLBaseDAO: self (for method chaining)

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass
