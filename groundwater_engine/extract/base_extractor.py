from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Iterator
from pymongo.database import Database

class BaseExtractor(ABC):
    """
    Abstract Base Class for reading documents from a source database.
    """

    def __init__(self, db: Database):
        """
        Args:
            db (Database): The source database handle (Read-Only).
        """
        self.db = db

    @abstractmethod
    def fetch_batch(
        self,
        collection: str,
        query: Dict[str, Any],
        projection: Optional[Dict[str, int]] = None,
        sort: Optional[list] = None,
        batch_size: int = 1000
    ) -> Iterator[Dict[str, Any]]:
        """
        Yields documents from the specified collection.

        Args:
            collection: Name of the collection to read from.
            query: MongoDB filter dictionary.
            projection: Fields to include/exclude (0 or 1).
            sort: Optional list of (field, direction) pairs.
            batch_size: Cursor batch size.
        """
        pass

    @abstractmethod
    def fetch_one(
        self,
        collection: str,
        query: Dict[str, Any],
        projection: Optional[Dict[str, int]] = None
    ) -> Optional[Dict[str, Any]]:
        pass

class MongoExtractor(BaseExtractor):
    """
    Concrete implementation for MongoDB extraction.
    """

    def fetch_batch(
        self,
        collection: str,
        query: Dict[str, Any],
        projection: Optional[Dict[str, int]] = None,
        sort: Optional[list] = None,
        batch_size: int = 1000
    ) -> Iterator[Dict[str, Any]]:

        if query is None:
            query = {}

        cursor = self.db[collection].find(query, projection)
        if sort:
            cursor = cursor.sort(sort)

        for document in cursor.batch_size(batch_size):
            yield document

    def fetch_one(
        self,
        collection: str,
        query: Dict[str, Any],
        projection: Optional[Dict[str, int]] = None
    ) -> Optional[Dict[str, Any]]:
        return self.db[collection].find_one(query, projection)
