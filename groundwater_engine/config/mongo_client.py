import logging
from pymongo import MongoClient, ReadPreference
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from groundwater_engine.config.settings import MONGO_URI, MONGO_DB_NAME

# Configure logging
logger = logging.getLogger(__name__)

class ReadingsMongoClient:
    """
    Wrapper for the MongoDB connection to the operational readings store.
    The engine only reads from it; analysis records are persisted elsewhere.
    """

    def __init__(self, uri: str = MONGO_URI, db_name: str = MONGO_DB_NAME):
        self._uri = uri
        self._db_name = db_name
        self._client: MongoClient = None

    def connect(self) -> None:
        """
        Establishes the MongoDB connection.
        Raises specific errors for connection failures so requests fail fast.
        """
        if not self._uri:
            raise ValueError("MONGO_URI environment variable is not set.")

        try:
            # Connect with a timeout to fail fast if DB is unreachable
            self._client = MongoClient(
                self._uri,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=5000
            )

            # Lightweight verification command
            self._client.admin.command('ping')
            logger.info("✅ Connected to MongoDB successfully.")

        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.critical(f"❌ Failed to connect to MongoDB: {e}")
            raise e

    def get_readings_db(self) -> Database:
        """
        Returns the handle for the operational database.

        Reads go to secondaries where available so analysis traffic does not
        load the primary that ingests DWLR readings.
        """
        if not self._client:
            self.connect()

        return self._client.get_database(
            self._db_name,
            read_preference=ReadPreference.SECONDARY_PREFERRED
        )

    def close(self):
        """Closes the connection."""
        if self._client:
            self._client.close()
            self._client = None
            logger.info("MongoDB connection closed.")

# Singleton instance for easy import across modules
mongo_client = ReadingsMongoClient()
