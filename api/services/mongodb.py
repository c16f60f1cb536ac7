# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
MongoDB service layer with connection pooling and index management.
"""

import os
import logging
from typing import Dict, Optional, Any, Iterable, List
from pymongo import MongoClient, ASCENDING
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
from bson import ObjectId
from bson.errors import InvalidId

logger = logging.getLogger(__name__)

MEMBERS_COLLECTION = "members"
PRIVILEGES_COLLECTION = "privileges"
GROUPS_COLLECTION = "groups"
ROLES_COLLECTION = "roles"
REPORTS_COLLECTION = "field_service_reports"


def to_object_id(value: Any) -> Optional[ObjectId]:
    """
    Convert a string identifier to ObjectId.

    Returns None when the value is not a valid ObjectId, so callers can turn
    it into a query that matches nothing.
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def to_object_ids(values: Iterable[Any]) -> List[ObjectId]:
    """Convert identifiers to ObjectIds, dropping invalid ones."""
    object_ids = []
    for value in values:
        object_id = to_object_id(value)
        if object_id is not None:
            object_ids.append(object_id)
    return object_ids


class MongoDBService:
    """MongoDB service with connection pooling."""

    def __init__(self, connection_string: str = None, database_name: str = None):
        """Initialize MongoDB service with connection pooling."""
        self.connection_string = connection_string or os.getenv(
            'MONGODB_URI',
            'mongodb://localhost:27017/congregation_dev'
        )
        self.database_name = database_name or os.getenv('MONGODB_DATABASE', 'congregation_dev')
        self._client: Optional[MongoClient] = None
        self._database: Optional[Database] = None

        # Connection pool settings
        self.max_pool_size = int(os.getenv('MONGODB_MAX_POOL_SIZE', '10'))
        self.min_pool_size = int(os.getenv('MONGODB_MIN_POOL_SIZE', '1'))
        self.max_idle_time_ms = int(os.getenv('MONGODB_MAX_IDLE_TIME_MS', '30000'))
        self.server_selection_timeout_ms = int(os.getenv('MONGODB_SERVER_SELECTION_TIMEOUT_MS', '5000'))

        logger.info(f"MongoDB service initialized for database: {self.database_name}")

    @property
    def client(self) -> MongoClient:
        """Get MongoDB client with connection pooling."""
        if self._client is None:
            try:
                self._client = MongoClient(
                    self.connection_string,
                    maxPoolSize=self.max_pool_size,
                    minPoolSize=self.min_pool_size,
                    maxIdleTimeMS=self.max_idle_time_ms,
                    serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                    retryReads=True
                )
                self._client.admin.command('ping')
                logger.info("MongoDB connection established successfully")
            except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                logger.error(f"Failed to connect to MongoDB: {e}")
                self._client = None
                raise

        return self._client

    @property
    def database(self) -> Database:
        """Get MongoDB database."""
        if self._database is None:
            self._database = self.client[self.database_name]
        return self._database

    def get_collection(self, collection_name: str) -> Collection:
        """Get MongoDB collection."""
        return self.database[collection_name]

    @property
    def members(self) -> Collection:
        return self.get_collection(MEMBERS_COLLECTION)

    @property
    def privileges(self) -> Collection:
        return self.get_collection(PRIVILEGES_COLLECTION)

    @property
    def groups(self) -> Collection:
        return self.get_collection(GROUPS_COLLECTION)

    @property
    def roles(self) -> Collection:
        return self.get_collection(ROLES_COLLECTION)

    @property
    def reports(self) -> Collection:
        return self.get_collection(REPORTS_COLLECTION)

    def close_connection(self) -> None:
        """Close MongoDB connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._database = None
            logger.info("MongoDB connection closed")

    def health_check(self) -> Dict[str, Any]:
        """Check MongoDB connection health."""
        try:
            result = self.client.admin.command('ping')
            server_info = self.client.server_info()

            return {
                'status': 'healthy',
                'ping': result.get('ok') == 1,
                'version': server_info.get('version'),
                'database': self.database_name,
                'connection_pool_size': self.max_pool_size
            }
        except Exception as e:
            logger.error(f"MongoDB health check failed: {e}")
            return {
                'status': 'unhealthy',
                'error': str(e),
                'database': self.database_name
            }

    # Index Management

    def create_indexes(self) -> None:
        """Create the indexes the report queries rely on."""
        try:
            logger.info("Creating MongoDB indexes...")

            # One report per publisher per month
            reports = self.reports
            reports.create_index([("publisher", ASCENDING), ("month", ASCENDING)], unique=True)
            reports.create_index([("month", ASCENDING), ("auxiliaryPioneer", ASCENDING)])

            members = self.members
            members.create_index("fullName")
            members.create_index("groupId")
            members.create_index("role")
            members.create_index("privileges")

            self.privileges.create_index("name")
            self.groups.create_index("name")
            self.roles.create_index("name")

            logger.info("MongoDB indexes created successfully")

        except Exception as e:
            logger.error(f"Failed to create MongoDB indexes: {e}")
            raise


# Singleton instance for application use
_mongodb_service: Optional[MongoDBService] = None


def get_mongodb_service() -> MongoDBService:
    """Get singleton MongoDB service instance."""
    global _mongodb_service
    if _mongodb_service is None:
        _mongodb_service = MongoDBService()
    return _mongodb_service


def close_mongodb_connection() -> None:
    """Close MongoDB connection (for cleanup)."""
    global _mongodb_service
    if _mongodb_service:
        _mongodb_service.close_connection()
        _mongodb_service = None
