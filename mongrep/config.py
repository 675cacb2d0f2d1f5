"""
Connection configuration and factory.

Loads settings from environment variables (.env file supported) and hands out
a database handle backed by one shared MongoClient.

Usage:
    from mongrep.config import get_database

    carts = ShoppingCarts(get_database())
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from pymongo import MongoClient
from pymongo.database import Database

from .logger import setup_logging

load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMATS = ("simple", "json")


@dataclass
class MongrepConfig:
    """
    Configuration for connecting repositories to MongoDB.

    Loaded from environment variables with sensible defaults.
    """
    mongodb_uri: str
    database: str = "mongrep"
    log_level: str = "INFO"
    log_format: str = "simple"

    @classmethod
    def from_env(cls) -> "MongrepConfig":
        """
        Load configuration from environment variables.

        Environment variables:
        - MONGODB_URI (required): MongoDB connection string
        - MONGREP_DATABASE: Database name (default: mongrep)
        - MONGREP_LOG_LEVEL: Log level (default: INFO)
        - MONGREP_LOG_FORMAT: simple/json (default: simple)

        Raises:
            ValueError: If MONGODB_URI is not set
        """
        mongodb_uri = os.getenv("MONGODB_URI")
        if not mongodb_uri:
            raise ValueError("MONGODB_URI environment variable is required")

        log_format = os.getenv("MONGREP_LOG_FORMAT", "simple").lower()
        if log_format not in LOG_FORMATS:
            logger.warning(f"Invalid MONGREP_LOG_FORMAT '{log_format}', defaulting to simple")
            log_format = "simple"

        return cls(
            mongodb_uri=mongodb_uri,
            database=os.getenv("MONGREP_DATABASE", "mongrep"),
            log_level=os.getenv("MONGREP_LOG_LEVEL", "INFO").upper(),
            log_format=log_format,
        )

    def apply_logging(self) -> None:
        """Configure the root logger from log_level and log_format."""
        setup_logging(level=self.log_level, format=self.log_format)


# Singleton client instance
_client: Optional[MongoClient] = None


def get_database(config: Optional[MongrepConfig] = None) -> Database:
    """
    Get the configured database, connecting on first use.

    The MongoClient is created once and reused; pymongo pools connections
    internally.

    Args:
        config: Explicit configuration; loaded from the environment if omitted

    Raises:
        ValueError: If MongoDB URI is not configured
    """
    global _client

    config = config or MongrepConfig.from_env()
    if _client is None:
        _client = MongoClient(config.mongodb_uri)
        logger.info(f"MongoDB client connected, database '{config.database}'")
    return _client[config.database]


def reset_client() -> None:
    """
    Close and forget the shared client.

    Used for testing or when configuration changes.
    """
    global _client

    if _client is not None:
        _client.close()
    _client = None
    logger.info("MongoDB client reset")
