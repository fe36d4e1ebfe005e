"""
Base service classes and shared context.

The ServiceContext holds the shared state and dependencies that services need.
The HTTP API and the operator console share the same context and services.
"""

import logging
from typing import Optional
from dataclasses import dataclass

from ..config import Config, load_config
from ..database import Database, init_database

logger = logging.getLogger(__name__)


@dataclass
class ServiceContext:
    """
    Shared context for all services.

    All services receive this context and use it to access shared resources.
    """
    config: Config
    db: Database

    @classmethod
    def create(
        cls,
        config: Optional[Config] = None,
        db: Optional[Database] = None,
        seed: bool = True
    ) -> "ServiceContext":
        """
        Factory method to create a ServiceContext with all dependencies.

        Args:
            config: Optional config (loads from env if not provided)
            db: Optional database (opened from config.database.url if not provided)
            seed: Write the initial site content into empty tables

        Returns:
            Configured ServiceContext
        """
        cfg = config or load_config()
        database = db or init_database(cfg.database.url, seed=seed)
        return cls(config=cfg, db=database)

    def close(self):
        """Clean up resources."""
        self.db.close()


class BaseService:
    """
    Base class for all services.

    Each service receives the shared context and provides focused functionality.
    """

    def __init__(self, context: ServiceContext):
        self.context = context

    @property
    def config(self) -> Config:
        return self.context.config

    @property
    def db(self) -> Database:
        return self.context.db
