"""
Abstract base class defining the draw storage interface.

All storage backends must inherit from this class and implement all abstract
methods. Shared draws are stored as one row per draw: an id, the JSON of the
12 groups and a creation timestamp.
"""

import secrets
from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any

# URL-safe alphabet, same character set as nanoid
ID_ALPHABET = '_-0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ'


def generate_draw_id(length: int = 8) -> str:
    """Generate a short random identifier for a shared draw."""
    return ''.join(secrets.choice(ID_ALPHABET) for _ in range(length))


class DrawStoreInterface(ABC):
    """
    Abstract interface for shared draw storage.

    All methods must be implemented by concrete database classes.
    """

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @abstractmethod
    def initialize(self) -> None:
        """
        Initialize the database connection and schema.

        Should create the draws table if it doesn't exist.
        Should be idempotent (safe to call multiple times).
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close database connections and clean up resources."""
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """
        Check if the database connection is healthy.

        Returns:
            True if database is accessible, False otherwise
        """
        pass

    # =========================================================================
    # DRAWS
    # =========================================================================

    @abstractmethod
    def save_draw(self, groups: List[Dict[str, Any]]) -> str:
        """
        Store a draw.

        Args:
            groups: List of group dictionaries ``{"name", "teams"}``

        Returns:
            The generated draw id
        """
        pass

    @abstractmethod
    def get_draw(self, draw_id: str) -> Optional[List[Dict[str, Any]]]:
        """
        Fetch a stored draw.

        Args:
            draw_id: Id returned by save_draw

        Returns:
            The stored group list, or None if no draw has this id
        """
        pass

    @abstractmethod
    def count_draws(self) -> int:
        """Number of stored draws."""
        pass

    # =========================================================================
    # MAINTENANCE
    # =========================================================================

    @abstractmethod
    def clear_all(self) -> None:
        """
        Delete all draws.

        Used for testing. Does not drop tables, just data.
        """
        pass
