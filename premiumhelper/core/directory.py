"""JSON flat-file directory of venues, visitors, roles and subscriptions."""

import fcntl
import json
import shutil
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .logging import directory_logger as logger
from .models import RoleAssignment, Subscription, SubscriptionKind, Venue, Visitor


class DirectoryError(Exception):
    """Base exception for directory lookups."""

    pass


class Directory:
    """Read-mostly JSON database with atomic writes.

    Uses file locking to prevent reading a half-written file.
    Writes are atomic: write to temp file, then rename.
    """

    def __init__(self, db_path: Path):
        """Initialize directory with database path.

        Args:
            db_path: Path to the JSON database file.
        """
        self.db_path = db_path
        self._data: dict | None = None

    @property
    def exists(self) -> bool:
        """Check if database file exists."""
        return self.db_path.exists()

    def load(self) -> dict:
        """Load database from file.

        Returns:
            Database contents as dictionary.

        Raises:
            DirectoryError: If file cannot be read or parsed.
        """
        if not self.db_path.exists():
            raise DirectoryError(f"Directory file not found: {self.db_path}")

        try:
            with open(self.db_path, "r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    self._data = json.load(f)
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)

            return self._data
        except json.JSONDecodeError as e:
            raise DirectoryError(f"Invalid JSON in directory: {e}")
        except OSError as e:
            raise DirectoryError(f"Cannot read directory: {e}")

    def save(self, data: dict | None = None) -> None:
        """Save database to file atomically.

        Args:
            data: Data to save. If None, saves cached data.

        Raises:
            DirectoryError: If save fails.
        """
        if data is not None:
            self._data = data
        elif self._data is None:
            raise DirectoryError("No data to save")

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            fd, temp_path = tempfile.mkstemp(dir=self.db_path.parent, suffix=".tmp")
            try:
                with open(fd, "w", encoding="utf-8") as f:
                    fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                    try:
                        json.dump(self._data, f, indent=2, ensure_ascii=False, default=str)
                    finally:
                        fcntl.flock(f.fileno(), fcntl.LOCK_UN)

                shutil.move(temp_path, self.db_path)
            except Exception:
                Path(temp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise DirectoryError(f"Cannot save directory: {e}")

    def get(self, path: str, default: Any = None) -> Any:
        """Get value from database using dot notation.

        Args:
            path: Dot-separated path (e.g., "config.disabled_plugins")
            default: Default value if path not found.

        Returns:
            Value at path or default.
        """
        if self._data is None:
            self.load()

        value = self._data
        for key in path.split("."):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def get_venue(self, path: str) -> Venue | None:
        """Find a venue by its URL path."""
        for raw in self.get("venues", []):
            if str(raw.get("path", "")).lower() == path.lower():
                return Venue(**raw)
        return None

    def get_visitor(self, user_id: int) -> Visitor | None:
        """Find a visitor by id."""
        for raw in self.get("users", []):
            if raw.get("id") == user_id:
                return Visitor(**raw)
        return None

    def get_roles(self, venue_id: int, user_id: int) -> list[RoleAssignment]:
        """Get the roles a visitor holds within a venue."""
        return [
            RoleAssignment(**raw)
            for raw in self.get("roles", [])
            if raw.get("venue_id") == venue_id and raw.get("user_id") == user_id
        ]

    def get_individual_subscription(self, user_id: int, venue_id: int) -> Subscription | None:
        """Get the visitor's individual subscription for a venue, if any.

        Only the visitor's own record is validated; a malformed record of
        another visitor does not affect this lookup.
        """
        for raw in self.get("subscriptions", []):
            if raw.get("kind", SubscriptionKind.INDIVIDUAL.value) != SubscriptionKind.INDIVIDUAL.value:
                continue
            if raw.get("venue_id") == venue_id and raw.get("user_id") == user_id:
                return self._to_subscription(raw)
        return None

    def get_institutional_subscriptions(self, user_id: int, venue_id: int) -> list[Subscription]:
        """Get institutional subscriptions linked to the visitor for a venue.

        A record is linked when the visitor is its contact or is listed in
        its ``members``. Callers decide what a link is worth.
        """
        linked = []
        for raw in self.get("subscriptions", []):
            if raw.get("kind") != SubscriptionKind.INSTITUTIONAL.value:
                continue
            if raw.get("venue_id") != venue_id:
                continue
            if raw.get("user_id") == user_id or user_id in raw.get("members", []):
                linked.append(self._to_subscription(raw))
        return linked

    def _to_subscription(self, raw: dict) -> Subscription:
        try:
            return Subscription(**raw)
        except ValidationError as e:
            logger.warning(f"Invalid subscription record {raw.get('id')}: {e}")
            raise DirectoryError(f"Invalid subscription record {raw.get('id')}")

    def initialize(self) -> dict:
        """Initialize a new directory with one venue and sample accounts.

        Returns:
            The initialized database.
        """
        self._data = {
            "config": {
                "disabled_plugins": [],
            },
            "venues": [
                {"id": 1, "path": "journal", "name": "Sample Journal"},
            ],
            "users": [
                {"id": 1, "username": "author", "display_name": "Regular Author"},
                {"id": 2, "username": "premium", "display_name": "Premium Author"},
            ],
            "roles": [
                {"user_id": 1, "venue_id": 1, "role": "user.role.author"},
                {"user_id": 2, "venue_id": 1, "role": "user.role.author"},
            ],
            "subscriptions": [
                {
                    "id": 1,
                    "kind": "individual",
                    "venue_id": 1,
                    "user_id": 2,
                    "type_name": "premium",
                    "date_end": None,
                },
            ],
        }

        self.save()
        return self._data
