"""Gateway-side item storage: abstract interface and SQLite implementation."""
from __future__ import annotations

import sqlite3
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class StoredItem:
    """One row of the ``clothing_items`` table."""

    id: int
    user_id: str
    mime_type: str
    category: Optional[str] = None
    color: Optional[str] = None
    pattern: Optional[str] = None
    style: Optional[str] = None
    season: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    created_at: float = 0.0

    def to_record(self) -> Dict[str, Any]:
        """Wire representation returned by the gateway."""

        return {
            "id": self.id,
            "user_id": self.user_id,
            "image_url": self.image_url,
            "mimetype": self.mime_type,
            "category": self.category,
            "color": self.color,
            "pattern": self.pattern,
            "style": self.style,
            "season": self.season,
            "description": self.description,
            "created_at": self.created_at,
        }


class WardrobeStore:
    """Persistence interface for gateway items."""

    def insert_item(self, user_id: str, mime_type: str, attributes: Dict[str, Any]) -> StoredItem:
        raise NotImplementedError

    def set_image_url(self, item_id: int, image_url: str) -> Optional[StoredItem]:
        raise NotImplementedError

    def get_item(self, item_id: int) -> Optional[StoredItem]:
        raise NotImplementedError

    def list_items_for_user(self, user_id: str) -> List[StoredItem]:
        raise NotImplementedError

    def delete_item(self, item_id: int) -> bool:
        raise NotImplementedError


class SQLiteWardrobeStore(WardrobeStore):
    """Local SQLite-backed store; ids come from the table's autoincrement."""

    _ATTRIBUTES = ("category", "color", "pattern", "style", "season", "description")

    def __init__(self, database_path: str | Path = "data/wardrobe.db") -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_tables()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_tables(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS clothing_items (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    image_url TEXT,
                    mime_type TEXT NOT NULL,
                    category TEXT,
                    color TEXT,
                    pattern TEXT,
                    style TEXT,
                    season TEXT,
                    description TEXT,
                    created_at REAL NOT NULL
                );
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_clothing_items_user ON clothing_items (user_id)")

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> StoredItem:
        return StoredItem(
            id=int(row["id"]),
            user_id=row["user_id"],
            image_url=row["image_url"],
            mime_type=row["mime_type"],
            category=row["category"],
            color=row["color"],
            pattern=row["pattern"],
            style=row["style"],
            season=row["season"],
            description=row["description"],
            created_at=row["created_at"],
        )

    def insert_item(self, user_id: str, mime_type: str, attributes: Dict[str, Any]) -> StoredItem:
        values = [attributes.get(name) for name in self._ATTRIBUTES]
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO clothing_items (
                    user_id, mime_type, category, color, pattern, style, season, description, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (user_id, mime_type, *values, time.time()),
            )
            item_id = int(cursor.lastrowid)
        item = self.get_item(item_id)
        if item is None:
            raise sqlite3.DatabaseError("Failed to create wardrobe item")
        return item

    def set_image_url(self, item_id: int, image_url: str) -> Optional[StoredItem]:
        with self._connect() as conn:
            conn.execute("UPDATE clothing_items SET image_url = ? WHERE id = ?", (image_url, item_id))
        return self.get_item(item_id)

    def get_item(self, item_id: int) -> Optional[StoredItem]:
        with self._connect() as conn:
            cursor = conn.execute("SELECT * FROM clothing_items WHERE id = ?", (item_id,))
            row = cursor.fetchone()
            return self._row_to_item(row) if row else None

    def list_items_for_user(self, user_id: str) -> List[StoredItem]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM clothing_items WHERE user_id = ? ORDER BY id ASC",
                (user_id,),
            )
            return [self._row_to_item(row) for row in cursor.fetchall()]

    def delete_item(self, item_id: int) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM clothing_items WHERE id = ?", (item_id,))
            return cursor.rowcount > 0


__all__ = ["StoredItem", "WardrobeStore", "SQLiteWardrobeStore"]
