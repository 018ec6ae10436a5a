"""
Local row stores.

MemoryStore keeps tables in process memory and mirrors the backend's rules:
generated ids and timestamps, foreign-key existence on insert and cascading
deletes. JsonFileStore adds persistence to a single JSON file so the CLI can
work without a hosted backend.
"""

import os
import copy
import threading
from typing import Dict, Any, List, Optional

from cohortcraft.schemas import nullable_columns
from cohortcraft.store.base import RowStore, TABLES, FOREIGN_KEYS, validate_row
from cohortcraft.core.error_handler import StoreError, RecordNotFoundError
from cohortcraft.core.utils import generate_unique_id, utc_timestamp, load_json_file, save_json_file
from cohortcraft.core.logging_config import get_logger

# Initialize logger
logger = get_logger(__name__)

class MemoryStore(RowStore):
    """
    Row store backed by in-process dictionaries.
    """

    def __init__(self):
        self._tables: Dict[str, Dict[str, Dict[str, Any]]] = {table: {} for table in TABLES}
        self._lock = threading.RLock()

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        validate_row(table, row)

        with self._lock:
            self._check_foreign_key(table, row)

            now = utc_timestamp()
            stored = copy.deepcopy(row)
            stored.setdefault("id", generate_unique_id())
            stored.setdefault("created_at", now)
            stored.setdefault("updated_at", now)
            for column in nullable_columns(table):
                stored.setdefault(column, None)

            if stored["id"] in self._tables[table]:
                raise StoreError(f"Duplicate id {stored['id']}", table=table)

            self._tables[table][stored["id"]] = stored
            self._on_change()

        logger.debug(f"Inserted row {stored['id']} into {table}")
        return copy.deepcopy(stored)

    def get(self, table: str, row_id: str) -> Dict[str, Any]:
        with self._lock:
            row = self._table(table).get(row_id)
            if row is None:
                raise RecordNotFoundError(table, row_id)
            return copy.deepcopy(row)

    def select(self, table: str, order_by: Optional[str] = "created_at", **filters: Any) -> List[Dict[str, Any]]:
        with self._lock:
            rows = [
                copy.deepcopy(row) for row in self._table(table).values()
                if all(row.get(column) == value for column, value in filters.items())
            ]

        if order_by:
            descending = order_by.startswith("-")
            column = order_by.lstrip("-")
            rows.sort(key=lambda row: row.get(column) or "", reverse=descending)

        return rows

    def update(self, table: str, row_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        validate_row(table, changes, partial=True)

        with self._lock:
            rows = self._table(table)
            if row_id not in rows:
                raise RecordNotFoundError(table, row_id)

            updated = dict(rows[row_id])
            updated.update(copy.deepcopy(changes))
            updated["id"] = row_id
            updated["updated_at"] = utc_timestamp()
            self._check_foreign_key(table, updated)

            rows[row_id] = updated
            self._on_change()

        logger.debug(f"Updated row {row_id} in {table}: {sorted(changes)}")
        return copy.deepcopy(updated)

    def delete(self, table: str, row_id: str) -> None:
        with self._lock:
            if row_id not in self._table(table):
                raise RecordNotFoundError(table, row_id)
            self._delete_cascade(table, row_id)
            self._on_change()

        logger.debug(f"Deleted row {row_id} from {table}")

    def _table(self, table: str) -> Dict[str, Dict[str, Any]]:
        if table not in self._tables:
            raise StoreError(f"Unknown table {table}", table=table)
        return self._tables[table]

    def _check_foreign_key(self, table: str, row: Dict[str, Any]) -> None:
        if table not in FOREIGN_KEYS:
            return
        column, parent_table = FOREIGN_KEYS[table]
        if row.get(column) not in self._tables[parent_table]:
            raise StoreError(
                f"Foreign key violation: {column}={row.get(column)} not found in {parent_table}",
                table=table
            )

    def _delete_cascade(self, table: str, row_id: str) -> None:
        for child_table, (column, parent_table) in FOREIGN_KEYS.items():
            if parent_table != table:
                continue
            child_ids = [
                child_id for child_id, child in self._tables[child_table].items()
                if child.get(column) == row_id
            ]
            for child_id in child_ids:
                self._delete_cascade(child_table, child_id)
        self._tables[table].pop(row_id, None)

    def _on_change(self) -> None:
        """Hook called after every mutation while the lock is held."""
        pass


class JsonFileStore(MemoryStore):
    """
    MemoryStore persisted to a JSON file after every mutation.
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = os.path.expanduser(path)

        if os.path.exists(self.path):
            data = load_json_file(self.path)
            for table in TABLES:
                self._tables[table] = {row["id"]: row for row in data.get(table, [])}
            logger.debug(f"Loaded store from {self.path}")

    def _on_change(self) -> None:
        data = {table: list(rows.values()) for table, rows in self._tables.items()}
        # The store file is only ever replaced by a complete write
        temp_path = f"{self.path}.tmp"
        save_json_file(data, temp_path)
        os.replace(temp_path, self.path)
