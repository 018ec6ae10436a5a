"""
Base row store interface.

This module defines the interface every persistence backend implements. Rows
are plain dictionaries keyed by column name; each table has a JSON schema in
cohortcraft.schemas that rows are validated against before they are written.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional

import jsonschema

from cohortcraft.schemas import load_schema
from cohortcraft.core.error_handler import StoreError
from cohortcraft.core.constants import (
    BRAND_GUIDELINES_TABLE,
    CAMPAIGNS_TABLE,
    MICRO_COHORTS_TABLE,
    CAMPAIGN_CREATIVES_TABLE
)

TABLES = [
    BRAND_GUIDELINES_TABLE,
    CAMPAIGNS_TABLE,
    MICRO_COHORTS_TABLE,
    CAMPAIGN_CREATIVES_TABLE
]

# child table -> (foreign key column, parent table)
FOREIGN_KEYS = {
    MICRO_COHORTS_TABLE: ("campaign_id", CAMPAIGNS_TABLE),
    CAMPAIGN_CREATIVES_TABLE: ("cohort_id", MICRO_COHORTS_TABLE),
}


def validate_row(table: str, row: Dict[str, Any], partial: bool = False) -> None:
    """
    Validate a row against its table schema.

    Args:
        table (str): Table name
        row (Dict[str, Any]): Row (or set of changed columns when partial)
        partial (bool): Skip the required-column check, for updates

    Raises:
        StoreError: If the table is unknown or the row does not match the schema
    """
    if table not in TABLES:
        raise StoreError(f"Unknown table {table}", table=table)

    schema = load_schema(table, partial=partial)

    try:
        jsonschema.validate(instance=row, schema=schema)
    except jsonschema.exceptions.ValidationError as e:
        raise StoreError(f"Invalid row: {e.message}", table=table) from e


class RowStore(ABC):
    """
    Base interface for row persistence backends.
    """

    @abstractmethod
    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a row.

        Args:
            table (str): Table name
            row (Dict[str, Any]): Column values

        Returns:
            Dict[str, Any]: The stored row including id and timestamps

        Raises:
            StoreError: If the row is invalid or the write fails
        """
        pass

    @abstractmethod
    def get(self, table: str, row_id: str) -> Dict[str, Any]:
        """
        Fetch a row by id.

        Raises:
            RecordNotFoundError: If no row has this id
        """
        pass

    @abstractmethod
    def select(self, table: str, order_by: Optional[str] = "created_at", **filters: Any) -> List[Dict[str, Any]]:
        """
        Fetch all rows whose columns equal the given filters.

        Args:
            table (str): Table name
            order_by (str, optional): Column to sort by; prefix with "-" for descending
            **filters: Column equality filters

        Returns:
            List[Dict[str, Any]]: Matching rows
        """
        pass

    @abstractmethod
    def update(self, table: str, row_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update columns of a row.

        Returns:
            Dict[str, Any]: The updated row

        Raises:
            RecordNotFoundError: If no row has this id
        """
        pass

    @abstractmethod
    def delete(self, table: str, row_id: str) -> None:
        """
        Delete a row and, by cascade, its children.
        """
        pass

    def find_one(self, table: str, **filters: Any) -> Optional[Dict[str, Any]]:
        """
        Fetch the first row matching the filters, or None.
        """
        rows = self.select(table, **filters)
        return rows[0] if rows else None
