"""
Row store backed by a hosted Supabase project.

Rows are read and written through the project's PostgREST endpoint
(<SUPABASE_URL>/rest/v1/<table>) using the service role key. Ids, timestamps,
foreign keys and cascades are enforced by the database itself.
"""

from typing import Dict, Any, List, Optional

import requests

from cohortcraft.store.base import RowStore, validate_row
from cohortcraft.core.config import get_config_value
from cohortcraft.core.credentials import get_credentials_for_service
from cohortcraft.core.error_handler import APIError, StoreError, RecordNotFoundError, handle_api_request
from cohortcraft.core.logging_config import get_logger
from cohortcraft.core.utils import utc_timestamp

# Initialize logger
logger = get_logger(__name__)

class SupabaseStore(RowStore):
    """
    Client for the Supabase REST (PostgREST) API.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        service_key: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        """
        Initialize the store.

        Args:
            url (str, optional): Project URL. Defaults to SUPABASE_URL.
            service_key (str, optional): Service role key. Defaults to SUPABASE_SERVICE_ROLE_KEY.
            timeout (float, optional): Request timeout in seconds.
        """
        if not url or not service_key:
            credentials = get_credentials_for_service(
                "supabase", ["SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY"]
            )
            url = url or credentials["SUPABASE_URL"]
            service_key = service_key or credentials["SUPABASE_SERVICE_ROLE_KEY"]

        self.service_key = service_key
        self.rest_url = f"{url.rstrip('/')}/rest/v1"
        self.timeout = timeout or get_config_value("storage.timeout", 30)

        logger.info(f"Initialized {self.__class__.__name__} for {url}")

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        validate_row(table, row)

        rows = self._request(
            requests.post, table, payload=row,
            prefer="return=representation",
            error_message=f"Failed to insert into {table}"
        )
        if not rows:
            raise StoreError("Insert returned no row", table=table)
        return rows[0]

    def get(self, table: str, row_id: str) -> Dict[str, Any]:
        rows = self.select(table, order_by=None, id=row_id)
        if not rows:
            raise RecordNotFoundError(table, row_id)
        return rows[0]

    def select(self, table: str, order_by: Optional[str] = "created_at", **filters: Any) -> List[Dict[str, Any]]:
        params = {"select": "*"}
        params.update(self._filters(filters))
        if order_by:
            direction = "desc" if order_by.startswith("-") else "asc"
            params["order"] = f"{order_by.lstrip('-')}.{direction}"

        return self._request(
            requests.get, table, params=params,
            error_message=f"Failed to select from {table}"
        ) or []

    def update(self, table: str, row_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        changes = dict(changes)
        changes["updated_at"] = utc_timestamp()
        validate_row(table, changes, partial=True)

        rows = self._request(
            requests.patch, table, payload=changes,
            params=self._filters({"id": row_id}),
            prefer="return=representation",
            error_message=f"Failed to update {table}"
        )
        if not rows:
            raise RecordNotFoundError(table, row_id)
        return rows[0]

    def delete(self, table: str, row_id: str) -> None:
        self._request(
            requests.delete, table,
            params=self._filters({"id": row_id}),
            error_message=f"Failed to delete from {table}"
        )

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
            "Content-Type": "application/json"
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    @staticmethod
    def _filters(filters: Dict[str, Any]) -> Dict[str, str]:
        params = {}
        for column, value in filters.items():
            params[column] = "is.null" if value is None else f"eq.{value}"
        return params

    def _request(
        self,
        request_func,
        table: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        prefer: Optional[str] = None,
        error_message: str = "Store request failed"
    ) -> Any:
        try:
            return handle_api_request(
                request_func,
                f"{self.rest_url}/{table}",
                payload=payload,
                headers=self._headers(prefer),
                error_message=error_message,
                params=params,
                timeout=self.timeout
            )
        except APIError as e:
            raise StoreError(e.message, table=table) from e
