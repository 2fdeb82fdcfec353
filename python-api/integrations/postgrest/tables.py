"""
PostgREST Tables API Wrapper

Provides row-level operations on the tables exposed by the REST endpoint.
"""

from typing import Any, List, Optional

RETURN_REPRESENTATION = {"Prefer": "return=representation"}


class TablesAPI:
    """
    Wrapper for PostgREST table operations.

    Provides methods for:
    - Selecting rows (with embedded relations, ordering and limits)
    - Inserting and upserting rows in a single statement
    - Updating and deleting rows matching a filter

    Filters are dictionaries of column -> PostgREST operator string, built with
    the helpers in ``integrations.postgrest.filters``.
    """

    def __init__(self, client):
        """
        Initialize TablesAPI wrapper.

        Args:
            client: PostgrestClient instance
        """
        self.client = client

    async def select(
        self,
        table_name: str,
        columns: str = "*",
        filters: Optional[dict[str, str]] = None,
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[dict[str, Any]]:
        """
        Select rows from a table.

        Args:
            table_name: Name of the table
            columns: PostgREST select expression, may embed related tables
            filters: Column filters (e.g. {"event_id": "eq.123"})
            order: Order expression (e.g. "display_order.asc,created_at.asc")
            limit: Maximum number of rows to return

        Returns:
            List of matching rows

        Example:
            rows = await client.tables.select(
                "competitions_participants",
                columns="*,participant:participants(*),competition:competitions(*)",
                filters={"competition_id": in_(ids)},
                order="created_at.desc",
            )
        """
        params: dict[str, Any] = {"select": columns}
        if filters:
            params.update(filters)
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = limit

        rows = await self.client._request("GET", f"/{table_name}", params=params)
        return rows or []

    async def insert(
        self,
        table_name: str,
        rows: List[dict[str, Any]],
    ) -> List[dict[str, Any]]:
        """
        Insert rows into a table as one statement.

        Args:
            table_name: Name of the table
            rows: List of row objects to insert

        Returns:
            Inserted rows as stored
        """
        result = await self.client._request(
            "POST", f"/{table_name}", json=rows, headers=RETURN_REPRESENTATION
        )
        return result or []

    async def upsert(
        self,
        table_name: str,
        rows: List[dict[str, Any]],
        on_conflict: str = "id",
    ) -> List[dict[str, Any]]:
        """
        Insert rows, merging into existing rows that collide on ``on_conflict``.

        Args:
            table_name: Name of the table
            rows: Complete row objects
            on_conflict: Comma-separated conflict target columns

        Returns:
            Upserted rows as stored
        """
        result = await self.client._request(
            "POST",
            f"/{table_name}",
            json=rows,
            params={"on_conflict": on_conflict},
            headers={"Prefer": "resolution=merge-duplicates,return=representation"},
        )
        return result or []

    async def update(
        self,
        table_name: str,
        data: dict[str, Any],
        filters: dict[str, str],
    ) -> List[dict[str, Any]]:
        """
        Update every row matching ``filters``.

        Args:
            table_name: Name of the table
            data: Column values to set
            filters: Column filters selecting the rows to update

        Returns:
            Updated rows (empty if nothing matched)

        Raises:
            ValueError: If no filter is given
        """
        if not filters:
            raise ValueError("update requires at least one filter")

        result = await self.client._request(
            "PATCH", f"/{table_name}", params=filters, json=data, headers=RETURN_REPRESENTATION
        )
        return result or []

    async def delete(
        self,
        table_name: str,
        filters: dict[str, str],
    ) -> List[dict[str, Any]]:
        """
        Delete every row matching ``filters``.

        Args:
            table_name: Name of the table
            filters: Column filters selecting the rows to delete

        Returns:
            Deleted rows

        Raises:
            ValueError: If no filter is given
        """
        if not filters:
            raise ValueError("delete requires at least one filter")

        result = await self.client._request(
            "DELETE", f"/{table_name}", params=filters, headers=RETURN_REPRESENTATION
        )
        return result or []
