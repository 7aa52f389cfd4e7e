# app/services/client_store.py
"""Flat CRUD over `clients`, the organizations the nutrition service works for."""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from app.services.store import Row, TableStore

logger = logging.getLogger(__name__)

CLIENT_FIELDS = ("name", "phone", "address", "responsible", "notes", "avatar")


def _client_row(fields: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: fields[key] for key in CLIENT_FIELDS if key in fields}


class ClientStore(TableStore):
    table_name = "clients"
    order_column = "created_at"
    order_desc = True

    async def create(self, fields: Mapping[str, Any]) -> Row:
        logger.info("create client %r", fields.get("name"))
        return await self._insert_one(_client_row(fields))

    async def update(self, client_id: Any, fields: Mapping[str, Any]) -> Row:
        return await self._update_one(client_id, _client_row(fields))
