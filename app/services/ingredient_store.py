# app/services/ingredient_store.py
"""
Flat CRUD over the `ingredients` table (one nutrient vector per food item).

Each operation is a single round trip; store errors propagate unchanged.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from app.services.field_mapper import ingredient_to_storage
from app.services.store import Row, TableStore

logger = logging.getLogger(__name__)


class IngredientStore(TableStore):
    table_name = "ingredients"
    order_column = "descricao_alimento"
    order_desc = False

    async def list(self) -> List[Row]:
        """All ingredients, alphabetical by description."""
        return await super().list()

    async def create(self, fields: Mapping[str, Any]) -> Row:
        row = ingredient_to_storage(fields)
        logger.info(
            "create ingredient: %s/%s %r",
            row.get("tabela_nutricional"),
            row.get("numero_alimento"),
            row.get("descricao_alimento"),
        )
        return await self._insert_one(row)

    async def update(self, ingredient_id: Any, fields: Mapping[str, Any]) -> Row:
        changes: Dict[str, Any] = ingredient_to_storage(fields, partial=True)
        logger.info("update ingredient %s: columns=%s", ingredient_id, sorted(changes))
        return await self._update_one(ingredient_id, changes)

    async def delete(self, ingredient_id: Any) -> None:
        # Recipe usages keep their (now dangling) ingredient_id; readers degrade the name.
        logger.info("delete ingredient %s", ingredient_id)
        await super().delete(ingredient_id)
