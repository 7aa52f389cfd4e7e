# app/services/recipe_reader.py
"""
Hydration of recipe aggregates from their three tables.

Headers are fetched first; their usages and steps are then selected with an
`in` filter on recipe_id, and the referenced ingredient names with an `in`
filter on id (`id, descricao_alimento` only). Each of those selects is chunked
and paged (TableStore._select_in), so no child row is lost to the server's
row cap. Rows are grouped per recipe and reshaped by the field mapper. A usage
whose ingredient no longer exists keeps its row with an empty name.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Dict, List

from app.services.errors import RecordNotFoundError
from app.services.field_mapper import recipe_from_storage
from app.services.recipe_writer import STEPS_TABLE, USAGES_TABLE
from app.services.store import Row, TableStore

logger = logging.getLogger(__name__)

INGREDIENTS_TABLE = "ingredients"


class RecipeReader(TableStore):
    table_name = "recipes"
    order_column = "created_at"
    order_desc = True

    async def list(self) -> List[Dict[str, Any]]:
        """All recipes, newest first."""
        headers = await super().list()
        return await self.hydrate(headers)

    async def get(self, recipe_id: Any) -> Dict[str, Any]:
        headers = await self._execute(
            lambda: self.table().select("*").eq("id", recipe_id).limit(1),
            "recipes.get",
        )
        if not headers:
            raise RecordNotFoundError(self.table_name, recipe_id)
        return (await self.hydrate(headers))[0]

    async def hydrate(self, headers: List[Row]) -> List[Dict[str, Any]]:
        if not headers:
            return []
        recipe_ids = [header["id"] for header in headers]

        usage_rows = await self._select_in(
            lambda ids: self.table(USAGES_TABLE)
            .select("*")
            .in_("recipe_id", ids)
            .order("id"),
            recipe_ids,
            f"{USAGES_TABLE}.by_recipe",
        )
        step_rows = await self._select_in(
            lambda ids: self.table(STEPS_TABLE)
            .select("*")
            .in_("recipe_id", ids)
            .order("step_number")
            .order("id"),
            recipe_ids,
            f"{STEPS_TABLE}.by_recipe",
        )
        refs = await self._ingredient_refs(usage_rows)

        usages_by_recipe: Dict[Any, List[Row]] = defaultdict(list)
        for usage in usage_rows:
            joined = dict(usage)
            joined["ingredients"] = refs.get(usage.get("ingredient_id"))
            usages_by_recipe[usage["recipe_id"]].append(joined)
        steps_by_recipe: Dict[Any, List[Row]] = defaultdict(list)
        for step in step_rows:
            steps_by_recipe[step["recipe_id"]].append(step)

        logger.debug(
            "hydrated %d recipes from %d usages and %d steps (%d ingredient refs)",
            len(headers),
            len(usage_rows),
            len(step_rows),
            len(refs),
        )
        return [
            recipe_from_storage(
                header,
                usages_by_recipe.get(header["id"], []),
                steps_by_recipe.get(header["id"], []),
            )
            for header in headers
        ]

    async def _ingredient_refs(self, usage_rows: List[Row]) -> Dict[Any, Row]:
        ingredient_ids = list(
            dict.fromkeys(
                usage["ingredient_id"] for usage in usage_rows if usage.get("ingredient_id") is not None
            )
        )
        if not ingredient_ids:
            return {}
        rows = await self._select_in(
            lambda ids: self.table(INGREDIENTS_TABLE)
            .select("id, descricao_alimento")
            .in_("id", ids)
            .order("id"),
            ingredient_ids,
            f"{INGREDIENTS_TABLE}.names",
        )
        return {row["id"]: row for row in rows}
