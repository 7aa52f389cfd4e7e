# app/services/recipe_store.py
"""
Public surface of the recipe aggregate: list/get through the reader,
create/update/delete through the writer.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from app.services.recipe_reader import RecipeReader
from app.services.recipe_writer import RecipeWriter
from app.services.store import Row


class RecipeStore:

    def __init__(self, client: Optional[Any] = None, page_size: Optional[int] = None) -> None:
        self.reader = RecipeReader(client, page_size)
        self.writer = RecipeWriter(client, page_size)

    async def list(self) -> List[Dict[str, Any]]:
        return await self.reader.list()

    async def get(self, recipe_id: Any) -> Dict[str, Any]:
        return await self.reader.get(recipe_id)

    async def create(self, aggregate: Mapping[str, Any]) -> Row:
        return await self.writer.create(aggregate)

    async def update(self, recipe_id: Any, aggregate: Mapping[str, Any]) -> Row:
        return await self.writer.update(recipe_id, aggregate)

    async def delete(self, recipe_id: Any) -> None:
        await self.writer.delete(recipe_id)
