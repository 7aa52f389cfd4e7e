# app/services/recipe_writer.py
"""
Create / update / delete for the recipe aggregate.

A recipe lives in three tables: the `recipes` header, its `recipe_ingredients`
usages and its `preparation_steps`. PostgREST gives us no transaction across
them, so every write is a fixed sequence of independent round trips:

    create: insert header -> insert usages -> insert steps
    update: update header -> delete+insert usages -> delete+insert steps
    delete: delete header -> delete usages -> delete steps

Child collections are replaced, never merged: after a successful update the
child tables hold exactly the rows that were submitted. A collection that is
absent from the update payload (None) is left as it is; an empty list clears it.

Failure policy:
  - The first stage (header) raises the store error unchanged; nothing was written.
  - Any later stage raises PartialWriteError chained to the store error. Earlier
    stages stay committed. No retry, no compensating cleanup.
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Sequence, Tuple

from app.services.errors import PartialWriteError
from app.services.field_mapper import (
    recipe_children,
    recipe_to_storage,
    steps_to_storage,
    usages_to_storage,
)
from app.services.store import Row, TableStore

logger = logging.getLogger(__name__)

USAGES_TABLE = "recipe_ingredients"
STEPS_TABLE = "preparation_steps"

Stage = Tuple[str, Callable[[], Awaitable[Any]]]


class RecipeWriter(TableStore):
    table_name = "recipes"

    # -----------------------
    # Internal helpers
    # -----------------------
    async def _insert_rows(self, table: str, rows: List[Row]) -> None:
        await self._execute(lambda: self.table(table).insert(rows), f"{table}.insert")

    async def _delete_children(self, table: str, recipe_id: Any) -> None:
        await self._execute(
            lambda: self.table(table).delete().eq("recipe_id", recipe_id),
            f"{table}.delete",
        )

    def _replace_stages(
        self, table: str, recipe_id: Any, rows: Optional[List[Row]]
    ) -> List[Stage]:
        if rows is None:
            return []
        stages: List[Stage] = [
            (f"{table}.delete", lambda: self._delete_children(table, recipe_id))
        ]
        if rows:
            stages.append((f"{table}.insert", lambda: self._insert_rows(table, rows)))
        return stages

    async def _run_stages(
        self,
        recipe_id: Any,
        row: Optional[Row],
        completed: List[str],
        stages: Sequence[Stage],
    ) -> None:
        for stage, action in stages:
            try:
                await action()
            except Exception as exc:
                logger.error(
                    "recipe %s: stage %s failed after %s; committed stages are kept: %s",
                    recipe_id,
                    stage,
                    completed,
                    exc,
                )
                raise PartialWriteError(
                    self.table_name, recipe_id, stage, completed, row=row
                ) from exc
            completed.append(stage)
        logger.info("recipe %s: stages committed %s", recipe_id, completed)

    # -----------------------
    # Public API
    # -----------------------
    async def create(self, aggregate: Mapping[str, Any]) -> Row:
        """Insert header then children; returns the stored header row."""
        usages, steps = recipe_children(aggregate)
        header = await self._insert_one(recipe_to_storage(aggregate))
        recipe_id = header["id"]
        logger.info("recipe %s created: %r", recipe_id, header.get("name"))

        stages: List[Stage] = []
        if usages:
            usage_rows = usages_to_storage(recipe_id, usages)
            stages.append(
                (f"{USAGES_TABLE}.insert", lambda: self._insert_rows(USAGES_TABLE, usage_rows))
            )
        if steps:
            step_rows = steps_to_storage(recipe_id, steps)
            stages.append(
                (f"{STEPS_TABLE}.insert", lambda: self._insert_rows(STEPS_TABLE, step_rows))
            )
        await self._run_stages(recipe_id, header, [f"{self.table_name}.insert"], stages)
        return header

    async def update(self, recipe_id: Any, aggregate: Mapping[str, Any]) -> Row:
        """
        Partial header update, then replace each child collection that was sent.

        A collection key that is absent (or null) leaves its stored rows
        untouched. A list, even an empty one, deletes every stored row of that
        collection and inserts the given ones, so `"ingredients": []` clears
        the recipe's ingredients while omitting "ingredients" keeps them.
        """
        usages, steps = recipe_children(aggregate)
        changes = recipe_to_storage(aggregate, partial=True)
        logger.info("recipe %s update: columns=%s", recipe_id, sorted(changes))
        header = await self._update_one(recipe_id, changes)

        usage_rows = None if usages is None else usages_to_storage(recipe_id, usages)
        step_rows = None if steps is None else steps_to_storage(recipe_id, steps)
        stages = self._replace_stages(USAGES_TABLE, recipe_id, usage_rows)
        stages += self._replace_stages(STEPS_TABLE, recipe_id, step_rows)
        await self._run_stages(recipe_id, header, [f"{self.table_name}.update"], stages)
        return header

    async def delete(self, recipe_id: Any) -> None:
        """
        Delete the header, then its children explicitly.

        Child rows left behind by a failure after the header delete are not
        reachable from the reader, which starts from header rows.
        """
        logger.info("recipe %s delete", recipe_id)
        await super().delete(recipe_id)
        stages: List[Stage] = [
            (f"{USAGES_TABLE}.delete", lambda: self._delete_children(USAGES_TABLE, recipe_id)),
            (f"{STEPS_TABLE}.delete", lambda: self._delete_children(STEPS_TABLE, recipe_id)),
        ]
        await self._run_stages(recipe_id, None, [f"{self.table_name}.delete"], stages)
