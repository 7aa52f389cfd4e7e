# app/api/recipes.py
"""
Recipe aggregate endpoints.

Bodies are plain JSON objects; the field mapper accepts camelCase or
snake_case keys. Errors are translated to HTTP by the handlers in main.py.
"""
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Response

from app.api.dependencies import get_database
from app.services import Database

router = APIRouter()


@router.get("")
async def list_recipes(db: Database = Depends(get_database)) -> List[Dict[str, Any]]:
    return await db.recipes.list()


@router.get("/{recipe_id}")
async def get_recipe(recipe_id: int, db: Database = Depends(get_database)) -> Dict[str, Any]:
    return await db.recipes.get(recipe_id)


@router.post("", status_code=201)
async def create_recipe(
    aggregate: Dict[str, Any] = Body(...), db: Database = Depends(get_database)
) -> Dict[str, Any]:
    return await db.recipes.create(aggregate)


@router.put("/{recipe_id}")
async def update_recipe(
    recipe_id: int,
    aggregate: Dict[str, Any] = Body(...),
    db: Database = Depends(get_database),
) -> Dict[str, Any]:
    return await db.recipes.update(recipe_id, aggregate)


@router.delete("/{recipe_id}", status_code=204)
async def delete_recipe(recipe_id: int, db: Database = Depends(get_database)) -> Response:
    await db.recipes.delete(recipe_id)
    return Response(status_code=204)
