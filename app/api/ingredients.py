"""
Ingredient (nutrient table) endpoints.
"""
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Response

from app.api.dependencies import get_database
from app.services import Database

router = APIRouter()


@router.get("")
async def list_ingredients(db: Database = Depends(get_database)) -> List[Dict[str, Any]]:
    return await db.ingredients.list()


@router.post("", status_code=201)
async def create_ingredient(
    fields: Dict[str, Any] = Body(...), db: Database = Depends(get_database)
) -> Dict[str, Any]:
    return await db.ingredients.create(fields)


@router.put("/{ingredient_id}")
async def update_ingredient(
    ingredient_id: int,
    fields: Dict[str, Any] = Body(...),
    db: Database = Depends(get_database),
) -> Dict[str, Any]:
    return await db.ingredients.update(ingredient_id, fields)


@router.delete("/{ingredient_id}", status_code=204)
async def delete_ingredient(ingredient_id: int, db: Database = Depends(get_database)) -> Response:
    await db.ingredients.delete(ingredient_id)
    return Response(status_code=204)
