"""
Client (organization) and conversation endpoints.
"""
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, Response

from app.api.dependencies import get_database
from app.services import Database

router = APIRouter()
conversations_router = APIRouter()


@router.get("")
async def list_clients(db: Database = Depends(get_database)) -> List[Dict[str, Any]]:
    return await db.clients.list()


@router.post("", status_code=201)
async def create_client(
    fields: Dict[str, Any] = Body(...), db: Database = Depends(get_database)
) -> Dict[str, Any]:
    return await db.clients.create(fields)


@router.put("/{client_id}")
async def update_client(
    client_id: int,
    fields: Dict[str, Any] = Body(...),
    db: Database = Depends(get_database),
) -> Dict[str, Any]:
    return await db.clients.update(client_id, fields)


@router.delete("/{client_id}", status_code=204)
async def delete_client(client_id: int, db: Database = Depends(get_database)) -> Response:
    await db.clients.delete(client_id)
    return Response(status_code=204)


@conversations_router.get("")
async def list_conversations(db: Database = Depends(get_database)) -> List[Dict[str, Any]]:
    return await db.conversations.list()


@conversations_router.post("", status_code=201)
async def create_conversation(
    fields: Dict[str, Any] = Body(...), db: Database = Depends(get_database)
) -> Dict[str, Any]:
    return await db.conversations.create(fields)


@conversations_router.post("/{conversation_id}/messages", status_code=201)
async def add_message(
    conversation_id: int,
    message: Dict[str, Any] = Body(...),
    db: Database = Depends(get_database),
) -> Dict[str, Any]:
    try:
        return await db.conversations.add_message(conversation_id, message)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
