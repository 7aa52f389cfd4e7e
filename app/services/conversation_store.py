# app/services/conversation_store.py
"""
Conversations between the nutrition team and its clients.

add_message() writes twice (message row, then the conversation's last-message
summary) with the same no-rollback policy as recipe writes.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

from app.services.errors import PartialWriteError
from app.services.store import Row, TableStore

logger = logging.getLogger(__name__)

MESSAGE_TYPES = ("client", "agent")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ConversationStore(TableStore):
    table_name = "conversations"
    order_column = "updated_at"
    order_desc = True

    async def list(self) -> List[Dict[str, Any]]:
        """Conversations (most recently updated first) with their client and messages."""
        conversations = await super().list()
        if not conversations:
            return []
        conversation_ids = [c["id"] for c in conversations]
        client_ids = list({c["client_id"] for c in conversations if c.get("client_id") is not None})

        clients: Dict[Any, Row] = {}
        if client_ids:
            rows = await self._select_in(
                lambda ids: self.table("clients").select("*").in_("id", ids).order("id"),
                client_ids,
                "clients.by_id",
            )
            clients = {row["id"]: row for row in rows}
        messages = await self._select_in(
            lambda ids: self.table("messages")
            .select("*")
            .in_("conversation_id", ids)
            .order("created_at")
            .order("id"),
            conversation_ids,
            "messages.by_conversation",
        )
        by_conversation: Dict[Any, List[Row]] = defaultdict(list)
        for message in messages:
            by_conversation[message["conversation_id"]].append(message)

        return [
            {
                **conversation,
                "client": clients.get(conversation.get("client_id")),
                "messages": by_conversation.get(conversation["id"], []),
            }
            for conversation in conversations
        ]

    async def create(self, fields: Mapping[str, Any]) -> Row:
        logger.info("create conversation for client %s", fields.get("client_id"))
        return await self._insert_one(dict(fields))

    async def add_message(self, conversation_id: Any, message: Mapping[str, Any]) -> Row:
        message_type = message.get("type")
        if message_type not in MESSAGE_TYPES:
            raise ValueError(f"message type must be one of {MESSAGE_TYPES}, got {message_type!r}")
        text = message.get("text")

        stored = await self._execute(
            lambda: self.table("messages").insert(
                {"conversation_id": conversation_id, "type": message_type, "text": text}
            ),
            "messages.insert",
        )
        new_message = stored[0] if stored else None

        now = _now_iso()
        summary = {
            "last_message_text": text,
            "last_message_timestamp": now,
            "updated_at": now,
            "unread": message_type == "client",
        }
        try:
            await self._execute(
                lambda: self.table().update(summary).eq("id", conversation_id),
                "conversations.touch",
            )
        except Exception as exc:
            logger.error(
                "conversation %s: message stored but summary update failed: %s",
                conversation_id,
                exc,
            )
            raise PartialWriteError(
                self.table_name,
                conversation_id,
                "conversations.update",
                ["messages.insert"],
                row=new_message,
            ) from exc
        return new_message
