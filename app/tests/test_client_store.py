# app/tests/test_client_store.py
import pytest

from app.services import Database
from app.services.errors import PartialWriteError, RecordNotFoundError


@pytest.mark.asyncio
async def test_clients_crud(db, fake_db):
    lar = await db.clients.create(
        {"name": "Lar Nossa Senhora dos Navegantes", "phone": "(51) 98765-4321", "responsible": "João Silva"}
    )
    await db.clients.create({"name": "Escolinha Amigos do Mar", "unknown_column": "dropped"})

    names = [c["name"] for c in await db.clients.list()]
    assert names == ["Escolinha Amigos do Mar", "Lar Nossa Senhora dos Navegantes"]
    assert "unknown_column" not in fake_db.rows("clients")[1]

    updated = await db.clients.update(lar["id"], {"notes": "Cliente preferencial"})
    assert updated["notes"] == "Cliente preferencial"
    assert updated["phone"] == "(51) 98765-4321"

    await db.clients.delete(lar["id"])
    assert [c["name"] for c in await db.clients.list()] == ["Escolinha Amigos do Mar"]


@pytest.mark.asyncio
async def test_update_unknown_client(db):
    with pytest.raises(RecordNotFoundError):
        await db.clients.update(5, {"name": "x"})


@pytest.mark.asyncio
async def test_conversation_with_client_and_messages(db):
    client = await db.clients.create({"name": "Lar"})
    conversation = await db.conversations.create({"client_id": client["id"]})

    await db.conversations.add_message(conversation["id"], {"type": "client", "text": "Bom dia"})
    reply = await db.conversations.add_message(conversation["id"], {"type": "agent", "text": "Olá!"})

    assert reply["text"] == "Olá!"
    listed = await db.conversations.list()
    assert len(listed) == 1
    assert listed[0]["client"]["name"] == "Lar"
    assert [m["text"] for m in listed[0]["messages"]] == ["Bom dia", "Olá!"]
    assert listed[0]["last_message_text"] == "Olá!"
    assert listed[0]["unread"] is False


@pytest.mark.asyncio
async def test_client_message_marks_unread(db, fake_db):
    conversation = await db.conversations.create({"client_id": 1})
    await db.conversations.add_message(conversation["id"], {"type": "client", "text": "Oi"})
    assert fake_db.rows("conversations")[0]["unread"] is True


@pytest.mark.asyncio
async def test_invalid_message_type(db, fake_db):
    with pytest.raises(ValueError):
        await db.conversations.add_message(1, {"type": "bot", "text": "?"})
    assert fake_db.calls == []


@pytest.mark.asyncio
async def test_summary_failure_keeps_message(db, fake_db):
    conversation = await db.conversations.create({"client_id": 1})
    fake_db.fail_on("conversations", "update")

    with pytest.raises(PartialWriteError) as excinfo:
        await db.conversations.add_message(conversation["id"], {"type": "agent", "text": "Olá"})

    assert excinfo.value.completed == ["messages.insert"]
    assert fake_db.rows("messages", conversation_id=conversation["id"])[0]["text"] == "Olá"


@pytest.mark.asyncio
async def test_conversation_lists_all_messages_past_server_row_cap(fake_db):
    fake_db.max_rows = 10
    db = Database(fake_db, page_size=10)
    conversation = await db.conversations.create({"client_id": 1})
    for n in range(25):
        await db.conversations.add_message(conversation["id"], {"type": "client", "text": f"msg {n}"})

    listed = await db.conversations.list()

    assert [m["text"] for m in listed[0]["messages"]] == [f"msg {n}" for n in range(25)]
    assert fake_db.calls.count(("messages", "select")) == 3
