"""
Persistence layer for the nutrition admin.

    from app.services import Database

    db = Database()
    recipes = await db.recipes.list()
    row = await db.recipes.create({"name": "Bolo", "category": "Sobremesa", ...})
"""
from typing import Any, Optional

from app.services.client_store import ClientStore
from app.services.conversation_store import ConversationStore
from app.services.errors import PartialWriteError, RecordNotFoundError
from app.services.ingredient_store import IngredientStore
from app.services.recipe_store import RecipeStore


class Database:
    """All stores bound to one supabase client (the global one by default)."""

    def __init__(self, client: Optional[Any] = None, page_size: Optional[int] = None) -> None:
        self.recipes = RecipeStore(client, page_size)
        self.ingredients = IngredientStore(client, page_size)
        self.clients = ClientStore(client, page_size)
        self.conversations = ConversationStore(client, page_size)


__all__ = [
    "Database",
    "RecipeStore",
    "IngredientStore",
    "ClientStore",
    "ConversationStore",
    "PartialWriteError",
    "RecordNotFoundError",
]
