"""Schema models for the nutrition admin tables."""
from app.models.database import Base, create_schema, get_engine
from app.models.ingredient import Ingredient
from app.models.recipe import PreparationStep, Recipe, RecipeIngredient
from app.models.client import Client, Conversation, Message

# Export all models
__all__ = [
    "Base",
    "create_schema",
    "get_engine",
    "Ingredient",
    "Recipe",
    "RecipeIngredient",
    "PreparationStep",
    "Client",
    "Conversation",
    "Message",
]
