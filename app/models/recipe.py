"""
Recipe aggregate tables: header, ingredient usages and preparation steps.
"""
from sqlalchemy import (
    ARRAY,
    JSON,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.models.database import Base

# Postgres stores tags as text[]; SQLite (tests) falls back to JSON
TagList = ARRAY(String).with_variant(JSON(), "sqlite")


class Recipe(Base):
    __tablename__ = "recipes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False)
    measurement_unit = Column(String(2), nullable=False, server_default="g")  # g, ml
    cooking_index = Column(Float, nullable=False, server_default="0")
    internal_code = Column(String, nullable=True)
    prep_time = Column(Integer, nullable=True)  # minutes
    yield_ = Column("yield", Integer, nullable=True)
    difficulty = Column(String, nullable=True)  # Fácil, Médio, Difícil
    notes = Column(Text, nullable=True)
    image = Column(Text, nullable=True)
    tags = Column(TagList, nullable=True)
    gross_weight = Column(Float, nullable=False, server_default="0")
    net_weight = Column(Float, nullable=False, server_default="0")
    correction_factor = Column(Float, nullable=False, server_default="0")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    ingredients = relationship(
        "RecipeIngredient",
        back_populates="recipe",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    steps = relationship(
        "PreparationStep",
        back_populates="recipe",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PreparationStep.step_number",
    )

    def __repr__(self):
        return f"<Recipe(name='{self.name}', category='{self.category}')>"


class RecipeIngredient(Base):
    __tablename__ = "recipe_ingredients"

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Weak reference: survives deletion of the ingredient
    ingredient_id = Column(
        Integer, ForeignKey("ingredients.id", ondelete="SET NULL"), nullable=True
    )
    quantity = Column(Float, nullable=True)
    unit = Column(String(2), nullable=True)  # g, ml
    correction_factor = Column(Float, nullable=True)

    recipe = relationship("Recipe", back_populates="ingredients")

    def __repr__(self):
        return f"<RecipeIngredient(recipe_id={self.recipe_id}, ingredient_id={self.ingredient_id})>"


class PreparationStep(Base):
    __tablename__ = "preparation_steps"

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(
        Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    step_number = Column(Integer, nullable=False)
    description = Column(Text, nullable=False)

    recipe = relationship("Recipe", back_populates="steps")

    def __repr__(self):
        return f"<PreparationStep(recipe_id={self.recipe_id}, step_number={self.step_number})>"
