"""
Ingredient model: one food item from a nutrition composition table.

Nutrient values are per 100 units (g or ml) of the food.
"""
from sqlalchemy import Column, DateTime, Float, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from app.models.database import Base


def _nutrient():
    return Column(Float, nullable=False, server_default="0")


class Ingredient(Base):
    __tablename__ = "ingredients"

    id = Column(Integer, primary_key=True, index=True)
    tabela_nutricional = Column(String, nullable=False)  # TACO, TBCA, IBGE, USDA
    numero_alimento = Column(String, nullable=False)
    descricao_alimento = Column(String, nullable=False, index=True)
    categoria = Column(String, nullable=False)

    porcentagem_umidade = _nutrient()
    energia_kcal = _nutrient()
    energia_kj = _nutrient()
    proteina_g = _nutrient()
    lipideos_g = _nutrient()
    colesterol_mg = _nutrient()
    carboidrato_g = _nutrient()
    fibra_alimentar_g = _nutrient()
    cinzas_g = _nutrient()
    calcio_mg = _nutrient()
    magnesio_mg = _nutrient()
    manganes_mg = _nutrient()
    fosforo_mg = _nutrient()
    ferro_mg = _nutrient()
    sodio_mg = _nutrient()
    potassio_mg = _nutrient()
    cobre_mg = _nutrient()
    zinco_mg = _nutrient()
    retinol_mcg = _nutrient()
    re_mcg = _nutrient()
    rae_mcg = _nutrient()
    tiamina_mg = _nutrient()
    riboflavina_mg = _nutrient()
    piridoxina_mg = _nutrient()
    niacina_mg = _nutrient()
    vitamina_c_mg = _nutrient()

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Natural key: (table of origin, food number)
    __table_args__ = (
        UniqueConstraint("tabela_nutricional", "numero_alimento", name="_table_food_number_uc"),
    )

    def __repr__(self):
        return f"<Ingredient(descricao_alimento='{self.descricao_alimento}')>"
