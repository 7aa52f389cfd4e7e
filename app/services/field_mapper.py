# app/services/field_mapper.py
"""
Translation between the recipe aggregate and its storage rows.

The aggregate uses camelCase names (cookingIndex, measurementUnit, ...); the
tables use snake_case columns. Both spellings are accepted on input and the
aggregate-side name wins when both are present. The mapping is a plain table
(RECIPE_FIELDS), no reflection.

Numbers follow parseFloat semantics: the longest leading numeric prefix of a
string is used ("12.5kg" -> 12.5) and anything else is NaN. Neither NaN nor
infinity ("1e400") reaches storage: defaulted header fields fall back to their
default, other numbers become None (what both turn into once serialized to
JSON).

Everything here is pure; no I/O.
"""
from __future__ import annotations

import math
import re
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional

from app.services.step_sequencer import order_step_rows, sequence_steps

_FLOAT_PREFIX_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

NAN = float("nan")


def parse_float(value: Any) -> float:
    """parseFloat: leading numeric prefix of the value, or NaN."""
    if value is None or isinstance(value, bool):
        return NAN
    if isinstance(value, (int, float)):
        return float(value)
    match = _FLOAT_PREFIX_RE.match(str(value))
    if not match:
        return NAN
    return float(match.group(1))


def float_or_none(value: Any) -> Optional[float]:
    number = parse_float(value)
    return number if math.isfinite(number) else None


def float_or_default(value: Any, default: float = 0.0) -> float:
    number = parse_float(value)
    return number if math.isfinite(number) else default


def int_or_none(value: Any) -> Optional[int]:
    number = parse_float(value)
    return int(number) if math.isfinite(number) else None


def _present(value: Any) -> bool:
    return value is not None and value != ""


def _pick(data: Mapping[str, Any], *names: str) -> Any:
    """First present value among names; the aggregate-side name goes first."""
    for name in names:
        if _present(data.get(name)):
            return data[name]
    for name in names:
        if name in data and data[name] is not None:
            return data[name]
    return None


# -----------------------
# Recipe header
# -----------------------
class HeaderField(NamedTuple):
    column: str
    alias: str
    kind: str  # text, float, int, list, raw
    create_default: Any = None


RECIPE_FIELDS = (
    HeaderField("name", "name", "text"),
    HeaderField("category", "category", "text"),
    HeaderField("measurement_unit", "measurementUnit", "text", "g"),
    HeaderField("cooking_index", "cookingIndex", "float", 0.0),
    HeaderField("internal_code", "internalCode", "text"),
    HeaderField("prep_time", "prepTime", "int"),
    HeaderField("yield", "yield", "int"),
    HeaderField("difficulty", "difficulty", "text"),
    HeaderField("notes", "notes", "text"),
    HeaderField("image", "image", "raw"),
    HeaderField("tags", "tags", "list"),
    HeaderField("gross_weight", "grossWeight", "float", 0.0),
    HeaderField("net_weight", "netWeight", "float", 0.0),
    HeaderField("correction_factor", "correctionFactor", "float", 0.0),
)

MEASUREMENT_UNITS = ("g", "ml")
DIFFICULTY_LEVELS = ("Fácil", "Médio", "Difícil")
RECIPE_CATEGORIES = (
    "Acompanhamento", "Couvert", "Drinks", "Entrada", "Entrada Fria",
    "Entrada Quente", "Guarnição", "Lanche Rápido", "Massa", "Molho",
    "Outro", "Pães", "Petisco", "Prato Principal", "Prato Único",
    "Receita Base", "Salgado", "Sanduíche", "Sobremesa", "Sopa",
)


def _coerce(field: HeaderField, value: Any, partial: bool) -> Any:
    if field.kind == "float":
        if partial:
            return float_or_none(value)
        return float_or_default(value, field.create_default)
    if field.kind == "int":
        return int_or_none(value)
    if field.kind == "list":
        if value is None:
            return None
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return list(value)
    return value


def recipe_to_storage(aggregate: Mapping[str, Any], partial: bool = False) -> Dict[str, Any]:
    """
    Map an aggregate (or a bare header dict) to a `recipes` row.

    partial=False (create): every column is emitted; defaulted numbers fall
    back to their default, other absent values are None.
    partial=True (update): only columns the caller supplied are emitted, so
    the store leaves the rest untouched.
    """
    row: Dict[str, Any] = {}
    for field in RECIPE_FIELDS:
        names = (field.alias,) if field.alias == field.column else (field.alias, field.column)
        raw = _pick(aggregate, *names)
        if raw is None:
            if partial:
                continue
            row[field.column] = field.create_default
            continue
        value = _coerce(field, raw, partial)
        if value is None and partial:
            continue
        row[field.column] = value
    return row


def usage_to_storage(recipe_id: Any, usage: Mapping[str, Any]) -> Dict[str, Any]:
    """One `recipe_ingredients` row; quantity forced to float, factor float-or-None."""
    ingredient_id = _pick(usage, "ingredientId", "ingredient_id")
    factor = _pick(usage, "correctionFactor", "correction_factor")
    return {
        "recipe_id": recipe_id,
        "ingredient_id": ingredient_id if ingredient_id else None,
        "quantity": float_or_none(usage.get("quantity")),
        "unit": usage.get("unit"),
        "correction_factor": float_or_none(factor) if factor else None,
    }


def usages_to_storage(recipe_id: Any, usages: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    return [usage_to_storage(recipe_id, usage) for usage in usages]


def steps_to_storage(recipe_id: Any, steps: Iterable[Any]) -> List[Dict[str, Any]]:
    return [
        {"recipe_id": recipe_id, **step} for step in sequence_steps(steps)
    ]


def recipe_children(aggregate: Mapping[str, Any]):
    """
    Split the child collections off an aggregate.

    Returns (usages, steps); either is None when the caller did not send that
    collection at all, which update() treats as "leave as is".
    """
    usages = aggregate.get("ingredients")
    steps = aggregate.get("preparationSteps")
    if steps is None:
        steps = aggregate.get("steps")
    if steps is None:
        steps = aggregate.get("preparation_steps")
    return usages, steps


# -----------------------
# Hydration
# -----------------------
def _ingredient_name(usage_row: Mapping[str, Any]) -> str:
    ref = usage_row.get("ingredients")
    if isinstance(ref, list):
        ref = ref[0] if ref else None
    if not ref:
        return ""
    return ref.get("descricao_alimento") or ""


def usage_from_storage(row: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": row.get("id"),
        "ingredientId": row.get("ingredient_id"),
        "name": _ingredient_name(row),
        "quantity": float_or_none(row.get("quantity")),
        "unit": row.get("unit"),
        "correctionFactor": float_or_none(row.get("correction_factor")),
    }


def recipe_from_storage(
    row: Mapping[str, Any],
    usage_rows: Iterable[Mapping[str, Any]] = (),
    step_rows: Iterable[Mapping[str, Any]] = (),
) -> Dict[str, Any]:
    """
    Build the aggregate view from a header row and its two child row sets.

    Usage rows may carry the joined ingredient under "ingredients"
    ({id, descricao_alimento}); a missing join degrades to an empty name.
    """
    aggregate: Dict[str, Any] = {"id": row.get("id")}
    for field in RECIPE_FIELDS:
        value = row.get(field.column)
        if field.kind == "float":
            value = float_or_default(value, field.create_default)
        elif field.kind == "list":
            value = list(value or [])
        aggregate[field.alias] = value
    aggregate["createdAt"] = row.get("created_at")
    aggregate["ingredients"] = [usage_from_storage(usage) for usage in usage_rows]
    aggregate["preparationSteps"] = [
        {"number": step.get("step_number"), "description": step.get("description")}
        for step in order_step_rows(step_rows)
    ]
    return aggregate


# -----------------------
# Ingredients (flat entity)
# -----------------------
INGREDIENT_TEXT_FIELDS = (
    ("tabela_nutricional", "table_of_origin"),
    ("numero_alimento", "food_number"),
    ("descricao_alimento", "description"),
    ("categoria", "category"),
)

NUTRIENT_COLUMNS = (
    "porcentagem_umidade",
    "energia_kcal",
    "energia_kj",
    "proteina_g",
    "lipideos_g",
    "colesterol_mg",
    "carboidrato_g",
    "fibra_alimentar_g",
    "cinzas_g",
    "calcio_mg",
    "magnesio_mg",
    "manganes_mg",
    "fosforo_mg",
    "ferro_mg",
    "sodio_mg",
    "potassio_mg",
    "cobre_mg",
    "zinco_mg",
    "retinol_mcg",
    "re_mcg",
    "rae_mcg",
    "tiamina_mg",
    "riboflavina_mg",
    "piridoxina_mg",
    "niacina_mg",
    "vitamina_c_mg",
)


def ingredient_to_storage(fields: Mapping[str, Any], partial: bool = False) -> Dict[str, Any]:
    """Map ingredient input to an `ingredients` row; nutrients default to 0 on create."""
    row: Dict[str, Any] = {}
    for column, alias in INGREDIENT_TEXT_FIELDS:
        value = _pick(fields, alias, column)
        if value is None:
            if partial:
                continue
        else:
            value = str(value).strip()
        row[column] = value
    for column in NUTRIENT_COLUMNS:
        if column not in fields:
            if not partial:
                row[column] = 0.0
            continue
        row[column] = float_or_default(fields[column], 0.0)
    return row
