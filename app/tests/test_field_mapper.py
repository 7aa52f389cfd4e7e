# app/tests/test_field_mapper.py
import math

import pytest

from app.services.field_mapper import (
    NUTRIENT_COLUMNS,
    RECIPE_FIELDS,
    ingredient_to_storage,
    parse_float,
    recipe_from_storage,
    recipe_to_storage,
    usage_to_storage,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (12.5, 12.5),
        ("12.5", 12.5),
        ("  7", 7.0),
        ("12.5kg", 12.5),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("1,1", 1.0),
        (3, 3.0),
    ],
)
def test_parse_float_follows_leading_prefix(raw, expected):
    assert parse_float(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "abc", "kg12", True, [], {}])
def test_parse_float_unparsable_is_nan(raw):
    assert math.isnan(parse_float(raw))


def test_create_mapping_fills_defaults():
    row = recipe_to_storage({"name": "Sopa", "category": "Sopa"})
    assert set(row) == {field.column for field in RECIPE_FIELDS}
    assert row["measurement_unit"] == "g"
    assert row["cooking_index"] == 0.0
    assert row["gross_weight"] == 0.0
    assert row["net_weight"] == 0.0
    assert row["correction_factor"] == 0.0
    assert row["internal_code"] is None
    assert row["notes"] is None


def test_camel_case_wins_over_snake_case():
    row = recipe_to_storage(
        {
            "name": "Arroz",
            "category": "Acompanhamento",
            "cookingIndex": "2.5",
            "cooking_index": 9,
            "measurementUnit": "ml",
            "measurement_unit": "g",
            "prepTime": "30",
        }
    )
    assert row["cooking_index"] == 2.5
    assert row["measurement_unit"] == "ml"
    assert row["prep_time"] == 30


def test_blank_camel_case_falls_back_to_snake_case():
    row = recipe_to_storage({"name": "Arroz", "grossWeight": "", "gross_weight": "450"})
    assert row["gross_weight"] == 450.0


def test_unparsable_header_numbers_degrade_to_zero():
    row = recipe_to_storage({"name": "X", "netWeight": "abc", "yield": "many"})
    assert row["net_weight"] == 0.0
    assert row["yield"] is None


def test_partial_mapping_only_emits_supplied_columns():
    row = recipe_to_storage({"notes": "", "cookingIndex": "1.5", "prepTime": ""}, partial=True)
    assert row == {"notes": "", "cooking_index": 1.5}


def test_tags_accept_comma_separated_text():
    row = recipe_to_storage({"name": "X", "tags": "doce, festa,"})
    assert row["tags"] == ["doce", "festa"]


def test_usage_coercion():
    row = usage_to_storage(3, {"ingredientId": 7, "quantity": "12.5", "unit": "g", "correctionFactor": "1.1"})
    assert row == {
        "recipe_id": 3,
        "ingredient_id": 7,
        "quantity": 12.5,
        "unit": "g",
        "correction_factor": 1.1,
    }


def test_usage_free_text_has_no_ingredient_and_no_factor():
    row = usage_to_storage(3, {"name": "sal a gosto", "quantity": "abc", "unit": "g", "correctionFactor": ""})
    assert row["ingredient_id"] is None
    assert row["quantity"] is None
    assert row["correction_factor"] is None


def test_recipe_from_storage_reshapes_rows():
    header = {
        "id": 1,
        "name": "Bolo",
        "category": "Sobremesa",
        "measurement_unit": "g",
        "cooking_index": 1.2,
        "tags": None,
        "gross_weight": None,
        "created_at": "2024-01-01T00:00:00+00:00",
    }
    usages = [
        {"id": 10, "ingredient_id": 7, "quantity": 200, "unit": "g", "correction_factor": None,
         "ingredients": {"id": 7, "descricao_alimento": "Farinha de trigo"}},
        {"id": 11, "ingredient_id": 8, "quantity": 2, "unit": "g", "correction_factor": 1.1,
         "ingredients": None},
    ]
    steps = [
        {"id": 21, "step_number": 2, "description": "Assar"},
        {"id": 20, "step_number": 1, "description": "Misturar"},
    ]

    recipe = recipe_from_storage(header, usages, steps)

    assert recipe["id"] == 1
    assert recipe["measurementUnit"] == "g"
    assert recipe["cookingIndex"] == 1.2
    assert recipe["grossWeight"] == 0.0
    assert recipe["tags"] == []
    assert recipe["createdAt"] == "2024-01-01T00:00:00+00:00"
    assert [u["name"] for u in recipe["ingredients"]] == ["Farinha de trigo", ""]
    assert recipe["ingredients"][0]["quantity"] == 200.0
    assert recipe["preparationSteps"] == [
        {"number": 1, "description": "Misturar"},
        {"number": 2, "description": "Assar"},
    ]


def test_ingredient_mapping_defaults_nutrients():
    row = ingredient_to_storage(
        {"table_of_origin": "TACO", "food_number": "001", "description": " Arroz ", "categoria": "Cereais",
         "energia_kcal": "128", "proteina_g": "x"}
    )
    assert row["tabela_nutricional"] == "TACO"
    assert row["numero_alimento"] == "001"
    assert row["descricao_alimento"] == "Arroz"
    assert row["categoria"] == "Cereais"
    assert row["energia_kcal"] == 128.0
    assert row["proteina_g"] == 0.0
    assert all(column in row for column in NUTRIENT_COLUMNS)
    assert len(NUTRIENT_COLUMNS) == 26


def test_ingredient_partial_mapping():
    assert ingredient_to_storage({"ferro_mg": "0.3"}, partial=True) == {"ferro_mg": 0.3}


@pytest.mark.parametrize("raw", ["1e400", "-1e400", float("inf"), float("nan")])
def test_non_finite_numbers_degrade(raw):
    row = recipe_to_storage(
        {"name": "Sopa", "category": "Sopa", "prepTime": raw, "yield": raw, "cookingIndex": raw}
    )
    assert row["prep_time"] is None
    assert row["yield"] is None
    assert row["cooking_index"] == 0.0

    usage = usage_to_storage(1, {"ingredient_id": 3, "quantity": raw, "correction_factor": raw, "unit": "g"})
    assert usage["quantity"] is None
    assert usage["correction_factor"] is None
