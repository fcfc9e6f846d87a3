"""
Nutrient normalization, one function per source taxonomy.

Providers report nutrients in different vocabularies (OpenFoodFacts keys,
USDA nutrient ids, NEVO codes, free-text nutrient names, flat vendor maps).
Each helper here maps one vocabulary to a sparse {key: float} dict per 100g.

Sodium to salt conversion is NOT consistent between sources. The USDA
mapping multiplies mg sodium by 0.00254, the RIVM mapping multiplies
sodium by 2.5. These two factors disagree by three orders of magnitude
once units are taken into account and are kept as separate constants
until upstream units are confirmed.
"""
import re
from typing import Any, Dict, Iterable, Optional

from logger_manager import log_warning
from utils.json_utils import to_float

KCAL_TO_KJ = 4.184
# USDA reports sodium in mg
USDA_SODIUM_MG_TO_SALT_G = 0.00254
# RIVM reports sodium in an unconfirmed unit
RIVM_SODIUM_TO_SALT = 2.5

USDA_NUTRIENT_IDS = {
    1008: "energy_100g",
    1004: "fat_100g",
    1258: "saturated_fat_100g",
    1005: "carbohydrates_100g",
    2000: "sugars_100g",
    1003: "proteins_100g",
    1079: "fiber_100g",
    1293: "salt_100g",
}

NEVO_CODES = {
    "ENER": "energy-kj",
    "ENERK": "energy-kcal",
    "PROT": "proteins",
    "CHOAVL": "carbohydrates",
    "FAT": "fat",
    "FASAT": "saturated-fat",
    "SUGAR": "sugars",
    "FIBTG": "fiber",
    "NA": "sodium",
    "SALTEQ": "salt",
}

KENNISCENTRUM_FIELDS = {
    "calories_per_100g": "energy_100g",
    "protein_g": "proteins_100g",
    "carbs_g": "carbohydrates_100g",
    "sugar_g": "sugars_100g",
    "fat_g": "fat_100g",
    "saturated_fat_g": "saturated_fat_100g",
    "fiber_g": "fiber_100g",
}

VOEDINGSCENTRUM_FIELDS = {
    "energy": "energy_100g",
    "protein": "proteins_100g",
    "carbohydrates": "carbohydrates_100g",
    "fat": "fat_100g",
    "fiber": "fiber_100g",
    "salt": "salt_100g",
}


def _or_none(nutriments: Dict[str, float]) -> Optional[Dict[str, float]]:
    return nutriments or None


def normalize_openfoodfacts(raw: Optional[Dict[str, Any]]) -> Optional[Dict[str, float]]:
    """OpenFoodFacts keys are already the reference vocabulary, only drop non-numeric values."""
    if not isinstance(raw, dict):
        return None
    nutriments = {}
    for key, value in raw.items():
        number = to_float(value)
        if number is not None:
            nutriments[key] = number
    return _or_none(nutriments)


def normalize_usda(food_nutrients: Optional[Iterable[Dict[str, Any]]]) -> Optional[Dict[str, float]]:
    nutriments = {}
    for nutrient in food_nutrients or []:
        key = USDA_NUTRIENT_IDS.get(nutrient.get("nutrientId"))
        value = to_float(nutrient.get("value"))
        if key is None or value is None:
            continue
        if nutrient.get("nutrientId") == 1008:
            value = value * KCAL_TO_KJ
        elif nutrient.get("nutrientId") == 1293:
            log_warning("Applying USDA sodium to salt factor 0.00254, differs from RIVM factor 2.5")
            value = value * USDA_SODIUM_MG_TO_SALT_G
        nutriments[key] = value
    return _or_none(nutriments)


def normalize_nevo(nutrients: Optional[Iterable[Dict[str, Any]]]) -> Optional[Dict[str, float]]:
    nutriments = {}
    for nutrient in nutrients or []:
        key = NEVO_CODES.get(nutrient.get("nevoCode"))
        value = to_float(nutrient.get("amount"))
        if key and value is not None:
            nutriments[key] = value
    return _or_none(nutriments)


def normalize_rivm(nutrients: Optional[Iterable[Dict[str, Any]]]) -> Optional[Dict[str, float]]:
    """Match RIVM nutrient codes by substring, first matching rule wins."""
    nutriments = {}
    for nutrient in nutrients or []:
        code = str(nutrient.get("nutrient_code", "")).lower()
        value = to_float(nutrient.get("value"))
        if value is None:
            continue
        if "energy" in code or "kcal" in code:
            nutriments["energy_100g"] = value
        elif "protein" in code:
            nutriments["proteins_100g"] = value
        elif "carbohydrate" in code:
            nutriments["carbohydrates_100g"] = value
        elif "sugar" in code:
            nutriments["sugars_100g"] = value
        elif "fat" in code and "saturated" not in code:
            nutriments["fat_100g"] = value
        elif "saturated" in code:
            nutriments["saturated_fat_100g"] = value
        elif "sodium" in code:
            log_warning("Applying RIVM sodium to salt factor 2.5, differs from USDA factor 0.00254")
            nutriments["salt_100g"] = value * RIVM_SODIUM_TO_SALT
        elif "salt" in code:
            nutriments["salt_100g"] = value
    return _or_none(nutriments)


def nutrient_name_key(name: str) -> str:
    """'Total Fat' -> 'total_fat'"""
    return re.sub(r"\s+", "_", name.strip().lower())


def normalize_named(nutrients: Optional[Iterable[Dict[str, Any]]], name_field: str, value_field: str) -> Optional[Dict[str, float]]:
    """Free-form nutrient names, used by EFSA, Health Canada and the Australian database."""
    nutriments = {}
    for nutrient in nutrients or []:
        name = nutrient.get(name_field)
        value = to_float(nutrient.get(value_field))
        if name and value is not None:
            nutriments[nutrient_name_key(name)] = value
    return _or_none(nutriments)


def normalize_flat(raw: Optional[Dict[str, Any]], field_map: Dict[str, str]) -> Optional[Dict[str, float]]:
    """Map a flat vendor dict through field_map, zero and missing values are skipped."""
    if not isinstance(raw, dict):
        return None
    nutriments = {}
    for field, key in field_map.items():
        value = to_float(raw.get(field))
        if value:
            nutriments[key] = value
    return _or_none(nutriments)


def normalize_kenniscentrum(raw: Optional[Dict[str, Any]]) -> Optional[Dict[str, float]]:
    nutriments = normalize_flat(raw, KENNISCENTRUM_FIELDS) or {}
    salt_mg = to_float((raw or {}).get("salt_mg"))
    if salt_mg:
        nutriments["salt_100g"] = salt_mg / 1000
    return _or_none(nutriments)
