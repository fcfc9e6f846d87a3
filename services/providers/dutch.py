"""Dutch food databases: Kenniscentrum Gezond Gewicht, NEVO, RIVM and Voedingscentrum."""
from typing import List, Optional

from interfaces.productModels import AuthoritativeProduct
from logger_manager import log_debug
from .base import build_product, fetch_json, first_item
from .nutrients import (
    VOEDINGSCENTRUM_FIELDS,
    normalize_flat,
    normalize_kenniscentrum,
    normalize_nevo,
    normalize_rivm,
)

KENNISCENTRUM_SOURCE_NAME = "Kenniscentrum Gezond Gewicht"
NEVO_SOURCE_NAME = "NEVO (Dutch Food Composition Database)"
RIVM_SOURCE_NAME = "RIVM"
VOEDINGSCENTRUM_SOURCE_NAME = "Voedingscentrum"

KENNISCENTRUM_LOOKUP_URL = "https://api.kenniscentrumgezondgewicht.nl/products/lookup"
KENNISCENTRUM_FOODS_URL = "https://api.kenniscentrumgezondgewicht.nl/foods/search"
NEVO_SEARCH_URL = "https://nevo-api.azurewebsites.net/api/foods/search"
RIVM_SEARCH_URL = "https://api.rivm.nl/food/search"
VOEDINGSCENTRUM_SEARCH_URL = "https://api.voedingscentrum.nl/products/search"

# NEVO has no barcode index, GS1 prefixes only hint at a food group
NEVO_PREFIX_HINTS = {
    "87": ["brood", "kaas", "melk"],
    "84": ["vlees", "worst", "ham"],
    "20": ["groente", "fruit"],
}


def _score_or_none(value) -> Optional[int]:
    if isinstance(value, (int, float)) and not isinstance(value, bool) and 0 <= value <= 10:
        return int(round(value))
    return None


async def fetch_product_from_kenniscentrum(barcode: str) -> Optional[AuthoritativeProduct]:
    data = await fetch_json(KENNISCENTRUM_LOOKUP_URL, params={"barcode": barcode})
    product = first_item(data, "products")
    if not product:
        return None
    return build_product(
        barcode,
        KENNISCENTRUM_SOURCE_NAME,
        product_name=product.get("product_name"),
        brands=product.get("brand_name"),
        ingredients_text=product.get("ingredients_list"),
        nutriments=normalize_kenniscentrum(product.get("nutritional_info")),
        processing_score=_score_or_none(product.get("health_score")),
    )


async def fetch_product_from_kgg_foods(barcode: str) -> Optional[AuthoritativeProduct]:
    """Generic foods endpoint of Kenniscentrum, part of the regional providers."""
    data = await fetch_json(KENNISCENTRUM_FOODS_URL, params={"barcode": barcode})
    food = first_item(data, "foods")
    if not food:
        return None
    return build_product(
        barcode,
        KENNISCENTRUM_SOURCE_NAME,
        product_name=food.get("name"),
        brands=food.get("brand"),
        ingredients_text=food.get("ingredients"),
    )


def nevo_hints_for_barcode(barcode: str) -> List[str]:
    hints = []
    for prefix, words in NEVO_PREFIX_HINTS.items():
        if barcode.startswith(prefix):
            hints.extend(words)
    return hints


async def search_nevo_by_name(product_name: str) -> Optional[AuthoritativeProduct]:
    data = await fetch_json(NEVO_SEARCH_URL, params={"q": product_name, "limit": 1})
    food = first_item(data, "data")
    if not food:
        return None
    trace = food.get("traceConstituents") or []
    return build_product(
        # barcode is replaced by the caller when searching by barcode hint
        str(food.get("nevoCode") or product_name),
        NEVO_SOURCE_NAME,
        product_name=food.get("englishFoodName") or food.get("foodName"),
        ingredients_text=", ".join(trace) if trace else None,
        nutriments=normalize_nevo(food.get("nutrients")),
    )


async def fetch_product_from_nevo(barcode: str) -> Optional[AuthoritativeProduct]:
    hints = nevo_hints_for_barcode(barcode)
    if not hints:
        log_debug(f"No NEVO food group hint for barcode prefix of {barcode}")
        return None

    for hint in hints:
        product = await search_nevo_by_name(hint)
        if product:
            return product.model_copy(update={"barcode": barcode})
    return None


async def fetch_product_from_rivm(barcode: str) -> Optional[AuthoritativeProduct]:
    data = await fetch_json(RIVM_SEARCH_URL, params={"barcode": barcode})
    food = first_item(data, "foods")
    if not food:
        return None
    return build_product(
        barcode,
        RIVM_SOURCE_NAME,
        product_name=food.get("food_name"),
        ingredients_text=food.get("ingredients"),
        nutriments=normalize_rivm(food.get("nutrients")),
    )


async def fetch_product_from_voedingscentrum(barcode: str) -> Optional[AuthoritativeProduct]:
    data = await fetch_json(VOEDINGSCENTRUM_SEARCH_URL, params={"barcode": barcode})
    product = first_item(data, "products")
    if not product:
        return None
    return build_product(
        barcode,
        VOEDINGSCENTRUM_SOURCE_NAME,
        product_name=product.get("name"),
        brands=product.get("brand"),
        ingredients_text=product.get("ingredients"),
        nutriments=normalize_flat(product.get("nutritionalValues"), VOEDINGSCENTRUM_FIELDS),
    )
