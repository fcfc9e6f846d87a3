from typing import Optional

from env import USDA_API_KEY, FOODDATA_CENTRAL_API_KEY
from interfaces.productModels import AuthoritativeProduct
from logger_manager import log_info
from .base import build_product, fetch_json, first_item
from .nutrients import normalize_usda

USDA_SOURCE_NAME = "USDA FoodData Central"
FDC_SOURCE_NAME = "FoodData Central"
SEARCH_URL = "https://api.nal.usda.gov/fdc/v1/foods/search"


def gtin_matches(gtin_upc: Optional[str], barcode: str) -> bool:
    """USDA stores GTINs with varying zero padding."""
    if not gtin_upc:
        return False
    return gtin_upc in {barcode, barcode.zfill(12), barcode.zfill(13), barcode.zfill(14)}


def _to_product(barcode: str, food: dict, data_source: str) -> AuthoritativeProduct:
    return build_product(
        barcode,
        data_source,
        product_name=food.get("description"),
        brands=food.get("brandOwner") or food.get("brandName"),
        ingredients_text=food.get("ingredients"),
        nutriments=normalize_usda(food.get("foodNutrients")),
    )


async def fetch_product_from_usda(barcode: str) -> Optional[AuthoritativeProduct]:
    """Branded food search, only an exact GTIN/UPC match counts as a hit."""
    params = {
        "api_key": USDA_API_KEY,
        "query": barcode,
        "dataType": "Branded",
        "pageSize": 25,
    }
    data = await fetch_json(SEARCH_URL, params=params)
    foods = (data or {}).get("foods") or []
    exact_match = next((food for food in foods if gtin_matches(food.get("gtinUpc"), barcode)), None)
    if exact_match is None:
        return None
    log_info(f"USDA exact GTIN match for {barcode}: {exact_match.get('fdcId')}")
    return _to_product(barcode, exact_match, USDA_SOURCE_NAME)


async def fetch_product_from_fooddata_central(barcode: str) -> Optional[AuthoritativeProduct]:
    """Looser FoodData Central lookup, falls back to the first search result."""
    if not FOODDATA_CENTRAL_API_KEY:
        log_info("USDA API key not configured, skipping FoodData Central")
        return None

    data = await fetch_json(SEARCH_URL, params={"query": barcode, "api_key": FOODDATA_CENTRAL_API_KEY})
    foods = (data or {}).get("foods") or []
    if not foods:
        return None
    matched = next((food for food in foods if food.get("gtinUpc") == barcode), foods[0])
    return _to_product(barcode, matched, FDC_SOURCE_NAME)


async def search_usda_by_name(product_name: str) -> Optional[AuthoritativeProduct]:
    data = await fetch_json(SEARCH_URL, params={"api_key": USDA_API_KEY, "query": product_name, "pageSize": 1})
    food = first_item(data, "foods")
    if not food:
        return None
    return _to_product(food.get("gtinUpc") or str(food.get("fdcId")), food, USDA_SOURCE_NAME)
