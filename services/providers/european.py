"""European food composition databases."""
from typing import Optional

from interfaces.productModels import AuthoritativeProduct
from .base import build_product, fetch_json, first_item
from .nutrients import normalize_named

EFSA_SOURCE_NAME = "EFSA"
CIQUAL_SOURCE_NAME = "CIQUAL (ANSES)"
BLS_SOURCE_NAME = "BLS (Germany)"
FINELI_SOURCE_NAME = "Fineli (Finland)"
DTU_SOURCE_NAME = "DTU Food (Denmark)"
BDA_IEO_SOURCE_NAME = "BDA-IEO (Italy)"

EFSA_SEARCH_URL = "https://www.efsa.europa.eu/en/data/food-composition-nutritional-data"
CIQUAL_SEARCH_URL = "https://ciqual.anses.fr/api/aliments/search"
BLS_SEARCH_URL = "https://www.blsdb.de/api/foods/search"
FINELI_SEARCH_URL = "https://fineli.fi/fineli/api/v1/foods"
DTU_SEARCH_URL = "https://frida.fooddata.dk/api/foods/search"
BDA_IEO_SEARCH_URL = "https://www.alimentinutrizione.it/api/foods/search"


async def fetch_product_from_efsa(barcode: str) -> Optional[AuthoritativeProduct]:
    data = await fetch_json(EFSA_SEARCH_URL, params={"search": barcode})
    food = first_item(data, "foods")
    if not food:
        return None
    return build_product(
        barcode,
        EFSA_SOURCE_NAME,
        product_name=food.get("foodName"),
        ingredients_text=food.get("ingredients"),
        nutriments=normalize_named(food.get("nutrients"), "nutrientName", "value"),
    )


async def fetch_product_from_ciqual(barcode: str) -> Optional[AuthoritativeProduct]:
    data = await fetch_json(CIQUAL_SEARCH_URL, params={"q": barcode})
    food = first_item(data, "foods")
    if not food:
        return None
    return build_product(barcode, CIQUAL_SOURCE_NAME, product_name=food.get("alim_nom_eng") or food.get("alim_nom_fr"))


async def fetch_product_from_bls(barcode: str) -> Optional[AuthoritativeProduct]:
    data = await fetch_json(BLS_SEARCH_URL, params={"code": barcode})
    food = first_item(data, "foods")
    if not food:
        return None
    return build_product(barcode, BLS_SOURCE_NAME, product_name=food.get("name"))


async def fetch_product_from_fineli(barcode: str) -> Optional[AuthoritativeProduct]:
    data = await fetch_json(FINELI_SEARCH_URL, params={"q": barcode})
    food = first_item(data, "foods")
    if not food:
        return None
    names = food.get("name") or {}
    return build_product(barcode, FINELI_SOURCE_NAME, product_name=names.get("en") or names.get("fi"))


async def fetch_product_from_dtu_food(barcode: str) -> Optional[AuthoritativeProduct]:
    data = await fetch_json(DTU_SEARCH_URL, params={"q": barcode})
    food = first_item(data, "foods")
    if not food:
        return None
    return build_product(barcode, DTU_SOURCE_NAME, product_name=food.get("FoodName"))


async def fetch_product_from_bda_ieo(barcode: str) -> Optional[AuthoritativeProduct]:
    data = await fetch_json(BDA_IEO_SEARCH_URL, params={"code": barcode})
    food = first_item(data, "foods")
    if not food:
        return None
    return build_product(barcode, BDA_IEO_SOURCE_NAME, product_name=food.get("name"))
