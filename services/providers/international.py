from typing import Optional

from interfaces.productModels import AuthoritativeProduct
from .base import build_product, fetch_json, first_item
from .nutrients import normalize_named

HEALTH_CANADA_SOURCE_NAME = "Health Canada"
AUSTRALIAN_FOOD_SOURCE_NAME = "Australian Food Database"

HEALTH_CANADA_URL = "https://food-nutrition.canada.ca/api/canadian-nutrient-file/food"
AUSTRALIAN_FOOD_URL = "https://www.foodstandards.gov.au/api/foodcomposition/foods"


async def fetch_product_from_health_canada(barcode: str) -> Optional[AuthoritativeProduct]:
    data = await fetch_json(HEALTH_CANADA_URL, params={"upc": barcode})
    food = first_item(data, "foods")
    if not food:
        return None
    return build_product(
        barcode,
        HEALTH_CANADA_SOURCE_NAME,
        product_name=food.get("food_description"),
        ingredients_text=food.get("ingredients_eng") or food.get("ingredients_fra"),
        nutriments=normalize_named(food.get("nutrients"), "nutrient_name_eng", "nutrient_value"),
    )


async def fetch_product_from_australian_food(barcode: str) -> Optional[AuthoritativeProduct]:
    data = await fetch_json(AUSTRALIAN_FOOD_URL, params={"barcode": barcode})
    food = first_item(data, "foods")
    if not food:
        return None
    return build_product(
        barcode,
        AUSTRALIAN_FOOD_SOURCE_NAME,
        product_name=food.get("Food_Name"),
        ingredients_text=food.get("ingredients"),
        nutriments=normalize_named(food.get("nutrients"), "Nutrient_Name", "Nutrient_Value"),
    )
