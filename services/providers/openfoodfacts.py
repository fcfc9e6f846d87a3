from typing import Optional

from interfaces.productModels import AuthoritativeProduct
from logger_manager import log_info
from .base import build_product, fetch_json, first_item
from .nutrients import normalize_openfoodfacts

SOURCE_NAME = "OpenFoodFacts"
PRODUCT_URL = "https://world.openfoodfacts.org/api/v0/product/{barcode}.json"
SEARCH_URL = "https://world.openfoodfacts.org/cgi/search.pl"


def _to_product(barcode: str, product: dict) -> AuthoritativeProduct:
    return build_product(
        barcode,
        SOURCE_NAME,
        product_name=product.get("product_name"),
        brands=product.get("brands"),
        image_url=product.get("image_url"),
        ingredients_text=product.get("ingredients_text"),
        nutriments=normalize_openfoodfacts(product.get("nutriments")),
    )


async def fetch_product_from_openfoodfacts(barcode: str) -> Optional[AuthoritativeProduct]:
    data = await fetch_json(PRODUCT_URL.format(barcode=barcode))
    # status 0 means the barcode is unknown to OpenFoodFacts
    if not data or data.get("status") != 1 or not data.get("product"):
        return None
    log_info(f"OpenFoodFacts found product for {barcode}")
    return _to_product(barcode, data["product"])


async def search_openfoodfacts_by_name(product_name: str) -> Optional[AuthoritativeProduct]:
    params = {
        "search_terms": product_name,
        "search_simple": 1,
        "json": 1,
        "page_size": 1,
    }
    data = await fetch_json(SEARCH_URL, params=params)
    product = first_item(data, "products")
    if not product:
        return None
    return _to_product(product.get("code") or product_name, product)
