"""Commercial barcode lookup services, most of them need an API key."""
from typing import Optional

from env import BARCODE_SPIDER_API_KEY, EAN_SEARCH_API_KEY, PRODUCT_API_KEY
from interfaces.productModels import AuthoritativeProduct
from logger_manager import log_info
from .base import build_product, fetch_json, first_item, first_of

BARCODE_SPIDER_SOURCE_NAME = "Barcode Spider"
EAN_SEARCH_SOURCE_NAME = "EAN Search"
PRODUCT_API_SOURCE_NAME = "Product API"
UPC_DATABASE_SOURCE_NAME = "UPC Database"

BARCODE_SPIDER_URL = "https://api.barcodespider.com/v1/lookup"
EAN_SEARCH_URL = "https://api.ean-search.org/api"
PRODUCT_API_URL = "https://api.productapi.io/product/{barcode}"
UPC_DATABASE_URL = "https://api.upcitemdb.com/prod/trial/lookup"


async def fetch_product_from_barcode_spider(barcode: str) -> Optional[AuthoritativeProduct]:
    if not BARCODE_SPIDER_API_KEY:
        log_info("Barcode Spider API key not configured")
        return None

    data = await fetch_json(BARCODE_SPIDER_URL, params={"token": BARCODE_SPIDER_API_KEY, "upc": barcode})
    item = ((data or {}).get("item_response") or {}).get("item")
    if not item:
        return None
    attributes = item.get("item_attributes") or {}
    return build_product(
        barcode,
        BARCODE_SPIDER_SOURCE_NAME,
        product_name=item.get("item_name"),
        brands=attributes.get("brand"),
        image_url=first_of(item.get("images")),
        ingredients_text=attributes.get("ingredients"),
    )


async def fetch_product_from_ean_search(barcode: str) -> Optional[AuthoritativeProduct]:
    if not EAN_SEARCH_API_KEY:
        log_info("EAN Search API key not configured")
        return None

    params = {
        "token": EAN_SEARCH_API_KEY,
        "op": "barcode-lookup",
        "ean": barcode,
        "format": "json",
    }
    data = await fetch_json(EAN_SEARCH_URL, params=params)
    if not isinstance(data, dict) or data.get("status") != "OK" or not data.get("product"):
        return None
    return build_product(barcode, EAN_SEARCH_SOURCE_NAME, product_name=data["product"].get("name"))


async def fetch_product_from_product_api(barcode: str) -> Optional[AuthoritativeProduct]:
    if not PRODUCT_API_KEY:
        log_info("Product API key not configured")
        return None

    data = await fetch_json(PRODUCT_API_URL.format(barcode=barcode), params={"apikey": PRODUCT_API_KEY})
    if not isinstance(data, dict) or data.get("status") != "success" or not data.get("product"):
        return None
    product = data["product"].get("product") or {}
    return build_product(
        barcode,
        PRODUCT_API_SOURCE_NAME,
        product_name=product.get("title"),
        brands=product.get("brand"),
        image_url=first_of(product.get("images")),
        ingredients_text=product.get("ingredients"),
    )


async def fetch_product_from_upc_database(barcode: str) -> Optional[AuthoritativeProduct]:
    data = await fetch_json(UPC_DATABASE_URL, params={"upc": barcode})
    item = first_item(data, "items")
    if not item:
        return None
    return build_product(
        barcode,
        UPC_DATABASE_SOURCE_NAME,
        product_name=item.get("title") or item.get("brand") or "Unknown Product",
        brands=item.get("brand"),
        image_url=first_of(item.get("images")),
    )
