"""
Provider priority lists.

The order of each list is the cascade order: the first provider that
returns a product wins and nothing after it is called.
"""
from typing import List, Optional

from interfaces.productModels import AuthoritativeProduct
from .base import ProductProvider
from . import commercial, dutch, european, international, openfoodfacts, usda


def default_barcode_providers() -> List[ProductProvider]:
    return [
        ProductProvider(openfoodfacts.SOURCE_NAME, openfoodfacts.fetch_product_from_openfoodfacts),
        ProductProvider(usda.USDA_SOURCE_NAME, usda.fetch_product_from_usda),
        ProductProvider(dutch.KENNISCENTRUM_SOURCE_NAME, dutch.fetch_product_from_kenniscentrum),
        ProductProvider(dutch.NEVO_SOURCE_NAME, dutch.fetch_product_from_nevo),
        ProductProvider(dutch.RIVM_SOURCE_NAME, dutch.fetch_product_from_rivm),
        ProductProvider(dutch.VOEDINGSCENTRUM_SOURCE_NAME, dutch.fetch_product_from_voedingscentrum),
        ProductProvider(usda.FDC_SOURCE_NAME, usda.fetch_product_from_fooddata_central),
        ProductProvider(european.EFSA_SOURCE_NAME, european.fetch_product_from_efsa),
        ProductProvider(international.HEALTH_CANADA_SOURCE_NAME, international.fetch_product_from_health_canada),
        ProductProvider(international.AUSTRALIAN_FOOD_SOURCE_NAME, international.fetch_product_from_australian_food),
        ProductProvider(commercial.BARCODE_SPIDER_SOURCE_NAME, commercial.fetch_product_from_barcode_spider),
        ProductProvider(commercial.EAN_SEARCH_SOURCE_NAME, commercial.fetch_product_from_ean_search),
        ProductProvider(commercial.PRODUCT_API_SOURCE_NAME, commercial.fetch_product_from_product_api),
        ProductProvider(commercial.UPC_DATABASE_SOURCE_NAME, commercial.fetch_product_from_upc_database),
    ]


def regional_barcode_providers() -> List[ProductProvider]:
    """Composition databases that can be appended to the barcode cascade when enabled."""
    return [
        ProductProvider(dutch.KENNISCENTRUM_SOURCE_NAME, dutch.fetch_product_from_kgg_foods),
        ProductProvider(european.CIQUAL_SOURCE_NAME, european.fetch_product_from_ciqual),
        ProductProvider(european.BLS_SOURCE_NAME, european.fetch_product_from_bls),
        ProductProvider(european.FINELI_SOURCE_NAME, european.fetch_product_from_fineli),
        ProductProvider(european.DTU_SOURCE_NAME, european.fetch_product_from_dtu_food),
        ProductProvider(european.BDA_IEO_SOURCE_NAME, european.fetch_product_from_bda_ieo),
    ]


async def name_search_not_supported(product_name: str) -> Optional[AuthoritativeProduct]:
    # These databases expose no name search endpoint we can use yet
    return None


def default_name_search_providers() -> List[ProductProvider]:
    """Only OpenFoodFacts and USDA search by name, the rest are placeholders that always miss."""
    stub_sources = [
        "NEVO (Netherlands)",
        "RIVM (Netherlands)",
        "Voedingscentrum (Netherlands)",
        "Kenniscentrum Gezond Gewicht (Netherlands)",
        "CIQUAL (France)",
        "BLS (Germany)",
        "Fineli (Finland)",
        "DTU Food (Denmark)",
        "BDA-IEO (Italy)",
        "EFSA (EU)",
        "Health Canada",
        "Australian Food Database",
    ]
    providers = [
        ProductProvider(openfoodfacts.SOURCE_NAME, openfoodfacts.search_openfoodfacts_by_name),
        ProductProvider("FoodData Central (USDA)", usda.search_usda_by_name),
    ]
    providers.extend(ProductProvider(name, name_search_not_supported) for name in stub_sources)
    return providers
