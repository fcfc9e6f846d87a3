from typing import Optional
from sqlalchemy.orm import Session

from db.repositories import ProductRepository
from interfaces.analysisModels import GlycemicAnalysis, ProcessingAnalysis
from interfaces.historyModels import InputType
from interfaces.productModels import (
    AuthoritativeProduct,
    LookupResult,
    ProductCreate,
    SearchFilters,
    SynthesizedProduct,
)
from logger_manager import log_error, log_info
from services.productAnalyzerAgent import format_glycemic_explanation
from services.productLookup import NOT_FOUND_SOURCE, ProductResolver, brand_filter_error
from services.search_history import history_record_for, record_search
from services.textSearchAgent import TEXT_SEARCH_KEY_PREFIX, next_text_search_barcode
from utils.db_utils import product_db_to_pydantic
from utils.input_utils import detect_input_type, is_barcode, normalize_barcode

CACHE_SOURCE = "cache"
MANUAL_ENTRY_SOURCE = "Manual Entry"


class ProductAlreadyExistsError(Exception):
    pass


class ProductNotFoundError(Exception):
    pass


class ProductService:
    """
    Cache-first orchestration around the resolver.

    Every lookup checks the products table, resolves on a miss, writes
    the resolved product back, and appends exactly one search history row.
    """

    def __init__(self, db: Session, resolver: ProductResolver):
        self.db = db
        self.resolver = resolver
        self.products = ProductRepository(db)

    async def lookup(self, search_input: str, filters: Optional[SearchFilters] = None) -> LookupResult:
        input_type = detect_input_type(search_input)
        key = normalize_barcode(search_input) if input_type == InputType.BARCODE else search_input.strip()

        cached = self.products.get_by_key(key)
        if cached:
            log_info(f"Serving {key} from cache")
            product = product_db_to_pydantic(cached)
            # brand filters only apply to free-text lookups
            rejection = brand_filter_error(product.brands, filters) if input_type == InputType.TEXT else None
            if rejection:
                result = LookupResult(product=None, source=CACHE_SOURCE, error=rejection)
            else:
                result = LookupResult(product=product, source=CACHE_SOURCE)
        else:
            try:
                result = await self.resolver.resolve(search_input, filters)
                if result.product is not None:
                    saved = self.products.put(self._with_free_text_key(result.product))
                    result = LookupResult(product=product_db_to_pydantic(saved), source=result.source)
            except Exception as e:
                log_error(f"Lookup for '{search_input}' failed: {e}", e)
                self.db.rollback()
                failed = LookupResult(product=None, source=NOT_FOUND_SOURCE, error=str(e) or type(e).__name__)
                record_search(self.db, history_record_for(search_input, input_type, failed))
                raise

        record_search(self.db, history_record_for(search_input, input_type, result))
        return result

    def _with_free_text_key(self, product):
        """Move a synthesized product to the next free text-<millis> key so it never replaces another."""
        if not isinstance(product, SynthesizedProduct) or not product.barcode.startswith(TEXT_SEARCH_KEY_PREFIX):
            return product
        barcode = product.barcode
        while self.products.get_by_barcode(barcode) is not None:
            barcode = next_text_search_barcode(barcode)
        if barcode == product.barcode:
            return product
        log_info(f"Text search key {product.barcode} already taken, using {barcode}")
        return product.model_copy(update={"barcode": barcode})

    async def create_manual(self, product_create: ProductCreate) -> AuthoritativeProduct:
        barcode = normalize_barcode(product_create.barcode)
        if self.products.get_by_barcode(barcode) is not None:
            raise ProductAlreadyExistsError(f"Product with barcode {barcode} already exists")

        product = AuthoritativeProduct(
            **product_create.model_dump(exclude={"barcode"}),
            barcode=barcode,
            data_source=MANUAL_ENTRY_SOURCE,
        )
        product = await self.resolver.enrich(product)
        saved = self.products.put(product)
        log_info(f"Manual product {barcode} created")
        return product_db_to_pydantic(saved)

    def _get_cached(self, key: str):
        lookup_key = normalize_barcode(key) if is_barcode(key) else key.strip()
        cached = self.products.get_by_key(lookup_key)
        if cached is None:
            raise ProductNotFoundError(f"Product {key} not found")
        return cached

    async def reanalyze_processing(self, key: str) -> ProcessingAnalysis:
        """Fresh processing analysis of a cached product, the stored record is left as is."""
        cached = self._get_cached(key)
        if not cached.ingredients_text:
            raise ProductNotFoundError(f"Product {key} has no ingredients")
        return await self.resolver.analyzer.analyze_ingredients(
            cached.ingredients_text,
            cached.product_name or "Unknown Product",
        )

    async def reanalyze_glycemic(self, key: str) -> GlycemicAnalysis:
        """Fresh glycemic analysis, persisted as a backfill on the cached product."""
        cached = self._get_cached(key)
        if not cached.ingredients_text and not cached.nutriments:
            raise ProductNotFoundError(f"Product {key} has no ingredients or nutrients")
        analysis = await self.resolver.analyzer.analyze_glycemic_index(
            cached.ingredients_text,
            cached.product_name or "Unknown Product",
            cached.nutriments,
        )
        self.products.update_analysis(
            cached.barcode,
            glycemic_index=analysis.glycemic_index,
            glycemic_load=analysis.glycemic_load,
            glycemic_explanation=format_glycemic_explanation(analysis),
        )
        return analysis
