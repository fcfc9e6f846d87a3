from typing import List, Optional

from langsmith import traceable

from interfaces.productModels import LookupResult, SearchFilters, SmartLookupResponse, SourceResult
from logger_manager import log_error, log_info, log_warning
from services.productAnalyzerAgent import ProductAnalyzer
from services.progress_store import ScanProgressStore
from services.providers.base import Error, Hit, Miss, ProductProvider, run_provider
from services.textSearchAgent import TextSearchSynthesizer, TEXT_SEARCH_GENERIC_SOURCE, build_fallback_product
from utils.input_utils import is_barcode, normalize_barcode

NOT_FOUND_SOURCE = "none"
NOT_FOUND_ERROR = "Product not found in any database. You can add this product manually."


def brand_matches(brands: str, brand_filter: str) -> bool:
    """Case-insensitive substring match in both directions, so "Aldi" also matches "Aldiwich"."""
    brands = brands.strip().lower()
    brand_filter = brand_filter.strip().lower()
    if not brands or not brand_filter:
        return False
    return brand_filter in brands or brands in brand_filter


def brand_filter_error(brands: Optional[str], filters: Optional[SearchFilters]) -> Optional[str]:
    """Return why a product is rejected by the filters, None when it passes."""
    if not filters or not brands:
        return None

    for excluded in filters.exclude_brands:
        if brand_matches(brands, excluded):
            return f"Product brand '{brands}' is excluded by filter '{excluded}'"

    if filters.include_brands and not any(brand_matches(brands, included) for included in filters.include_brands):
        return f"Product brand '{brands}' does not match included brands: {', '.join(filters.include_brands)}"
    return None


class ProductResolver:
    """
    Turns a barcode or a free-text query into a LookupResult.

    Barcodes go through the provider list in order until one hits. Free text
    goes to the text search synthesizer and is then filtered by brand.
    Provider errors and analysis failures never escape from here.
    """

    def __init__(
        self,
        providers: List[ProductProvider],
        analyzer: ProductAnalyzer,
        synthesizer: TextSearchSynthesizer,
        progress_store: Optional[ScanProgressStore] = None,
        name_search_providers: Optional[List[ProductProvider]] = None,
    ):
        self.providers = providers
        self.analyzer = analyzer
        self.synthesizer = synthesizer
        self.progress_store = progress_store
        self.name_search_providers = name_search_providers or []

    @traceable
    async def resolve(self, input: str, filters: Optional[SearchFilters] = None) -> LookupResult:
        if input is None or not input.strip():
            raise ValueError("Search input must not be empty")

        if is_barcode(input):
            return await self.resolve_barcode(normalize_barcode(input))
        return await self.resolve_text(input.strip(), filters)

    async def enrich(self, product, language: str = "en"):
        """Fill processing and glycemic fields, failures leave placeholder explanations."""
        name = product.product_name or "Unknown Product"
        updates = {}
        if product.ingredients_text:
            updates.update(await self.analyzer.processing_backfill(product.ingredients_text, name, language))
        if product.nutriments:
            updates.update(await self.analyzer.glycemic_backfill(product.ingredients_text, name, product.nutriments, language))
        if not updates:
            return product
        return product.model_copy(update=updates)

    async def resolve_barcode(self, barcode: str) -> LookupResult:
        log_info(f"Starting cascading lookup for barcode: {barcode}")
        if self.progress_store:
            self.progress_store.start(barcode, len(self.providers))

        for provider in self.providers:
            log_info(f"Trying {provider.name}...")
            if self.progress_store:
                self.progress_store.update(barcode, current_source=provider.name)

            outcome = await run_provider(provider, barcode)

            if self.progress_store:
                self.progress_store.mark_completed_source(barcode, provider.name)

            if isinstance(outcome, Hit):
                log_info(f"Product {barcode} found in {provider.name}")
                product = await self.enrich(outcome.product)
                if self.progress_store:
                    self.progress_store.complete(barcode, found=True, source=provider.name)
                return LookupResult(product=product, source=provider.name)
            if isinstance(outcome, Error):
                log_warning(f"{provider.name} failed for {barcode}, continuing: {outcome.detail}")
            elif isinstance(outcome, Miss):
                log_info(f"{provider.name}: {outcome.reason}")

        log_info(f"All providers missed for barcode: {barcode}")
        if self.progress_store:
            self.progress_store.complete(barcode, found=False, error=NOT_FOUND_ERROR)
        return LookupResult(product=None, source=NOT_FOUND_SOURCE, error=NOT_FOUND_ERROR)

    async def resolve_text(self, query: str, filters: Optional[SearchFilters] = None) -> LookupResult:
        try:
            result = await self.synthesizer.synthesize(query, filters)
        except Exception as e:
            log_error(f"Text search failed for '{query}', returning generic product: {e}", e)
            result = LookupResult(product=build_fallback_product(query), source=TEXT_SEARCH_GENERIC_SOURCE)

        if result.product is None:
            return result

        rejection = brand_filter_error(result.product.brands, filters)
        if rejection:
            log_info(f"Text search result for '{query}' rejected: {rejection}")
            return LookupResult(product=None, source=result.source, error=rejection)
        return result

    @traceable
    async def smart_lookup(self, product_name: str, barcode: Optional[str] = None) -> SmartLookupResponse:
        """Search the name search providers one by one and report every source tried."""
        if product_name is None or not product_name.strip():
            raise ValueError("Product name must not be empty")

        product_name = product_name.strip()
        log_info(f"Starting name-based search for product: {product_name}")
        results = []
        for provider in self.name_search_providers:
            outcome = await run_provider(provider, product_name)
            if isinstance(outcome, Hit):
                found = outcome.product
                results.append(SourceResult(
                    source=provider.name,
                    product_name=found.product_name,
                    brands=found.brands,
                    ingredients=found.ingredients_text,
                    found=True,
                ))
                if barcode:
                    found = found.model_copy(update={"barcode": normalize_barcode(barcode)})
                product = await self.enrich(found)
                return SmartLookupResponse(product=product, results=results, source=provider.name)

            error = outcome.detail if isinstance(outcome, Error) else None
            results.append(SourceResult(source=provider.name, found=False, error=error))

        log_info(f"All name-based database searches failed for product: {product_name}")
        return SmartLookupResponse(product=None, results=results, source=NOT_FOUND_SOURCE)
