import time
from typing import Optional

from langsmith import traceable
from pydantic import ValidationError

from interfaces.analysisModels import GenericProductDraft, KeywordExpansion
from interfaces.productModels import LookupResult, SearchFilters, SynthesizedProduct
from logger_manager import log_debug, log_error, log_info, log_warning
from services.productAnalyzerAgent import AnalysisError, ProductAnalyzer, ask_llm_for_json
from utils.json_utils import to_float

TEXT_SEARCH_SOURCE = "Text Search"
TEXT_SEARCH_GENERIC_SOURCE = "Text Search (Generic)"


TEXT_SEARCH_KEY_PREFIX = "text-"


def text_search_barcode(millis: Optional[int] = None) -> str:
    """Synthetic cache key for free-text results, text-<epoch millis>."""
    if millis is None:
        millis = int(time.time() * 1000)
    return f"{TEXT_SEARCH_KEY_PREFIX}{millis}"


def next_text_search_barcode(barcode: str) -> str:
    """The key one millisecond after barcode."""
    return text_search_barcode(int(barcode[len(TEXT_SEARCH_KEY_PREFIX):]) + 1)


def build_fallback_product(query: str) -> SynthesizedProduct:
    """Bare generic record carrying only the query as its name."""
    return SynthesizedProduct(
        barcode=text_search_barcode(),
        product_name=query,
        data_source=TEXT_SEARCH_GENERIC_SOURCE,
        is_generic=True,
    )


def _clean_nutriments(raw) -> Optional[dict]:
    if not isinstance(raw, dict):
        return None
    nutriments = {}
    for key, value in raw.items():
        number = to_float(value)
        if number is not None:
            nutriments[key] = number
    return nutriments or None


class TextSearchSynthesizer:
    """
    Builds a product for free-text input with the LLM.

    Records produced here are fabricated, they come back as
    SynthesizedProduct so callers can tell them apart from provider data.
    """

    def __init__(self, llm, analyzer: ProductAnalyzer):
        self.llm = llm
        self.analyzer = analyzer

    @traceable
    async def expand_keywords(self, query: str) -> KeywordExpansion:
        prompt = f"""
You are a food product search assistant.

Given the search query "{query}", suggest 3-5 alternative search terms that could find
this product in food databases (brand names, generic names, translations), guess the
food category and the language of the query.

## FORMAT YOUR RESPONSE AS JSON:
{{
  "search_terms": ["term1", "term2", "term3"],
  "category": "food category",
  "language": "two letter language code"
}}
"""
        try:
            result = await ask_llm_for_json(self.llm, prompt)
            terms = [str(term) for term in result.get("search_terms") or [] if term]
            expansion = KeywordExpansion(
                search_terms=terms[:5] or [query],
                category=result.get("category"),
                language=result.get("language"),
            )
        except AnalysisError as e:
            log_warning(f"Keyword expansion failed for '{query}': {e}")
            expansion = KeywordExpansion(search_terms=[query])

        # terms are diagnostic only, providers are not searched with them
        log_info(f"Expanded '{query}' to {expansion.search_terms} (category: {expansion.category}, language: {expansion.language})")
        return expansion

    @traceable
    async def fabricate_generic_product(self, query: str, category: Optional[str] = None) -> Optional[GenericProductDraft]:
        prompt = f"""
You are a food product information specialist.

Describe a typical, generic version of the product "{query}"{f" in the category {category}" if category else ""}.
Use realistic values for a common supermarket version of this food.

## FORMAT YOUR RESPONSE AS JSON:
{{
  "product_name": "product name",
  "category": "product category",
  "description": "brief description",
  "ingredients_text": "typical ingredients list",
  "nutriments": {{
    "energy_100g": number_in_kcal,
    "fat_100g": number_in_grams,
    "saturated_fat_100g": number_in_grams,
    "carbohydrates_100g": number_in_grams,
    "sugars_100g": number_in_grams,
    "proteins_100g": number_in_grams,
    "salt_100g": number_in_grams,
    "fiber_100g": number_in_grams
  }},
  "is_generic": true
}}

IMPORTANT: Ensure your response is valid JSON with double quotes (") around property names and string values.
"""
        try:
            result = await ask_llm_for_json(self.llm, prompt)
        except AnalysisError as e:
            log_warning(f"Generic product fabrication failed for '{query}': {e}")
            return None

        if not result.get("product_name"):
            log_warning(f"Generic product for '{query}' had no product name")
            return None
        try:
            return GenericProductDraft(
                product_name=str(result["product_name"]),
                brands=result.get("brands") or None,
                category=result.get("category"),
                description=result.get("description"),
                ingredients_text=result.get("ingredients_text") or result.get("ingredientsText") or None,
                nutriments=_clean_nutriments(result.get("nutriments")),
            )
        except ValidationError as e:
            log_error(f"Unusable generic product for '{query}': {e}", e)
            return None

    @traceable
    async def synthesize(self, query: str, filters: Optional[SearchFilters] = None) -> LookupResult:
        """
        Two LLM calls (keyword expansion then generic product) followed by
        analysis. Brand filters are applied by the resolver afterwards.
        """
        log_info(f"Starting text search for product: {query}")
        expansion = await self.expand_keywords(query)
        draft = await self.fabricate_generic_product(query, expansion.category)

        if draft is None:
            source = TEXT_SEARCH_GENERIC_SOURCE
            fields = {"product_name": query}
        else:
            source = TEXT_SEARCH_SOURCE
            fields = {
                "product_name": draft.product_name,
                "brands": draft.brands,
                "ingredients_text": draft.ingredients_text,
                "nutriments": draft.nutriments,
            }

        product_name = fields["product_name"]
        language = expansion.language or "en"
        ingredients = fields.get("ingredients_text")
        nutriments = fields.get("nutriments")

        looked_up = False
        if not ingredients:
            try:
                ingredients = await self.analyzer.find_ingredients(product_name)
            except AnalysisError as e:
                log_warning(f"Ingredient lookup failed for '{product_name}': {e}")
                ingredients = None
            if ingredients:
                fields["ingredients_text"] = ingredients
                looked_up = True
            else:
                log_debug(f"No ingredients available for '{product_name}'")

        if ingredients:
            fields.update(await self.analyzer.processing_backfill(ingredients, product_name, language))
        if nutriments or looked_up:
            fields.update(await self.analyzer.glycemic_backfill(ingredients, product_name, nutriments, language))

        product = SynthesizedProduct(
            barcode=text_search_barcode(),
            data_source=source,
            is_generic=True,
            **fields,
        )
        log_info(f"Text search produced '{product.product_name}' via {source}")
        return LookupResult(product=product, source=source)
