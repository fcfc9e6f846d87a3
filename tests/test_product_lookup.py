import json
import re
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from interfaces.productModels import (
    AuthoritativeProduct,
    LookupResult,
    SearchFilters,
    SynthesizedProduct,
)
from services.productAnalyzerAgent import ProductAnalyzer
from services.productLookup import NOT_FOUND_ERROR, ProductResolver, brand_filter_error, brand_matches
from services.progress_store import ScanProgressStore
from services.providers.base import ProductProvider
from services.providers.registry import default_barcode_providers
from services.textSearchAgent import TEXT_SEARCH_GENERIC_SOURCE, TEXT_SEARCH_SOURCE, TextSearchSynthesizer

ANALYSIS_REPLY = json.dumps({
    "score": 8,
    "explanation": "Contains colouring and phosphoric acid",
    "glycemic_index": 63,
    "glycemic_load": 6.7,
    "impact_description": "Raises blood sugar quickly",
})


def mock_llm(*replies):
    llm = MagicMock()
    if len(replies) == 1:
        llm.ainvoke = AsyncMock(return_value=MagicMock(content=replies[0]))
    else:
        llm.ainvoke = AsyncMock(side_effect=[MagicMock(content=reply) for reply in replies])
    return llm


def provider(name, product=None, error=None):
    fetch = AsyncMock(return_value=product, side_effect=error)
    return ProductProvider(name, fetch)


def provider_product(barcode, source, **fields):
    return AuthoritativeProduct(barcode=barcode, data_source=source, **fields)


def make_resolver(providers, llm=None, synthesizer=None, progress_store=None, name_search_providers=None):
    analyzer = ProductAnalyzer(llm)
    return ProductResolver(
        providers=providers,
        analyzer=analyzer,
        synthesizer=synthesizer or TextSearchSynthesizer(llm, analyzer),
        progress_store=progress_store,
        name_search_providers=name_search_providers,
    )


def synthesizer_returning(product):
    synthesizer = MagicMock()
    synthesizer.synthesize = AsyncMock(return_value=LookupResult(product=product, source=TEXT_SEARCH_SOURCE))
    return synthesizer


class TestBrandFilters(unittest.TestCase):

    def test_brand_matching_is_bidirectional_substring(self):
        self.assertTrue(brand_matches("Lidl", "lidl"))
        self.assertTrue(brand_matches("Albert Heijn Basic", "albert heijn"))
        self.assertTrue(brand_matches("AH", "AH Excellent"))
        self.assertFalse(brand_matches("Jumbo", "Lidl"))

    def test_filters_ignored_without_brands(self):
        filters = SearchFilters(include_brands=["Jumbo"])
        self.assertIsNone(brand_filter_error(None, filters))
        self.assertIsNone(brand_filter_error("Lidl", None))

    def test_exclude_wins_over_include(self):
        filters = SearchFilters(include_brands=["Lidl"], exclude_brands=["Lidl"])
        error = brand_filter_error("Lidl", filters)
        self.assertEqual(error, "Product brand 'Lidl' is excluded by filter 'Lidl'")


class TestBarcodeCascade(unittest.IsolatedAsyncioTestCase):

    async def test_first_hit_stops_the_cascade(self):
        first = provider("First")
        second = provider("Second", provider_product("5449000000996", "Second", product_name="Cola"))
        third = provider("Third", provider_product("5449000000996", "Third"))
        resolver = make_resolver([first, second, third])

        result = await resolver.resolve("5449000000996")

        self.assertEqual(result.source, "Second")
        self.assertEqual(result.product.product_name, "Cola")
        first.fetch.assert_awaited_once_with("5449000000996")
        second.fetch.assert_awaited_once_with("5449000000996")
        third.fetch.assert_not_awaited()

    async def test_failing_provider_is_skipped(self):
        broken = provider("Broken", error=RuntimeError("connection reset"))
        working = provider("Working", provider_product("96385074", "Working", product_name="Crackers"))
        resolver = make_resolver([broken, working])

        result = await resolver.resolve("96385074")

        self.assertTrue(result.found)
        self.assertEqual(result.source, "Working")

    async def test_all_providers_miss(self):
        providers = [provider("A"), provider("B", error=ValueError("bad json")), provider("C")]
        resolver = make_resolver(providers)

        result = await resolver.resolve("036000291452")

        self.assertIsNone(result.product)
        self.assertEqual(result.source, "none")
        self.assertEqual(result.error, NOT_FOUND_ERROR)
        for item in providers:
            item.fetch.assert_awaited_once()

    async def test_spaced_barcode_is_normalized_before_lookup(self):
        hit = provider("Only", provider_product("5449000000996", "Only"))
        resolver = make_resolver([hit])

        await resolver.resolve("5449 0000 00996")

        hit.fetch.assert_awaited_once_with("5449000000996")

    async def test_hit_is_enriched_with_clamped_analysis(self):
        product = provider_product(
            "5449000000996", "Only",
            product_name="Cola",
            ingredients_text="water, sugar",
            nutriments={"sugars_100g": 10.6},
        )
        resolver = make_resolver([provider("Only", product)], llm=mock_llm(json.dumps({"score": 42, "glycemic_index": 250})))

        result = await resolver.resolve("5449000000996")

        self.assertEqual(result.product.processing_score, 10)
        self.assertEqual(result.product.glycemic_index, 100)

    async def test_analysis_failure_keeps_the_product(self):
        product = provider_product("5449000000996", "Only", product_name="Cola", ingredients_text="water, sugar")
        resolver = make_resolver([provider("Only", product)], llm=None)

        result = await resolver.resolve("5449000000996")

        self.assertTrue(result.found)
        self.assertIsNone(result.product.processing_score)
        self.assertEqual(result.product.processing_explanation, "Unable to analyze ingredients at this time")

    async def test_progress_is_tracked_per_provider(self):
        store = ScanProgressStore()
        resolver = make_resolver([provider("A"), provider("B")], progress_store=store)

        await resolver.resolve("96385074")

        progress = store.get("96385074")
        self.assertTrue(progress.is_complete)
        self.assertFalse(progress.found)
        self.assertEqual(progress.completed_sources, ["A", "B"])
        self.assertEqual(progress.total_sources, 2)
        self.assertEqual(progress.error, NOT_FOUND_ERROR)

    async def test_empty_input_is_rejected(self):
        resolver = make_resolver([])
        with self.assertRaises(ValueError):
            await resolver.resolve("  ")

    @patch('services.providers.usda.fetch_json', new_callable=AsyncMock)
    @patch('services.providers.openfoodfacts.fetch_json', new_callable=AsyncMock)
    async def test_coca_cola_resolves_from_openfoodfacts(self, mock_off_fetch, mock_usda_fetch):
        mock_off_fetch.return_value = {
            "status": 1,
            "product": {
                "product_name": "Coca-Cola",
                "brands": "Coca-Cola",
                "image_url": "",
                "ingredients_text": "Carbonated water, sugar, colour (caramel E150d), phosphoric acid, natural flavourings, caffeine",
                "nutriments": {"energy_100g": 180, "sugars_100g": 10.6, "salt_100g": 0, "nova_group": "4"},
            },
        }
        resolver = make_resolver(default_barcode_providers(), llm=mock_llm(ANALYSIS_REPLY))

        result = await resolver.resolve("5449000000996")

        self.assertEqual(result.source, "OpenFoodFacts")
        self.assertEqual(result.product.data_source, "OpenFoodFacts")
        self.assertEqual(result.product.provenance, "authoritative")
        self.assertIsNone(result.product.image_url)
        self.assertTrue(0 <= result.product.processing_score <= 10)
        self.assertEqual(result.product.nutriments["nova_group"], 4.0)
        mock_usda_fetch.assert_not_awaited()


class TestTextResolution(unittest.IsolatedAsyncioTestCase):

    async def test_greek_yogurt_is_synthesized(self):
        llm = mock_llm(
            json.dumps({"search_terms": ["greek yoghurt", "yogurt"], "category": "dairy", "language": "en"}),
            json.dumps({
                "product_name": "Greek Yogurt",
                "ingredients_text": "milk, cream, live cultures",
                "nutriments": {"proteins_100g": 9, "sugars_100g": 4, "fat_100g": "10"},
            }),
            json.dumps({"score": 2, "explanation": "fermented dairy"}),
            json.dumps({"glycemic_index": 11, "glycemic_load": 0.5, "explanation": "low sugar"}),
        )
        resolver = make_resolver([provider("Never")], llm=llm)

        result = await resolver.resolve("Greek Yogurt")

        self.assertEqual(result.source, TEXT_SEARCH_SOURCE)
        self.assertIsInstance(result.product, SynthesizedProduct)
        self.assertTrue(result.product.is_generic)
        self.assertRegex(result.product.barcode, r"^text-\d+$")
        self.assertEqual(result.product.processing_score, 2)
        self.assertEqual(result.product.glycemic_index, 11)
        self.assertEqual(result.product.nutriments["fat_100g"], 10.0)
        resolver.providers[0].fetch.assert_not_awaited()

    async def test_excluded_brand_is_rejected(self):
        product = SynthesizedProduct(barcode="text-1", product_name="Bread", brands="Lidl", data_source=TEXT_SEARCH_SOURCE)
        resolver = make_resolver([], synthesizer=synthesizer_returning(product))

        result = await resolver.resolve("bread", SearchFilters(exclude_brands=["Lidl"]))

        self.assertIsNone(result.product)
        self.assertIn("excluded", result.error)

    async def test_missing_included_brand_is_rejected(self):
        product = SynthesizedProduct(barcode="text-1", product_name="Bread", brands="Lidl", data_source=TEXT_SEARCH_SOURCE)
        resolver = make_resolver([], synthesizer=synthesizer_returning(product))

        result = await resolver.resolve("bread", SearchFilters(include_brands=["Jumbo"]))

        self.assertIsNone(result.product)
        self.assertIn("does not match included brands: Jumbo", result.error)

    async def test_synthesizer_crash_returns_generic_product(self):
        synthesizer = MagicMock()
        synthesizer.synthesize = AsyncMock(side_effect=RuntimeError("boom"))
        resolver = make_resolver([], synthesizer=synthesizer)

        result = await resolver.resolve("Oat milk")

        self.assertEqual(result.source, TEXT_SEARCH_GENERIC_SOURCE)
        self.assertEqual(result.product.product_name, "Oat milk")
        self.assertTrue(re.match(r"^text-\d+$", result.product.barcode))


class TestSmartLookup(unittest.IsolatedAsyncioTestCase):

    async def test_stops_at_first_name_hit_and_reports_sources(self):
        name_providers = [
            provider("OpenFoodFacts"),
            provider("FoodData Central (USDA)", provider_product("041196910759", "USDA FoodData Central", product_name="Nutella")),
            provider("NEVO (Netherlands)"),
        ]
        resolver = make_resolver([], name_search_providers=name_providers)

        response = await resolver.smart_lookup("Nutella", barcode="3017620422003")

        self.assertEqual(response.source, "FoodData Central (USDA)")
        self.assertEqual(response.product.barcode, "3017620422003")
        self.assertEqual([result.source for result in response.results], ["OpenFoodFacts", "FoodData Central (USDA)"])
        self.assertEqual([result.found for result in response.results], [False, True])
        name_providers[2].fetch.assert_not_awaited()

    async def test_nothing_found(self):
        resolver = make_resolver([], name_search_providers=[provider("A"), provider("B", error=RuntimeError("down"))])

        response = await resolver.smart_lookup("Unknown snack")

        self.assertIsNone(response.product)
        self.assertEqual(response.source, "none")
        self.assertIn("RuntimeError", response.results[1].error)


if __name__ == '__main__':
    unittest.main()
