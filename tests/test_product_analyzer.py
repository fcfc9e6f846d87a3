import json
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from interfaces.analysisModels import GlycemicCategory
from services.llm import create_llm
from services.productAnalyzerAgent import (
    GLYCEMIC_UNAVAILABLE,
    PROCESSING_FALLBACK_EXPLANATION,
    PROCESSING_UNAVAILABLE,
    AnalysisError,
    ProductAnalyzer,
    categorize_glycemic_index,
    clamp_processing_score,
)


def llm_returning(payload):
    content = payload if isinstance(payload, str) else json.dumps(payload)
    llm = MagicMock()
    llm.ainvoke = AsyncMock(return_value=MagicMock(content=content))
    return llm


class TestScoreHelpers(unittest.TestCase):

    def test_processing_score_is_clamped_and_rounded(self):
        self.assertEqual(clamp_processing_score(-5), 0)
        self.assertEqual(clamp_processing_score(17.8), 10)
        self.assertEqual(clamp_processing_score(6.5), 7)
        self.assertEqual(clamp_processing_score(None), 0)
        self.assertEqual(clamp_processing_score("not a number"), 0)

    def test_glycemic_category_thresholds(self):
        self.assertEqual(categorize_glycemic_index(70), GlycemicCategory.HIGH)
        self.assertEqual(categorize_glycemic_index(69), GlycemicCategory.MEDIUM)
        self.assertEqual(categorize_glycemic_index(56), GlycemicCategory.MEDIUM)
        self.assertEqual(categorize_glycemic_index(55), GlycemicCategory.LOW)
        self.assertEqual(categorize_glycemic_index(0), GlycemicCategory.LOW)


class TestProductAnalyzer(unittest.IsolatedAsyncioTestCase):

    async def test_negative_score_from_model_becomes_zero(self):
        analyzer = ProductAnalyzer(llm_returning({"score": -5, "explanation": "odd"}))

        result = await analyzer.analyze_ingredients("water", "Water")

        self.assertEqual(result.score, 0)
        self.assertEqual(result.explanation, "odd")

    async def test_score_above_range_becomes_ten(self):
        analyzer = ProductAnalyzer(llm_returning({
            "score": 17.8,
            "explanation": "very processed",
            "categories": {"ultra_processed": ["E150d"], "processed": ["sugar"], "minimally_processed": ["water"]},
        }))

        result = await analyzer.analyze_ingredients("water, sugar, E150d", "Cola")

        self.assertEqual(result.score, 10)
        self.assertIsInstance(result.score, int)
        self.assertEqual(result.categories.ultra_processed, ["E150d"])
        self.assertEqual(result.categories.minimally_processed, ["water"])

    async def test_missing_explanation_uses_fallback(self):
        analyzer = ProductAnalyzer(llm_returning("Here you go: {\"score\": 3}"))

        result = await analyzer.analyze_ingredients("oats", "Oats")

        self.assertEqual(result.score, 3)
        self.assertEqual(result.explanation, PROCESSING_FALLBACK_EXPLANATION)

    async def test_glycemic_category_ignores_model_category(self):
        analyzer = ProductAnalyzer(llm_returning({
            "glycemic_index": 72.4,
            "glycemic_load": 55,
            "category": "Low",
            "explanation": "refined sugar",
        }))

        result = await analyzer.analyze_glycemic_index("sugar", "Candy", {"sugars_100g": 90})

        self.assertEqual(result.glycemic_index, 72)
        self.assertEqual(result.glycemic_load, 40)
        self.assertEqual(result.category, GlycemicCategory.HIGH)

    async def test_glycemic_index_clamped_below_zero(self):
        analyzer = ProductAnalyzer(llm_returning({"glycemic_index": -12, "glycemic_load": -3, "category": "High"}))

        result = await analyzer.analyze_glycemic_index(None, "Water", None)

        self.assertEqual(result.glycemic_index, 0)
        self.assertEqual(result.glycemic_load, 0)
        self.assertEqual(result.category, GlycemicCategory.LOW)

    async def test_unparseable_response_raises_analysis_error(self):
        analyzer = ProductAnalyzer(llm_returning("I cannot help with that"))

        with self.assertRaises(AnalysisError):
            await analyzer.analyze_ingredients("water", "Water")

    async def test_llm_failure_raises_analysis_error(self):
        llm = MagicMock()
        llm.ainvoke = AsyncMock(side_effect=RuntimeError("quota exceeded"))
        analyzer = ProductAnalyzer(llm)

        with self.assertRaises(AnalysisError):
            await analyzer.analyze_glycemic_index("sugar", "Candy", None)

    async def test_no_llm_configured(self):
        analyzer = ProductAnalyzer(None)

        with self.assertRaises(AnalysisError):
            await analyzer.analyze_ingredients("water", "Water")

    async def test_backfill_degrades_to_placeholder(self):
        analyzer = ProductAnalyzer(None)

        processing = await analyzer.processing_backfill("water", "Water")
        glycemic = await analyzer.glycemic_backfill("water", "Water", {"sugars_100g": 0})

        self.assertEqual(processing, {"processing_explanation": PROCESSING_UNAVAILABLE})
        self.assertEqual(glycemic, {"glycemic_explanation": GLYCEMIC_UNAVAILABLE})

    async def test_find_ingredients(self):
        analyzer = ProductAnalyzer(llm_returning({"ingredients_text": "milk, cultures", "found": True}))
        self.assertEqual(await analyzer.find_ingredients("Greek Yogurt"), "milk, cultures")

        analyzer = ProductAnalyzer(llm_returning({"found": False}))
        self.assertIsNone(await analyzer.find_ingredients("Mystery"))


class TestCreateLLM(unittest.TestCase):

    def test_no_key_means_no_llm(self):
        self.assertIsNone(create_llm(api_key=None))

    @patch('services.llm.ChatGoogleGenerativeAI')
    def test_model_is_built_with_key(self, mock_chat_model):
        llm = create_llm(api_key="test-key", temperature=0.1)

        self.assertIs(llm, mock_chat_model.return_value)
        self.assertEqual(mock_chat_model.call_args.kwargs["google_api_key"], "test-key")
        self.assertEqual(mock_chat_model.call_args.kwargs["temperature"], 0.1)


if __name__ == '__main__':
    unittest.main()
