import math
from typing import Any, Dict, Optional

from langchain_core.messages import HumanMessage
from langsmith import traceable

from interfaces.analysisModels import (
    GlycemicAnalysis,
    GlycemicCategory,
    ProcessingAnalysis,
    ProcessingCategories,
)
from logger_manager import log_debug, log_error, log_info, log_warning
from utils.json_utils import extract_json_from_text, to_float

PROCESSING_FALLBACK_EXPLANATION = "Unable to analyze ingredients"
PROCESSING_UNAVAILABLE = "Unable to analyze ingredients at this time"
GLYCEMIC_UNAVAILABLE = "Unable to analyze glycemic impact at this time"


class AnalysisError(Exception):
    """The LLM could not be reached or its answer could not be used."""


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_processing_score(raw: Any) -> int:
    """Missing or non numeric scores count as 0."""
    number = to_float(raw, default=0.0)
    if math.isnan(number):
        number = 0.0
    return round_half_up(clamp(number, 0, 10))


def clamp_glycemic_index(raw: Any) -> Optional[int]:
    number = to_float(raw)
    if number is None or math.isnan(number):
        return None
    return round_half_up(clamp(number, 0, 100))


def clamp_glycemic_load(raw: Any) -> float:
    number = to_float(raw, default=0.0)
    if math.isnan(number):
        number = 0.0
    return round(clamp(number, 0.0, 40.0), 1)


def categorize_glycemic_index(glycemic_index: float) -> GlycemicCategory:
    if glycemic_index >= 70:
        return GlycemicCategory.HIGH
    if glycemic_index >= 56:
        return GlycemicCategory.MEDIUM
    return GlycemicCategory.LOW


def format_glycemic_explanation(analysis: GlycemicAnalysis) -> str:
    """Stored glycemic_explanation text, the explanation followed by the impact description."""
    if analysis.impact_description:
        return f"{analysis.explanation} {analysis.impact_description}"
    return analysis.explanation


def _string_list(value) -> list:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


async def ask_llm_for_json(llm, prompt: str) -> Dict[str, Any]:
    """Send one prompt and return the JSON object found in the reply."""
    if llm is None:
        raise AnalysisError("No LLM configured")
    try:
        message = HumanMessage(content=prompt)
        llm_response = await llm.ainvoke([message])
    except Exception as e:
        log_error(f"LLM call failed: {e}", e)
        raise AnalysisError(str(e)) from e

    content = llm_response.content if hasattr(llm_response, "content") else str(llm_response)
    result = extract_json_from_text(content)
    if result is None:
        log_error("Could not find JSON in LLM response")
        raise AnalysisError("LLM response did not contain JSON")
    log_debug(f"LLM JSON response: {result}")
    return result


def _format_nutriments(nutriments: Optional[Dict[str, float]]) -> str:
    if not nutriments:
        return "Not available"
    return ", ".join(f"{key}: {value}" for key, value in sorted(nutriments.items()))


class ProductAnalyzer:
    """
    LLM backed analysis of a product's processing level and glycemic impact.

    The chat model is injected so startup owns its lifecycle and tests can
    pass a mock. Every numeric field coming back from the model is clamped
    into its valid range and the glycemic category is always recomputed
    from the clamped index.
    """

    def __init__(self, llm):
        self.llm = llm

    async def _ask(self, prompt: str) -> Dict[str, Any]:
        return await ask_llm_for_json(self.llm, prompt)

    @traceable
    async def analyze_ingredients(self, ingredients_text: str, product_name: str, language: str = "en") -> ProcessingAnalysis:
        log_info(f"Analyzing processing level for {product_name}")
        prompt = f"""
You are a food science expert specializing in analyzing food processing levels.
Provide accurate, evidence-based assessments of ingredient processing levels.

Analyze the following food product ingredients for processing level. Provide a score from 0-10 where:
0-2: Minimally processed (whole foods, basic preparation)
3-4: Processed culinary ingredients (oils, butter, sugar, salt)
5-6: Processed foods (canned vegetables, simple breads, cheese)
7-8: Ultra-processed foods (most packaged snacks, sugary drinks, instant meals)
9-10: Highly ultra-processed (complex industrial formulations with many additives)

Product: {product_name}
Ingredients: {ingredients_text}

Categorize each ingredient into one of these categories:
- Ultra-processed: Industrial ingredients, artificial additives, emulsifiers, preservatives, artificial flavors/colors
- Processed: Refined ingredients, added sugars, processed dairy, refined oils
- Minimally processed: Whole foods, basic ingredients with minimal modification

Write the explanation in this language: {language}

## FORMAT YOUR RESPONSE AS JSON:
{{
  "score": (number between 0-10),
  "explanation": "detailed explanation of the processing level and reasoning",
  "categories": {{
    "ultra_processed": ["ingredient1", "ingredient2"],
    "processed": ["ingredient3"],
    "minimally_processed": ["ingredient4"]
  }}
}}

IMPORTANT: Ensure your response is valid JSON with double quotes (") around property names and string values.
"""
        result = await self._ask(prompt)
        categories = result.get("categories") or {}
        if not isinstance(categories, dict):
            categories = {}

        analysis = ProcessingAnalysis(
            score=clamp_processing_score(result.get("score")),
            explanation=result.get("explanation") or PROCESSING_FALLBACK_EXPLANATION,
            categories=ProcessingCategories(
                ultra_processed=_string_list(categories.get("ultra_processed", categories.get("ultraProcessed"))),
                processed=_string_list(categories.get("processed")),
                minimally_processed=_string_list(categories.get("minimally_processed", categories.get("minimallyProcessed"))),
            ),
        )
        log_info(f"Processing score for {product_name}: {analysis.score}")
        return analysis

    @traceable
    async def analyze_glycemic_index(
        self,
        ingredients_text: Optional[str],
        product_name: str,
        nutriments: Optional[Dict[str, float]],
        language: str = "en",
    ) -> GlycemicAnalysis:
        log_info(f"Analyzing glycemic impact for {product_name}")
        prompt = f"""
You are a nutrition scientist estimating the blood glucose impact of a food product.

Product: {product_name}
Ingredients: {ingredients_text or "Not available"}
Nutrients per 100g: {_format_nutriments(nutriments)}

Estimate:
1. Glycemic index (0-100) of the product
2. Glycemic load (0-40) for a 100g portion
3. A short explanation of the estimate
4. A one sentence description of the impact on blood sugar

Write the explanation and impact description in this language: {language}

## FORMAT YOUR RESPONSE AS JSON:
{{
  "glycemic_index": (number between 0-100),
  "glycemic_load": (number between 0-40),
  "explanation": "why the product has this glycemic profile",
  "impact_description": "effect on blood sugar"
}}

IMPORTANT: Ensure your response is valid JSON with double quotes (") around property names and string values.
"""
        result = await self._ask(prompt)
        glycemic_index = clamp_glycemic_index(result.get("glycemic_index", result.get("glycemicIndex")))
        if glycemic_index is None:
            raise AnalysisError("LLM response had no glycemic index")

        # category comes from the clamped index, never from the model
        analysis = GlycemicAnalysis(
            glycemic_index=glycemic_index,
            glycemic_load=clamp_glycemic_load(result.get("glycemic_load", result.get("glycemicLoad"))),
            category=categorize_glycemic_index(glycemic_index),
            explanation=result.get("explanation") or "No explanation provided",
            impact_description=result.get("impact_description") or result.get("impactDescription") or "",
        )
        log_info(f"Glycemic index for {product_name}: {analysis.glycemic_index} ({analysis.category.value})")
        return analysis

    @traceable
    async def find_ingredients(self, product_name: str) -> Optional[str]:
        """Ask the model for the ingredient list of a named product."""
        prompt = f"""
You are a product information specialist. Only provide real, accurate ingredients lists.

Find the complete ingredients list for the product: "{product_name}"

Provide only the ingredients list in this format:
{{
  "ingredients_text": "complete ingredients list",
  "found": true/false
}}
"""
        result = await self._ask(prompt)
        ingredients = result.get("ingredients_text") or result.get("ingredientsText")
        if result.get("found") and ingredients:
            return ingredients
        return None

    async def processing_backfill(self, ingredients_text: str, product_name: str, language: str = "en") -> Dict[str, Any]:
        """Product fields from a processing analysis, a placeholder explanation on failure."""
        try:
            analysis = await self.analyze_ingredients(ingredients_text, product_name, language)
            return {
                "processing_score": analysis.score,
                "processing_explanation": analysis.explanation,
            }
        except Exception as e:
            log_warning(f"Processing analysis failed for {product_name}: {e}")
            return {"processing_explanation": PROCESSING_UNAVAILABLE}

    async def glycemic_backfill(
        self,
        ingredients_text: Optional[str],
        product_name: str,
        nutriments: Optional[Dict[str, float]],
        language: str = "en",
    ) -> Dict[str, Any]:
        """Product fields from a glycemic analysis, a placeholder explanation on failure."""
        try:
            analysis = await self.analyze_glycemic_index(ingredients_text, product_name, nutriments, language)
            return {
                "glycemic_index": analysis.glycemic_index,
                "glycemic_load": analysis.glycemic_load,
                "glycemic_explanation": format_glycemic_explanation(analysis),
            }
        except Exception as e:
            log_warning(f"Glycemic analysis failed for {product_name}: {e}")
            return {"glycemic_explanation": GLYCEMIC_UNAVAILABLE}
