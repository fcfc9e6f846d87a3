from difflib import SequenceMatcher
from typing import Iterable, List

from interfaces.productModels import SearchSuggestion
from logger_manager import log_debug, log_error

SIMILARITY_THRESHOLD = 0.6
VERY_SIMILAR_THRESHOLD = 0.9
NAME_SIMILARITY_THRESHOLD = 0.5
MAX_SUGGESTIONS = 5

# digits that barcode scanners and OCR commonly confuse
OCR_MISTAKES = {
    "0": "8", "1": "7", "2": "7", "3": "8", "4": "9",
    "5": "6", "6": "5", "7": "1", "8": "0", "9": "4",
}

# GS1 prefixes of a few large brands
COMPANY_PREFIX_HINTS = {
    "30": ["Kellogg", "cereal", "breakfast"],
    "04": ["Coca Cola", "drink", "beverage"],
    "01": ["Pepsi", "drink", "beverage"],
    "36": ["Nestle", "chocolate", "candy"],
    "76": ["Unilever", "food", "personal care"],
}


def generate_barcode_variations(barcode: str) -> List[str]:
    variations = []
    if len(barcode) == 13:
        variations.append(barcode[:12])
    if len(barcode) == 12:
        variations.append("0" + barcode)

    variations.append(barcode.lstrip("0"))
    variations.append("0" + barcode)
    variations.append("00" + barcode)

    for i, char in enumerate(barcode):
        if char in OCR_MISTAKES:
            variations.append(barcode[:i] + OCR_MISTAKES[char] + barcode[i + 1:])

    unique = []
    for variation in variations:
        if variation != barcode and len(variation) >= 8 and variation not in unique:
            unique.append(variation)
    return unique


def barcode_similarity(first: str, second: str) -> float:
    if first == second:
        return 1.0
    return SequenceMatcher(None, first, second).ratio()


def product_name_hints(barcode: str) -> List[str]:
    return list(COMPANY_PREFIX_HINTS.get(barcode[:2], []))


def name_similarity(hints: List[str], product_name: str) -> float:
    product_name = product_name.lower()
    product_words = product_name.split()
    best = 0.0
    for hint in hints:
        hint = hint.lower()
        if hint in product_name:
            best = max(best, 0.8)
            continue
        hint_words = hint.split()
        overlap = len([word for word in hint_words if word in product_words])
        best = max(best, overlap / max(len(hint_words), len(product_words), 1))
    return best


def generate_search_suggestions(barcode: str, products: Iterable) -> List[SearchSuggestion]:
    """
    Suggest cached products for a barcode that found nothing.

    Candidates are cached products whose barcode is similar to the input or
    to one of its scan-error variations, plus products whose name matches a
    brand hint from the GS1 prefix. Returns the top 5 by similarity.
    """
    suggestions = []
    try:
        candidates = [barcode, *generate_barcode_variations(barcode)]
        hints = product_name_hints(barcode)

        for product in products:
            if product.barcode == barcode:
                continue
            similarity = max(barcode_similarity(candidate, product.barcode) for candidate in candidates)
            if similarity > SIMILARITY_THRESHOLD:
                suggestions.append(SearchSuggestion(
                    barcode=product.barcode,
                    product_name=product.product_name or "Unknown Product",
                    brands=product.brands,
                    similarity=round(similarity, 3),
                    reason="Very similar barcode" if similarity > VERY_SIMILAR_THRESHOLD else "Similar barcode pattern",
                ))

            if hints and product.product_name:
                similarity = name_similarity(hints, product.product_name)
                if similarity > NAME_SIMILARITY_THRESHOLD:
                    suggestions.append(SearchSuggestion(
                        barcode=product.barcode,
                        product_name=product.product_name,
                        brands=product.brands,
                        similarity=round(similarity, 3),
                        reason="Similar product name",
                    ))
    except Exception as e:
        log_error(f"Error generating search suggestions: {e}", e)
        return []

    suggestions.sort(key=lambda suggestion: suggestion.similarity, reverse=True)
    unique = []
    seen = set()
    for suggestion in suggestions:
        if suggestion.barcode in seen:
            continue
        seen.add(suggestion.barcode)
        unique.append(suggestion)
    log_debug(f"{len(unique)} suggestions for {barcode}")
    return unique[:MAX_SUGGESTIONS]
