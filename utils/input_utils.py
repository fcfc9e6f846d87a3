import re
from interfaces.historyModels import InputType

# EAN-8, UPC-A, EAN-13 and ITF-14 all fall inside the general 6-18 digit range
BARCODE_PATTERN = re.compile(r"^[0-9]{6,18}$")
WHITESPACE_PATTERN = re.compile(r"\s+")


def normalize_barcode(text: str) -> str:
    """Strip every whitespace character so spaced-out barcodes share one cache key."""
    if text is None or not text.strip():
        raise ValueError("Input must not be empty")
    return WHITESPACE_PATTERN.sub("", text)


def is_barcode(text: str) -> bool:
    if text is None:
        return False
    cleaned = WHITESPACE_PATTERN.sub("", text)
    return bool(BARCODE_PATTERN.match(cleaned))


def detect_input_type(text: str) -> InputType:
    if text is None or not text.strip():
        raise ValueError("Input must not be empty")
    return InputType.BARCODE if is_barcode(text) else InputType.TEXT
