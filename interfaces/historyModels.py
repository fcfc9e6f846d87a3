from enum import Enum
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class InputType(str, Enum):
    BARCODE = "BarcodeInput"
    TEXT = "TextInput"


class SearchHistoryCreate(BaseModel):
    search_input: str
    input_type: InputType
    found: bool
    product_barcode: Optional[str] = None
    product_name: Optional[str] = None
    brands: Optional[str] = None
    processing_score: Optional[int] = None
    data_source: Optional[str] = None
    source: Optional[str] = None
    error_message: Optional[str] = None


class SearchHistoryResponse(SearchHistoryCreate):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
