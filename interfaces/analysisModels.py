from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Dict, Optional


class ProcessingCategories(BaseModel):
    ultra_processed: List[str] = []
    processed: List[str] = []
    minimally_processed: List[str] = []


class ProcessingAnalysis(BaseModel):
    score: int = Field(..., ge=0, le=10)
    explanation: str
    categories: ProcessingCategories = ProcessingCategories()


class GlycemicCategory(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class GlycemicAnalysis(BaseModel):
    glycemic_index: int = Field(..., ge=0, le=100)
    glycemic_load: float = Field(..., ge=0, le=40)
    category: GlycemicCategory
    explanation: str
    impact_description: str = ""


class KeywordExpansion(BaseModel):
    search_terms: List[str] = []
    category: Optional[str] = None
    language: Optional[str] = None


class GenericProductDraft(BaseModel):
    """Plausible generic product the LLM produced for a food category."""
    product_name: str
    brands: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    ingredients_text: Optional[str] = None
    nutriments: Optional[Dict[str, float]] = None
    is_generic: bool = True


class ChatTurn(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    messages: List[ChatTurn] = []


class ChatResponse(BaseModel):
    response: str
