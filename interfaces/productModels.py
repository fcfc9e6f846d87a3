from pydantic import BaseModel, Field, model_validator
from typing import List, Dict, Optional, Literal, Union, Annotated
from datetime import datetime


class ProductBase(BaseModel):
    """Fields shared by every resolved product, whatever produced it."""
    barcode: str
    product_name: Optional[str] = None
    brands: Optional[str] = None
    image_url: Optional[str] = None
    ingredients_text: Optional[str] = None
    # sparse nutrient key -> value per 100g, keys depend on the provider
    nutriments: Optional[Dict[str, float]] = None
    processing_score: Optional[int] = Field(default=None, ge=0, le=10)
    processing_explanation: Optional[str] = None
    glycemic_index: Optional[float] = Field(default=None, ge=0, le=100)
    glycemic_load: Optional[float] = Field(default=None, ge=0, le=40)
    glycemic_explanation: Optional[str] = None
    data_source: str
    last_updated: Optional[datetime] = None

    class Config:
        from_attributes = True


class AuthoritativeProduct(ProductBase):
    """Record that came from a provider database or a manual entry."""
    provenance: Literal["authoritative"] = "authoritative"


class SynthesizedProduct(ProductBase):
    """Record fabricated by the LLM for a free-text query, not real product data."""
    provenance: Literal["synthesized"] = "synthesized"
    is_generic: bool = True


Product = Annotated[Union[AuthoritativeProduct, SynthesizedProduct], Field(discriminator="provenance")]


class LookupResult(BaseModel):
    product: Optional[Product] = None
    source: str
    error: Optional[str] = None

    @model_validator(mode="after")
    def check_error_when_missing(self):
        if self.product is None and not self.error:
            raise ValueError("A lookup result without a product must carry an error")
        return self

    @property
    def found(self) -> bool:
        return self.product is not None


class SearchFilters(BaseModel):
    include_brands: List[str] = []
    exclude_brands: List[str] = []


class ProductSearchRequest(BaseModel):
    query: str = Field(..., min_length=1)
    filters: Optional[SearchFilters] = None


class ProductCreate(BaseModel):
    """Body of a manual product entry."""
    barcode: str = Field(..., min_length=1, max_length=64)
    product_name: str = Field(..., min_length=1)
    brands: Optional[str] = None
    image_url: Optional[str] = None
    ingredients_text: Optional[str] = None
    nutriments: Optional[Dict[str, float]] = None


class SourceResult(BaseModel):
    source: str
    product_name: Optional[str] = None
    brands: Optional[str] = None
    ingredients: Optional[str] = None
    found: bool = False
    error: Optional[str] = None


class SmartLookupRequest(BaseModel):
    product_name: str = Field(..., min_length=1)
    barcode: Optional[str] = None


class SmartLookupResponse(BaseModel):
    product: Optional[Product] = None
    results: List[SourceResult] = []
    source: str = "none"


class SearchSuggestion(BaseModel):
    barcode: str
    product_name: Optional[str] = None
    brands: Optional[str] = None
    similarity: float
    reason: str


class ScanProgress(BaseModel):
    barcode: str
    current_source: Optional[str] = None
    completed_sources: List[str] = []
    total_sources: int = 0
    found: bool = False
    is_complete: bool = False
    error: Optional[str] = None
    timestamp: Optional[datetime] = None
