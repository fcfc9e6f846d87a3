from sqlalchemy import Column, Integer, String, Boolean, Text, JSON, Float, DateTime
from .database import Base
from datetime import datetime
import pytz


def utc_now():
    return datetime.now(tz=pytz.utc)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    # cache key, may be a real barcode, a provider code or text-<millis>
    barcode = Column(String(64), unique=True, index=True, nullable=False)
    product_name = Column(String(255), nullable=True, index=True)
    brands = Column(String(255), nullable=True)
    image_url = Column(Text, nullable=True)
    ingredients_text = Column(Text, nullable=True)
    nutriments = Column(JSON, nullable=True)

    processing_score = Column(Integer, nullable=True)
    processing_explanation = Column(Text, nullable=True)
    glycemic_index = Column(Float, nullable=True)
    glycemic_load = Column(Float, nullable=True)
    glycemic_explanation = Column(Text, nullable=True)

    data_source = Column(String(255), nullable=True)
    provenance = Column(String(32), nullable=False, default="authoritative")
    is_generic = Column(Boolean, default=False)
    last_updated = Column(DateTime(timezone=True), default=utc_now)


class SearchHistory(Base):
    __tablename__ = "search_history"

    id = Column(Integer, primary_key=True, index=True)
    search_input = Column(String(255), nullable=False)
    input_type = Column(String(32), nullable=False)
    found = Column(Boolean, default=False)

    # snapshot of the product at lookup time
    product_barcode = Column(String(64), nullable=True)
    product_name = Column(String(255), nullable=True)
    brands = Column(String(255), nullable=True)
    processing_score = Column(Integer, nullable=True)
    data_source = Column(String(255), nullable=True)

    source = Column(String(255), nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now)
