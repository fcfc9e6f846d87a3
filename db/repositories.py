from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from logger_manager import log_debug, log_info
from . import models
from .models import utc_now
from interfaces.historyModels import SearchHistoryCreate
from utils.db_utils import product_pydantic_to_columns
from utils.input_utils import is_barcode


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_barcode(self, barcode: str) -> Optional[models.Product]:
        return self.db.query(models.Product).filter(models.Product.barcode == barcode).first()

    def get_by_key(self, key: str) -> Optional[models.Product]:
        """Exact barcode match first, then a case-insensitive name match for text keys."""
        exact_match = self.get_by_barcode(key)
        if exact_match:
            log_debug(f"Cache hit on barcode: {key}")
            return exact_match

        if is_barcode(key):
            return None

        name_match = self.db.query(models.Product)\
            .filter(func.lower(models.Product.product_name) == key.strip().lower())\
            .order_by(models.Product.last_updated.desc())\
            .first()
        if name_match:
            log_debug(f"Cache hit on product name: {key}")
        return name_match

    def put(self, product) -> models.Product:
        """Insert or update a product keyed by barcode and stamp last_updated."""
        columns = product_pydantic_to_columns(product)
        db_product = self.db.query(models.Product)\
            .filter(models.Product.barcode == product.barcode)\
            .first()

        if db_product is None:
            db_product = models.Product(**columns)
            self.db.add(db_product)
            log_info(f"Caching new product {product.barcode} from {product.data_source}")
        else:
            for field, value in columns.items():
                setattr(db_product, field, value)
            log_info(f"Updating cached product {product.barcode}")

        db_product.last_updated = utc_now()
        self.db.commit()
        self.db.refresh(db_product)
        return db_product

    def update_analysis(self, barcode: str, **fields) -> Optional[models.Product]:
        """Backfill analysis columns, the only mutation allowed on a cached product."""
        allowed = {
            "processing_score",
            "processing_explanation",
            "glycemic_index",
            "glycemic_load",
            "glycemic_explanation",
        }
        unknown = set(fields) - allowed
        if unknown:
            raise ValueError(f"Cannot update non-analysis fields: {', '.join(sorted(unknown))}")

        db_product = self.db.query(models.Product).filter(models.Product.barcode == barcode).first()
        if db_product is None:
            return None
        for field, value in fields.items():
            setattr(db_product, field, value)
        db_product.last_updated = utc_now()
        self.db.commit()
        self.db.refresh(db_product)
        return db_product

    def list_products(self, skip: int = 0, limit: int = 500) -> List[models.Product]:
        return self.db.query(models.Product).offset(skip).limit(limit).all()


class SearchHistoryRepository:
    def __init__(self, db: Session):
        self.db = db

    def append(self, record: SearchHistoryCreate) -> models.SearchHistory:
        entry = models.SearchHistory(**record.model_dump(mode="json"))
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def list_recent(self, limit: int = 50, found: Optional[bool] = None) -> List[models.SearchHistory]:
        query = self.db.query(models.SearchHistory)
        if found is not None:
            query = query.filter(models.SearchHistory.found == found)
        return query.order_by(models.SearchHistory.created_at.desc(), models.SearchHistory.id.desc())\
            .limit(limit)\
            .all()
