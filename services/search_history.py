from typing import List, Optional
from fastapi import HTTPException
from sqlalchemy.orm import Session

from db.models import SearchHistory
from db.repositories import SearchHistoryRepository
from interfaces.historyModels import InputType, SearchHistoryCreate
from interfaces.productModels import LookupResult
from logger_manager import log_info, log_error


def history_record_for(search_input: str, input_type: InputType, result: LookupResult) -> SearchHistoryCreate:
    """Snapshot of one lookup attempt, found or not."""
    product = result.product
    return SearchHistoryCreate(
        search_input=search_input,
        input_type=input_type,
        found=product is not None,
        product_barcode=product.barcode if product else None,
        product_name=product.product_name if product else None,
        brands=product.brands if product else None,
        processing_score=product.processing_score if product else None,
        data_source=product.data_source if product else None,
        source=result.source,
        error_message=result.error,
    )


def record_search(db: Session, record: SearchHistoryCreate) -> SearchHistory:
    log_info(f"Recording search for '{record.search_input}' (found: {record.found})")
    try:
        entry = SearchHistoryRepository(db).append(record)
        log_info("Search recorded successfully")
        return entry
    except Exception as e:
        log_error(f"Error recording search: {str(e)}", e)
        raise HTTPException(status_code=500, detail="Internal Server Error")


def get_search_history(db: Session, limit: int = 50, found: Optional[bool] = None) -> List[SearchHistory]:
    log_info("Getting search history")
    try:
        history = SearchHistoryRepository(db).list_recent(limit=limit, found=found)
        log_info("Search history retrieved successfully")
        return history
    except Exception as e:
        log_error(f"Error getting search history: {str(e)}", e)
        raise HTTPException(status_code=500, detail="Internal Server Error")
