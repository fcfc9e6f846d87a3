from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from db.database import get_db
from interfaces.historyModels import SearchHistoryResponse
from logger_manager import log_info, log_error
from services.search_history import get_search_history

router = APIRouter()


@router.get("", response_model=List[SearchHistoryResponse])
def read_search_history(
    limit: int = Query(50, ge=1, le=500),
    found: Optional[bool] = None,
    db: Session = Depends(get_db),
):
    log_info("Read search history endpoint called")
    try:
        return get_search_history(db, limit=limit, found=found)
    except HTTPException:
        raise
    except Exception as e:
        log_error(f"Error in read_search_history endpoint: {str(e)}", e)
        raise HTTPException(status_code=500, detail="Internal Server Error")
