from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from db.database import get_db
from db.repositories import ProductRepository
from interfaces.analysisModels import GlycemicAnalysis, ProcessingAnalysis
from interfaces.historyModels import InputType
from interfaces.productModels import (
    LookupResult,
    ProductCreate,
    ProductSearchRequest,
    ScanProgress,
    SearchSuggestion,
    SmartLookupRequest,
    SmartLookupResponse,
)
from logger_manager import log_info, log_error
from routers.dependencies import get_product_service, get_progress_store, get_resolver
from services.productAnalyzerAgent import AnalysisError
from services.productLookup import ProductResolver
from services.product_service import ProductAlreadyExistsError, ProductNotFoundError, ProductService
from services.progress_store import ScanProgressStore
from services.search_history import history_record_for, record_search
from services.search_suggestions import generate_search_suggestions
from utils.db_utils import product_db_to_pydantic
from utils.input_utils import is_barcode, normalize_barcode

router = APIRouter()


def lookup_response(result: LookupResult) -> JSONResponse:
    if result.product is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "message": result.error or "Product not found in any database",
                "source": result.source,
                "allow_manual_entry": True,
            },
        )
    content = result.product.model_dump(mode="json")
    content["lookup_source"] = result.source
    return JSONResponse(content=content)


@router.post("/search")
async def search_products(request: ProductSearchRequest, service: ProductService = Depends(get_product_service)):
    """Barcode or free-text search with optional brand filters."""
    log_info(f"Search endpoint called for '{request.query}'")
    try:
        result = await service.lookup(request.query, request.filters)
        return lookup_response(result)
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log_error(f"Error searching products: {e}", e)
        raise HTTPException(status_code=500, detail="Failed to fetch product data")


@router.post("/smart-lookup", response_model=SmartLookupResponse)
async def smart_lookup(
    request: SmartLookupRequest,
    db: Session = Depends(get_db),
    resolver: ProductResolver = Depends(get_resolver),
):
    """Name search across the databases, reporting the outcome of every source."""
    log_info(f"Smart lookup endpoint called for '{request.product_name}'")
    try:
        response = await resolver.smart_lookup(request.product_name, request.barcode)
        if response.product is not None:
            saved = ProductRepository(db).put(response.product)
            response.product = product_db_to_pydantic(saved)

        result = LookupResult(
            product=response.product,
            source=response.source,
            error=None if response.product else f'Product "{request.product_name}" not found in any database',
        )
        record_search(db, history_record_for(request.product_name, InputType.TEXT, result))
        return response
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log_error(f"Error in smart lookup: {e}", e)
        raise HTTPException(status_code=500, detail="Failed to fetch product data")


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(product: ProductCreate, service: ProductService = Depends(get_product_service)):
    """Manual product entry, analysis runs inline."""
    log_info(f"Create product endpoint called for {product.barcode}")
    try:
        created = await service.create_manual(product)
        return JSONResponse(status_code=status.HTTP_201_CREATED, content=created.model_dump(mode="json"))
    except ProductAlreadyExistsError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Product with this barcode already exists")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log_error(f"Error creating product: {e}", e)
        raise HTTPException(status_code=500, detail="Failed to create product")


@router.get("/{barcode}")
async def get_product(barcode: str, service: ProductService = Depends(get_product_service)):
    """Cache first, then the cascade."""
    log_info(f"Get product endpoint called for {barcode}")
    try:
        result = await service.lookup(barcode)
        return lookup_response(result)
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        log_error(f"Error fetching product: {e}", e)
        raise HTTPException(status_code=500, detail="Failed to fetch product data")


@router.get("/{barcode}/analysis", response_model=ProcessingAnalysis)
async def get_product_analysis(barcode: str, service: ProductService = Depends(get_product_service)):
    try:
        return await service.reanalyze_processing(barcode)
    except ProductNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product or ingredients not found")
    except AnalysisError as e:
        log_error(f"Error analyzing ingredients: {e}", e)
        raise HTTPException(status_code=500, detail="Failed to analyze ingredients")


@router.get("/{barcode}/glycemic", response_model=GlycemicAnalysis)
async def get_product_glycemic(barcode: str, service: ProductService = Depends(get_product_service)):
    try:
        return await service.reanalyze_glycemic(barcode)
    except ProductNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product or ingredients not found")
    except AnalysisError as e:
        log_error(f"Error analyzing glycemic impact: {e}", e)
        raise HTTPException(status_code=500, detail="Failed to analyze glycemic impact")


@router.get("/{barcode}/progress", response_model=ScanProgress)
def get_scan_progress(barcode: str, progress_store: ScanProgressStore = Depends(get_progress_store)):
    key = normalize_barcode(barcode) if is_barcode(barcode) else barcode
    progress = progress_store.get(key)
    if progress is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No scan in progress for this barcode")
    return progress


@router.get("/{barcode}/suggestions", response_model=List[SearchSuggestion])
def get_search_suggestions(barcode: str, db: Session = Depends(get_db)):
    key = normalize_barcode(barcode) if is_barcode(barcode) else barcode
    products = ProductRepository(db).list_products()
    return generate_search_suggestions(key, products)
