from fastapi import Depends, Request
from sqlalchemy.orm import Session

from db.database import get_db
from services.nutribotAgent import NutriBot
from services.productLookup import ProductResolver
from services.product_service import ProductService
from services.progress_store import ScanProgressStore


def get_resolver(request: Request) -> ProductResolver:
    return request.app.state.resolver


def get_progress_store(request: Request) -> ScanProgressStore:
    return request.app.state.progress_store


def get_nutribot(request: Request) -> NutriBot:
    return request.app.state.nutribot


def get_product_service(
    db: Session = Depends(get_db),
    resolver: ProductResolver = Depends(get_resolver),
) -> ProductService:
    return ProductService(db, resolver)
