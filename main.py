from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse
import uvicorn

from db.database import init_db
from logger_manager import log_info
from routers.chat import router as chat_router
from routers.history import router as history_router
from routers.product import router as product_router
from services.llm import create_llm
from services.nutribotAgent import NutriBot
from services.productAnalyzerAgent import ProductAnalyzer
from services.productLookup import ProductResolver
from services.progress_store import ScanProgressStore
from services.providers.registry import (
    default_barcode_providers,
    default_name_search_providers,
    regional_barcode_providers,
)
from services.textSearchAgent import TextSearchSynthesizer
from env import ENABLE_REGIONAL_PROVIDERS, PORT


app = FastAPI(title="ProcessedOrNot Scanner API")


# Build the LLM, providers and resolver once and store them on the app state
@app.on_event("startup")
async def startup_event():
    init_db()

    llm = create_llm()
    analyzer = ProductAnalyzer(llm)
    providers = default_barcode_providers()
    if ENABLE_REGIONAL_PROVIDERS:
        providers.extend(regional_barcode_providers())

    app.state.progress_store = ScanProgressStore()
    app.state.resolver = ProductResolver(
        providers=providers,
        analyzer=analyzer,
        synthesizer=TextSearchSynthesizer(llm, analyzer),
        progress_store=app.state.progress_store,
        name_search_providers=default_name_search_providers(),
    )
    app.state.nutribot = NutriBot(llm)
    log_info(f"Resolver ready with {len(providers)} barcode providers")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )


@app.get("/")
def read_root():
    return RedirectResponse("/docs")


# log every request using middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    response = await call_next(request)
    log_info(f"Request: {request.method} {request.url} -> {response.status_code}")
    return response


app.include_router(product_router, prefix="/api/products")
app.include_router(history_router, prefix="/api/history")
app.include_router(chat_router, prefix="/api/chat")

# To run the FastAPI app, use the command: uvicorn main:app --reload
if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=PORT)
