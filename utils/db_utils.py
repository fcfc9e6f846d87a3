from pydantic import TypeAdapter
from db import models
from interfaces.productModels import Product, AuthoritativeProduct, SynthesizedProduct
from logger_manager import log_error

product_adapter = TypeAdapter(Product)


def product_db_to_pydantic(db_product: models.Product):
    """Convert a database product row to the matching provenance variant."""
    data = {
        "barcode": db_product.barcode,
        "product_name": db_product.product_name,
        "brands": db_product.brands,
        "image_url": db_product.image_url,
        "ingredients_text": db_product.ingredients_text,
        "nutriments": db_product.nutriments,
        "processing_score": db_product.processing_score,
        "processing_explanation": db_product.processing_explanation,
        "glycemic_index": db_product.glycemic_index,
        "glycemic_load": db_product.glycemic_load,
        "glycemic_explanation": db_product.glycemic_explanation,
        "data_source": db_product.data_source or "Unknown",
        "last_updated": db_product.last_updated,
        "provenance": db_product.provenance or "authoritative",
    }
    if data["provenance"] == "synthesized":
        data["is_generic"] = bool(db_product.is_generic)
    try:
        return product_adapter.validate_python(data)
    except Exception as e:
        log_error(f"Error converting DB product {db_product.barcode} to Pydantic model: {e}", e)
        raise


def product_pydantic_to_columns(product) -> dict:
    """Flatten a product variant into keyword arguments for the Product table."""
    columns = product.model_dump(exclude={"provenance", "is_generic", "last_updated"})
    columns["provenance"] = product.provenance
    columns["is_generic"] = isinstance(product, SynthesizedProduct) and product.is_generic
    return columns


def is_authoritative(product) -> bool:
    return isinstance(product, AuthoritativeProduct)
