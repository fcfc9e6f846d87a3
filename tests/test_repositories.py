import unittest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db import models
from db.database import Base
from db.repositories import ProductRepository, SearchHistoryRepository
from interfaces.historyModels import InputType, SearchHistoryCreate
from interfaces.productModels import AuthoritativeProduct, SynthesizedProduct
from utils.db_utils import product_db_to_pydantic


def make_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)()


class TestProductRepository(unittest.TestCase):

    def setUp(self):
        self.db = make_session()
        self.repository = ProductRepository(self.db)

    def tearDown(self):
        self.db.close()

    def test_put_then_get_by_barcode(self):
        self.repository.put(AuthoritativeProduct(
            barcode="5449000000996",
            product_name="Coca-Cola",
            nutriments={"sugars_100g": 10.6},
            processing_score=8,
            data_source="OpenFoodFacts",
        ))

        cached = self.repository.get_by_key("5449000000996")

        self.assertEqual(cached.product_name, "Coca-Cola")
        self.assertEqual(cached.nutriments, {"sugars_100g": 10.6})
        self.assertIsNotNone(cached.last_updated)
        self.assertIsNone(self.repository.get_by_key("5449000000997"))

    def test_put_overwrites_existing_barcode(self):
        self.repository.put(AuthoritativeProduct(barcode="96385074", product_name="Old", data_source="A"))
        self.repository.put(AuthoritativeProduct(barcode="96385074", product_name="New", data_source="B"))

        self.assertEqual(self.db.query(models.Product).count(), 1)
        self.assertEqual(self.repository.get_by_key("96385074").data_source, "B")

    def test_text_keys_match_product_name_case_insensitively(self):
        self.repository.put(SynthesizedProduct(barcode="text-1700000000000", product_name="Greek Yogurt", data_source="Text Search"))

        cached = self.repository.get_by_key("greek yogurt")

        self.assertEqual(cached.barcode, "text-1700000000000")
        product = product_db_to_pydantic(cached)
        self.assertIsInstance(product, SynthesizedProduct)
        self.assertTrue(product.is_generic)

    def test_update_analysis_only_touches_analysis_fields(self):
        self.repository.put(AuthoritativeProduct(barcode="96385074", product_name="Crackers", data_source="A"))

        updated = self.repository.update_analysis("96385074", glycemic_index=70, glycemic_load=12.5)

        self.assertEqual(updated.glycemic_index, 70)
        self.assertEqual(updated.product_name, "Crackers")
        with self.assertRaises(ValueError):
            self.repository.update_analysis("96385074", product_name="Changed")
        self.assertIsNone(self.repository.update_analysis("00000000", processing_score=1))

    def test_get_by_barcode_never_matches_names(self):
        self.repository.put(SynthesizedProduct(barcode="text-1", product_name="house-bread", data_source="Text Search"))

        self.assertIsNone(self.repository.get_by_barcode("house-bread"))
        self.assertEqual(self.repository.get_by_key("house-bread").barcode, "text-1")
        self.assertEqual(self.repository.get_by_barcode("text-1").product_name, "house-bread")


class TestSearchHistoryRepository(unittest.TestCase):

    def setUp(self):
        self.db = make_session()
        self.repository = SearchHistoryRepository(self.db)

    def tearDown(self):
        self.db.close()

    def test_append_and_list_recent(self):
        self.repository.append(SearchHistoryCreate(
            search_input="5449000000996",
            input_type=InputType.BARCODE,
            found=True,
            product_barcode="5449000000996",
            source="OpenFoodFacts",
        ))
        self.repository.append(SearchHistoryCreate(
            search_input="unknown thing",
            input_type=InputType.TEXT,
            found=False,
            source="none",
            error_message="not found",
        ))

        history = self.repository.list_recent()
        self.assertEqual(len(history), 2)
        self.assertEqual(history[0].search_input, "unknown thing")
        self.assertEqual(history[0].input_type, "TextInput")

        found_only = self.repository.list_recent(found=True)
        self.assertEqual([entry.search_input for entry in found_only], ["5449000000996"])
        self.assertEqual(len(self.repository.list_recent(limit=1)), 1)


if __name__ == '__main__':
    unittest.main()
