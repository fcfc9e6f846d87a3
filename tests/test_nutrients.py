import unittest

from services.providers.nutrients import (
    normalize_kenniscentrum,
    normalize_named,
    normalize_nevo,
    normalize_openfoodfacts,
    normalize_rivm,
    normalize_usda,
    nutrient_name_key,
)


class TestNutrientNormalization(unittest.TestCase):

    def test_openfoodfacts_drops_non_numeric_values(self):
        nutriments = normalize_openfoodfacts({"sugars_100g": "10.6", "energy_unit": "kcal", "fat_100g": 0})
        self.assertEqual(nutriments, {"sugars_100g": 10.6, "fat_100g": 0.0})
        self.assertIsNone(normalize_openfoodfacts(None))

    def test_usda_nutrient_ids(self):
        nutriments = normalize_usda([
            {"nutrientId": 1008, "value": 100},
            {"nutrientId": 1003, "value": 3.5},
            {"nutrientId": 1079, "value": 2},
            {"nutrientId": 1293, "value": 1000},
            {"nutrientId": 9999, "value": 1},
        ])
        self.assertAlmostEqual(nutriments["energy_100g"], 418.4)
        self.assertEqual(nutriments["proteins_100g"], 3.5)
        self.assertEqual(nutriments["fiber_100g"], 2.0)
        self.assertAlmostEqual(nutriments["salt_100g"], 2.54)
        self.assertEqual(len(nutriments), 4)

    def test_nevo_codes(self):
        nutriments = normalize_nevo([
            {"nevoCode": "ENERK", "amount": 250},
            {"nevoCode": "NA", "amount": 400},
            {"nevoCode": "UNKNOWN", "amount": 1},
        ])
        self.assertEqual(nutriments, {"energy-kcal": 250.0, "sodium": 400.0})

    def test_rivm_substring_rules(self):
        nutriments = normalize_rivm([
            {"nutrient_code": "ENERGY_KCAL", "value": 120},
            {"nutrient_code": "fat_total", "value": 4},
            {"nutrient_code": "saturated_fat", "value": 1.5},
            {"nutrient_code": "sodium", "value": 0.4},
        ])
        self.assertEqual(nutriments["energy_100g"], 120.0)
        self.assertEqual(nutriments["fat_100g"], 4.0)
        self.assertEqual(nutriments["saturated_fat_100g"], 1.5)
        self.assertAlmostEqual(nutriments["salt_100g"], 1.0)

    def test_named_nutrients(self):
        self.assertEqual(nutrient_name_key(" Total  Fat "), "total_fat")
        nutriments = normalize_named(
            [{"name": "Dietary Fibre", "value": "3"}, {"name": "", "value": 1}],
            "name",
            "value",
        )
        self.assertEqual(nutriments, {"dietary_fibre": 3.0})

    def test_kenniscentrum_salt_in_milligrams(self):
        nutriments = normalize_kenniscentrum({"calories_per_100g": 90, "salt_mg": 1200, "fiber_g": 0})
        self.assertEqual(nutriments, {"energy_100g": 90.0, "salt_100g": 1.2})

    def test_empty_inputs_return_none(self):
        self.assertIsNone(normalize_usda([]))
        self.assertIsNone(normalize_rivm(None))
        self.assertIsNone(normalize_kenniscentrum(None))


if __name__ == '__main__':
    unittest.main()
