"""
Unit tests for filename-based waste classification.
"""

import pytest

from agriloop.models.waste import WasteType
from agriloop.services.classifier import classify_waste


class TestClassifyWaste:
    """Keyword table lookup."""

    @pytest.mark.parametrize(
        "filename,waste_type,confidence,price",
        [
            ("coconut_pile.jpg", WasteType.COCONUT_SHELL, 0.92, 15),
            ("rice-husk.png", WasteType.RICE_HUSK, 0.87, 8),
            ("SUGARCANE.JPG", WasteType.SUGARCANE_STALK, 0.88, 12),
            ("corn_field.jpeg", WasteType.CORN_HUSK, 0.90, 10),
            ("wheat straw bales.jpg", WasteType.WHEAT_STRAW, 0.89, 7),
            ("cotton_stalks.webp", WasteType.COTTON_STALK, 0.85, 9),
        ],
    )
    def test_keyword_match(self, filename, waste_type, confidence, price):
        result = classify_waste(filename)

        assert result.waste_type == waste_type
        assert result.confidence == pytest.approx(confidence)
        assert result.suggested_price == price

    def test_no_match_falls_back_to_other(self):
        result = classify_waste("IMG_0042.jpg")

        assert result.waste_type == WasteType.OTHER
        assert result.confidence == pytest.approx(0.6)
        assert result.suggested_price == 10

    def test_first_rule_wins(self):
        """A name mentioning several crops resolves to the earliest rule."""
        assert classify_waste("rice_and_coconut.jpg").waste_type == WasteType.COCONUT_SHELL
        assert classify_waste("corn_rice.jpg").waste_type == WasteType.RICE_HUSK

    @pytest.mark.parametrize("filename", [None, ""])
    def test_missing_filename(self, filename):
        assert classify_waste(filename).waste_type == WasteType.OTHER

    def test_fallback_is_not_shared(self):
        first = classify_waste("unknown.jpg")
        first.confidence = 0.1

        assert classify_waste("unknown.jpg").confidence == pytest.approx(0.6)
