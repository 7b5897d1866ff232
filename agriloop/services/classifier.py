"""
Filename-based waste classification.

A keyword table stands in for an image model: the first keyword found in
the lower-cased filename decides the waste type, its confidence and a
suggested INR price per unit.
"""

from typing import NamedTuple, Optional, Tuple

from agriloop.models.waste import ClassificationResult, WasteType


class _Rule(NamedTuple):
    keyword: str
    waste_type: WasteType
    confidence: float
    suggested_price: float


# Order matters: first match wins.
RULES: Tuple[_Rule, ...] = (
    _Rule("coconut", WasteType.COCONUT_SHELL, 0.92, 15),
    _Rule("rice", WasteType.RICE_HUSK, 0.87, 8),
    _Rule("sugarcane", WasteType.SUGARCANE_STALK, 0.88, 12),
    _Rule("corn", WasteType.CORN_HUSK, 0.90, 10),
    _Rule("wheat", WasteType.WHEAT_STRAW, 0.89, 7),
    _Rule("cotton", WasteType.COTTON_STALK, 0.85, 9),
)

FALLBACK = ClassificationResult(waste_type=WasteType.OTHER, confidence=0.6, suggested_price=10)


def classify_waste(filename: Optional[str]) -> ClassificationResult:
    """
    Classify a waste image by its filename.

    >>> classify_waste("Coconut_pile.JPG").waste_type
    <WasteType.COCONUT_SHELL: 'coconut_shell'>
    """
    name = (filename or "").lower()
    for rule in RULES:
        if rule.keyword in name:
            return ClassificationResult(
                waste_type=rule.waste_type,
                confidence=rule.confidence,
                suggested_price=rule.suggested_price,
            )
    return FALLBACK.model_copy()
