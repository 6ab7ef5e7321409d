from .field_result import FieldResult, FieldStatus
from .intermediate import ProviderPayload, RawObservation, RawValue
from .unit_normalizer import (
    PROVIDER_UNIT_TABLE,
    Quantity,
    UnitConversionUtils,
    UnitNormalizer,
    round_precipitation,
)

__all__ = [
    "FieldResult",
    "FieldStatus",
    "PROVIDER_UNIT_TABLE",
    "ProviderPayload",
    "Quantity",
    "RawObservation",
    "RawValue",
    "UnitConversionUtils",
    "UnitNormalizer",
    "round_precipitation",
]
