"""
Agro API - Regras de área da propriedade

arable + vegetation <= total, e nenhuma área negativa.
Valores comparados em Decimal (0.1 + 0.2 == 0.3), já arredondados para a
escala da coluna (Numeric(12, 2)): o que é checado é o que é gravado.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping, Optional, Union

from agro_api.core.exceptions import BadRequestError

Number = Union[int, float, Decimal, str]

AREA_FIELDS = ("total_area", "arable_area", "vegetation_area")

# Mesma escala/precisão das colunas de área
AREA_PRECISION = Decimal("0.01")
MAX_AREA = Decimal("9999999999.99")

NEGATIVE_AREA_MESSAGE = "Area values must be positive"
INVALID_AREA_MESSAGE = "Area values must be finite numbers up to 9999999999.99"
AREA_SUM_MESSAGE = "The sum of arable area and vegetation area cannot exceed the total area"


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize(value: Number) -> Decimal:
    """Arredonda para 2 casas (ROUND_HALF_UP), rejeitando NaN/Infinity e estouro."""
    value = to_decimal(value)
    if not value.is_finite() or abs(value) > MAX_AREA:
        raise BadRequestError(INVALID_AREA_MESSAGE)
    return value.quantize(AREA_PRECISION, rounding=ROUND_HALF_UP)


def check(total: Number, arable: Number, vegetation: Number) -> None:
    """
    Levanta BadRequestError se as áreas forem inconsistentes.
    """
    total, arable, vegetation = to_decimal(total), to_decimal(arable), to_decimal(vegetation)

    if not (total.is_finite() and arable.is_finite() and vegetation.is_finite()):
        raise BadRequestError(INVALID_AREA_MESSAGE)

    if total < 0 or arable < 0 or vegetation < 0:
        raise BadRequestError(NEGATIVE_AREA_MESSAGE)

    if arable + vegetation > total:
        raise BadRequestError(AREA_SUM_MESSAGE)


def merge_areas(current: Optional[Any], patch: Mapping[str, Any]) -> dict:
    """
    Combina as áreas do patch com as persistidas.

    Campos ausentes no patch assumem o valor atual do registro. Todos os
    valores saem arredondados para a escala da coluna.
    """
    merged = {}
    for field in AREA_FIELDS:
        value = patch.get(field)
        if value is None and current is not None:
            value = getattr(current, field)
        merged[field] = quantize(value)
    return merged


def check_merged(current: Optional[Any], patch: Mapping[str, Any]) -> dict:
    """Valida o estado final (persistido + patch) e retorna as áreas a gravar."""
    merged = merge_areas(current, patch)
    check(merged["total_area"], merged["arable_area"], merged["vegetation_area"])
    return merged
