"""
Agro API - Validação de CPF/CNPJ

Dígitos verificadores pelo algoritmo módulo 11 da Receita Federal:
- CPF: 11 dígitos, pesos 10..2 e 11..2
- CNPJ: 14 dígitos, pesos 5,4,3,2,9,8,7,6,5,4,3,2 e 6,5,4,3,2,9,8,7,6,5,4,3,2
"""
import re
from typing import List, Union

from agro_api.models.schemas import DocumentType

CPF_LENGTH = 11
CNPJ_LENGTH = 14

CPF_WEIGHTS_1 = list(range(10, 1, -1))
CPF_WEIGHTS_2 = list(range(11, 1, -1))
CNPJ_WEIGHTS_1 = [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]
CNPJ_WEIGHTS_2 = [6] + CNPJ_WEIGHTS_1

# Apenas dígitos e a pontuação usual (111.444.777-35, 11.222.333/0001-81)
_ALLOWED = re.compile(r"^[\d.\-/\s]+$")
_SEPARATORS = re.compile(r"[.\-/\s]")


def normalize(document: str) -> str:
    """Remove pontuação do documento. Caracteres estranhos são mantidos."""
    return _SEPARATORS.sub("", document or "")


def _check_digit(digits: str, weights: List[int]) -> int:
    total = sum(int(d) * w for d, w in zip(digits, weights))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def _valid_shape(document: str, length: int) -> bool:
    if not document or not _ALLOWED.match(document):
        return False
    digits = normalize(document)
    return len(digits) == length and len(set(digits)) > 1


def has_document_shape(document: str) -> bool:
    """Só dígitos e pontuação, com 11 ou 14 dígitos. Não confere os verificadores."""
    if not document or not _ALLOWED.match(document):
        return False
    return len(normalize(document)) in (CPF_LENGTH, CNPJ_LENGTH)


def is_valid_cpf(document: str) -> bool:
    if not _valid_shape(document, CPF_LENGTH):
        return False
    digits = normalize(document)
    first = _check_digit(digits[:9], CPF_WEIGHTS_1)
    second = _check_digit(digits[:9] + str(first), CPF_WEIGHTS_2)
    return digits[9:] == f"{first}{second}"


def is_valid_cnpj(document: str) -> bool:
    if not _valid_shape(document, CNPJ_LENGTH):
        return False
    digits = normalize(document)
    first = _check_digit(digits[:12], CNPJ_WEIGHTS_1)
    second = _check_digit(digits[:12] + str(first), CNPJ_WEIGHTS_2)
    return digits[12:] == f"{first}{second}"


def validate(document: str, kind: Union[DocumentType, str]) -> bool:
    """
    Valida um documento conforme o tipo informado.

    Args:
        document: CPF ou CNPJ, com ou sem pontuação
        kind: DocumentType.CPF ou DocumentType.CNPJ

    Returns:
        True se formato e dígitos verificadores conferem
    """
    if DocumentType(kind) == DocumentType.CPF:
        return is_valid_cpf(document)
    return is_valid_cnpj(document)


def generate_cpf(base: str) -> str:
    """Completa uma base de 9 dígitos com os dígitos verificadores."""
    if len(base) != 9 or not base.isdigit():
        raise ValueError("Base do CPF deve ter 9 dígitos")
    first = _check_digit(base, CPF_WEIGHTS_1)
    second = _check_digit(base + str(first), CPF_WEIGHTS_2)
    return f"{base}{first}{second}"


def generate_cnpj(base: str) -> str:
    """Completa uma base de 12 dígitos com os dígitos verificadores."""
    if len(base) != 12 or not base.isdigit():
        raise ValueError("Base do CNPJ deve ter 12 dígitos")
    first = _check_digit(base, CNPJ_WEIGHTS_1)
    second = _check_digit(base + str(first), CNPJ_WEIGHTS_2)
    return f"{base}{first}{second}"
