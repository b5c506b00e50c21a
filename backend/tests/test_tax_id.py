"""
Agro API - Testes de validação de CPF/CNPJ
"""
import random

import pytest

from agro_api.models.schemas import DocumentType
from agro_api.services import tax_id


def _mutations(document: str):
    """Todas as variações com exatamente um dígito trocado."""
    for i, digit in enumerate(document):
        for replacement in "0123456789":
            if replacement != digit:
                yield document[:i] + replacement + document[i + 1:]


class TestCPF:

    def test_known_valid_cpf(self):
        assert tax_id.is_valid_cpf("11144477735")
        assert tax_id.is_valid_cpf("111.444.777-35")

    def test_generated_cpfs_are_valid(self):
        rng = random.Random(7)
        for _ in range(50):
            base = "".join(rng.choice("0123456789") for _ in range(9))
            if len(set(base)) == 1:
                continue
            assert tax_id.is_valid_cpf(tax_id.generate_cpf(base))

    def test_single_digit_mutation_invalidates(self):
        document = tax_id.generate_cpf("529982247")
        assert tax_id.is_valid_cpf(document)
        for mutated in _mutations(document):
            assert not tax_id.is_valid_cpf(mutated), mutated

    @pytest.mark.parametrize("document", [
        "11111111111",
        "00000000000",
        "1114447773",
        "111444777350",
        "1114447773a",
        "111 444 777 3x",
        "",
    ])
    def test_invalid_cpf_shapes(self, document):
        assert not tax_id.is_valid_cpf(document)

    def test_wrong_check_digits(self):
        assert not tax_id.is_valid_cpf("11144477734")


class TestCNPJ:

    def test_known_valid_cnpj(self):
        assert tax_id.is_valid_cnpj("11222333000181")
        assert tax_id.is_valid_cnpj("11.222.333/0001-81")

    def test_single_digit_mutation_invalidates(self):
        document = tax_id.generate_cnpj("112223330001")
        assert document == "11222333000181"
        for mutated in _mutations(document):
            assert not tax_id.is_valid_cnpj(mutated), mutated

    @pytest.mark.parametrize("document", [
        "22222222222222",
        "1122233300018",
        "11222333000182",
        "11.222.333/0001-8X",
    ])
    def test_invalid_cnpj(self, document):
        assert not tax_id.is_valid_cnpj(document)


class TestValidateByType:

    def test_dispatches_on_document_type(self):
        assert tax_id.validate("11144477735", DocumentType.CPF)
        assert tax_id.validate("11222333000181", "CNPJ")
        assert not tax_id.validate("11144477735", DocumentType.CNPJ)
        assert not tax_id.validate("11222333000181", DocumentType.CPF)

    def test_normalize_strips_punctuation(self):
        assert tax_id.normalize("111.444.777-35") == "11144477735"
        assert tax_id.normalize("11.222.333/0001-81") == "11222333000181"

    def test_generate_rejects_bad_base(self):
        with pytest.raises(ValueError):
            tax_id.generate_cpf("12345")
        with pytest.raises(ValueError):
            tax_id.generate_cnpj("abcdefghijkl")


class TestDocumentShape:

    @pytest.mark.parametrize("document", ["11144477735", "111.444.777-35", "11.222.333/0001-81"])
    def test_accepts_cpf_and_cnpj_lengths(self, document):
        assert tax_id.has_document_shape(document)

    @pytest.mark.parametrize("document", ["", "1234567890", "123456789012", "123456789012345678", "1114447773A"])
    def test_rejects_other_lengths_and_characters(self, document):
        assert not tax_id.has_document_shape(document)
