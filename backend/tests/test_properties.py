"""
Agro API - Testes de Propriedades
"""
import json
import uuid
from decimal import Decimal

import pytest
from httpx import AsyncClient

from conftest import API

AREA_SUM_ERROR = "The sum of arable area and vegetation area cannot exceed the total area"


def _payload(producer_id: str, **overrides) -> dict:
    payload = {
        "name": "Fazenda São João",
        "city": "Ribeirão Preto",
        "state": "SP",
        "total_area": 1000,
        "arable_area": 900,
        "vegetation_area": 100,
        "producer_id": producer_id,
    }
    payload.update(overrides)
    return payload


@pytest.mark.integration
class TestCreateProperty:

    @pytest.mark.asyncio
    async def test_area_rule_scenario(self, client: AsyncClient):
        """Produtor com CPF válido; 900 + 200 > 1000 é recusado; 900 + 100 é aceito."""
        producer = await client.post(f"{API}/producers", json={
            "document": "11144477735", "document_type": "CPF", "name": "João Silva",
        })
        assert producer.status_code == 201
        producer_id = producer.json()["id"]

        rejected = await client.post(f"{API}/properties", json=_payload(producer_id, vegetation_area=200))
        assert rejected.status_code == 400
        assert rejected.json()["error"] == AREA_SUM_ERROR

        accepted = await client.post(f"{API}/properties", json=_payload(producer_id, vegetation_area=100))
        assert accepted.status_code == 201
        data = accepted.json()
        assert data["total_area"] == 1000
        assert data["producer"]["id"] == producer_id
        assert data["seasons"] == []
        assert data["cultures"] == []

    @pytest.mark.asyncio
    async def test_negative_area(self, client: AsyncClient, make_producer):
        producer = await make_producer()
        response = await client.post(
            f"{API}/properties", json=_payload(producer["id"], arable_area=-1)
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Area values must be positive"

    @pytest.mark.asyncio
    async def test_decimal_areas(self, client: AsyncClient, make_producer):
        producer = await make_producer()
        response = await client.post(f"{API}/properties", json=_payload(
            producer["id"], total_area=0.3, arable_area=0.1, vegetation_area=0.2,
        ))
        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_areas_checked_after_rounding_to_column_scale(self, client: AsyncClient, make_producer):
        """1.004 / 0.505 / 0.499 seriam gravados como 1.00 / 0.51 / 0.50."""
        producer = await make_producer()
        response = await client.post(f"{API}/properties", json=_payload(
            producer["id"], total_area=1.004, arable_area=0.505, vegetation_area=0.499,
        ))
        assert response.status_code == 400
        assert response.json()["error"] == AREA_SUM_ERROR

    @pytest.mark.asyncio
    async def test_stored_areas_are_rounded_and_consistent(self, client: AsyncClient, make_producer):
        producer = await make_producer()
        created = await client.post(f"{API}/properties", json=_payload(
            producer["id"], total_area=10.005, arable_area=5.004, vegetation_area=5.005,
        ))
        assert created.status_code == 201

        stored = (await client.get(f"{API}/properties/{created.json()['id']}")).json()
        total, arable, vegetation = (
            Decimal(str(stored[field])) for field in ("total_area", "arable_area", "vegetation_area")
        )
        assert (total, arable, vegetation) == (Decimal("10.01"), Decimal("5.00"), Decimal("5.01"))
        assert arable + vegetation <= total

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    async def test_non_finite_area_is_a_validation_error(self, client: AsyncClient, make_producer, value):
        producer = await make_producer()
        # json.dumps emite NaN/Infinity literais, aceitos pelo parser do Python
        body = json.dumps(_payload(producer["id"], total_area=value))
        response = await client.post(
            f"{API}/properties", content=body, headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    @pytest.mark.asyncio
    async def test_unknown_producer(self, client: AsyncClient):
        response = await client.post(f"{API}/properties", json=_payload(str(uuid.uuid4())))
        assert response.status_code == 400
        assert response.json()["error"] == "Producer not found"

    @pytest.mark.asyncio
    async def test_state_must_have_two_letters(self, client: AsyncClient, make_producer):
        producer = await make_producer()
        response = await client.post(f"{API}/properties", json=_payload(producer["id"], state="SPX"))
        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"


@pytest.mark.integration
class TestUpdateProperty:

    @pytest.mark.asyncio
    async def test_partial_update_uses_persisted_areas(self, client: AsyncClient, make_property):
        prop = await make_property(total_area=1000, arable_area=600, vegetation_area=300)

        response = await client.put(f"{API}/properties/{prop['id']}", json={"arable_area": 800})
        assert response.status_code == 400
        assert response.json()["error"] == AREA_SUM_ERROR

        # Registro inalterado após a recusa
        stored = (await client.get(f"{API}/properties/{prop['id']}")).json()
        assert stored["arable_area"] == 600
        assert stored["arable_area"] + stored["vegetation_area"] <= stored["total_area"]

    @pytest.mark.asyncio
    async def test_valid_partial_update(self, client: AsyncClient, make_property):
        prop = await make_property(total_area=1000, arable_area=600, vegetation_area=300)

        response = await client.put(f"{API}/properties/{prop['id']}", json={"arable_area": 700, "city": "Sorriso"})
        assert response.status_code == 200
        data = response.json()
        assert data["arable_area"] == 700
        assert data["vegetation_area"] == 300
        assert data["city"] == "Sorriso"

    @pytest.mark.asyncio
    async def test_shrinking_total(self, client: AsyncClient, make_property):
        prop = await make_property(total_area=1000, arable_area=600, vegetation_area=300)
        response = await client.put(f"{API}/properties/{prop['id']}", json={"total_area": 500})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_partial_update_with_nan_area(self, client: AsyncClient, make_property):
        prop = await make_property()
        response = await client.put(
            f"{API}/properties/{prop['id']}",
            content='{"vegetation_area": NaN}',
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    @pytest.mark.asyncio
    async def test_move_to_unknown_producer(self, client: AsyncClient, make_property):
        prop = await make_property()
        response = await client.put(
            f"{API}/properties/{prop['id']}", json={"producer_id": str(uuid.uuid4())}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Producer not found"

    @pytest.mark.asyncio
    async def test_update_missing(self, client: AsyncClient):
        response = await client.put(f"{API}/properties/{uuid.uuid4()}", json={"name": "X"})
        assert response.status_code == 404
        assert response.json()["error"] == "Property not found"


@pytest.mark.integration
class TestReadProperty:

    @pytest.mark.asyncio
    async def test_detail_projection(
        self, client: AsyncClient, make_property, make_season, make_culture_type, make_crop
    ):
        prop = await make_property()
        season = await make_season(property_id=prop["id"])
        soja = await make_culture_type(name="soja", title="Soja")
        await make_crop(season_id=season["id"], culture_type_id=soja["id"], planted_area=120.5)

        data = (await client.get(f"{API}/properties/{prop['id']}")).json()
        assert data["producer"]["id"] == prop["producer_id"]
        assert len(data["seasons"]) == 1
        crop = data["seasons"][0]["crops"][0]
        assert crop["planted_area"] == 120.5
        assert crop["culture_type"]["name"] == "soja"

    @pytest.mark.asyncio
    async def test_list_filters(self, client: AsyncClient, make_property):
        await make_property(name="Fazenda Norte", city="Cuiabá", state="MT")
        await make_property(name="Fazenda Sul", city="Londrina", state="PR")

        response = await client.get(
            f"{API}/properties", params={"filters": json.dumps({"state": "mt"})}
        )
        items = response.json()["items"]
        assert [item["name"] for item in items] == ["Fazenda Norte"]

        response = await client.get(
            f"{API}/properties", params={"filters": json.dumps({"city": "londr"})}
        )
        assert [item["name"] for item in response.json()["items"]] == ["Fazenda Sul"]

    @pytest.mark.asyncio
    async def test_list_by_producer(self, client: AsyncClient, make_producer, make_property, make_season):
        producer = await make_producer()
        older = await make_property(producer_id=producer["id"], name="Antiga")
        newer = await make_property(producer_id=producer["id"], name="Nova")
        await make_property(name="De outro produtor")
        await make_season(property_id=older["id"], year=2023)
        await make_season(property_id=older["id"], year=2024)

        response = await client.get(f"{API}/properties/producer/{producer['id']}")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert [item["id"] for item in data["items"]] == [newer["id"], older["id"]]
        assert data["items"][1]["seasons_count"] == 2
        assert data["items"][0]["seasons_count"] == 0

    @pytest.mark.asyncio
    async def test_list_by_producer_applies_filters(self, client: AsyncClient, make_producer, make_property):
        producer = await make_producer()
        await make_property(producer_id=producer["id"], name="Fazenda Norte", state="MT")
        await make_property(producer_id=producer["id"], name="Fazenda Sul", state="PR")
        await make_property(name="Fazenda Norte", state="MT")

        response = await client.get(
            f"{API}/properties/producer/{producer['id']}",
            params={"filters": json.dumps({"name": "norte"})},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert [item["name"] for item in data["items"]] == ["Fazenda Norte"]
        assert data["items"][0]["producer_id"] == producer["id"]

    @pytest.mark.asyncio
    async def test_list_by_unknown_producer(self, client: AsyncClient):
        response = await client.get(f"{API}/properties/producer/{uuid.uuid4()}")
        assert response.status_code == 400
        assert response.json()["error"] == "Producer not found"


@pytest.mark.integration
class TestAttachCulture:

    @pytest.mark.asyncio
    async def test_attach_and_reject_duplicate(self, client: AsyncClient, make_property, make_culture_type):
        prop = await make_property()
        milho = await make_culture_type(name="milho")

        response = await client.post(
            f"{API}/properties/{prop['id']}/cultures", json={"culture_type_id": milho["id"]}
        )
        assert response.status_code == 201
        assert [c["name"] for c in response.json()["cultures"]] == ["milho"]

        again = await client.post(
            f"{API}/properties/{prop['id']}/cultures", json={"culture_type_id": milho["id"]}
        )
        assert again.status_code == 400
        assert again.json()["error"] == "Culture type is already attached to this property"

    @pytest.mark.asyncio
    async def test_attach_unknown_culture_type(self, client: AsyncClient, make_property):
        prop = await make_property()
        response = await client.post(
            f"{API}/properties/{prop['id']}/cultures", json={"culture_type_id": str(uuid.uuid4())}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Culture type not found"

    @pytest.mark.asyncio
    async def test_attach_to_missing_property(self, client: AsyncClient, make_culture_type):
        culture = await make_culture_type()
        response = await client.post(
            f"{API}/properties/{uuid.uuid4()}/cultures", json={"culture_type_id": culture["id"]}
        )
        assert response.status_code == 404


@pytest.mark.integration
class TestDeleteProperty:

    @pytest.mark.asyncio
    async def test_delete_cascades_to_seasons_and_crops(self, client: AsyncClient, make_property, make_season, make_crop):
        prop = await make_property()
        season = await make_season(property_id=prop["id"])
        crop = await make_crop(season_id=season["id"])

        response = await client.delete(f"{API}/properties/{prop['id']}")
        assert response.status_code == 200

        assert (await client.get(f"{API}/properties/{prop['id']}")).status_code == 404
        assert (await client.get(f"{API}/seasons/{season['id']}")).status_code == 404
        assert (await client.get(f"{API}/crops/{crop['id']}")).status_code == 404
