"""
Agro API - Dados de exemplo

Apaga e recria: tipos de cultura, produtores (CPF/CNPJ válidos),
propriedades, safras dos últimos 3 anos e cultivos.

Uso:
    python -m agro_api.seed
"""
import asyncio
import random
from datetime import datetime, timezone

from sqlalchemy import delete, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from agro_api.core.database import async_session_maker, init_db
from agro_api.core.logging_config import get_logger, setup_logging
from agro_api.models.database import (
    Crop, CultureType, Producer, Property, Season, property_cultures,
)
from agro_api.services import tax_id

log = get_logger("agro_api.seed")


CULTURE_TYPES = [
    # Grãos
    ("Soja", "soja"),
    ("Milho", "milho"),
    ("Arroz", "arroz"),
    ("Trigo", "trigo"),
    ("Feijão", "feijao"),
    ("Sorgo", "sorgo"),
    # Fibras
    ("Algodão", "algodao"),
    # Culturas permanentes
    ("Café", "cafe"),
    ("Cana-de-açúcar", "cana-de-acucar"),
    ("Eucalipto", "eucalipto"),
    ("Laranja", "laranja"),
    ("Banana", "banana"),
    # Outras
    ("Mandioca", "mandioca"),
    ("Batata", "batata"),
    ("Tomate", "tomate"),
]

# (nome, tipo, base do documento sem dígitos verificadores)
PRODUCERS = [
    ("João Silva Santos", "CPF", "111444777"),
    ("Maria Oliveira Costa", "CPF", "222333444"),
    ("Carlos Eduardo Ferreira", "CPF", "333222111"),
    ("Fazendas Reunidas Ltda", "CNPJ", "112223330001"),
    ("Agropecuária Brasil S.A.", "CNPJ", "223334440001"),
    ("Ana Paula Rodrigues", "CPF", "444555666"),
    ("Pedro Henrique Lima", "CPF", "555666777"),
    ("Cooperativa Agrícola Central", "CNPJ", "334445550001"),
]

# (índice do produtor, nome, cidade, UF, total, agricultável, vegetação)
PROPERTIES = [
    (0, "Fazenda Santa Rita", "Ribeirão Preto", "SP", 500, 350, 150),
    (0, "Sítio Boa Esperança", "Campinas", "SP", 150, 100, 50),
    (1, "Fazenda Três Corações", "Uberlândia", "MG", 800, 600, 200),
    (2, "Fazenda Cerrado Verde", "Brasília", "DF", 1200, 900, 300),
    (2, "Propriedade São João", "Goiânia", "GO", 300, 200, 100),
    (3, "Complexo Agro Norte", "Cuiabá", "MT", 2500, 2000, 500),
    (3, "Fazenda Dourada", "Campo Grande", "MS", 1800, 1400, 400),
    (4, "Agro Industrial Sul", "Londrina", "PR", 3000, 2200, 800),
    (4, "Fazenda Pioneira", "Cascavel", "PR", 1500, 1100, 400),
    (5, "Sítio Flores do Campo", "Belo Horizonte", "MG", 200, 140, 60),
    (6, "Fazenda Horizonte", "Palmas", "TO", 600, 450, 150),
    (7, "Unidade Cooperativa A", "Dourados", "MS", 2200, 1800, 400),
    (7, "Unidade Cooperativa B", "Rondonópolis", "MT", 1900, 1500, 400),
]

# Combinações de cultivo por safra e seus pesos
CROP_COMBINATIONS = [
    (("soja", "milho"), 0.35),
    (("soja",), 0.18),
    (("milho",), 0.12),
    (("cafe",), 0.08),
    (("cana-de-acucar",), 0.08),
    (("soja", "feijao"), 0.05),
    (("algodao",), 0.04),
    (("arroz",), 0.03),
    (("eucalipto",), 0.02),
    (("milho", "feijao"), 0.02),
    (("mandioca",), 0.015),
    (("trigo",), 0.01),
    (("sorgo",), 0.005),
]

SEASONS_PER_PROPERTY = 3
SEASON_WITH_CROPS_CHANCE = 0.9


def build_document(kind: str, base: str) -> str:
    return tax_id.generate_cpf(base) if kind == "CPF" else tax_id.generate_cnpj(base)


def pick_combination(rng: random.Random) -> tuple:
    cultures, weights = zip(*CROP_COMBINATIONS)
    return rng.choices(cultures, weights=weights, k=1)[0]


async def clear(db: AsyncSession) -> None:
    """Remove tudo, dos filhos para os pais."""
    await db.execute(delete(Crop))
    await db.execute(delete(Season))
    await db.execute(delete(property_cultures))
    await db.execute(delete(CultureType))
    await db.execute(delete(Property))
    await db.execute(delete(Producer))


async def seed(db: AsyncSession, rng: random.Random = None, current_year: int = None) -> dict:
    """
    Popula o banco e retorna as contagens por tabela.
    """
    rng = rng or random.Random(42)
    current_year = current_year or datetime.now(timezone.utc).year

    await clear(db)
    log.info("seed_cleared")

    culture_types = {name: CultureType(title=title, name=name) for title, name in CULTURE_TYPES}
    db.add_all(culture_types.values())

    producers = [
        Producer(name=name, document_type=kind, document=build_document(kind, base))
        for name, kind, base in PRODUCERS
    ]
    db.add_all(producers)
    await db.flush()

    properties = []
    for owner, name, city, state, total, arable, vegetation in PROPERTIES:
        prop = Property(
            producer_id=producers[owner].id,
            name=name,
            city=city,
            state=state,
            total_area=total,
            arable_area=arable,
            vegetation_area=vegetation,
        )
        properties.append(prop)
    db.add_all(properties)
    await db.flush()

    for prop in properties:
        planted = set()
        for year in range(current_year - SEASONS_PER_PROPERTY + 1, current_year + 1):
            season = Season(name=f"Safra {year}", year=year, property_id=prop.id)
            db.add(season)
            await db.flush()

            if rng.random() > SEASON_WITH_CROPS_CHANCE:
                continue

            cultures = pick_combination(rng)
            # Entre 20% e 80% da área agricultável dividida pelas culturas
            max_area = float(prop.arable_area) / len(cultures)
            for culture_name in cultures:
                db.add(Crop(
                    season_id=season.id,
                    culture_type_id=culture_types[culture_name].id,
                    planted_area=round(max_area * rng.uniform(0.2, 0.8), 2),
                ))
                planted.add(culture_types[culture_name].id)

        if planted:
            await db.flush()
            await db.execute(
                insert(property_cultures),
                [{"property_id": prop.id, "culture_type_id": ct_id} for ct_id in sorted(planted, key=str)],
            )

    await db.flush()

    counts = {}
    for model in (CultureType, Producer, Property, Season, Crop):
        result = await db.execute(select(func.count()).select_from(model))
        counts[model.__tablename__] = result.scalar_one()

    log.info("seed_completed", **counts)
    return counts


async def main() -> None:
    setup_logging()
    await init_db()

    async with async_session_maker() as db:
        await seed(db)
        await db.commit()


if __name__ == "__main__":
    asyncio.run(main())
