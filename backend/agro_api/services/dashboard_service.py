"""
Agro API - Dashboard

Estatísticas agregadas de todas as propriedades e cultivos, usadas pelos
gráficos do frontend. Sem filtros e sem paginação.
"""
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from agro_api.core.logging_config import get_logger
from agro_api.models.database import Crop, CultureType, Property

log = get_logger(__name__)

ARABLE_LABEL = "Área Agricultável"
VEGETATION_LABEL = "Área de Vegetação"
UNKNOWN_CULTURE = "Unknown"


async def get_dashboard_stats(db: AsyncSession) -> dict:
    """
    Monta o payload do dashboard.

    Returns:
        Dict com total_farms, total_hectares e charts
        (farms_by_state, farms_by_culture, land_use)
    """
    totals = await db.execute(
        select(
            func.count(Property.id),
            func.coalesce(func.sum(Property.total_area), 0),
            func.coalesce(func.sum(Property.arable_area), 0),
            func.coalesce(func.sum(Property.vegetation_area), 0),
        )
    )
    total_farms, total_hectares, arable_sum, vegetation_sum = totals.one()

    state_count = func.count(Property.id).label("count")
    by_state = await db.execute(
        select(Property.state, state_count)
        .group_by(Property.state)
        .order_by(state_count.desc(), Property.state.asc())
    )

    # LEFT JOIN: cultivo com tipo removido aparece como "Unknown"
    crop_count = func.count(Crop.id).label("count")
    by_culture = await db.execute(
        select(CultureType.name, crop_count)
        .select_from(Crop)
        .outerjoin(CultureType, Crop.culture_type_id == CultureType.id)
        .group_by(CultureType.name)
        .order_by(crop_count.desc(), CultureType.name.asc())
    )

    stats = {
        "total_farms": total_farms or 0,
        "total_hectares": float(total_hectares or 0),
        "charts": {
            "farms_by_state": [
                {"state": state, "count": count} for state, count in by_state.all()
            ],
            "farms_by_culture": [
                {"culture": name or UNKNOWN_CULTURE, "count": count} for name, count in by_culture.all()
            ],
            "land_use": [
                {"type": ARABLE_LABEL, "value": float(arable_sum or 0)},
                {"type": VEGETATION_LABEL, "value": float(vegetation_sum or 0)},
            ],
        },
    }

    log.debug("dashboard_computed", total_farms=stats["total_farms"])
    return stats
