# server/agents/farm/service.py
"""
Farm service - in-memory farms, irrigation logs and water savings reports
"""
import logging
import uuid
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional

from agents.farm.models import (
    PERIOD_DAYS, EnvironmentalImpact, Farm, FarmCreate, IrrigationLog, IrrigationLogCreate,
    LogPage, Projection, Savings, SavingsPeriod, SavingsReport, SystemUsage
)
from core.config import get_settings
from core.exceptions import FarmNotFoundError
from core.utils import round_half_up

logger = logging.getLogger(__name__)

CO2_KG_PER_LITER = 0.0004
ENERGY_KWH_PER_LITER = 0.001
HOUSEHOLD_DAILY_LITERS = 150

SAMPLE_FARMS = [
    {
        "id": "farm1",
        "name": "Karimov Cotton Farm",
        "location": "Tashkent",
        "crop_type": "cotton",
        "area": 50,
        "soil_type": "loamy",
        "current_efficiency": 75,
        "traditional_efficiency": 60,
        "water_cost_per_liter": 0.003,
        "monthly_water_usage": 2500,
    },
    {
        "id": "farm2",
        "name": "Fergana Valley Wheat Cooperative",
        "location": "Fergana",
        "crop_type": "wheat",
        "area": 25,
        "soil_type": "clay_loam",
        "current_efficiency": 85,
        "traditional_efficiency": 65,
        "water_cost_per_liter": 0.0025,
        "monthly_water_usage": 5000,
    },
    {
        "id": "farm3",
        "name": "Khorezm Rice Fields",
        "location": "Urgench",
        "crop_type": "rice",
        "area": 15,
        "soil_type": "clay",
        "current_efficiency": 70,
        "traditional_efficiency": 55,
        "water_cost_per_liter": 0.002,
        "monthly_water_usage": 8000,
    },
]

class FarmService:
    """In-memory bookkeeping; state is lost on restart"""

    def __init__(self, config: Dict[str, Any], clock: Callable[[], datetime] = datetime.now):
        self.config = config
        self._clock = clock
        self._farms: Dict[str, Farm] = {}
        self._logs: List[IrrigationLog] = []

        if config.get("seed_sample_farms", True):
            self.seed_sample_farms()

    def seed_sample_farms(self) -> None:
        now = self._clock()
        for sample in SAMPLE_FARMS:
            self._farms[sample["id"]] = Farm(created_at=now, **sample)
        logger.info(f"Seeded {len(SAMPLE_FARMS)} sample farms")

    def reset(self) -> None:
        self._farms.clear()
        self._logs.clear()
        if self.config.get("seed_sample_farms", True):
            self.seed_sample_farms()

    # ---------- Farms ----------

    def list_farms(self) -> List[Farm]:
        return list(self._farms.values())

    def get_farm(self, farm_id: str) -> Farm:
        farm = self._farms.get(farm_id)
        if farm is None:
            raise FarmNotFoundError(f"Farm not found: {farm_id}")
        return farm

    def create_farm(self, data: FarmCreate) -> Farm:
        values = data.model_dump()
        # Explicit efficiencies/costs win; unset ones take the configured defaults
        if "current_efficiency" not in data.model_fields_set:
            values["current_efficiency"] = self.config.get("default_current_efficiency", 75.0)
        if "traditional_efficiency" not in data.model_fields_set:
            values["traditional_efficiency"] = self.config.get("default_traditional_efficiency", 60.0)
        if "water_cost_per_liter" not in data.model_fields_set:
            values["water_cost_per_liter"] = self.config.get("default_water_cost_per_liter", 0.003)

        farm = Farm(id=f"farm-{uuid.uuid4().hex[:12]}", created_at=self._clock(), **values)
        self._farms[farm.id] = farm
        logger.info(f"Created farm {farm.id} ({farm.name})")
        return farm

    # ---------- Irrigation logs ----------

    def log_irrigation(self, data: IrrigationLogCreate, timestamp: Optional[datetime] = None) -> IrrigationLog:
        now = self._clock()
        entry = IrrigationLog(
            id=uuid.uuid4().hex,
            timestamp=timestamp or now,
            created_at=now,
            **data.model_dump()
        )
        self._logs.append(entry)

        farm = self._farms.get(data.farm_id)
        if farm is not None:
            self._farms[farm.id] = farm.model_copy(update={
                "last_irrigation": entry.timestamp,
                "total_water_used": farm.total_water_used + entry.amount,
            })
        else:
            logger.warning(f"Irrigation logged for unknown farm {data.farm_id}")

        return entry

    def get_logs(self, farm_id: str, limit: int = 50, offset: int = 0) -> LogPage:
        farm_logs = sorted(
            (log for log in self._logs if log.farm_id == farm_id),
            key=lambda log: log.timestamp,
            reverse=True
        )
        return LogPage(
            logs=farm_logs[offset:offset + limit],
            total=len(farm_logs),
            limit=limit,
            offset=offset,
        )

    # ---------- Savings ----------

    def calculate_savings(self, farm_id: str, period: SavingsPeriod = SavingsPeriod.MONTHLY) -> SavingsReport:
        """
        Compare logged water use with what a traditional system would have needed.

        A traditional system delivering the same water to the crop needs
        actual * current_efficiency / traditional_efficiency liters.
        """
        farm = self.get_farm(farm_id)
        period = SavingsPeriod(period)
        days = PERIOD_DAYS[period]
        start = self._clock() - timedelta(days=days)

        actual_water = sum(
            log.amount for log in self._logs
            if log.farm_id == farm_id and log.timestamp >= start
        )
        actual_cost = actual_water * farm.water_cost_per_liter

        traditional_water = actual_water * farm.current_efficiency / farm.traditional_efficiency
        traditional_cost = traditional_water * farm.water_cost_per_liter

        water_saved = traditional_water - actual_water
        cost_saved = traditional_cost - actual_cost
        percentage = water_saved / traditional_water * 100 if traditional_water > 0 else 0.0

        def money(value: float) -> float:
            return round_half_up(value, 2)

        def project(target_days: int) -> Projection:
            scale = target_days / days
            return Projection(
                water_saved=int(round_half_up(water_saved * scale)),
                cost_saved=money(cost_saved * scale),
            )

        return SavingsReport(
            farm_id=farm_id,
            farm_name=farm.name,
            period=period,
            current_system=SystemUsage(
                water_used=int(round_half_up(actual_water)),
                cost=money(actual_cost),
                efficiency=farm.current_efficiency,
            ),
            traditional_system=SystemUsage(
                water_used=int(round_half_up(traditional_water)),
                cost=money(traditional_cost),
                efficiency=farm.traditional_efficiency,
            ),
            savings=Savings(
                water_saved=int(round_half_up(water_saved)),
                cost_saved=money(cost_saved),
                efficiency_gain=int(round_half_up(farm.current_efficiency - farm.traditional_efficiency)),
                percentage_saved=int(round_half_up(percentage)),
            ),
            environmental_impact=EnvironmentalImpact(
                co2_saved=money(water_saved * CO2_KG_PER_LITER),
                energy_saved=money(water_saved * ENERGY_KWH_PER_LITER),
                households_equivalent=int(round_half_up(water_saved / HOUSEHOLD_DAILY_LITERS)),
            ),
            projections={
                "monthly": project(PERIOD_DAYS[SavingsPeriod.MONTHLY]),
                "yearly": project(PERIOD_DAYS[SavingsPeriod.YEARLY]),
            },
            timestamp=self._clock().isoformat(),
        )

@lru_cache()
def get_farm_service() -> FarmService:
    """Process-wide farm store"""
    return FarmService(get_settings().get_agent_config("farm"))
