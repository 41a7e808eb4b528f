# server/agents/farm/__init__.py
"""
Farm bookkeeping package
"""

from .models import Farm, FarmCreate, IrrigationLog, IrrigationLogCreate, SavingsPeriod, SavingsReport
from .service import FarmService, get_farm_service

__all__ = [
    "Farm", "FarmCreate", "IrrigationLog", "IrrigationLogCreate",
    "SavingsPeriod", "SavingsReport", "FarmService", "get_farm_service"
]
