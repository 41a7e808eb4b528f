# server/agents/reference/__init__.py
"""
Crop and soil reference data package
"""

from .models import CropProfile, GrowthStage, ReferenceData, SoilProfile
from .service import ReferenceDataService, get_reference_data, load_reference_data

__all__ = [
    "CropProfile", "GrowthStage", "ReferenceData", "SoilProfile",
    "ReferenceDataService", "get_reference_data", "load_reference_data",
]
