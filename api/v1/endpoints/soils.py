# server/api/v1/endpoints/soils.py
from fastapi import APIRouter, Depends, HTTPException

from agents.reference.service import ReferenceDataService, get_reference_service

router = APIRouter()

@router.get("")
async def list_soil_types(reference: ReferenceDataService = Depends(get_reference_service)):
    return {"success": True, "data": reference.get_available_soil_types()}

@router.get("/{soil_type}")
async def get_soil_type(soil_type: str, reference: ReferenceDataService = Depends(get_reference_service)):
    """Hydraulic properties and crop suitability of a soil"""
    soil = reference.get_soil_type_info(soil_type)
    if soil is None:
        raise HTTPException(status_code=404, detail=f"Soil type not found: {soil_type}")
    return {
        "success": True,
        "data": {**soil.model_dump(), "available_water_capacity": soil.available_water_capacity}
    }
