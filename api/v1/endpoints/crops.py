# server/api/v1/endpoints/crops.py
from fastapi import APIRouter, Depends, HTTPException, Query

from agents.reference.service import ReferenceDataService, get_reference_service

router = APIRouter()

@router.get("")
async def list_crops(reference: ReferenceDataService = Depends(get_reference_service)):
    """Crops supported by the reference database"""
    return {"success": True, "data": reference.get_available_crops()}

@router.get("/{crop_type}")
async def get_crop(crop_type: str, reference: ReferenceDataService = Depends(get_reference_service)):
    """Coefficient and stage tables; unknown crops get the generic profile"""
    return {"success": True, "data": reference.get_crop_details(crop_type)}

@router.get("/{crop_type}/coefficients/{growth_stage}")
async def get_crop_coefficient(crop_type: str, growth_stage: str,
                               reference: ReferenceDataService = Depends(get_reference_service)):
    coefficient = reference.get_crop_coefficient(crop_type, growth_stage)
    if coefficient is None:
        raise HTTPException(status_code=404, detail=f"No coefficient for {crop_type} at stage {growth_stage}")
    return {"success": True, "data": {"crop_type": crop_type, "growth_stage": growth_stage, **coefficient}}

@router.get("/{crop_type}/water-requirements")
async def get_water_requirements(crop_type: str, reference: ReferenceDataService = Depends(get_reference_service)):
    requirements = reference.get_water_requirements(crop_type)
    if requirements is None:
        raise HTTPException(status_code=404, detail=f"Crop not found: {crop_type}")
    return {"success": True, "data": requirements}

@router.get("/{crop_type}/growing-season")
async def get_growing_season(crop_type: str, reference: ReferenceDataService = Depends(get_reference_service)):
    season = reference.get_growing_season(crop_type)
    if season is None:
        raise HTTPException(status_code=404, detail=f"Crop not found: {crop_type}")
    return {
        "success": True,
        "data": {
            "growing_season": season,
            "optimal_planting_dates": reference.get_optimal_planting_dates(crop_type),
            "critical_periods": reference.get_critical_irrigation_periods(crop_type)
        }
    }

@router.get("/{crop_type}/recommendation")
async def get_crop_recommendation(
    crop_type: str,
    soil_type: str = Query("loamy", description="Soil type"),
    area: float = Query(1.0, gt=0, description="Area in hectares"),
    reference: ReferenceDataService = Depends(get_reference_service)
):
    """Seasonal water budget and agronomic advice for a crop on a soil"""
    recommendation = reference.get_crop_recommendation(crop_type, soil_type, area)
    if recommendation is None:
        raise HTTPException(status_code=404, detail=f"Crop not found: {crop_type}")
    return {"success": True, "data": recommendation}

@router.get("/{crop_type}/schedule")
async def get_irrigation_schedule(crop_type: str, reference: ReferenceDataService = Depends(get_reference_service)):
    """Typical irrigation method, count and interval with expected yield"""
    schedule = reference.get_irrigation_schedule(crop_type)
    if schedule is None:
        raise HTTPException(status_code=404, detail=f"Crop not found: {crop_type}")
    return {
        "success": True,
        "data": {
            "irrigation_schedule": schedule,
            "yield_factors": reference.get_yield_factors(crop_type)
        }
    }
