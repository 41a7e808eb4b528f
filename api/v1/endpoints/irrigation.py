# server/api/v1/endpoints/irrigation.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from agents.base import agent_registry
from agents.farm.models import IrrigationLogCreate
from agents.farm.service import FarmService, get_farm_service
from agents.irrigation.models import ET0Request, IrrigationRequest
from agents.reference.service import ReferenceDataService, get_reference_service

router = APIRouter()

def _irrigation_agent():
    irrigation_agent = agent_registry.get("irrigation")
    if not irrigation_agent:
        raise HTTPException(status_code=500, detail="Irrigation agent not available")
    return irrigation_agent

@router.get("/guidelines")
async def get_irrigation_guidelines(reference: ReferenceDataService = Depends(get_reference_service)):
    """Regional irrigation guidelines for Uzbekistan"""
    guidelines = reference.get_irrigation_guidelines()
    if guidelines is None:
        raise HTTPException(status_code=404, detail="Irrigation guidelines not available")
    return {"success": True, "data": guidelines}

@router.post("/et0")
async def calculate_et0(request: ET0Request):
    """Reference evapotranspiration (mm/day) for a single weather observation"""
    try:
        et0 = _irrigation_agent().service.compute_et0(request.weather)
        return {
            "success": True,
            "data": {
                "et0": et0,
                "unit": "mm/day",
                "method": "fao56_pm",
                "weather": request.weather.model_dump()
            }
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error calculating ET0: {str(e)}")

@router.post("/log", status_code=201)
async def log_irrigation(entry: IrrigationLogCreate, farms: FarmService = Depends(get_farm_service)):
    """Record an irrigation event"""
    log = farms.log_irrigation(entry)
    return {
        "success": True,
        "message": "Irrigation activity logged successfully",
        "data": log
    }

@router.get("/logs/{farm_id}")
async def get_irrigation_logs(
    farm_id: str,
    limit: int = Query(50, ge=1, le=500, description="Maximum number of logs"),
    offset: int = Query(0, ge=0, description="Number of logs to skip"),
    farms: FarmService = Depends(get_farm_service)
):
    """Irrigation logs for a farm, newest first"""
    return {"success": True, "data": farms.get_logs(farm_id, limit=limit, offset=offset)}

@router.get("/{crop_type}/{location}")
async def get_irrigation_recommendation(
    crop_type: str,
    location: str,
    area: Optional[float] = Query(None, gt=0, description="Field area in hectares"),
    soil_moisture: Optional[float] = Query(None, ge=0, le=100, description="Current volumetric soil moisture (%)"),
    soil_type: Optional[str] = Query(None, description="Soil type (sandy, loamy, clay, clay_loam)"),
    days_since_planting: Optional[int] = Query(None, ge=0, description="Days since planting"),
    recent_rainfall: float = Query(0.0, ge=0, description="Rainfall over the last day (mm)"),
    irrigation_efficiency: Optional[float] = Query(None, gt=0, le=1, description="Irrigation system efficiency (0-1]")
):
    """
    Get today's irrigation recommendation for a crop at a location

    Combines current weather with FAO-56 Penman-Monteith ET0, the crop's
    growth-stage coefficient and a soil water balance. Omitted field
    parameters fall back to the irrigation agent configuration.
    """
    try:
        irrigation_agent = _irrigation_agent()

        overrides = {
            "soil_type": soil_type.strip() if soil_type else None,
            "days_since_planting": days_since_planting,
            "area": area,
            "soil_moisture": soil_moisture,
            "irrigation_efficiency": irrigation_efficiency,
        }
        request = IrrigationRequest(
            location=location.strip(),
            crop_type=crop_type.strip(),
            recent_rainfall=recent_rainfall,
            **{key: value for key, value in overrides.items() if value is not None}
        )

        response = await irrigation_agent.execute(request)
        return response

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error processing irrigation request: {str(e)}")
