# server/api/v1/endpoints/farms.py
from fastapi import APIRouter, Depends, HTTPException, Query

from agents.farm.models import FarmCreate, SavingsPeriod
from agents.farm.service import FarmService, get_farm_service
from core.exceptions import FarmNotFoundError

router = APIRouter()

@router.get("/farms")
async def list_farms(farms: FarmService = Depends(get_farm_service)):
    return {"success": True, "data": farms.list_farms()}

@router.post("/farms", status_code=201)
async def create_farm(farm: FarmCreate, farms: FarmService = Depends(get_farm_service)):
    created = farms.create_farm(farm)
    return {"success": True, "message": "Farm created successfully", "data": created}

@router.get("/savings/{farm_id}")
async def get_savings(
    farm_id: str,
    period: SavingsPeriod = Query(SavingsPeriod.MONTHLY, description="weekly, monthly or yearly"),
    farms: FarmService = Depends(get_farm_service)
):
    """Water, cost and environmental savings against a traditional system"""
    try:
        return {"success": True, "data": farms.calculate_savings(farm_id, period)}
    except FarmNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
