# server/api/v1/endpoints/regional.py
from fastapi import APIRouter, Depends, HTTPException

from agents.reference.service import ReferenceDataService, get_reference_service

router = APIRouter()

@router.get("/climate/uzbekistan")
async def get_uzbekistan_climate(reference: ReferenceDataService = Depends(get_reference_service)):
    climate = reference.get_climate()
    if climate is None:
        raise HTTPException(status_code=404, detail="Climate data not available")
    return {"success": True, "data": climate}

@router.get("/database/stats")
async def get_database_stats(reference: ReferenceDataService = Depends(get_reference_service)):
    return {"success": True, "data": reference.get_database_stats()}
