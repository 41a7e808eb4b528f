# server/api/v1/endpoints/health.py
from fastapi import APIRouter
from datetime import datetime

from agents.base import agent_registry
from core.config import get_settings

router = APIRouter()

@router.get("/")
async def health_check():
    """Basic health check endpoint"""
    settings = get_settings()
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "service": settings.api_title,
        "version": settings.api_version,
        "agents": await agent_registry.health_check_all()
    }

@router.get("/agents")
async def list_agents():
    """Registered agents with their configuration"""
    return {
        "registered": agent_registry.list_agents(),
        "agents": agent_registry.get_agents_info()
    }
