# server/api/app.py
"""
FastAPI application factory
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from api.v1.router import api_router
from core.config import get_settings

def create_app(lifespan=None) -> FastAPI:
    """Create FastAPI application"""
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="Daily irrigation advice for cotton, wheat and rice in Uzbekistan",
        debug=settings.debug,
        lifespan=lifespan
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Include routers
    app.include_router(api_router, prefix="/api")

    @app.get("/")
    async def root():
        return {
            "service": settings.api_title,
            "version": settings.api_version,
            "status": "healthy",
            "endpoints": {
                "health": "/api/health/",
                "irrigation": "/api/irrigation/{crop_type}/{location}",
                "weather": "/api/weather/{location}",
                "crops": "/api/crops",
                "farms": "/api/farms",
                "savings": "/api/savings/{farm_id}"
            }
        }

    return app
