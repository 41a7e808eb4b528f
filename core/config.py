# server/core/config.py
"""
Configuration management for backend services
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional, Dict, Any
from functools import lru_cache
from enum import Enum
import logging
from dotenv import load_dotenv
load_dotenv()

logger = logging.getLogger(__name__)

class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"

class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

class Settings(BaseSettings):
    """Application settings with validation"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Environment
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True

    # API Configuration
    api_title: str = "Uzbekistan Irrigation Advisor"
    api_version: str = "1.0.0"
    api_host: str = "0.0.0.0"
    api_port: int = 5000

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    cors_allow_credentials: bool = True
    cors_allow_methods: List[str] = ["*"]
    cors_allow_headers: List[str] = ["*"]

    # External API Keys
    openweather_api_key: Optional[str] = None

    # Cache Configuration
    cache_enabled: bool = True
    cache_default_ttl: int = 900  # 15 minutes

    # Reference data (crop/soil database); None means the bundled JSON file
    crop_database_path: Optional[str] = None

    # Agent Configurations
    irrigation_config: Dict[str, Any] = {
        "default_soil_type": "loamy",
        "default_days_since_planting": 60,
        "default_area_ha": 1.0,
        "default_soil_moisture": 50.0,
        "default_irrigation_efficiency": 0.85,
        # Used when the weather collaborator cannot be reached
        "fallback_weather": {
            "temperature": 25.0,
            "humidity": 60.0,
            "wind_speed": 10.0,
            "pressure": 101.3,
            "solar_radiation": 18.5,
            "precipitation": 0.0,
        },
    }

    weather_config: Dict[str, Any] = {
        "base_url": "https://api.openweathermap.org/data/2.5",
        "cache_ttl_seconds": 600,
        "cache_max_entries": 1000,
        "request_timeout_seconds": 10,
        "min_request_interval_seconds": 1.0,
        "rate_limits": {
            "current": {"requests": 60, "window_seconds": 60},
            "forecast": {"requests": 60, "window_seconds": 60},
        },
        "forecast_days": 7,
    }

    farm_config: Dict[str, Any] = {
        "seed_sample_farms": True,
        "default_current_efficiency": 75.0,
        "default_traditional_efficiency": 60.0,
        "default_water_cost_per_liter": 0.003,
    }

    def get_agent_config(self, agent_name: str) -> Dict[str, Any]:
        """Get configuration for specific agent"""
        config_map = {
            "irrigation": self.irrigation_config,
            "weather": self.weather_config,
            "farm": self.farm_config,
        }
        return config_map.get(agent_name, {})

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()

# Validation functions
def validate_api_keys(settings: Settings) -> None:
    """Validate required API keys based on environment"""
    required_keys = []

    if not settings.openweather_api_key:
        required_keys.append("OPENWEATHER_API_KEY")

    if required_keys and settings.is_production:
        raise ValueError(f"Missing required API keys in production: {', '.join(required_keys)}")

    if required_keys:
        logger.warning(f"Missing API keys ({settings.environment.value} mode): {', '.join(required_keys)}")
        logger.warning("The weather service will use mock data instead of real API data")
    else:
        logger.info("All required API keys are present")
