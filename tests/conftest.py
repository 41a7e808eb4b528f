import os

# Keep tests offline and independent of any local .env
os.environ["OPENWEATHER_API_KEY"] = ""
os.environ["ENVIRONMENT"] = "testing"

import pytest

from agents.irrigation.models import WeatherObservation
from agents.reference.models import ReferenceData
from agents.reference.service import load_reference_data


@pytest.fixture(scope="session")
def reference():
    """The bundled Uzbekistan crop/soil database"""
    return load_reference_data()


@pytest.fixture
def synthetic_reference():
    """A small database with a low-water crop and two soils"""
    return ReferenceData.model_validate({
        "version": "test",
        "crops": {
            "millet": {
                "crop_id": "millet",
                "name": "Millet",
                "description": "Test crop",
                "stages": {
                    "initial": {"kc": 0.1, "duration": 10},
                    "development": {"kc": 0.1, "duration": 10},
                    "mid": {"kc": 0.2, "duration": 10},
                    "late": {"kc": 0.1, "duration": 10},
                    "harvest": {"kc": 0.1, "duration": 10},
                },
            }
        },
        "soils": {
            "loamy": {
                "soil_id": "loamy",
                "name": "Loamy",
                "field_capacity": 0.30,
                "wilting_point": 0.10,
                "bulk_density": 1.4,
                "infiltration_rate": 15,
            },
            "silt": {
                "soil_id": "silt",
                "name": "Silt",
                "field_capacity": 0.40,
                "wilting_point": 0.20,
                "bulk_density": 1.3,
                "infiltration_rate": 8,
            },
        },
    })


@pytest.fixture
def mild_weather():
    return WeatherObservation(
        temperature=25,
        humidity=60,
        wind_speed=10,
        pressure=101.3,
        solar_radiation=18.5,
    )
