# server/core/exceptions.py
"""
Custom exceptions for the irrigation advisor backend
"""

class IrrigationAdvisorError(Exception):
    """Base exception for the irrigation advisor backend"""
    pass

class AgentError(IrrigationAdvisorError):
    """Agent-related errors"""
    pass

class AgentConfigError(IrrigationAdvisorError):
    """Agent configuration errors"""
    pass

class ExternalAPIError(IrrigationAdvisorError):
    """External API errors"""
    pass

class ReferenceDataError(IrrigationAdvisorError):
    """Crop/soil reference data is missing or malformed"""
    pass

class FarmNotFoundError(IrrigationAdvisorError):
    """Requested farm is not registered"""
    pass
