"""Service layer"""
from progression_engine.services.progression_service import ProgressionService

__all__ = ["ProgressionService"]
