"""
Models Package

Contains Pydantic data models for:
- api_models: API response models
"""

__all__ = ["api_models"]
