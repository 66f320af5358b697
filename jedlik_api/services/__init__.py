"""
Services Package

Contains process-level services:
- resource_connector: starts and stops the MongoDB and Redis connections
"""
__all__ = ["resource_connector"]
