"""
Core Infrastructure Package

Contains shared infrastructure components:
- config: Application configuration and settings
- logging: Structured JSON logging utilities
- errors: Error kinds and their client response mapping
- resources: Connection state for external dependencies
- mongo: MongoDB connector
- cache: Redis connector with its reconnect loop
"""

__all__ = ["config", "logging", "errors", "resources", "mongo", "cache"]
