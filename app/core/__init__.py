"""
iLocks QR Backend - Core Module

This module contains configuration, database setup, and security utilities.
"""

from app.core.config import OtpPolicy, get_settings, settings
from app.core.database import Base, get_db, get_engine

__all__ = ["settings", "get_settings", "OtpPolicy", "Base", "get_db", "get_engine"]
