"""
Range Market API
"""
from .routes import router

__all__ = ['router']
