"""
API 路由包
"""
from .combat import router as combat_router

__all__ = ["combat_router"]
