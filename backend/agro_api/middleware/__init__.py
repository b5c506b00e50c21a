"""Agro API - Middlewares"""
from agro_api.middleware.logger import RequestLoggingMiddleware
from agro_api.middleware.limits import LimitUploadSizeMiddleware

__all__ = ["RequestLoggingMiddleware", "LimitUploadSizeMiddleware"]
