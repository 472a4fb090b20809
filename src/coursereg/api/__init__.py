"""REST API for coursereg."""

from coursereg.api.app import create_app, register_exception_handlers
from coursereg.api.dependencies import Services, close_services, get_services, init_services
from coursereg.api.models import APIResponse, PageResponse

__all__ = [
    "APIResponse",
    "PageResponse",
    "Services",
    "close_services",
    "create_app",
    "get_services",
    "init_services",
    "register_exception_handlers",
]
