"""
Services layer for the nrv site.

This module provides the business logic as reusable services that can be
consumed by the HTTP API and the operator console.
"""

from .base import BaseService, ServiceContext
from .auth_service import AuthService, AuthResult, AuthStatus, Caller
from .content_service import ContentService, PostEntry, ProjectEntry, InquiryEntry
from .chat_service import ChatService
from .sysinfo_service import SysInfo, collect_sysinfo

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    # Services
    "AuthService",
    "ContentService",
    "ChatService",
    "collect_sysinfo",
    # Data classes
    "AuthResult",
    "AuthStatus",
    "Caller",
    "PostEntry",
    "ProjectEntry",
    "InquiryEntry",
    "SysInfo",
]
