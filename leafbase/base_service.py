"""
Base utilities shared by Leafbase services.

This module provides:
- Logging setup
- Structured event/error logging with secret redaction
- Standard JSON response envelope
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse

logger = logging.getLogger("leafbase")

# Keys whose values never reach the log output
REDACTED_KEYS = {"password", "hashed_password", "token", "access_token", "authorization"}
REDACTED = "***REDACTED***"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def redact(details: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Return a copy of ``details`` with sensitive values masked."""
    if not details:
        return {}
    clean = {}
    for key, value in details.items():
        if key.lower() in REDACTED_KEYS:
            clean[key] = REDACTED
        elif isinstance(value, dict):
            clean[key] = redact(value)
        else:
            clean[key] = value
    return clean


class ApiResponse(JSONResponse):
    """
    Standard response envelope for all API endpoints:
    ``{"status": ..., "message": ..., "data": ...}``.
    """
    def __init__(self, data: Any = None, message: str = "success", status: str = "ok", **kwargs):
        content = {
            "status": status,
            "message": message,
            "data": data,
        }
        super().__init__(content=content, **kwargs)


class BaseService:
    """
    Base class for Leafbase services. Provides:
    - A named logger
    - Event and error logging
    - Response envelope helpers
    """
    def __init__(self, service_name: str = "core"):
        self.service_name = service_name
        self.logger = logging.getLogger(f"leafbase.{service_name}")

    def log_event(self, event: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Log a structured event. Sensitive keys are redacted."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": self.service_name,
            "event": event,
            "data": redact(details),
        }
        self.logger.info("EVENT: %s", json.dumps(log_data, default=str))
        return log_data

    def log_error(self, error: Exception, context: str = "") -> Dict[str, Any]:
        """Log an error with optional context."""
        error_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": self.service_name,
            "error": str(error),
            "error_type": error.__class__.__name__,
            "context": context or "unknown",
        }
        self.logger.error("ERROR: %s", json.dumps(error_data))
        return error_data

    def response(self, data: Any = None, message: str = "success", status_code: int = 200) -> ApiResponse:
        return ApiResponse(data=data, message=message, status="ok", status_code=status_code)

    def error_response(
        self,
        message: str,
        status_code: int,
        headers: Optional[Dict[str, str]] = None,
        data: Any = None,
    ) -> ApiResponse:
        return ApiResponse(data=data, message=message, status="error", status_code=status_code, headers=headers)
