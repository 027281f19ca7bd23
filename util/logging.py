"""
Structured operation logging for the fan CMS.
Store mutations, rate-limit rejections and domain errors are logged as single-line records.
"""

import logging
from typing import Any, Dict, List

SENSITIVE_FIELDS = ['password', 'passwordHash', 'password_hash', 'ipHash', 'ip']


class StructuredLogger:
    """Structured logger for store, query and API operations."""

    def __init__(self, name: str = "fancms"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {sanitize_payload(details)}"

        self.logger.info(message)

    def log_store_operation(self, operation: str, document: str, record_count: int = None,
                            status: str = "success", details: Dict[str, Any] = None):
        """Log a document-level store operation (load, mutate, write)."""
        log_details = {"document": document}
        if record_count is not None:
            log_details["records"] = record_count
        if details:
            log_details.update(details)

        self.log_operation(f"store.{operation}", status, log_details)

    def log_record_change(self, action: str, document: str, record_id: str, slug: str = None):
        """Log a single record create/update/delete."""
        details = {"document": document, "id": record_id}
        if slug:
            details["slug"] = slug

        self.log_operation(f"record.{action}", "success", details)

    def log_rate_limit(self, key: str, max_requests: int, window_ms: int):
        """Log a rate limiter rejection."""
        log_details = {
            "key": key,
            "max_requests": max_requests,
            "window_ms": window_ms
        }
        self.log_operation("rate_limit.rejected", "rejected", log_details)

    def log_domain_error(self, error_type: str, message: str, path: str = None, status_code: int = None):
        """Log a domain error that was turned into a failure response."""
        log_details = {
            "error_type": error_type,
            "message": message[:100] if message else ""
        }
        if path:
            log_details["path"] = path
        if status_code is not None:
            log_details["status_code"] = status_code

        if status_code is not None and status_code >= 500:
            self.logger.error(f"Operation: api.error, Status: failed, Details: {log_details}")
        else:
            self.log_operation("api.error", "handled", log_details)

    def log_telemetry_event(self, event: str, ip_hash: str, kept: int):
        """Log a recorded telemetry event."""
        log_details = {"event": event, "ip_hash": ip_hash, "kept": kept}
        self.log_operation("telemetry.recorded", "success", log_details)

    def log_schema_validation_error(self, document: str, errors: List[Any]):
        """Log records that failed validation with sanitized details."""
        sanitized_errors = []
        for error in errors:
            if isinstance(error, dict):
                sanitized_error = {k: v for k, v in error.items() if k not in ('input', 'ctx', 'url')}
                sanitized_errors.append(sanitized_error)
            else:
                sanitized_errors.append(str(error)[:100])

        log_details = {
            "document": document,
            "errors": sanitized_errors[:5],
            "error_count": len(sanitized_errors)
        }
        self.log_operation("schema_validation.error", "rejected", log_details)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()


def sanitize_payload(payload: Any, reveal_sensitive: bool = False, sensitive_fields: List[str] = None) -> Any:
    """Sanitize payloads before they reach a log line."""
    if sensitive_fields is None:
        sensitive_fields = SENSITIVE_FIELDS

    if isinstance(payload, dict):
        sanitized = {}
        for k, v in payload.items():
            if reveal_sensitive or k not in sensitive_fields:
                sanitized[k] = sanitize_payload(v, reveal_sensitive, sensitive_fields)
            else:
                sanitized[k] = "[REDACTED]"
        return sanitized
    elif isinstance(payload, str):
        # Truncate long strings
        return payload[:100] + "..." if len(payload) > 100 else payload
    elif isinstance(payload, list):
        return [sanitize_payload(item, reveal_sensitive, sensitive_fields) for item in payload]
    else:
        return payload
