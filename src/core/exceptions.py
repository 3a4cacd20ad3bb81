#!/usr/bin/env python3
"""
Standardized exception hierarchy for the news aggregator.

Provides specific exception types for provider, database and configuration
failures, each carrying structured context for logging.
"""

from typing import Optional, Dict, Any


class NewsAggregatorError(Exception):
    """Base exception for all news aggregator errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            context: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context
        }


# Provider-related exceptions
class ProviderError(NewsAggregatorError):
    """Base exception for external news provider errors."""
    pass


class ProviderRequestError(ProviderError):
    """Request to a news provider failed (network, timeout or HTTP status)."""

    def __init__(self, provider: str, url: str, reason: str, status_code: Optional[int] = None):
        message = f"Request to {provider} failed: {reason}"
        context = {
            'provider': provider,
            'url': url,
            'reason': reason,
            'status_code': status_code
        }
        super().__init__(message, context=context)
        self.status_code = status_code


class ProviderResponseError(ProviderError):
    """Provider returned a payload that could not be decoded or mapped."""

    def __init__(self, provider: str, parse_stage: str, original_error: Exception):
        message = f"Failed to parse {parse_stage} from {provider}"
        context = {
            'provider': provider,
            'parse_stage': parse_stage,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


# Database-related exceptions
class DatabaseError(NewsAggregatorError):
    """Base exception for database errors."""
    pass


class DatabaseConnectionError(DatabaseError):
    """Failed to connect to database."""

    def __init__(self, original_error: Exception):
        message = f"Failed to connect to database: {original_error}"
        context = {'original_error': str(original_error)}
        super().__init__(message, context=context)


class DatabaseOperationError(DatabaseError):
    """Database operation failed."""

    def __init__(self, operation: str, table: str, original_error: Exception,
                 details: Optional[Dict[str, Any]] = None):
        message = f"Database {operation} failed on table {table}: {original_error}"
        context = {
            'operation': operation,
            'table': table,
            'original_error': str(original_error)
        }
        if details:
            context.update(details)
        super().__init__(message, context=context)


class SourceNotFoundError(NewsAggregatorError):
    """Requested source does not exist."""

    def __init__(self, source_id: int):
        super().__init__(f"Source {source_id} not found", context={'source_id': source_id})
        self.source_id = source_id


# Configuration-related exceptions
class ConfigurationError(NewsAggregatorError, ValueError):
    """Configuration is invalid or missing. Subclasses ValueError as well."""

    def __init__(self, config_key: str, issue: str):
        message = f"Configuration error for {config_key}: {issue}"
        context = {
            'config_key': config_key,
            'issue': issue
        }
        super().__init__(message, context=context)
