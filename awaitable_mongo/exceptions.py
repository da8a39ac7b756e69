"""
Custom exceptions for awaitable-mongo.

Precondition violations are raised synchronously, before any task is
scheduled, so they double as ``TypeError`` for callers that only expect the
builtin type. Errors coming from the driver are never wrapped; they reach the
caller through the awaited task unchanged.
"""

from typing import Any, Dict, Iterable, Optional


class AwaitableMongoError(RuntimeError):
    """
    Base exception for awaitable-mongo errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (argument,
                 collection_key, etc.)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            context: Optional dictionary with additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class InvalidArgumentError(AwaitableMongoError, TypeError):
    """
    Raised when an operation argument has the wrong type or shape.

    Attributes:
        message: Error message
        argument: Name of the offending argument (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        argument: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if argument:
            context["argument"] = argument
        super().__init__(message, context=context)
        self.argument = argument


class InvalidUpdateError(InvalidArgumentError):
    """
    Raised when an update expression carries no recognised update operator.

    Attributes:
        message: Error message
        operators: Sorted update operators that would have been accepted
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        operators: Iterable[str] = (),
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, argument="update", context=context)
        self.operators = sorted(operators)


class ConfigurationError(AwaitableMongoError):
    """
    Raised when configuration is invalid or missing.

    Attributes:
        message: Error message
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize the configuration error.

        Args:
            message: Error message
            config_key: Configuration key that caused the error (if available)
            config_value: Configuration value that caused the error (if available)
            context: Additional context information
        """
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value
