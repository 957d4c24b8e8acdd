"""
Exceptions for ODT template filling.

Handles the exception hierarchy of a fill run: fatal data, structure and
packaging errors, recoverable per-occurrence resource errors, and failures of
the PDF/print collaborators.
"""

from typing import Optional, Any, Dict
import traceback


class OdtFillError(Exception):
    """
    Base exception for template fill errors.

    Carries the message, the causing exception, an optional error code and
    free-form details.
    """

    def __init__(self, message: str, cause: Optional[Exception] = None,
                 error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """
        Initialize fill error.

        Args:
            message: Error message
            cause: Causing exception
            error_code: Error code
            details: Additional details
        """
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.error_code = error_code
        self.details = details or {}
        self.traceback = traceback.format_exc()

    def get_error_info(self) -> Dict[str, Any]:
        """
        Get error information.

        Returns:
            Dictionary with error information
        """
        return {
            'message': self.message,
            'cause': str(self.cause) if self.cause else None,
            'error_code': self.error_code,
            'details': self.details,
            'traceback': self.traceback
        }

    def __str__(self) -> str:
        """String representation of exception."""
        return f"{self.__class__.__name__}: {self.message}"


class DataFormatError(OdtFillError):
    """
    Malformed input data.

    Raised before any markup pass runs; no partial flattening is kept.
    """

    def __init__(self, message: str, source: Optional[str] = None,
                 cause: Optional[Exception] = None, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        """
        Initialize data format error.

        Args:
            message: Error message
            source: Path or URL of the data document
            cause: Causing exception
            error_code: Error code
            details: Additional details
        """
        super().__init__(message, cause, error_code, details)
        self.source = source

    def get_error_info(self) -> Dict[str, Any]:
        info = super().get_error_info()
        info['source'] = self.source
        return info


class StructuralError(OdtFillError):
    """
    Template is not a valid ODT container.

    Raised when the archive cannot be opened or extracted, or when the
    ``mimetype`` entry or the ``content.xml`` part is missing.
    """

    def __init__(self, message: str, package_path: Optional[str] = None,
                 part_name: Optional[str] = None, cause: Optional[Exception] = None,
                 error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """
        Initialize structural error.

        Args:
            message: Error message
            package_path: Path of the template or working directory
            part_name: Name of the missing or broken part
            cause: Causing exception
            error_code: Error code
            details: Additional details
        """
        super().__init__(message, cause, error_code, details)
        self.package_path = package_path
        self.part_name = part_name

    def get_error_info(self) -> Dict[str, Any]:
        info = super().get_error_info()
        info.update({
            'package_path': self.package_path,
            'part_name': self.part_name
        })
        return info


class ResourceResolutionError(OdtFillError):
    """
    A single image or resource could not be fetched or decoded.

    Recovered locally by the image resolver: the occurrence degrades to empty
    output and the run continues.
    """

    def __init__(self, message: str, locator: Optional[str] = None,
                 cause: Optional[Exception] = None, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, cause, error_code, details)
        self.locator = locator

    def get_error_info(self) -> Dict[str, Any]:
        info = super().get_error_info()
        info['locator'] = self.locator
        return info


class PackagingError(OdtFillError):
    """Archive assembly failed; no partial output file is left in place."""

    def __init__(self, message: str, output_path: Optional[str] = None,
                 cause: Optional[Exception] = None, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, cause, error_code, details)
        self.output_path = output_path

    def get_error_info(self) -> Dict[str, Any]:
        info = super().get_error_info()
        info['output_path'] = self.output_path
        return info


class ConversionError(OdtFillError):
    """
    PDF conversion, optimisation or print dispatch failed.

    The filled ODT is kept when this is raised.
    """

    def __init__(self, message: str, command: Optional[str] = None,
                 stderr: Optional[str] = None, cause: Optional[Exception] = None,
                 error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, cause, error_code, details)
        self.command = command
        self.stderr = stderr

    def get_error_info(self) -> Dict[str, Any]:
        info = super().get_error_info()
        info.update({
            'command': self.command,
            'stderr': self.stderr
        })
        return info


def handle_exception(exception: Exception, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Handle exception and return error information.

    Args:
        exception: Exception to handle
        context: Additional context

    Returns:
        Dictionary with error information
    """
    if isinstance(exception, OdtFillError):
        error_info = exception.get_error_info()
    else:
        error_info = {
            'message': str(exception),
            'error_code': None,
            'details': {},
            'cause': None,
            'traceback': traceback.format_exc()
        }

    if context:
        error_info['context'] = context

    return error_info
