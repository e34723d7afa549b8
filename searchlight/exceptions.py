"""
Custom exceptions for the highlighting service.
"""


from typing import Optional


class SearchlightException(Exception):
    """Base exception for all highlighting-related errors."""

    pass


class ConfigurationException(SearchlightException):
    """Configuration-related errors."""

    pass


class SettingsStoreException(SearchlightException):
    """Settings store read/write errors."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class SearchBackendException(SearchlightException):
    """Search backend errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
