# lolbuild/errors.py - Exception types shared by the scraping pipeline
from typing import List, Optional


class LoLBuildError(Exception):
    """Base exception for lolbuild errors"""
    pass


class UpstreamError(LoLBuildError):
    """A build site or Data Dragon answered with an unusable response"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(UpstreamError):
    """The upstream page for the champion does not exist"""
    pass


class ChampionNotFoundError(LoLBuildError):
    """Raised when user input does not match any champion"""
    def __init__(self, name: str, suggestions: Optional[List[str]] = None):
        self.name = name
        self.suggestions = suggestions or []
        super().__init__(f"Champion `{name}` not found.")


class InvalidRoleError(LoLBuildError):
    """Raised for a role outside the supported lanes"""
    pass


class ImageRenderError(LoLBuildError):
    """Raised when a summary card cannot be encoded"""
    pass
