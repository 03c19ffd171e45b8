# flavor_models.py
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Flavor:
    name: str
    top_color: Optional[str] = None
    bottom_color: Optional[str] = None


FlavorList = Tuple[Flavor, ...]


class LoadError(Exception):
    """Base class for anything that stops a flavor load from completing."""


class TransportError(LoadError):
    """Network failure or a non-2xx HTTP response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DecodeError(LoadError):
    """Response body does not match the expected list-of-records shape."""


class InvalidFlavorRecord(DecodeError):
    """A single record could not be turned into a Flavor."""


class LoadOutcome:
    """Result of a load attempt: success flag, the decoded flavors, and the error if any."""
    def __init__(self, success: bool, flavors: FlavorList = (), error: Optional[LoadError] = None):
        self.success = success
        self.flavors = tuple(flavors)
        self.error = error

    def __bool__(self):
        return self.success

    @classmethod
    def failed(cls, error: LoadError) -> "LoadOutcome":
        return cls(False, (), error)
