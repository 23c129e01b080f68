"""
Client collaborator interface used by bound services.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class ODataClient(ABC):
    """Abstract wire client; services build URLs and payloads and delegate every request here.

    Implementations may be synchronous or return awaitables, services hand back
    whatever the client returns.
    """

    @abstractmethod
    def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Read semantics."""

    @abstractmethod
    def post(self, url: str, data: Any = None) -> Any:
        """Create semantics; also used to invoke actions."""

    @abstractmethod
    def put(self, url: str, data: Any) -> Any:
        """Full replace semantics."""

    @abstractmethod
    def patch(self, url: str, data: Any) -> Any:
        """Partial merge semantics (OData V4)."""

    @abstractmethod
    def merge(self, url: str, data: Any) -> Any:
        """Partial merge semantics (OData V2, HTTP MERGE)."""

    @abstractmethod
    def delete(self, url: str) -> Any:
        """Delete semantics."""
