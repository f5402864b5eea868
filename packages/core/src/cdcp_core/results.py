"""Navigation-aware result type for wizard operations.

Loading, saving and guarding wizard state can end in one of two ways: the
operation succeeds and yields data, or the user's wizard cannot support the
requested step and must be sent elsewhere. The second outcome is not an
error, so it is returned rather than raised.

Example Usage:
    ```python
    result = repository.load(application_id)
    if result.is_redirect:
        return http_redirect(result.redirect_to)

    state = result.data
    ```

Callers that prefer unwinding can use ``unwrap()``, which raises
``RedirectRequired`` for the routing layer to intercept.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from cdcp_core.exceptions import RedirectRequired

ResultT = TypeVar("ResultT")
"""Type variable for result data types."""


class FlowStatus(str, Enum):
    """Outcome of a wizard operation."""

    OK = "ok"
    """The operation produced data."""

    REDIRECT = "redirect"
    """The user must be navigated to ``redirect_to``."""


class FlowResult(BaseModel, Generic[ResultT]):
    """Standardized wrapper for wizard operation results.

    Attributes:
        status: Whether the operation produced data or a redirect
        data: The result data when status is OK
        redirect_to: Target URL when status is REDIRECT
        reason: Machine-readable reason for the redirect
    """

    model_config = {"arbitrary_types_allowed": True}

    status: FlowStatus = Field(
        default=FlowStatus.OK,
        description="Outcome of the operation",
    )
    data: Optional[ResultT] = Field(
        default=None,
        description="The result data when the operation succeeded",
    )
    redirect_to: Optional[str] = Field(
        default=None,
        description="URL to navigate to when the operation redirects",
    )
    reason: Optional[str] = Field(
        default=None,
        description="Machine-readable redirect reason",
    )

    @property
    def is_ok(self) -> bool:
        """Check if the operation produced data."""
        return self.status == FlowStatus.OK

    @property
    def is_redirect(self) -> bool:
        """Check if the operation requires navigation."""
        return self.status == FlowStatus.REDIRECT

    @classmethod
    def ok(cls, data: Any) -> FlowResult[Any]:
        """Create a successful result with the given data."""
        return cls(status=FlowStatus.OK, data=data)

    @classmethod
    def redirect(cls, redirect_to: str, reason: Optional[str] = None) -> FlowResult[Any]:
        """Create a redirect result.

        Args:
            redirect_to: The URL the user must be sent to
            reason: Machine-readable reason code

        Returns:
            A FlowResult with REDIRECT status
        """
        return cls(status=FlowStatus.REDIRECT, redirect_to=redirect_to, reason=reason)

    def unwrap(self) -> ResultT:
        """Return the data, or raise RedirectRequired for redirect results."""
        if self.is_redirect:
            raise RedirectRequired(self.redirect_to or "", reason=self.reason)
        return self.data  # type: ignore[return-value]


__all__ = [
    "ResultT",
    "FlowStatus",
    "FlowResult",
]
