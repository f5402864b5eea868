"""Exceptions raised by the CDCP application core.

Every failure raised by the wizard core derives from ``CdcpError`` so the
outer web layer can map all of them at one error boundary.

Sending a user back to an earlier step is not a failure. A wizard that is
missing, expired or on the wrong flow is reported through ``FlowResult``
(see ``cdcp_core.results``). ``RedirectRequired`` is only for callers that
would rather unwind with an exception, and it sits outside the
``CdcpError`` tree.

Example:
    try:
        dto = mapper.adult_to_dto(state)
    except PreconditionError as e:
        # the flow guard let incomplete state through
        logger.error("renewal_mapping_failed", error=str(e), **e.details)
        raise
"""

from typing import Any, Optional


class CdcpError(Exception):
    """Root of the CDCP exception tree.

    Attributes:
        message: What went wrong, for people.
        details: Structured context for logs.
        recoverable: Whether retrying or taking another path might succeed.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ConfigurationError(CdcpError):
    """Settings are malformed, or an operation lacks data its settings require.

    Starting a wizard inside the renewal period without the client's
    existing application is reported this way too.

    Attributes:
        config_key: Setting (or input) at fault.
        expected: Human description of an acceptable value.
        actual: What was found; never a secret.

    Example:
        >>> raise ConfigurationError(
        ...     "Eligibility rules must be a list",
        ...     config_key="CDCP_ELIGIBILITY_RULES",
        ...     expected="JSON array of rules",
        ... )
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected
        if actual is not None:
            self.details["actual"] = actual


class DomainError(CdcpError):
    """A value breaks a domain rule.

    A negative age, an unparseable date of birth or a flow key with no
    entry route. These are programming errors and are never retried.

    Attributes:
        field: Name of the offending field.
        value: Offending value, when safe to log.
        constraint: The rule in words.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class PreconditionError(CdcpError):
    """A mapper was handed state the flow guard should have turned away.

    Missing communication preferences or client application, a child
    without information or dental insurance, and a renewed child with no
    match on file all mean the flow was sequenced wrongly.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, recoverable=False)
        self.field = field
        if field:
            self.details["field"] = field


class DataIntegrityError(CdcpError):
    """The client record on file lacks data that must be carried through.

    Raised when unchanged contact information is copied from a record
    with no home address, city or country.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, recoverable=False)
        self.field = field
        if field:
            self.details["field"] = field


class RedirectRequired(Exception):
    """Tells the routing layer to answer with a redirect.

    Only ``FlowResult.unwrap()`` raises it.

    Attributes:
        redirect_to: Where to send the user.
        reason: Short machine-readable code, e.g. ``"state_expired"``.
    """

    def __init__(self, redirect_to: str, reason: Optional[str] = None) -> None:
        super().__init__(redirect_to)
        self.redirect_to = redirect_to
        self.reason = reason

    def __repr__(self) -> str:
        return f"RedirectRequired(redirect_to={self.redirect_to!r}, reason={self.reason!r})"


__all__ = [
    "CdcpError",
    "ConfigurationError",
    "DomainError",
    "PreconditionError",
    "DataIntegrityError",
    "RedirectRequired",
]
