"""Session-backed wizard state repository.

Owns the lifecycle of an ``ApplicationState``: starting a wizard, loading it
on every request, merging a step's answers into it, and clearing it once the
application is submitted or abandoned.

Loading never raises for a bad, missing or expired wizard. The user simply
left and came back too late (or followed a stale link), so the result is a
redirect to the public apply page.

Example Usage:
    ```python
    repository = ApplicationStateRepository(session, config)
    state = repository.start(application_year)

    result = repository.save(
        state.id,
        ApplicationStatePatch(marital_status="1"),
        remove="partner_information",
    )
    if result.is_redirect:
        return redirect(result.redirect_to)
    ```
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping, Optional, Union

import structlog

from cdcp_core.config import CdcpConfig
from cdcp_core.eligibility import is_within_renewal_period
from cdcp_core.exceptions import ConfigurationError, DomainError
from cdcp_core.ids import generate_id, is_valid_id
from cdcp_core.models.client import ClientApplication
from cdcp_core.models.state import (
    IMMUTABLE_STATE_FIELDS,
    ApplicationState,
    ApplicationStatePatch,
    ApplicationYearState,
    Context,
    InputModel,
)
from cdcp_core.results import FlowResult
from cdcp_core.session import SessionStore

logger = structlog.get_logger()

PROTECTED_FLOW_PREFIX = "protected-application-flow"
PUBLIC_FLOW_PREFIX = "public-application-flow"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return current UTC datetime with timezone info."""
    return datetime.now(timezone.utc)


def _field_names_by_key() -> dict[str, str]:
    names: dict[str, str] = {}
    for name, field in ApplicationState.model_fields.items():
        names[name] = name
        if field.alias:
            names[field.alias] = name
    return names


_FIELD_NAMES = _field_names_by_key()


class ApplicationStateRepository:
    """Create, load, update and clear wizard state in a session.

    Args:
        session: The user's session store
        config: Settings for the renewal period and flow lifetime
        flow_prefix: Session key family; protected and public wizards
            live side by side in the same session
        clock: Source of the current time
        id_factory: Source of new wizard ids
    """

    def __init__(
        self,
        session: SessionStore,
        config: Optional[CdcpConfig] = None,
        *,
        flow_prefix: str = PROTECTED_FLOW_PREFIX,
        clock: Clock = utc_now,
        id_factory: Callable[[], str] = generate_id,
    ) -> None:
        self.session = session
        self.config = config or CdcpConfig()
        self.flow_prefix = flow_prefix
        self._clock = clock
        self._id_factory = id_factory

    @property
    def ttl(self) -> timedelta:
        return timedelta(minutes=self.config.flow.state_ttl_minutes)

    def session_key(self, application_id: str) -> str:
        return f"{self.flow_prefix}-{application_id}"

    def _now(self) -> datetime:
        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now

    def _persist(self, state: ApplicationState) -> None:
        self.session.set(self.session_key(state.id), state.to_wire())

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(
        self,
        application_year: Union[ApplicationYearState, Mapping[str, Any]],
        client_application: Optional[Union[ClientApplication, Mapping[str, Any]]] = None,
    ) -> ApplicationState:
        """Start a new wizard and store its initial state.

        The context is ``renewal`` when now falls within the renewal period,
        otherwise ``intake``. Renewals whose client record has a copay tier
        earning record use the simplified input model.

        Raises:
            ConfigurationError: If starting a renewal without a client application
        """
        now = self._now()
        context = Context.RENEWAL if is_within_renewal_period(self.config.renewal, now) else Context.INTAKE

        if client_application is not None and not isinstance(client_application, ClientApplication):
            client_application = ClientApplication.model_validate(client_application)

        if context == Context.RENEWAL and client_application is None:
            logger.error("application_state_start_failed", reason="client_application_missing", context=context.value)
            raise ConfigurationError(
                "Client application data is required to start a renewal application",
                config_key="renewal",
                expected="client_application",
            )

        if context == Context.RENEWAL and client_application.copay_tier_earning_record:
            input_model = InputModel.SIMPLIFIED
        else:
            input_model = InputModel.FULL

        state = ApplicationState(
            id=self._id_factory(),
            context=context,
            input_model=input_model,
            last_updated_on=now,
            application_year=ApplicationYearState.model_validate(application_year),
            client_application=client_application,
            children=[],
        )
        self._persist(state)
        logger.info(
            "application_state_started",
            state_id=state.id,
            session_id=self.session.id,
            context=context.value,
            input_model=input_model.value,
        )
        return state

    def load(self, application_id: str, locale: str = "en") -> FlowResult[ApplicationState]:
        """Load the wizard's state.

        Returns a redirect to the apply page when the id is malformed, when no
        state exists, or when the state has not been saved for the configured
        lifetime. Expired state is removed from the session.
        """
        redirect_to = self.config.flow.apply_url(locale)

        if not is_valid_id(application_id):
            logger.warning("application_id_invalid", application_id=application_id, session_id=self.session.id, redirect_to=redirect_to)
            return FlowResult.redirect(redirect_to, reason="invalid_id")

        session_key = self.session_key(application_id)
        if not self.session.has(session_key):
            logger.warning("application_state_not_found", session_key=session_key, session_id=self.session.id, redirect_to=redirect_to)
            return FlowResult.redirect(redirect_to, reason="state_not_found")

        state = ApplicationState.model_validate(self.session.get(session_key))

        if self._now() - state.last_updated_on >= self.ttl:
            self.session.unset(session_key)
            logger.warning("application_state_expired", session_key=session_key, session_id=self.session.id, redirect_to=redirect_to)
            return FlowResult.redirect(redirect_to, reason="state_expired")

        return FlowResult.ok(state)

    def save(
        self,
        application_id: str,
        patch: Union[ApplicationStatePatch, Mapping[str, Any]],
        *,
        remove: Optional[str] = None,
        locale: str = "en",
    ) -> FlowResult[ApplicationState]:
        """Shallow-merge ``patch`` into the wizard's state.

        Args:
            application_id: Wizard id
            patch: Answers to merge; top-level fields replace existing ones
            remove: Field to delete from the merged state
            locale: Language of the redirect URL

        Returns:
            The new state, or the same redirect ``load`` would give

        Raises:
            DomainError: If ``remove`` names an immutable field or ``children``
        """
        remove_name = _FIELD_NAMES.get(remove, remove) if remove else None
        if remove_name is not None and (remove_name in IMMUTABLE_STATE_FIELDS or remove_name == "children"):
            raise DomainError(
                f"Field [{remove}] cannot be removed from application state",
                field="remove",
                value=remove,
                constraint="mutable, non-collection field",
            )

        result = self.load(application_id, locale)
        if result.is_redirect:
            return result
        current = result.data

        updates = self._patch_updates(patch, current.id)

        merged = current.model_dump()
        merged.update(updates)
        merged["last_updated_on"] = self._now()
        if remove_name is not None:
            merged.pop(remove_name, None)

        new_state = ApplicationState.model_validate(merged)
        self._persist(new_state)
        logger.info(
            "application_state_saved",
            session_key=self.session_key(new_state.id),
            session_id=self.session.id,
            fields=sorted(updates),
            removed=remove_name,
        )
        return FlowResult.ok(new_state)

    def clear(self, application_id: str, locale: str = "en") -> FlowResult[None]:
        """Delete the wizard's state; redirects like ``load`` if there is none."""
        result = self.load(application_id, locale)
        if result.is_redirect:
            return result

        session_key = self.session_key(result.data.id)
        self.session.unset(session_key)
        logger.info("application_state_cleared", session_key=session_key, session_id=self.session.id)
        return FlowResult.ok(None)

    @staticmethod
    def _patch_updates(patch: Union[ApplicationStatePatch, Mapping[str, Any]], state_id: str) -> dict[str, Any]:
        if isinstance(patch, ApplicationStatePatch):
            return {name: getattr(patch, name) for name in patch.model_fields_set}

        updates: dict[str, Any] = {}
        ignored: list[str] = []
        for key, value in patch.items():
            name = _FIELD_NAMES.get(key)
            if name is None:
                raise DomainError(
                    f"Unknown application state field [{key}]",
                    field=key,
                    constraint="declared application state field",
                )
            if name in IMMUTABLE_STATE_FIELDS:
                ignored.append(name)
                continue
            updates[name] = value

        if ignored:
            logger.warning("immutable_fields_ignored", state_id=state_id, fields=sorted(ignored))
        return updates


__all__ = [
    "PROTECTED_FLOW_PREFIX",
    "PUBLIC_FLOW_PREFIX",
    "Clock",
    "utc_now",
    "ApplicationStateRepository",
]
