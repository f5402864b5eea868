"""Flow guard for the application wizard.

Every route belongs to one or more flows, identified by a flow key of the
form ``{input_model}-{type_of_application}`` (``full-adult``,
``simplified-family``, ...). Before a route touches the state it checks that
the wizard is on one of its flows. A wizard that is not is sent back to the
start of the flow it is actually on; this is navigation, not an error.

Example:
    result = validate_flow(state, ["full-adult", "simplified-adult"], config.flow)
    if result.is_redirect:
        return redirect(result.redirect_to)

    adult_state = result.data  # AdultApplicationState
"""

from typing import Iterable, Optional, Union

import structlog

from cdcp_core.config import FlowConfig
from cdcp_core.exceptions import DomainError
from cdcp_core.models.state import (
    AdultApplicationState,
    AdultChildApplicationState,
    ApplicationState,
    ChildApplicationState,
    Context,
    InputModel,
    TypeOfApplication,
)
from cdcp_core.results import FlowResult

logger = structlog.get_logger()

ENTRY_FLOW = "entry"

NarrowedApplicationState = Union[
    AdultApplicationState,
    AdultChildApplicationState,
    ChildApplicationState,
]

_FIRST_STEP_BY_TYPE: dict[TypeOfApplication, str] = {
    TypeOfApplication.ADULT: "marital-status",
    TypeOfApplication.CHILDREN: "parent-or-guardian",
    TypeOfApplication.FAMILY: "marital-status",
}

_NARROWED_STATE_BY_TYPE: dict[TypeOfApplication, type[ApplicationState]] = {
    TypeOfApplication.ADULT: AdultApplicationState,
    TypeOfApplication.FAMILY: AdultChildApplicationState,
    TypeOfApplication.CHILDREN: ChildApplicationState,
}


def _build_initial_paths() -> dict[str, str]:
    paths = {ENTRY_FLOW: "eligibility-requirements"}
    for input_model in InputModel:
        for type_of_application in TypeOfApplication:
            flow = f"{input_model.value}-{type_of_application.value}"
            if type_of_application == TypeOfApplication.DELEGATE:
                paths[flow] = "application-delegate"
            else:
                paths[flow] = f"{flow}/{_FIRST_STEP_BY_TYPE[type_of_application]}"
    return paths


INITIAL_FLOW_PATHS: dict[str, str] = _build_initial_paths()
"""First route of each flow, relative to the wizard's base URL."""


def application_url(application_id: str, path: str, config: FlowConfig, locale: str = "en") -> str:
    """Absolute path of a wizard route."""
    base = config.base_path.format(lang=locale).rstrip("/")
    return f"{base}/{application_id}/{path}"


def get_initial_flow_url(flow: str, application_id: str, config: FlowConfig, locale: str = "en") -> str:
    """URL of the first route of ``flow``.

    Raises:
        DomainError: If ``flow`` is neither ``entry`` nor a known flow key
    """
    path = INITIAL_FLOW_PATHS.get(flow)
    if path is None:
        raise DomainError(
            f"Unknown application flow value: [{flow}]",
            field="flow",
            value=flow,
            constraint=f"one of {sorted(INITIAL_FLOW_PATHS)}",
        )
    return application_url(application_id, path, config, locale)


def narrow_state(state: ApplicationState) -> Union[NarrowedApplicationState, ApplicationState]:
    """Re-type ``state`` as the variant matching its type of application.

    Delegate states, and states with no type yet, are returned unchanged.
    """
    if isinstance(state, tuple(_NARROWED_STATE_BY_TYPE.values())):
        return state
    variant = _NARROWED_STATE_BY_TYPE.get(state.type_of_application) if state.type_of_application else None
    if variant is None:
        return state
    return variant.model_validate(state.model_dump())


def validate_flow(
    state: ApplicationState,
    allowed_flows: Iterable[str],
    config: FlowConfig,
    locale: str = "en",
) -> FlowResult[NarrowedApplicationState]:
    """Check that the wizard is on one of ``allowed_flows``.

    Args:
        state: Loaded wizard state
        allowed_flows: Flow keys the current route serves
        config: Flow settings used to build redirect URLs
        locale: Language segment of redirect URLs

    Returns:
        The narrowed state, or a redirect to the entry page when no type of
        application has been chosen (or a simplified wizard has no client
        record), or to the start of the wizard's own flow when it is not
        allowed here
    """
    allowed = set(allowed_flows)

    if state.type_of_application is None:
        redirect_to = get_initial_flow_url(ENTRY_FLOW, state.id, config, locale)
        logger.warning("flow_type_undefined", state_id=state.id, redirect_to=redirect_to)
        return FlowResult.redirect(redirect_to, reason="type_of_application_undefined")

    flow_key = state.flow_key
    if flow_key not in allowed:
        redirect_to = get_initial_flow_url(flow_key, state.id, config, locale)
        logger.warning(
            "flow_not_allowed",
            state_id=state.id,
            flow_key=flow_key,
            allowed_flows=sorted(allowed),
            redirect_to=redirect_to,
        )
        return FlowResult.redirect(redirect_to, reason="flow_not_allowed")

    if state.input_model == InputModel.SIMPLIFIED and state.client_application is None:
        redirect_to = get_initial_flow_url(ENTRY_FLOW, state.id, config, locale)
        logger.warning("flow_client_application_missing", state_id=state.id, flow_key=flow_key, redirect_to=redirect_to)
        return FlowResult.redirect(redirect_to, reason="client_application_missing")

    return FlowResult.ok(narrow_state(state))


def validate_context(
    state: ApplicationState,
    expected_context: Context,
    config: FlowConfig,
    locale: str = "en",
) -> FlowResult[ApplicationState]:
    """Check that the wizard is an intake or a renewal as the route expects."""
    if state.context != expected_context:
        redirect_to = get_initial_flow_url(ENTRY_FLOW, state.id, config, locale)
        logger.warning(
            "flow_context_mismatch",
            state_id=state.id,
            context=state.context.value,
            expected_context=Context(expected_context).value,
            redirect_to=redirect_to,
        )
        return FlowResult.redirect(redirect_to, reason="context_mismatch")
    return FlowResult.ok(state)


def children_index_url(state: ApplicationState, config: FlowConfig, locale: str = "en") -> str:
    """URL of the children list of the wizard's flow.

    A wizard with no type of application yet has no children list and gets
    the entry page instead.
    """
    if state.flow_key is None:
        return get_initial_flow_url(ENTRY_FLOW, state.id, config, locale)
    return application_url(state.id, f"{state.flow_key}/children/index", config, locale)


def flow_step_url(state: ApplicationState, step: str, config: FlowConfig, locale: str = "en", flow_key: Optional[str] = None) -> str:
    """URL of ``step`` within the wizard's flow."""
    return application_url(state.id, f"{flow_key or state.flow_key}/{step}", config, locale)


__all__ = [
    "ENTRY_FLOW",
    "INITIAL_FLOW_PATHS",
    "NarrowedApplicationState",
    "application_url",
    "get_initial_flow_url",
    "narrow_state",
    "validate_flow",
    "validate_context",
    "children_index_url",
    "flow_step_url",
]
