"""Child identity and collection helpers.

A child record is created as soon as the user clicks "add a child" and is
filled in over several steps. Until all three answer groups are saved the
child is "new" and is left out of listings and submissions.
"""

from typing import Optional

import structlog
from pydantic import BaseModel

from cdcp_core.config import FlowConfig
from cdcp_core.flow import children_index_url
from cdcp_core.ids import is_valid_id
from cdcp_core.models.state import ApplicationState, ChildState
from cdcp_core.results import FlowResult

logger = structlog.get_logger()


class SingleChildState(BaseModel):
    """A child located within the wizard state.

    Attributes:
        child: The child's state
        child_number: 1-based position in the order children were added
        is_new: Whether the child is still incomplete
    """
    child: ChildState
    child_number: int
    is_new: bool


def is_new_child_state(child: ChildState) -> bool:
    """A child is new until information, dental insurance and dental benefits are all saved."""
    return child.information is None or child.dental_insurance is None or child.dental_benefits is None


def list_children(state: ApplicationState, include_new: bool = False) -> list[ChildState]:
    """Children in the order they were added, skipping new ones unless asked."""
    if include_new:
        return list(state.children)
    return [child for child in state.children if not is_new_child_state(child)]


def find_child_by_id(state: ApplicationState, child_id: str) -> Optional[ChildState]:
    return next((child for child in state.children if child.id == child_id), None)


def get_single_child_state(
    state: ApplicationState,
    child_id: str,
    config: FlowConfig,
    locale: str = "en",
) -> FlowResult[SingleChildState]:
    """Locate a child for a per-child route.

    Returns a redirect to the flow's children list when ``child_id`` is
    malformed or names no child of this wizard.
    """
    if not is_valid_id(child_id):
        redirect_to = children_index_url(state, config, locale)
        logger.warning("child_id_invalid", state_id=state.id, child_id=child_id, redirect_to=redirect_to)
        return FlowResult.redirect(redirect_to, reason="child_id_invalid")

    for index, child in enumerate(state.children):
        if child.id == child_id:
            return FlowResult.ok(
                SingleChildState(child=child, child_number=index + 1, is_new=is_new_child_state(child))
            )

    redirect_to = children_index_url(state, config, locale)
    logger.warning("child_not_found", state_id=state.id, child_id=child_id, redirect_to=redirect_to)
    return FlowResult.redirect(redirect_to, reason="child_not_found")


__all__ = [
    "SingleChildState",
    "is_new_child_state",
    "list_children",
    "find_child_by_id",
    "get_single_child_state",
]
