"""Completeness checks before the review step.

The review page summarises the whole application, so every answer the flow
requires must be present and consistent. When one is not, the user is sent
back to the step that collects it. A state that passes is returned with
only its completed children, which is what the submission mappers expect.

Ages are assessed at ``assessment_date``: today, or the configured current
date, moved forward to the coverage start date while coverage has not started.

Example:
    result = validate_family_state_for_review(state, config)
    if result.is_redirect:
        return redirect(result.redirect_to)
    render_review(result.data)
"""

from datetime import date
from typing import Optional

import structlog

from cdcp_core.children import list_children
from cdcp_core.config import CdcpConfig
from cdcp_core.eligibility import AgeCategory, age_category, applicant_has_partner, assessment_date
from cdcp_core.flow import ENTRY_FLOW, NarrowedApplicationState, application_url, get_initial_flow_url, narrow_state
from cdcp_core.models.state import ApplicationState, InputModel, TypeOfApplication
from cdcp_core.results import FlowResult

logger = structlog.get_logger()

TYPE_OF_APPLICATION_STEP = "type-of-application"


class _Review:
    """Runs the shared checks for one composition and builds redirect URLs."""

    def __init__(
        self,
        state: ApplicationState,
        config: CdcpConfig,
        expected_type: TypeOfApplication,
        locale: str,
        today: Optional[date],
    ) -> None:
        self.state = state
        self.config = config
        self.expected_type = expected_type
        self.locale = locale
        self.reference_date = assessment_date(config.eligibility, today)
        self.flow_key = f"{state.input_model.value}-{expected_type.value}"

    def entry(self, reason: str) -> FlowResult:
        return self._redirect(get_initial_flow_url(ENTRY_FLOW, self.state.id, self.config.flow, self.locale), reason)

    def step(self, step: str, reason: str, in_flow: bool = True) -> FlowResult:
        path = f"{self.flow_key}/{step}" if in_flow else step
        return self._redirect(application_url(self.state.id, path, self.config.flow, self.locale), reason)

    def _redirect(self, redirect_to: str, reason: str) -> FlowResult:
        logger.warning("review_incomplete", state_id=self.state.id, flow_key=self.flow_key, reason=reason, redirect_to=redirect_to)
        return FlowResult.redirect(redirect_to, reason=reason)

    def check_flow(self) -> Optional[FlowResult]:
        state = self.state
        if state.terms_and_conditions is None:
            return self.entry("terms_and_conditions_missing")
        if state.type_of_application != self.expected_type:
            return self.step(TYPE_OF_APPLICATION_STEP, "type_of_application_mismatch", in_flow=False)
        if state.input_model == InputModel.SIMPLIFIED and state.client_application is None:
            return self.entry("client_application_missing")
        if not state.has_filed_taxes:
            return self.entry("has_filed_taxes_missing")
        return None

    def check_applicant(self, partner_step: str, contact_step: str) -> Optional[FlowResult]:
        state = self.state
        if state.applicant_information is None:
            return self.step(TYPE_OF_APPLICATION_STEP, "applicant_information_missing", in_flow=False)

        if age_category(state.applicant_information.date_of_birth, self.reference_date) == AgeCategory.CHILDREN:
            return self.step(TYPE_OF_APPLICATION_STEP, "applicant_under_age", in_flow=False)

        has_partner = applicant_has_partner(state.marital_status, self.config.codes)
        if has_partner and state.partner_information is None:
            return self.step(partner_step, "partner_information_missing")
        if not has_partner and state.partner_information is not None:
            return self.step(partner_step, "partner_information_unexpected")

        if state.phone_number is None:
            return self.step(contact_step, "phone_number_missing")
        if state.mailing_address is None:
            return self.step(contact_step, "mailing_address_missing")
        if state.communication_preferences is None:
            return self.step(contact_step, "communication_preferences_missing")

        preferences = state.communication_preferences.value
        if (
            preferences is not None
            and preferences.preferred_method in self.config.codes.email_communication_methods
            and not state.email_verified
        ):
            return self.step("contact-information", "email_not_verified")
        return None

    def check_applicant_coverage(self) -> Optional[FlowResult]:
        if self.state.dental_insurance is None:
            return self.step("dental-insurance", "dental_insurance_missing")
        if self.state.dental_benefits is None:
            return self.step("dental-insurance", "dental_benefits_missing")
        return None

    def check_children(self) -> Optional[FlowResult]:
        children = list_children(self.state)
        if not children:
            return self.step("childrens-application", "children_missing")

        for child in children:
            information = child.information
            if information.date_of_birth == "" or not information.is_parent:
                return self.step("childrens-application", "child_information_invalid")
            if age_category(information.date_of_birth, self.reference_date) in (AgeCategory.ADULTS, AgeCategory.SENIORS):
                return self.step(TYPE_OF_APPLICATION_STEP, "child_over_age", in_flow=False)
        return None

    def ok(self) -> FlowResult[NarrowedApplicationState]:
        # children still being added are not part of what gets submitted
        reviewed = self.state.model_copy(update={"children": list_children(self.state)})
        return FlowResult.ok(narrow_state(reviewed))


def _first_failure(*checks) -> Optional[FlowResult]:
    for check in checks:
        result = check()
        if result is not None:
            return result
    return None


def validate_adult_state_for_review(
    state: ApplicationState,
    config: CdcpConfig,
    locale: str = "en",
    today: Optional[date] = None,
) -> FlowResult[NarrowedApplicationState]:
    """Check an adult application is ready for review."""
    review = _Review(state, config, TypeOfApplication.ADULT, locale, today)
    failure = _first_failure(
        review.check_flow,
        lambda: review.check_applicant("marital-status", "contact-information"),
        review.check_applicant_coverage,
    )
    return failure if failure is not None else review.ok()


def validate_family_state_for_review(
    state: ApplicationState,
    config: CdcpConfig,
    locale: str = "en",
    today: Optional[date] = None,
) -> FlowResult[NarrowedApplicationState]:
    """Check a family application, including every saved child, is ready for review."""
    review = _Review(state, config, TypeOfApplication.FAMILY, locale, today)
    failure = _first_failure(
        review.check_flow,
        lambda: review.check_applicant("marital-status", "contact-information"),
        review.check_applicant_coverage,
        review.check_children,
    )
    return failure if failure is not None else review.ok()


def validate_children_state_for_review(
    state: ApplicationState,
    config: CdcpConfig,
    locale: str = "en",
    today: Optional[date] = None,
) -> FlowResult[NarrowedApplicationState]:
    """Check a children-only application is ready for review.

    The applicant is the parent or guardian; their own coverage answers are
    not required.
    """
    review = _Review(state, config, TypeOfApplication.CHILDREN, locale, today)
    failure = _first_failure(
        review.check_flow,
        lambda: review.check_applicant("parent-or-guardian", "parent-or-guardian"),
        review.check_children,
    )
    return failure if failure is not None else review.ok()


__all__ = [
    "validate_adult_state_for_review",
    "validate_family_state_for_review",
    "validate_children_state_for_review",
]
