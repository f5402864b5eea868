"""Renewal submission mapper for the protected (signed-in) wizard.

Reduces a completed renewal wizard into a ``BenefitRenewalDto`` by
reconciling the user's declared changes with the client record captured
when the wizard started. The DTO carries change indicators telling the
benefits service which parts of the record to update.

Marital status is resolved declared-first: a marital status saved in the
wizard replaces the one on file (``declared ?? existing``).

Example:
    mapper = BenefitRenewalStateMapper()
    dto = mapper.adult_child_to_dto(state, user_id=user.id)
    submission_service.submit(dto.to_wire())
"""

from typing import Optional, Sequence

import structlog

from cdcp_core.children import list_children
from cdcp_core.exceptions import PreconditionError
from cdcp_core.mappers.common import (
    declared_dental_benefits,
    has_address_changed,
    has_declared_change,
    to_children,
    to_communication_preferences,
    to_contact_information,
    to_partner_information,
)
from cdcp_core.models.client import ClientApplicantInformation, ClientApplication
from cdcp_core.models.state import (
    ApplicationState,
    ChildState,
    CommunicationPreferencesState,
    DeclaredChange,
)
from cdcp_core.models.submission import (
    BenefitRenewalDto,
    ChangeIndicators,
    PartnerInformationDto,
    RenewalApplicantInformationDto,
    SubmissionTypeOfApplication,
)

logger = structlog.get_logger()


class BenefitRenewalStateMapper:
    """Map renewal wizard state to the renewal submission DTO.

    Each ``*_to_dto`` method expects state that has passed the flow guard
    and review validation; missing prerequisites raise
    ``PreconditionError``.
    """

    include_change_indicators: bool = True

    def adult_to_dto(self, state: ApplicationState, user_id: str = "anonymous") -> BenefitRenewalDto:
        """Renewal of the primary applicant alone."""
        return self._to_dto(
            state,
            user_id,
            renewed_children=[],
            type_of_application=SubmissionTypeOfApplication.ADULT,
            applicant_renewing=True,
        )

    def adult_child_to_dto(self, state: ApplicationState, user_id: str = "anonymous") -> BenefitRenewalDto:
        """Renewal of the primary applicant and their children."""
        renewed_children = list_children(state)
        type_of_application = (
            SubmissionTypeOfApplication.ADULT_CHILD if renewed_children else SubmissionTypeOfApplication.ADULT
        )
        return self._to_dto(
            state,
            user_id,
            renewed_children=renewed_children,
            type_of_application=type_of_application,
            applicant_renewing=True,
        )

    def child_to_dto(self, state: ApplicationState, user_id: str = "anonymous") -> BenefitRenewalDto:
        """Renewal of children only; the applicant's own coverage is not renewed."""
        return self._to_dto(
            state,
            user_id,
            renewed_children=list_children(state),
            type_of_application=SubmissionTypeOfApplication.CHILD,
            applicant_renewing=False,
        )

    def change_indicators(self, state: ApplicationState, client_application: ClientApplication) -> ChangeIndicators:
        """Which parts of the record the renewal changes."""
        return ChangeIndicators(
            has_address_changed=has_address_changed(state.home_address, state.mailing_address),
            has_email_changed=self.has_email_changed(state, client_application),
            has_marital_status_changed=self.has_marital_status_changed(state, client_application),
            has_phone_changed=has_declared_change(state.phone_number),
        )

    # =========================================================================
    # Precedence rules
    # =========================================================================

    def has_email_changed(self, state: ApplicationState, client_application: ClientApplication) -> bool:
        """A new email counts only once verified and when it differs from the one on file."""
        return (
            bool(state.email_verified)
            and bool(state.email)
            and state.email != client_application.contact_information.email
        )

    def has_marital_status_changed(self, state: ApplicationState, client_application: ClientApplication) -> bool:
        return state.marital_status is not None

    def resolve_marital_status(self, existing: ClientApplicantInformation, declared: Optional[str]) -> Optional[str]:
        return declared if declared is not None else existing.marital_status

    def resolve_partner_information(self, state: ApplicationState, client_application: ClientApplication) -> Optional[PartnerInformationDto]:
        if self.has_marital_status_changed(state, client_application):
            return to_partner_information(state.partner_information)
        return to_partner_information(client_application.partner_information)

    def resolve_communication_email(self, state: ApplicationState, client_application: ClientApplication) -> Optional[str]:
        if self.has_email_changed(state, client_application):
            return state.email
        return client_application.communication_preferences.email or client_application.contact_information.email

    # =========================================================================
    # Assembly
    # =========================================================================

    def _require_inputs(self, state: ApplicationState) -> tuple[ClientApplication, DeclaredChange[CommunicationPreferencesState]]:
        if state.communication_preferences is None:
            logger.error("renewal_mapping_precondition_failed", state_id=state.id, field="communication_preferences")
            raise PreconditionError("Expected communication_preferences to be defined", field="communication_preferences")
        if state.client_application is None:
            logger.error("renewal_mapping_precondition_failed", state_id=state.id, field="client_application")
            raise PreconditionError("Expected client_application to be defined", field="client_application")
        return state.client_application, state.communication_preferences

    def _to_applicant_information(self, existing: ClientApplicantInformation, declared_marital_status: Optional[str]) -> RenewalApplicantInformationDto:
        return RenewalApplicantInformationDto(
            first_name=existing.first_name,
            last_name=existing.last_name,
            marital_status=self.resolve_marital_status(existing, declared_marital_status),
            social_insurance_number=existing.social_insurance_number,
            client_id=existing.client_id,
            client_number=existing.client_number,
        )

    def _to_dto(
        self,
        state: ApplicationState,
        user_id: str,
        *,
        renewed_children: Sequence[ChildState],
        type_of_application: SubmissionTypeOfApplication,
        applicant_renewing: bool,
    ) -> BenefitRenewalDto:
        client_application, communication_preferences = self._require_inputs(state)

        if applicant_renewing and state.dental_insurance is None:
            logger.error("renewal_mapping_precondition_failed", state_id=state.id, field="dental_insurance")
            raise PreconditionError("Expected dental_insurance to be defined", field="dental_insurance")

        dto = BenefitRenewalDto(
            applicant_information=self._to_applicant_information(
                client_application.applicant_information, state.marital_status
            ),
            application_year_id=state.application_year.application_year_id,
            change_indicators=(
                self.change_indicators(state, client_application) if self.include_change_indicators else None
            ),
            children=to_children(client_application.children, renewed_children),
            communication_preferences=to_communication_preferences(
                client_application.communication_preferences,
                communication_preferences,
                email=self.resolve_communication_email(state, client_application),
                email_verified=state.email_verified,
            ),
            contact_information=to_contact_information(
                client_application.contact_information,
                home_address=state.home_address,
                mailing_address=state.mailing_address,
                is_home_address_same_as_mailing_address=state.is_home_address_same_as_mailing_address,
                phone_number=state.phone_number,
                has_email_changed=self.has_email_changed(state, client_application),
                email=state.email,
            ),
            date_of_birth=client_application.date_of_birth,
            dental_benefits=(
                declared_dental_benefits(client_application.dental_benefits, state.dental_benefits)
                if applicant_renewing
                else []
            ),
            dental_insurance=state.dental_insurance if applicant_renewing else None,
            has_filed_taxes=(
                state.has_filed_taxes if state.has_filed_taxes is not None else client_application.has_filed_taxes
            ),
            is_invitation_to_apply_client=client_application.is_invitation_to_apply_client,
            partner_information=self.resolve_partner_information(state, client_application),
            terms_and_conditions=state.terms_and_conditions,
            type_of_application=type_of_application,
            user_id=user_id,
        )
        logger.info(
            "renewal_mapped",
            state_id=state.id,
            mapper=type(self).__name__,
            type_of_application=type_of_application.value,
            children=len(dto.children),
        )
        return dto


__all__ = [
    "BenefitRenewalStateMapper",
]
