"""First-time application mapper for the hub-spoke wizard.

Intake has no client record to reconcile with: every answer is taken as
declared, and children still being added are left out. The mapper still
enforces what the review step should already have guaranteed, raising
``PreconditionError`` otherwise.
"""

from datetime import date
from typing import Optional, Sequence

import structlog

from cdcp_core.children import list_children
from cdcp_core.config import EligibilityConfig
from cdcp_core.eligibility import AgeCategory, age_category, assessment_date
from cdcp_core.exceptions import PreconditionError
from cdcp_core.mappers.common import declared_dental_benefits, has_declared_change, to_partner_information
from cdcp_core.models.state import AddressState, ApplicationState, ChildState
from cdcp_core.models.submission import (
    ApplicantInformationDto,
    ApplicationChildDto,
    BenefitApplicationDto,
    ChildInformationDto,
    CommunicationPreferencesDto,
    ContactInformationDto,
    SubmissionTypeOfApplication,
)

logger = structlog.get_logger()


def _precondition(state: ApplicationState, field: str, message: Optional[str] = None) -> PreconditionError:
    logger.error("application_mapping_precondition_failed", state_id=state.id, field=field)
    return PreconditionError(message or f"Expected {field} to be defined", field=field)


class HubSpokeBenefitApplicationStateMapper:
    """Map intake wizard state to the application submission DTO.

    Args:
        today: Date used to evaluate the applicant's age; defaults to today
        eligibility: Eligibility settings; when given, ages are assessed at
            ``assessment_date`` so the configured current date and coverage
            start date apply
    """

    def __init__(self, today: Optional[date] = None, eligibility: Optional[EligibilityConfig] = None) -> None:
        self._today = today
        self._eligibility = eligibility

    def reference_date(self) -> Optional[date]:
        if self._eligibility is None:
            return self._today
        return assessment_date(self._eligibility, self._today)

    def adult_to_dto(self, state: ApplicationState) -> BenefitApplicationDto:
        return self._applicant_to_dto(state, SubmissionTypeOfApplication.ADULT, children=[])

    def family_to_dto(self, state: ApplicationState) -> BenefitApplicationDto:
        return self._applicant_to_dto(state, SubmissionTypeOfApplication.ADULT_CHILD, children=list_children(state))

    def children_to_dto(self, state: ApplicationState) -> BenefitApplicationDto:
        return self._to_dto(
            state,
            SubmissionTypeOfApplication.CHILD,
            children=list_children(state),
            living_independently=state.living_independently,
        )

    def _applicant_to_dto(
        self,
        state: ApplicationState,
        type_of_application: SubmissionTypeOfApplication,
        children: Sequence[ChildState],
    ) -> BenefitApplicationDto:
        applicant = self._require_applicant(state)
        is_youth = age_category(applicant.date_of_birth, self.reference_date()) == AgeCategory.YOUTH
        if is_youth and state.living_independently is None:
            raise _precondition(state, "living_independently")

        return self._to_dto(
            state,
            type_of_application,
            children=children,
            living_independently=state.living_independently if is_youth else None,
        )

    def _require_applicant(self, state: ApplicationState):
        if state.applicant_information is None:
            raise _precondition(state, "applicant_information")
        return state.applicant_information

    def _to_dto(
        self,
        state: ApplicationState,
        type_of_application: SubmissionTypeOfApplication,
        *,
        children: Sequence[ChildState],
        living_independently: Optional[bool],
    ) -> BenefitApplicationDto:
        applicant = self._require_applicant(state)
        if state.marital_status is None:
            raise _precondition(state, "marital_status")
        if not has_declared_change(state.communication_preferences):
            raise _precondition(state, "communication_preferences")

        preferences = state.communication_preferences.value
        dto = BenefitApplicationDto(
            applicant_information=ApplicantInformationDto(
                member_id=applicant.member_id,
                first_name=applicant.first_name,
                last_name=applicant.last_name,
                date_of_birth=applicant.date_of_birth,
                social_insurance_number=applicant.social_insurance_number,
                marital_status=state.marital_status,
            ),
            application_year_id=state.application_year.application_year_id,
            children=[self._to_child(child) for child in children],
            communication_preferences=CommunicationPreferencesDto(
                email=state.email,
                email_verified=state.email_verified,
                preferred_language=preferences.preferred_language,
                preferred_method=preferences.preferred_method,
                preferred_method_government_of_canada=preferences.preferred_notification_method,
            ),
            contact_information=self._to_contact_information(state),
            date_of_birth=applicant.date_of_birth,
            marital_status=state.marital_status,
            dental_benefits=declared_dental_benefits([], state.dental_benefits),
            dental_insurance=state.dental_insurance,
            living_independently=living_independently,
            partner_information=to_partner_information(state.partner_information),
            terms_and_conditions=state.terms_and_conditions,
            type_of_application=type_of_application,
        )
        logger.info("application_mapped", state_id=state.id, type_of_application=type_of_application.value, children=len(dto.children))
        return dto

    def _to_child(self, child: ChildState) -> ApplicationChildDto:
        # only completed children reach here, see list_children
        return ApplicationChildDto(
            id=child.id,
            dental_benefits=declared_dental_benefits([], child.dental_benefits),
            dental_insurance=child.dental_insurance,
            information=ChildInformationDto(
                first_name=child.information.first_name,
                last_name=child.information.last_name,
                date_of_birth=child.information.date_of_birth,
                is_parent=child.information.is_parent,
                social_insurance_number=child.information.social_insurance_number,
            ),
        )

    def _to_contact_information(self, state: ApplicationState) -> ContactInformationDto:
        if not has_declared_change(state.mailing_address):
            raise _precondition(state, "mailing_address")
        if not has_declared_change(state.phone_number):
            raise _precondition(state, "phone_number")

        mailing = state.mailing_address.value
        if state.is_home_address_same_as_mailing_address:
            home: AddressState = mailing
        elif has_declared_change(state.home_address):
            home = state.home_address.value
        else:
            raise _precondition(state, "home_address")

        return ContactInformationDto(
            copy_mailing_address=bool(state.is_home_address_same_as_mailing_address),
            home_address=home.address,
            home_city=home.city,
            home_country=home.country,
            home_postal_code=home.postal_code,
            home_province=home.province,
            mailing_address=mailing.address,
            mailing_city=mailing.city,
            mailing_country=mailing.country,
            mailing_postal_code=mailing.postal_code,
            mailing_province=mailing.province,
            phone_number=state.phone_number.value.primary,
            phone_number_alt=state.phone_number.value.alternate,
            email=state.email,
        )


__all__ = [
    "HubSpokeBenefitApplicationStateMapper",
]
