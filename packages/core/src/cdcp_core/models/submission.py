"""Submission DTOs handed to the external benefits service.

These are the output boundary of the core. Field names and nesting are part
of the wire contract and serialize to camelCase via ``to_wire()``.
"""

from enum import Enum
from typing import Optional

from pydantic import Field

from cdcp_core.models.base import CamelModel
from cdcp_core.models.state import DentalInsuranceState, TermsAndConditionsState


class SubmissionTypeOfApplication(str, Enum):
    """Composition of a submitted application."""
    ADULT = "adult"
    ADULT_CHILD = "adult-child"
    CHILD = "child"


class ChangeIndicators(CamelModel):
    """Which parts of the client record the renewal changes."""
    has_address_changed: bool
    has_email_changed: bool
    has_marital_status_changed: bool
    has_phone_changed: bool


class ContactInformationDto(CamelModel):
    copy_mailing_address: bool = False
    home_address: Optional[str] = None
    home_apartment: Optional[str] = None
    home_city: Optional[str] = None
    home_country: Optional[str] = None
    home_postal_code: Optional[str] = None
    home_province: Optional[str] = None
    mailing_address: Optional[str] = None
    mailing_apartment: Optional[str] = None
    mailing_city: Optional[str] = None
    mailing_country: Optional[str] = None
    mailing_postal_code: Optional[str] = None
    mailing_province: Optional[str] = None
    phone_number: Optional[str] = None
    phone_number_alt: Optional[str] = None
    email: Optional[str] = None


class CommunicationPreferencesDto(CamelModel):
    email: Optional[str] = None
    email_verified: Optional[bool] = None
    preferred_language: Optional[str] = None
    preferred_method: Optional[str] = None
    preferred_method_government_of_canada: Optional[str] = None


class PartnerInformationDto(CamelModel):
    confirm: Optional[bool] = None
    year_of_birth: Optional[str] = None
    social_insurance_number: str


class ChildInformationDto(CamelModel):
    first_name: str
    last_name: str
    date_of_birth: str
    is_parent: bool
    social_insurance_number: Optional[str] = None


# =============================================================================
# Renewal
# =============================================================================


class RenewalApplicantInformationDto(CamelModel):
    first_name: str
    last_name: str
    marital_status: Optional[str] = None
    social_insurance_number: str
    client_id: str
    client_number: Optional[str] = None


class RenewalChildDto(CamelModel):
    """A renewed child: identity from the record, answers from the wizard."""
    client_id: str
    client_number: Optional[str] = None
    dental_benefits: list[str] = Field(default_factory=list)
    dental_insurance: DentalInsuranceState
    information: ChildInformationDto


class BenefitRenewalDto(CamelModel):
    """Reconciled renewal submission.

    ``change_indicators`` is only produced by the direct renewal mapper.
    """
    applicant_information: RenewalApplicantInformationDto
    application_year_id: str
    change_indicators: Optional[ChangeIndicators] = None
    children: list[RenewalChildDto] = Field(default_factory=list)
    communication_preferences: CommunicationPreferencesDto
    contact_information: ContactInformationDto
    date_of_birth: Optional[str] = None
    dental_benefits: list[str] = Field(default_factory=list)
    dental_insurance: Optional[DentalInsuranceState] = None
    has_filed_taxes: Optional[bool] = None
    is_invitation_to_apply_client: bool = False
    partner_information: Optional[PartnerInformationDto] = None
    terms_and_conditions: Optional[TermsAndConditionsState] = None
    type_of_application: SubmissionTypeOfApplication
    user_id: str = "anonymous"


# =============================================================================
# Intake
# =============================================================================


class ApplicantInformationDto(CamelModel):
    member_id: Optional[str] = None
    first_name: str
    last_name: str
    date_of_birth: str
    social_insurance_number: str
    marital_status: str


class ApplicationChildDto(CamelModel):
    id: str
    dental_benefits: list[str] = Field(default_factory=list)
    dental_insurance: DentalInsuranceState
    information: ChildInformationDto


class BenefitApplicationDto(CamelModel):
    """First-time application submission."""
    applicant_information: ApplicantInformationDto
    application_year_id: str
    children: list[ApplicationChildDto] = Field(default_factory=list)
    communication_preferences: CommunicationPreferencesDto
    contact_information: ContactInformationDto
    date_of_birth: str
    marital_status: str
    dental_benefits: list[str] = Field(default_factory=list)
    dental_insurance: Optional[DentalInsuranceState] = None
    living_independently: Optional[bool] = None
    partner_information: Optional[PartnerInformationDto] = None
    terms_and_conditions: Optional[TermsAndConditionsState] = None
    type_of_application: SubmissionTypeOfApplication
    user_id: str = "anonymous"


__all__ = [
    "SubmissionTypeOfApplication",
    "ChangeIndicators",
    "ContactInformationDto",
    "CommunicationPreferencesDto",
    "PartnerInformationDto",
    "ChildInformationDto",
    "RenewalApplicantInformationDto",
    "RenewalChildDto",
    "BenefitRenewalDto",
    "ApplicantInformationDto",
    "ApplicationChildDto",
    "BenefitApplicationDto",
]
