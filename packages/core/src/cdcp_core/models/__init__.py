"""Data models for the CDCP application core.

This package contains Pydantic models for:
- Wizard state (ApplicationState, ChildState, DeclaredChange, ...)
- Existing client records (ClientApplication, ...)
- Submission DTOs (BenefitRenewalDto, BenefitApplicationDto, ...)
"""

from cdcp_core.models.base import CamelModel
from cdcp_core.models.client import (
    ClientApplicantInformation,
    ClientApplication,
    ClientChild,
    ClientChildInformation,
    ClientCommunicationPreferences,
    ClientContactInformation,
    ClientPartnerInformation,
)
from cdcp_core.models.state import (
    IMMUTABLE_STATE_FIELDS,
    AddressState,
    AdultApplicationState,
    AdultChildApplicationState,
    ApplicantInformationState,
    ApplicationState,
    ApplicationStateFields,
    ApplicationStatePatch,
    ApplicationYearState,
    ChildApplicationState,
    ChildInformationState,
    ChildState,
    CommunicationPreferencesState,
    Context,
    DeclaredChange,
    DentalBenefitsState,
    DentalInsuranceState,
    InputModel,
    PartnerInformationState,
    PhoneNumberState,
    SubmissionInfoState,
    SubmitTermsState,
    TermsAndConditionsState,
    TypeOfApplication,
    VerifyEmailState,
)
from cdcp_core.models.submission import (
    ApplicantInformationDto,
    ApplicationChildDto,
    BenefitApplicationDto,
    BenefitRenewalDto,
    ChangeIndicators,
    ChildInformationDto,
    CommunicationPreferencesDto,
    ContactInformationDto,
    PartnerInformationDto,
    RenewalApplicantInformationDto,
    RenewalChildDto,
    SubmissionTypeOfApplication,
)

__all__ = [
    "CamelModel",
    # Client record
    "ClientApplicantInformation",
    "ClientApplication",
    "ClientChild",
    "ClientChildInformation",
    "ClientCommunicationPreferences",
    "ClientContactInformation",
    "ClientPartnerInformation",
    # Wizard state
    "IMMUTABLE_STATE_FIELDS",
    "AddressState",
    "AdultApplicationState",
    "AdultChildApplicationState",
    "ApplicantInformationState",
    "ApplicationState",
    "ApplicationStateFields",
    "ApplicationStatePatch",
    "ApplicationYearState",
    "ChildApplicationState",
    "ChildInformationState",
    "ChildState",
    "CommunicationPreferencesState",
    "Context",
    "DeclaredChange",
    "DentalBenefitsState",
    "DentalInsuranceState",
    "InputModel",
    "PartnerInformationState",
    "PhoneNumberState",
    "SubmissionInfoState",
    "SubmitTermsState",
    "TermsAndConditionsState",
    "TypeOfApplication",
    "VerifyEmailState",
    # Submission
    "ApplicantInformationDto",
    "ApplicationChildDto",
    "BenefitApplicationDto",
    "BenefitRenewalDto",
    "ChangeIndicators",
    "ChildInformationDto",
    "CommunicationPreferencesDto",
    "ContactInformationDto",
    "PartnerInformationDto",
    "RenewalApplicantInformationDto",
    "RenewalChildDto",
    "SubmissionTypeOfApplication",
]
