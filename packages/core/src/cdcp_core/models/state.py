"""Wizard state models.

The application wizard accumulates answers across many steps into a single
``ApplicationState`` record kept in the user's session. Most fields start
empty and are filled in by successive steps; a handful are fixed when the
wizard starts and can never be changed by a save.

Answers that may or may not differ from the client's existing record are
wrapped in ``DeclaredChange``:

    DeclaredChange(has_changed=False)                   # keep what is on file
    DeclaredChange(has_changed=True, value=new_address) # use the new value

Usage:
    state = ApplicationState.model_validate(session.get(key))
    if state.phone_number and state.phone_number.has_changed:
        print(state.phone_number.value.primary)
"""

from datetime import datetime
from enum import Enum
from typing import Generic, Literal, Optional, TypeVar

from pydantic import ConfigDict, Field, model_validator

from cdcp_core.models.base import CamelModel
from cdcp_core.models.client import ClientApplication

ValueT = TypeVar("ValueT")


class Context(str, Enum):
    """Whether the wizard is a first-time application or a renewal."""
    INTAKE = "intake"
    RENEWAL = "renewal"


class InputModel(str, Enum):
    """How much information the wizard collects."""
    FULL = "full"
    SIMPLIFIED = "simplified"


class TypeOfApplication(str, Enum):
    """Who the application is for."""
    ADULT = "adult"
    CHILDREN = "children"
    FAMILY = "family"
    DELEGATE = "delegate"


# =============================================================================
# Declared change wrapper
# =============================================================================


class DeclaredChange(CamelModel, Generic[ValueT]):
    """Answer to "has X changed?", with the new value when it has.

    When ``has_changed`` is false, ``value`` must be ignored and the client's
    existing value used instead.
    """

    has_changed: bool
    value: Optional[ValueT] = None

    @model_validator(mode="after")
    def require_value_when_changed(self) -> "DeclaredChange[ValueT]":
        if self.has_changed and self.value is None:
            raise ValueError("value is required when has_changed is true")
        return self

    def resolve(self, existing: Optional[ValueT]) -> Optional[ValueT]:
        """Return the declared value if changed, otherwise ``existing``."""
        return self.value if self.has_changed else existing


# =============================================================================
# Step answers
# =============================================================================


class ApplicationYearState(CamelModel):
    application_year_id: str
    tax_year: str
    dependent_eligibility_end_date: str


class ApplicantInformationState(CamelModel):
    member_id: Optional[str] = None
    first_name: str
    last_name: str
    date_of_birth: str
    social_insurance_number: str


class PartnerInformationState(CamelModel):
    confirm: bool
    year_of_birth: str
    social_insurance_number: str


class CommunicationPreferencesState(CamelModel):
    preferred_language: str
    preferred_method: str
    preferred_notification_method: str


class DentalBenefitsState(CamelModel):
    """Federal and provincial/territorial dental program answers."""
    has_federal_benefits: bool
    federal_social_program: Optional[str] = None
    has_provincial_territorial_benefits: bool
    provincial_territorial_social_program: Optional[str] = None
    province: Optional[str] = None


class DentalInsuranceState(CamelModel):
    has_dental_insurance: bool
    dental_insurance_eligibility_confirmation: Optional[bool] = None


class AddressState(CamelModel):
    address: str
    city: str
    country: str
    postal_code: Optional[str] = None
    province: Optional[str] = None


class PhoneNumberState(CamelModel):
    primary: str
    alternate: Optional[str] = None


class VerifyEmailState(CamelModel):
    verification_code: str
    verification_attempts: int = 0


class SubmitTermsState(CamelModel):
    acknowledge_info: bool
    acknowledge_criteria: bool


class SubmissionInfoState(CamelModel):
    """Confirmation returned by the submission service."""
    confirmation_code: str
    submitted_on: datetime


class TermsAndConditionsState(CamelModel):
    acknowledge_terms: bool
    acknowledge_privacy: bool
    share_data: bool


class ChildInformationState(CamelModel):
    member_id: Optional[str] = None
    first_name: str
    last_name: str
    date_of_birth: str
    is_parent: bool
    has_social_insurance_number: bool
    social_insurance_number: Optional[str] = None


class ChildState(CamelModel):
    """A child added to the application.

    A child missing any of its three answer groups is "new" (see
    ``cdcp_core.children.is_new_child_state``).
    """
    id: str
    information: Optional[ChildInformationState] = None
    dental_insurance: Optional[DentalInsuranceState] = None
    dental_benefits: Optional[DeclaredChange[DentalBenefitsState]] = None


# =============================================================================
# Application state
# =============================================================================


class ApplicationStateFields(CamelModel):
    """Fields a wizard step is allowed to save."""

    applicant_information: Optional[ApplicantInformationState] = None
    partner_information: Optional[PartnerInformationState] = None
    communication_preferences: Optional[DeclaredChange[CommunicationPreferencesState]] = None
    email: Optional[str] = None
    verify_email: Optional[VerifyEmailState] = None
    email_verified: Optional[bool] = None
    marital_status: Optional[str] = None
    dental_benefits: Optional[DeclaredChange[DentalBenefitsState]] = None
    dental_insurance: Optional[DentalInsuranceState] = None
    living_independently: Optional[bool] = None
    is_home_address_same_as_mailing_address: Optional[bool] = None
    mailing_address: Optional[DeclaredChange[AddressState]] = None
    home_address: Optional[DeclaredChange[AddressState]] = None
    phone_number: Optional[DeclaredChange[PhoneNumberState]] = None
    submit_terms: Optional[SubmitTermsState] = None
    submission_info: Optional[SubmissionInfoState] = None
    has_filed_taxes: Optional[bool] = None
    terms_and_conditions: Optional[TermsAndConditionsState] = None
    type_of_application: Optional[TypeOfApplication] = None
    client_application: Optional[ClientApplication] = None
    applicant_client_ids_to_renew: Optional[list[str]] = None
    children: list[ChildState] = Field(default_factory=list)


class ApplicationStatePatch(ApplicationStateFields):
    """A partial update produced by a wizard step.

    The fields fixed at creation (``id``, ``context``, ``input_model``,
    ``last_updated_on``, ``application_year``) are not declared here, and
    unknown fields are rejected, so a patch cannot carry them.
    """

    model_config = ConfigDict(extra="forbid")


IMMUTABLE_STATE_FIELDS: frozenset[str] = frozenset(
    {"id", "context", "input_model", "last_updated_on", "application_year"}
)
"""State fields that no save may change."""


class ApplicationState(ApplicationStateFields):
    """The root wizard record.

    Attributes:
        id: Opaque wizard id (UUID), part of the session key
        context: Intake or renewal, fixed at creation
        input_model: Full or simplified, fixed at creation
        last_updated_on: UTC timestamp of the last save, drives expiry
        application_year: Coverage year the application is for
    """

    id: str
    context: Context
    input_model: InputModel
    last_updated_on: datetime
    application_year: ApplicationYearState

    @property
    def flow_key(self) -> Optional[str]:
        """``{input_model}-{type_of_application}``, or None before the type is chosen."""
        if self.type_of_application is None:
            return None
        return f"{self.input_model.value}-{self.type_of_application.value}"


class AdultApplicationState(ApplicationState):
    """State of a wizard applying for the primary applicant only."""
    type_of_application: Literal[TypeOfApplication.ADULT]


class AdultChildApplicationState(ApplicationState):
    """State of a wizard applying for the primary applicant and children."""
    type_of_application: Literal[TypeOfApplication.FAMILY]


class ChildApplicationState(ApplicationState):
    """State of a wizard applying for children only."""
    type_of_application: Literal[TypeOfApplication.CHILDREN]


__all__ = [
    "Context",
    "InputModel",
    "TypeOfApplication",
    "DeclaredChange",
    "ApplicationYearState",
    "ApplicantInformationState",
    "PartnerInformationState",
    "CommunicationPreferencesState",
    "DentalBenefitsState",
    "DentalInsuranceState",
    "AddressState",
    "PhoneNumberState",
    "VerifyEmailState",
    "SubmitTermsState",
    "SubmissionInfoState",
    "TermsAndConditionsState",
    "ChildInformationState",
    "ChildState",
    "ApplicationStateFields",
    "ApplicationStatePatch",
    "IMMUTABLE_STATE_FIELDS",
    "ApplicationState",
    "AdultApplicationState",
    "AdultChildApplicationState",
    "ChildApplicationState",
]
