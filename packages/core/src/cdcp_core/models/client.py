"""Snapshot of a pre-existing client record.

A renewal starts from the client's current application as held by the
benefits system. The snapshot is read-only: mappers reconcile declared
changes against it but never mutate it.
"""

from typing import Optional

from pydantic import Field

from cdcp_core.models.base import CamelModel


class ClientApplicantInformation(CamelModel):
    """Identity of the primary applicant on file."""
    client_id: str
    client_number: Optional[str] = None
    first_name: str
    last_name: str
    marital_status: Optional[str] = None
    social_insurance_number: str


class ClientChildInformation(CamelModel):
    """Identity of a child on file."""
    client_id: str
    client_number: Optional[str] = None
    first_name: str
    last_name: str
    date_of_birth: str
    is_parent: bool = True
    social_insurance_number: Optional[str] = None


class ClientChild(CamelModel):
    """A child on file with their current coverage."""
    information: ClientChildInformation
    dental_benefits: list[str] = Field(default_factory=list)
    dental_insurance: Optional[bool] = None


class ClientCommunicationPreferences(CamelModel):
    """Communication preferences on file."""
    email: Optional[str] = None
    preferred_language: str
    preferred_method: Optional[str] = None
    preferred_method_sun_life: Optional[str] = None
    preferred_method_government_of_canada: Optional[str] = None


class ClientContactInformation(CamelModel):
    """Addresses, phone numbers and email on file.

    Home fields are optional here because legacy records may lack them; the
    mappers raise ``DataIntegrityError`` when they must carry them through.
    """
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


class ClientPartnerInformation(CamelModel):
    """Spouse or common-law partner on file."""
    confirm: bool = True
    year_of_birth: Optional[str] = None
    social_insurance_number: str


class ClientApplication(CamelModel):
    """The client's existing application.

    Attributes:
        applicant_information: Primary applicant identity
        children: Children covered under the application
        communication_preferences: Preferred language and methods
        contact_information: Addresses, phone numbers and email
        date_of_birth: Primary applicant's date of birth (ISO-8601)
        dental_benefits: Ids of federal/provincial programs the applicant has
        dental_insurance: Whether the applicant has private dental insurance
        copay_tier_earning_record: Whether the client qualifies for the
            simplified renewal input model
        t4_dental_indicator: Employer-reported dental benefit access
    """
    applicant_information: ClientApplicantInformation
    children: list[ClientChild] = Field(default_factory=list)
    communication_preferences: ClientCommunicationPreferences
    contact_information: ClientContactInformation
    date_of_birth: str
    dental_benefits: list[str] = Field(default_factory=list)
    dental_insurance: Optional[bool] = None
    has_filed_taxes: Optional[bool] = None
    is_invitation_to_apply_client: bool = False
    living_independently: Optional[bool] = None
    partner_information: Optional[ClientPartnerInformation] = None
    type_of_application: Optional[str] = None
    copay_tier_earning_record: bool = False
    t4_dental_indicator: Optional[bool] = None


__all__ = [
    "ClientApplicantInformation",
    "ClientChildInformation",
    "ClientChild",
    "ClientCommunicationPreferences",
    "ClientContactInformation",
    "ClientPartnerInformation",
    "ClientApplication",
]
