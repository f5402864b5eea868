"""Reconciliation helpers shared by the submission mappers.

Each helper combines what the user declared in the wizard with what is on
the client's existing record. A declared change that reports
``has_changed=False`` always yields the existing value, whatever its
``value`` holds.
"""

from typing import Optional, Sequence, TypeVar, Union

import structlog

from cdcp_core.exceptions import DataIntegrityError, PreconditionError
from cdcp_core.models.client import (
    ClientChild,
    ClientCommunicationPreferences,
    ClientContactInformation,
    ClientPartnerInformation,
)
from cdcp_core.models.state import (
    AddressState,
    ChildState,
    CommunicationPreferencesState,
    DeclaredChange,
    DentalBenefitsState,
    PartnerInformationState,
    PhoneNumberState,
)
from cdcp_core.models.submission import (
    ChildInformationDto,
    CommunicationPreferencesDto,
    ContactInformationDto,
    PartnerInformationDto,
    RenewalChildDto,
)

logger = structlog.get_logger()

T = TypeVar("T")


def declared_or_existing(declared: Optional[DeclaredChange[T]], existing: Optional[T]) -> Optional[T]:
    """Pick the declared value or the existing one.

    Returns the declared value when it changed, the existing value when it
    did not, and None when the question was never answered.
    """
    if declared is None:
        return None
    return declared.resolve(existing)


def has_declared_change(declared: Optional[DeclaredChange]) -> bool:
    return declared is not None and declared.has_changed


def _require(value: Optional[T], field: str) -> T:
    if value is None:
        logger.error("client_record_field_missing", field=field)
        raise DataIntegrityError(f"Expected existing contact information {field} to be defined", field=field)
    return value


# =============================================================================
# Dental benefits
# =============================================================================


def to_dental_benefits(
    existing_dental_benefits: Sequence[str],
    has_changed: bool,
    renewed_dental_benefits: Optional[DentalBenefitsState],
) -> list[str]:
    """Program ids the applicant is enrolled in.

    Unchanged benefits pass through. Changed benefits are rebuilt as the
    federal program id followed by the provincial/territorial one, each only
    when the user said they have it and named a program.
    """
    if not has_changed:
        return list(existing_dental_benefits)
    if renewed_dental_benefits is None:
        return []

    dental_benefits: list[str] = []
    if renewed_dental_benefits.has_federal_benefits and renewed_dental_benefits.federal_social_program:
        dental_benefits.append(renewed_dental_benefits.federal_social_program)
    if (
        renewed_dental_benefits.has_provincial_territorial_benefits
        and renewed_dental_benefits.provincial_territorial_social_program
    ):
        dental_benefits.append(renewed_dental_benefits.provincial_territorial_social_program)
    return dental_benefits


def declared_dental_benefits(existing: Sequence[str], declared: Optional[DeclaredChange[DentalBenefitsState]]) -> list[str]:
    """``to_dental_benefits`` driven by a declared change; unanswered counts as unchanged."""
    if declared is None:
        return list(existing)
    return to_dental_benefits(existing, declared.has_changed, declared.value)


# =============================================================================
# Children
# =============================================================================


def to_children(
    existing_children: Sequence[ClientChild],
    renewed_children: Sequence[ChildState],
) -> list[RenewalChildDto]:
    """Pair each renewed child with the child on file and merge them.

    Children are matched on ``existing.client_number == renewed.member_id``.
    Identity (client id and number, SIN) comes from the record; name, date
    of birth, parent attestation and coverage answers come from the wizard.

    Raises:
        PreconditionError: If a renewed child is incomplete or matches no
            child on file
    """
    result: list[RenewalChildDto] = []
    for renewed in renewed_children:
        if renewed.information is None:
            logger.error("renewed_child_incomplete", child_id=renewed.id, field="information")
            raise PreconditionError("Expected renewed child information to be defined", field="information", details={"child_id": renewed.id})

        existing = next(
            (child for child in existing_children if child.information.client_number == renewed.information.member_id),
            None,
        )
        if existing is None:
            logger.error("renewed_child_unmatched", child_id=renewed.id, member_id=renewed.information.member_id)
            raise PreconditionError(
                "Expected renewed child to match an existing child",
                field="member_id",
                details={"child_id": renewed.id, "member_id": renewed.information.member_id},
            )

        if renewed.dental_insurance is None:
            logger.error("renewed_child_incomplete", child_id=renewed.id, field="dental_insurance")
            raise PreconditionError("Expected renewed child dental insurance to be defined", field="dental_insurance", details={"child_id": renewed.id})

        result.append(
            RenewalChildDto(
                client_id=existing.information.client_id,
                client_number=existing.information.client_number,
                dental_benefits=declared_dental_benefits(existing.dental_benefits, renewed.dental_benefits),
                dental_insurance=renewed.dental_insurance,
                information=ChildInformationDto(
                    first_name=renewed.information.first_name,
                    last_name=renewed.information.last_name,
                    date_of_birth=renewed.information.date_of_birth,
                    is_parent=renewed.information.is_parent,
                    social_insurance_number=existing.information.social_insurance_number,
                ),
            )
        )
    return result


# =============================================================================
# Contact information
# =============================================================================


def _address_fields(prefix: str, address: AddressState) -> dict[str, Optional[str]]:
    return {
        f"{prefix}_address": address.address,
        f"{prefix}_apartment": None,
        f"{prefix}_city": address.city,
        f"{prefix}_country": address.country,
        f"{prefix}_postal_code": address.postal_code,
        f"{prefix}_province": address.province,
    }


def to_home_address(
    existing: ClientContactInformation,
    home_address: Optional[DeclaredChange[AddressState]],
    is_home_address_same_as_mailing_address: Optional[bool],
    mailing_address: Optional[DeclaredChange[AddressState]],
) -> dict[str, Optional[str]]:
    """Home address fields.

    When home is the same as mailing, they are copied from the declared
    mailing address, or from the mailing address on file if none was
    declared.

    Raises:
        DataIntegrityError: If the home address on file must be used but
            lacks its address, city or country
    """
    if is_home_address_same_as_mailing_address:
        if has_declared_change(mailing_address):
            return _address_fields("home", mailing_address.value)
        return {
            "home_address": existing.mailing_address,
            "home_apartment": existing.mailing_apartment,
            "home_city": existing.mailing_city,
            "home_country": existing.mailing_country,
            "home_postal_code": existing.mailing_postal_code,
            "home_province": existing.mailing_province,
        }

    if has_declared_change(home_address):
        return _address_fields("home", home_address.value)

    return {
        "home_address": _require(existing.home_address, "home_address"),
        "home_apartment": existing.home_apartment,
        "home_city": _require(existing.home_city, "home_city"),
        "home_country": _require(existing.home_country, "home_country"),
        "home_postal_code": existing.home_postal_code,
        "home_province": existing.home_province,
    }


def to_mailing_address(
    existing: ClientContactInformation,
    mailing_address: Optional[DeclaredChange[AddressState]],
) -> dict[str, Optional[str]]:
    if has_declared_change(mailing_address):
        return _address_fields("mailing", mailing_address.value)
    return {
        "mailing_address": existing.mailing_address,
        "mailing_apartment": existing.mailing_apartment,
        "mailing_city": existing.mailing_city,
        "mailing_country": existing.mailing_country,
        "mailing_postal_code": existing.mailing_postal_code,
        "mailing_province": existing.mailing_province,
    }


def has_address_changed(
    home_address: Optional[DeclaredChange[AddressState]],
    mailing_address: Optional[DeclaredChange[AddressState]],
) -> bool:
    return has_declared_change(home_address) or has_declared_change(mailing_address)


def to_contact_information(
    existing: ClientContactInformation,
    *,
    home_address: Optional[DeclaredChange[AddressState]] = None,
    mailing_address: Optional[DeclaredChange[AddressState]] = None,
    is_home_address_same_as_mailing_address: Optional[bool] = None,
    phone_number: Optional[DeclaredChange[PhoneNumberState]] = None,
    has_email_changed: bool = False,
    email: Optional[str] = None,
) -> ContactInformationDto:
    """Reconcile addresses, phone and email against the record.

    If either address changed, home and mailing are both recomputed;
    otherwise the whole address block on file is carried through.
    """
    if has_address_changed(home_address, mailing_address):
        fields = {
            "copy_mailing_address": bool(is_home_address_same_as_mailing_address),
            **to_home_address(existing, home_address, is_home_address_same_as_mailing_address, mailing_address),
            **to_mailing_address(existing, mailing_address),
        }
    else:
        fields = {
            "copy_mailing_address": existing.copy_mailing_address,
            "home_address": _require(existing.home_address, "home_address"),
            "home_apartment": existing.home_apartment,
            "home_city": _require(existing.home_city, "home_city"),
            "home_country": _require(existing.home_country, "home_country"),
            "home_postal_code": existing.home_postal_code,
            "home_province": existing.home_province,
            **to_mailing_address(existing, None),
        }

    if has_declared_change(phone_number):
        fields["phone_number"] = phone_number.value.primary
        fields["phone_number_alt"] = phone_number.value.alternate
    else:
        fields["phone_number"] = existing.phone_number
        fields["phone_number_alt"] = existing.phone_number_alt

    fields["email"] = email if has_email_changed else existing.email
    return ContactInformationDto(**fields)


# =============================================================================
# Communication preferences and partner
# =============================================================================


def to_communication_preferences(
    existing: ClientCommunicationPreferences,
    declared: DeclaredChange[CommunicationPreferencesState],
    *,
    email: Optional[str],
    email_verified: Optional[bool],
) -> CommunicationPreferencesDto:
    """Preferred language and methods, declared when changed, else from the record."""
    if declared.has_changed:
        return CommunicationPreferencesDto(
            email=email,
            email_verified=email_verified,
            preferred_language=declared.value.preferred_language,
            preferred_method=declared.value.preferred_method,
            preferred_method_government_of_canada=declared.value.preferred_notification_method,
        )
    return CommunicationPreferencesDto(
        email=email,
        email_verified=email_verified,
        preferred_language=existing.preferred_language,
        preferred_method=existing.preferred_method_sun_life or existing.preferred_method,
        preferred_method_government_of_canada=existing.preferred_method_government_of_canada,
    )


def to_partner_information(
    partner: Optional[Union[PartnerInformationState, ClientPartnerInformation]],
) -> Optional[PartnerInformationDto]:
    if partner is None:
        return None
    return PartnerInformationDto(
        confirm=partner.confirm,
        year_of_birth=partner.year_of_birth,
        social_insurance_number=partner.social_insurance_number,
    )


__all__ = [
    "declared_or_existing",
    "has_declared_change",
    "to_dental_benefits",
    "declared_dental_benefits",
    "to_children",
    "to_home_address",
    "to_mailing_address",
    "has_address_changed",
    "to_contact_information",
    "to_communication_preferences",
    "to_partner_information",
]
