"""Renewal submission mapper for the hub-spoke wizard.

Same reconciliation as ``BenefitRenewalStateMapper`` with the hub-spoke
channel's own precedence rules:

- marital status is resolved existing-first (``existing ?? declared``), so a
  status on file is never replaced by the wizard's answer
- partner information is always taken as declared in the wizard
- any email entered in the wizard replaces the one on file
- no change indicators are produced
"""

from typing import Optional

from cdcp_core.mappers.common import to_partner_information
from cdcp_core.mappers.renewal import BenefitRenewalStateMapper
from cdcp_core.models.client import ClientApplicantInformation, ClientApplication
from cdcp_core.models.state import ApplicationState
from cdcp_core.models.submission import PartnerInformationDto


class HubSpokeBenefitRenewalStateMapper(BenefitRenewalStateMapper):
    """Map hub-spoke renewal wizard state to the renewal submission DTO."""

    include_change_indicators = False

    def has_email_changed(self, state: ApplicationState, client_application: ClientApplication) -> bool:
        return bool(state.email)

    def resolve_marital_status(self, existing: ClientApplicantInformation, declared: Optional[str]) -> Optional[str]:
        return existing.marital_status if existing.marital_status is not None else declared

    def resolve_partner_information(self, state: ApplicationState, client_application: ClientApplication) -> Optional[PartnerInformationDto]:
        return to_partner_information(state.partner_information)

    def resolve_communication_email(self, state: ApplicationState, client_application: ClientApplication) -> Optional[str]:
        return state.email


__all__ = [
    "HubSpokeBenefitRenewalStateMapper",
]
