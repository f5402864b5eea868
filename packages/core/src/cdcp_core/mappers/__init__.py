"""State-to-DTO mappers.

- ``BenefitRenewalStateMapper``: protected renewal, declared-first marital
  status, with change indicators
- ``HubSpokeBenefitRenewalStateMapper``: hub-spoke renewal, existing-first
  marital status, no change indicators
- ``HubSpokeBenefitApplicationStateMapper``: first-time applications
"""

from cdcp_core.mappers.hub_spoke_application import HubSpokeBenefitApplicationStateMapper
from cdcp_core.mappers.hub_spoke_renewal import HubSpokeBenefitRenewalStateMapper
from cdcp_core.mappers.renewal import BenefitRenewalStateMapper

__all__ = [
    "BenefitRenewalStateMapper",
    "HubSpokeBenefitRenewalStateMapper",
    "HubSpokeBenefitApplicationStateMapper",
]
