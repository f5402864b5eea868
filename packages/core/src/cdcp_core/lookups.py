"""Read-only reference data lookups.

Countries, provinces, languages, marital statuses, insurance plans and
communication methods are owned by external reference-data services. The
core only ever resolves an id to a localized name, for display.

Example:
    provider = StaticLookupProvider({
        LookupDomain.FEDERAL_INSURANCE_PLAN: {"F1": {"en": "Veterans", "fr": "Anciens combattants"}},
    })
    plan = provider.get_by_id(LookupDomain.FEDERAL_INSURANCE_PLAN, "F1", "fr")
"""

from enum import Enum
from typing import Iterable, Mapping, Optional, Protocol, runtime_checkable

import structlog
from pydantic import BaseModel

from cdcp_core.exceptions import DomainError

logger = structlog.get_logger()


class LookupDomain(str, Enum):
    COUNTRY = "country"
    PROVINCE_TERRITORY_STATE = "province-territory-state"
    LANGUAGE = "language"
    MARITAL_STATUS = "marital-status"
    FEDERAL_INSURANCE_PLAN = "federal-insurance-plan"
    PROVINCIAL_INSURANCE_PLAN = "provincial-insurance-plan"
    COMMUNICATION_METHOD = "communication-method"


class LocalizedEntity(BaseModel):
    id: str
    name: str


@runtime_checkable
class LookupProvider(Protocol):
    """Resolves reference data ids to localized names."""

    def find_by_id(self, domain: LookupDomain, entity_id: str, locale: str) -> Optional[LocalizedEntity]:
        ...

    def get_by_id(self, domain: LookupDomain, entity_id: str, locale: str) -> LocalizedEntity:
        ...


class StaticLookupProvider:
    """In-memory ``LookupProvider`` over ``{domain: {id: {locale: name}}}``.

    A name missing for the requested locale falls back to English.
    """

    def __init__(self, data: Mapping[LookupDomain, Mapping[str, Mapping[str, str]]]) -> None:
        self._data = {LookupDomain(domain): dict(entries) for domain, entries in data.items()}

    def find_by_id(self, domain: LookupDomain, entity_id: str, locale: str = "en") -> Optional[LocalizedEntity]:
        names = self._data.get(LookupDomain(domain), {}).get(entity_id)
        if names is None:
            return None
        name = names.get(locale) or names.get("en")
        if name is None:
            return None
        return LocalizedEntity(id=entity_id, name=name)

    def get_by_id(self, domain: LookupDomain, entity_id: str, locale: str = "en") -> LocalizedEntity:
        entity = self.find_by_id(domain, entity_id, locale)
        if entity is None:
            raise DomainError(
                f"No {LookupDomain(domain).value} found for id [{entity_id}]",
                field="id",
                value=entity_id,
                details={"domain": LookupDomain(domain).value, "locale": locale},
            )
        return entity


def describe_dental_benefits(provider: LookupProvider, benefit_ids: Iterable[str], locale: str = "en") -> list[LocalizedEntity]:
    """Resolve dental benefit program ids to names.

    Benefit lists mix federal and provincial/territorial programs, so each
    id is tried as a federal plan first. Ids found in neither are skipped.
    """
    described: list[LocalizedEntity] = []
    for benefit_id in benefit_ids:
        entity = provider.find_by_id(LookupDomain.FEDERAL_INSURANCE_PLAN, benefit_id, locale)
        if entity is None:
            entity = provider.find_by_id(LookupDomain.PROVINCIAL_INSURANCE_PLAN, benefit_id, locale)
        if entity is None:
            logger.warning("dental_benefit_unknown", benefit_id=benefit_id, locale=locale)
            continue
        described.append(entity)
    return described


__all__ = [
    "LookupDomain",
    "LocalizedEntity",
    "LookupProvider",
    "StaticLookupProvider",
    "describe_dental_benefits",
]
