"""Eligibility and branching rules.

Pure functions that decide which way the wizard goes next: the applicant's
age category, whether their age band is covered yet, whether today is in
the renewal period, and which kind of application a renewal selection
amounts to.

Example:
    from cdcp_core.eligibility import age_category, eligibility_by_age

    category = age_category("2009-05-01", reference_date=date(2026, 1, 1))
    result = eligibility_by_age("1950-01-01", config.eligibility)
    if not result.eligible:
        print(f"Coverage starts {result.start_date}")
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Iterable, Optional, Union

import structlog
from pydantic import BaseModel

from cdcp_core.config import CodesConfig, EligibilityConfig, RenewalPeriodConfig
from cdcp_core.exceptions import DomainError
from cdcp_core.models.client import ClientApplication
from cdcp_core.models.state import ApplicationState, Context, TypeOfApplication

logger = structlog.get_logger()

DateLike = Union[str, date]


class AgeCategory(str, Enum):
    """Age bands that drive wizard branching."""
    CHILDREN = "children"
    YOUTH = "youth"
    ADULTS = "adults"
    SENIORS = "seniors"


class EligibilityStatus(str, Enum):
    """Dental benefit eligibility classification."""
    ELIGIBLE = "eligible"
    ELIGIBLE_PROOF = "eligible-proof"
    INELIGIBLE = "ineligible"


class EligibilityResult(BaseModel):
    """Outcome of an age-band eligibility check."""
    eligible: bool
    start_date: Optional[date] = None


# =============================================================================
# Age
# =============================================================================


def parse_date(value: DateLike, field: str = "date_of_birth") -> date:
    """Parse an ISO-8601 date (a datetime string is truncated to its date)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value[:10])
    except (TypeError, ValueError) as e:
        raise DomainError(
            f"Invalid date [{value}]",
            field=field,
            value=value,
            constraint="ISO-8601 date",
        ) from e


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def get_age(date_of_birth: DateLike, reference_date: Optional[DateLike] = None) -> int:
    """Whole years between ``date_of_birth`` and ``reference_date`` (default: today)."""
    born = parse_date(date_of_birth)
    ref = parse_date(reference_date, field="reference_date") if reference_date is not None else today_utc()
    if born > ref:
        raise DomainError(
            f"Date of birth [{born.isoformat()}] is after reference date [{ref.isoformat()}]",
            field="date_of_birth",
            value=born.isoformat(),
            constraint="date_of_birth <= reference_date",
        )
    return ref.year - born.year - ((ref.month, ref.day) < (born.month, born.day))


def age_reference_date(today: date, coverage_start_date: Optional[date] = None) -> date:
    """Date at which ages are evaluated.

    Before coverage starts, applicants are assessed on the age they will be
    when it does.
    """
    if coverage_start_date is not None and today < coverage_start_date:
        return coverage_start_date
    return today


def assessment_date(config: EligibilityConfig, today: Optional[date] = None) -> date:
    """Reference date for age checks at review and submission.

    ``today`` falls back to ``config.current_date`` and then to today's UTC
    date, and is moved forward to ``config.coverage_start_date`` while
    coverage has not started.
    """
    return age_reference_date(today or config.current_date or today_utc(), config.coverage_start_date)


def age_category_from_age(age: int) -> AgeCategory:
    if age >= 65:
        return AgeCategory.SENIORS
    if 18 <= age < 65:
        return AgeCategory.ADULTS
    if 16 <= age < 18:
        return AgeCategory.YOUTH
    if 0 <= age < 16:
        return AgeCategory.CHILDREN
    raise DomainError(f"Invalid age [{age}]", field="age", value=age, constraint="age >= 0")


def age_category(date_of_birth: DateLike, reference_date: Optional[DateLike] = None) -> AgeCategory:
    """Age category of an applicant born on ``date_of_birth``."""
    return age_category_from_age(get_age(date_of_birth, reference_date))


def eligibility_by_age(
    date_of_birth: DateLike,
    config: EligibilityConfig,
    today: Optional[date] = None,
) -> EligibilityResult:
    """Check whether the applicant's age band is covered yet.

    The first configured rule whose inclusive ``[min_age, max_age]`` band
    contains the applicant's age decides. Ages outside every band are
    eligible.

    Args:
        date_of_birth: Applicant's date of birth
        config: Eligibility settings holding the rules
        today: Overrides the current date; defaults to ``config.current_date``
            and then to today's UTC date

    Returns:
        EligibilityResult with the band's start date when not yet eligible
    """
    today = today or config.current_date or today_utc()
    age = get_age(date_of_birth, today)

    for rule in config.rules:
        if rule.min_age <= age <= rule.max_age:
            if today < rule.start_date:
                return EligibilityResult(eligible=False, start_date=rule.start_date)
            return EligibilityResult(eligible=True)

    return EligibilityResult(eligible=True)


# =============================================================================
# Renewal period and status
# =============================================================================


def is_within_renewal_period(period: RenewalPeriodConfig, at: Optional[datetime] = None) -> bool:
    """Check whether ``at`` (default: now) falls in the renewal period, boundaries included."""
    at = at or datetime.now(timezone.utc)
    if at.tzinfo is None:
        at = at.replace(tzinfo=timezone.utc)
    return period.start_date <= at <= period.end_date


def eligibility_status(
    has_private_dental_insurance: bool,
    t4_dental_indicator: Optional[bool] = None,
) -> EligibilityStatus:
    if not has_private_dental_insurance and not t4_dental_indicator:
        return EligibilityStatus.ELIGIBLE
    if not has_private_dental_insurance and t4_dental_indicator:
        return EligibilityStatus.ELIGIBLE_PROOF
    return EligibilityStatus.INELIGIBLE


# =============================================================================
# Application type
# =============================================================================


def is_primary_applicant(client_application: ClientApplication, client_id: str) -> bool:
    return client_application.applicant_information.client_id == client_id


def is_primary_applicant_child(client_application: ClientApplication, client_id: str) -> bool:
    return any(child.information.client_id == client_id for child in client_application.children)


def derive_type_of_application(
    client_application: ClientApplication,
    renewing_client_ids: Iterable[str],
) -> TypeOfApplication:
    """Work out the application type from the clients selected for renewal.

    Selecting the primary applicant and at least one of their children is a
    family application; only the applicant is adult; only children is
    children. Selecting neither means someone is applying on another's
    behalf.
    """
    ids = list(renewing_client_ids)
    has_primary = any(is_primary_applicant(client_application, i) for i in ids)
    has_dependent = any(is_primary_applicant_child(client_application, i) for i in ids)

    if has_primary and has_dependent:
        result = TypeOfApplication.FAMILY
    elif has_primary:
        result = TypeOfApplication.ADULT
    elif has_dependent:
        result = TypeOfApplication.CHILDREN
    else:
        result = TypeOfApplication.DELEGATE

    logger.debug("type_of_application_derived", selected=len(ids), type_of_application=result.value)
    return result


def applicant_has_partner(marital_status: Optional[str], codes: CodesConfig) -> bool:
    """Check whether a marital status requires partner information."""
    if not marital_status:
        return False
    return marital_status in codes.partnered_marital_statuses


def should_skip_marital_status(state: ApplicationState) -> bool:
    """Renewals whose record has a copay tier earning record skip the marital status step."""
    if state.context != Context.RENEWAL:
        return False
    if state.client_application is None:
        return False
    return state.client_application.copay_tier_earning_record is True


__all__ = [
    "AgeCategory",
    "EligibilityStatus",
    "EligibilityResult",
    "parse_date",
    "today_utc",
    "get_age",
    "age_reference_date",
    "assessment_date",
    "age_category_from_age",
    "age_category",
    "eligibility_by_age",
    "is_within_renewal_period",
    "eligibility_status",
    "is_primary_applicant",
    "is_primary_applicant_child",
    "derive_type_of_application",
    "applicant_has_partner",
    "should_skip_marital_status",
]
