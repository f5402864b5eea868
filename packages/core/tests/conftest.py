"""Shared fixtures for cdcp_core tests."""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable

import pytest

from cdcp_core.config import (
    CdcpConfig,
    EligibilityConfig,
    EligibilityRule,
    FlowConfig,
    RenewalPeriodConfig,
)
from cdcp_core.models import ApplicationState, ClientApplication
from cdcp_core.repository import ApplicationStateRepository
from cdcp_core.session import InMemorySession

RENEWAL_START = datetime(2026, 1, 1, tzinfo=timezone.utc)
RENEWAL_END = datetime(2026, 6, 30, 23, 59, 59, tzinfo=timezone.utc)
FIXED_NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)
STATE_ID = "5f0c3a1e-8b7d-4c2a-9e61-2d3f4a5b6c7d"

APPLICATION_YEAR = {
    "applicationYearId": "2026",
    "taxYear": "2025",
    "dependentEligibilityEndDate": "2027-06-30",
}


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def state_id() -> str:
    return STATE_ID


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def application_year() -> dict[str, str]:
    """Application year payload as the benefits service returns it."""
    return dict(APPLICATION_YEAR)


@pytest.fixture
def base_url(state_id: str) -> str:
    """English route prefix of the wizard started with ``state_id``."""
    return f"/en/protected/application/{state_id}"


@pytest.fixture
def config() -> CdcpConfig:
    """Configuration with a fixed renewal period and eligibility rules."""
    return CdcpConfig(
        renewal=RenewalPeriodConfig(start_date=RENEWAL_START, end_date=RENEWAL_END),
        eligibility=EligibilityConfig(
            rules=[
                EligibilityRule(min_age=65, max_age=150, start_date=date(2024, 5, 1)),
                EligibilityRule(min_age=18, max_age=64, start_date=date(2025, 5, 1)),
            ],
        ),
        flow=FlowConfig(),
    )


@pytest.fixture
def clock() -> FrozenClock:
    """Clock frozen inside the renewal period."""
    return FrozenClock(FIXED_NOW)


@pytest.fixture
def session() -> InMemorySession:
    return InMemorySession(session_id="test-session")


@pytest.fixture
def repository(session: InMemorySession, config: CdcpConfig, clock: FrozenClock) -> ApplicationStateRepository:
    return ApplicationStateRepository(session, config, clock=clock)


@pytest.fixture
def client_application_data() -> dict[str, Any]:
    """Raw client record as returned by the benefits service."""
    return {
        "applicantInformation": {
            "clientId": "client-applicant",
            "clientNumber": "00000000001",
            "firstName": "Jean",
            "lastName": "Tremblay",
            "maritalStatus": "1",
            "socialInsuranceNumber": "800000002",
        },
        "children": [
            {
                "information": {
                    "clientId": "client-child-1",
                    "clientNumber": "00000000101",
                    "firstName": "Lea",
                    "lastName": "Tremblay",
                    "dateOfBirth": "2015-04-02",
                    "isParent": True,
                    "socialInsuranceNumber": "800000010",
                },
                "dentalBenefits": ["F-CHILD"],
                "dentalInsurance": False,
            },
        ],
        "communicationPreferences": {
            "email": "jean@example.com",
            "preferredLanguage": "en",
            "preferredMethod": "mail",
            "preferredMethodSunLife": "mail",
            "preferredMethodGovernmentOfCanada": "mail",
        },
        "contactInformation": {
            "copyMailingAddress": False,
            "homeAddress": "1 Home St",
            "homeCity": "Ottawa",
            "homeCountry": "CAN",
            "homePostalCode": "K1A 0A1",
            "homeProvince": "ON",
            "mailingAddress": "PO Box 9",
            "mailingCity": "Ottawa",
            "mailingCountry": "CAN",
            "mailingPostalCode": "K1A 0B1",
            "mailingProvince": "ON",
            "phoneNumber": "555-555-0100",
            "email": "jean@example.com",
        },
        "dateOfBirth": "1980-05-10",
        "dentalBenefits": ["F-OLD"],
        "dentalInsurance": False,
        "hasFiledTaxes": True,
        "partnerInformation": {
            "confirm": True,
            "yearOfBirth": "1981",
            "socialInsuranceNumber": "800000028",
        },
        "copayTierEarningRecord": False,
    }


@pytest.fixture
def client_application(client_application_data: dict[str, Any]) -> ClientApplication:
    return ClientApplication.model_validate(client_application_data)


@pytest.fixture
def make_state(client_application: ClientApplication) -> Callable[..., ApplicationState]:
    """Build an ApplicationState; keyword arguments override the defaults.

    Defaults describe a full-input adult renewal that passes review.
    """

    def _make(**overrides: Any) -> ApplicationState:
        data: dict[str, Any] = {
            "id": STATE_ID,
            "context": "renewal",
            "input_model": "full",
            "last_updated_on": FIXED_NOW,
            "application_year": APPLICATION_YEAR,
            "type_of_application": "adult",
            "client_application": client_application,
            "terms_and_conditions": {"acknowledge_terms": True, "acknowledge_privacy": True, "share_data": True},
            "has_filed_taxes": True,
            "applicant_information": {
                "member_id": "00000000001",
                "first_name": "Jean",
                "last_name": "Tremblay",
                "date_of_birth": "1980-05-10",
                "social_insurance_number": "800000002",
            },
            "marital_status": "1",
            "partner_information": {"confirm": True, "year_of_birth": "1981", "social_insurance_number": "800000028"},
            "communication_preferences": {"has_changed": False},
            "email": None,
            "email_verified": None,
            "dental_insurance": {"has_dental_insurance": False},
            "dental_benefits": {"has_changed": False},
            "phone_number": {"has_changed": False},
            "mailing_address": {"has_changed": False},
            "home_address": {"has_changed": False},
            "children": [],
        }
        data.update(overrides)
        return ApplicationState.model_validate(data)

    return _make


@pytest.fixture
def renewed_child_data() -> dict[str, Any]:
    """A completed child matching the first child on file."""
    return {
        "id": "0b6f1d0e-1111-4c2a-9e61-2d3f4a5b6c7d",
        "information": {
            "member_id": "00000000101",
            "first_name": "Lea",
            "last_name": "Tremblay-Roy",
            "date_of_birth": "2015-04-02",
            "is_parent": True,
            "has_social_insurance_number": False,
        },
        "dental_insurance": {"has_dental_insurance": True},
        "dental_benefits": {"has_changed": False},
    }
