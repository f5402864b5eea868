"""Configuration system for the CDCP application core.

Settings are read from CDCP_-prefixed environment variables (and a .env
file) into nested groups, one per concern of the application wizards.

Usage:
    from cdcp_core.config import CdcpConfig

    # environment first, then .env
    config = CdcpConfig()

    # renewal window
    print(config.renewal.start_date)

    # wizard state lifetime
    print(config.flow.state_ttl_minutes)
"""

import json
from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cdcp_core.exceptions import ConfigurationError


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class EligibilityRule(BaseModel):
    """An age band whose coverage starts on a given date."""

    min_age: int = Field(ge=0, alias="minAge")
    max_age: int = Field(ge=0, alias="maxAge")
    start_date: date = Field(alias="startDate")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def validate_band(self) -> "EligibilityRule":
        """Ensure the band is not inverted."""
        if self.max_age < self.min_age:
            raise ValueError(f"max_age {self.max_age} is below min_age {self.min_age}")
        return self


class RenewalPeriodConfig(BaseSettings):
    """Renewal period settings.

    A wizard started between the two boundaries (inclusive) is a renewal;
    otherwise it is an intake.

    Environment Variables:
        CDCP_RENEWAL_START_DATE: First instant of the renewal period (ISO-8601)
        CDCP_RENEWAL_END_DATE: Last instant of the renewal period (ISO-8601)
    """

    model_config = SettingsConfigDict(
        env_prefix="CDCP_RENEWAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    start_date: datetime = Field(
        default=datetime(2026, 1, 1, tzinfo=timezone.utc),
        description="Start of the renewal period (inclusive)",
    )
    end_date: datetime = Field(
        default=datetime(2026, 6, 30, 23, 59, 59, tzinfo=timezone.utc),
        description="End of the renewal period (inclusive)",
    )

    @field_validator("start_date", "end_date")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Treat naive boundaries as UTC."""
        return _as_utc(v)

    @model_validator(mode="after")
    def validate_period(self) -> "RenewalPeriodConfig":
        """Ensure the period is not inverted."""
        if self.end_date < self.start_date:
            raise ValueError("Renewal period end_date must not precede start_date")
        return self


class EligibilityConfig(BaseSettings):
    """Age-based eligibility settings.

    Environment Variables:
        CDCP_ELIGIBILITY_RULES: JSON array of {minAge, maxAge, startDate}
        CDCP_ELIGIBILITY_CURRENT_DATE: Override for "today" (testing/staging)
        CDCP_ELIGIBILITY_COVERAGE_START_DATE: Age reference date before coverage starts
    """

    model_config = SettingsConfigDict(
        env_prefix="CDCP_ELIGIBILITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    rules: list[EligibilityRule] = Field(
        default_factory=list,
        description="Ordered age bands; the first matching band wins",
    )
    current_date: Optional[date] = Field(
        default=None,
        description="Overrides today's date for eligibility checks",
    )
    coverage_start_date: Optional[date] = Field(
        default=None,
        description="Ages are evaluated as of this date while today precedes it",
    )

    @field_validator("rules", mode="before")
    @classmethod
    def parse_rules(cls, v: Any) -> Any:
        """Accept the rules as a JSON string."""
        if isinstance(v, str):
            if not v.strip():
                return []
            try:
                v = json.loads(v)
            except json.JSONDecodeError as e:
                raise ConfigurationError(
                    "Eligibility rules are not valid JSON",
                    config_key="CDCP_ELIGIBILITY_RULES",
                    expected="JSON array of rules",
                ) from e
        if not isinstance(v, list):
            raise ConfigurationError(
                "Eligibility rules must be a list",
                config_key="CDCP_ELIGIBILITY_RULES",
                expected="JSON array of rules",
                actual=type(v).__name__,
            )
        return v


class CodesConfig(BaseSettings):
    """Reference-data codes the core needs to recognise.

    Environment Variables:
        CDCP_CODES_MARITAL_STATUS_MARRIED: Code for "married"
        CDCP_CODES_MARITAL_STATUS_COMMON_LAW: Code for "common-law"
        CDCP_CODES_COMMUNICATION_METHOD_EMAIL: Email communication method id
        CDCP_CODES_COMMUNICATION_METHOD_MAIL: Mail communication method id
        CDCP_CODES_COMMUNICATION_METHOD_SUNLIFE_EMAIL: Benefit administrator email id
        CDCP_CODES_COMMUNICATION_METHOD_SUNLIFE_MAIL: Benefit administrator mail id
        CDCP_CODES_COMMUNICATION_METHOD_GC_DIGITAL: Government digital mailbox id
    """

    model_config = SettingsConfigDict(
        env_prefix="CDCP_CODES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    marital_status_married: str = Field(default="1")
    marital_status_common_law: str = Field(default="2")
    communication_method_email: str = Field(default="email")
    communication_method_mail: str = Field(default="mail")
    communication_method_sunlife_email: str = Field(default="email")
    communication_method_sunlife_mail: str = Field(default="mail")
    communication_method_gc_digital: str = Field(default="msca")

    @property
    def partnered_marital_statuses(self) -> frozenset[str]:
        """Marital status codes that require partner information."""
        return frozenset({self.marital_status_married, self.marital_status_common_law})

    @property
    def email_communication_methods(self) -> frozenset[str]:
        """Communication methods that require a verified email."""
        return frozenset({self.communication_method_sunlife_email, self.communication_method_gc_digital})


class FlowConfig(BaseSettings):
    """Wizard navigation and lifetime settings.

    Environment Variables:
        CDCP_FLOW_STATE_TTL_MINUTES: Idle minutes before a wizard expires
        CDCP_FLOW_APPLY_URL_EN: External apply page (English)
        CDCP_FLOW_APPLY_URL_FR: External apply page (French)
        CDCP_FLOW_BASE_PATH: Path prefix of the application wizard routes
    """

    model_config = SettingsConfigDict(
        env_prefix="CDCP_FLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    state_ttl_minutes: int = Field(
        default=20,
        gt=0,
        description="Idle minutes after which wizard state is discarded",
    )
    apply_url_en: str = Field(
        default="https://www.canada.ca/en/services/benefits/dental/dental-care-plan/apply.html",
        description="Fallback URL for invalid or expired wizards (English)",
    )
    apply_url_fr: str = Field(
        default="https://www.canada.ca/fr/services/prestations/dentaire/regime-soins-dentaires/demande.html",
        description="Fallback URL for invalid or expired wizards (French)",
    )
    base_path: str = Field(
        default="/{lang}/protected/application",
        description="Path prefix for wizard routes; {lang} is substituted",
    )

    def apply_url(self, locale: str = "en") -> str:
        """Return the fallback apply URL for a locale."""
        return self.apply_url_fr if locale == "fr" else self.apply_url_en


class CdcpConfig(BaseSettings):
    """Root configuration for the CDCP application core.

    Environment Variables:
        CDCP_LOG_LEVEL: Level below which ``configure_logging`` drops events

    Example:
        # everything from the environment
        config = CdcpConfig()

        # or build groups explicitly, as tests do
        config = CdcpConfig(
            flow=FlowConfig(state_ttl_minutes=30),
            renewal=RenewalPeriodConfig(start_date=..., end_date=...),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="CDCP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    renewal: RenewalPeriodConfig = Field(default_factory=RenewalPeriodConfig)
    eligibility: EligibilityConfig = Field(default_factory=EligibilityConfig)
    codes: CodesConfig = Field(default_factory=CodesConfig)
    flow: FlowConfig = Field(default_factory=FlowConfig)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case the level and check it names a standard logging level."""
        level = v.upper().strip()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level [{v}], expected one of {LOG_LEVELS}")
        return level
