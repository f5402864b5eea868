"""Tests for configuration loading."""

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from cdcp_core.config import (
    CdcpConfig,
    CodesConfig,
    EligibilityConfig,
    EligibilityRule,
    FlowConfig,
    RenewalPeriodConfig,
)
from cdcp_core.exceptions import ConfigurationError


class TestCdcpConfig:
    """Tests for the root configuration."""

    def test_defaults(self):
        """Should load sensible defaults without any environment."""
        config = CdcpConfig()
        assert config.log_level == "INFO"
        assert config.flow.state_ttl_minutes == 20

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch):
        """Should read CDCP_ prefixed environment variables."""
        monkeypatch.setenv("CDCP_LOG_LEVEL", "debug")
        config = CdcpConfig()
        assert config.log_level == "DEBUG"

    def test_rejects_unknown_log_level(self):
        """Should reject an unknown log level."""
        with pytest.raises(ValidationError):
            CdcpConfig(log_level="VERBOSE")

    def test_nested_groups_read_their_own_prefix(self, monkeypatch: pytest.MonkeyPatch):
        """Should build nested groups from their own environment prefixes."""
        monkeypatch.setenv("CDCP_FLOW_STATE_TTL_MINUTES", "45")
        monkeypatch.setenv("CDCP_CODES_MARITAL_STATUS_MARRIED", "MARRIED")
        config = CdcpConfig()
        assert config.flow.state_ttl_minutes == 45
        assert config.codes.marital_status_married == "MARRIED"


class TestRenewalPeriodConfig:
    """Tests for renewal period settings."""

    def test_default_period(self):
        """Should default to the first half of 2026, in UTC."""
        period = RenewalPeriodConfig()
        assert period.start_date == datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert period.end_date == datetime(2026, 6, 30, 23, 59, 59, tzinfo=timezone.utc)

    def test_naive_datetimes_are_utc(self, monkeypatch: pytest.MonkeyPatch):
        """Should treat naive boundaries from the environment as UTC."""
        monkeypatch.setenv("CDCP_RENEWAL_START_DATE", "2027-01-01T00:00:00")
        monkeypatch.setenv("CDCP_RENEWAL_END_DATE", "2027-03-31T23:59:59")
        period = RenewalPeriodConfig()
        assert period.start_date == datetime(2027, 1, 1, tzinfo=timezone.utc)
        assert period.end_date.tzinfo is not None

    def test_rejects_inverted_period(self):
        """Should reject an end date before the start date."""
        with pytest.raises(ValidationError):
            RenewalPeriodConfig(
                start_date=datetime(2026, 6, 1, tzinfo=timezone.utc),
                end_date=datetime(2026, 1, 1, tzinfo=timezone.utc),
            )


class TestEligibilityConfig:
    """Tests for eligibility rule settings."""

    def test_rules_from_environment_json(self, monkeypatch: pytest.MonkeyPatch):
        """Should parse rules given as a JSON array with camelCase keys."""
        monkeypatch.setenv(
            "CDCP_ELIGIBILITY_RULES",
            '[{"minAge": 65, "maxAge": 150, "startDate": "2024-05-01"}]',
        )
        config = EligibilityConfig()
        assert config.rules == [EligibilityRule(min_age=65, max_age=150, start_date=date(2024, 5, 1))]

    def test_rules_from_json_string(self):
        """Should accept a JSON string passed directly."""
        config = EligibilityConfig(rules='[{"minAge": 18, "maxAge": 64, "startDate": "2025-05-01"}]')
        assert config.rules[0].min_age == 18
        assert config.rules[0].start_date == date(2025, 5, 1)

    def test_empty_string_means_no_rules(self):
        """Should treat a blank rules value as no rules."""
        assert EligibilityConfig(rules="  ").rules == []

    def test_invalid_json_raises_configuration_error(self):
        """Should raise ConfigurationError naming the setting."""
        with pytest.raises(ConfigurationError) as exc_info:
            EligibilityConfig(rules="{not json")
        assert exc_info.value.config_key == "CDCP_ELIGIBILITY_RULES"

    def test_non_list_raises_configuration_error(self):
        """Should raise ConfigurationError when the rules are not a list."""
        with pytest.raises(ConfigurationError) as exc_info:
            EligibilityConfig(rules='{"minAge": 1}')
        assert exc_info.value.details["actual"] == "dict"

    def test_rejects_inverted_band(self):
        """Should reject a rule whose max age is below its min age."""
        with pytest.raises(ValidationError):
            EligibilityRule(min_age=30, max_age=20, start_date=date(2025, 1, 1))


class TestCodesConfig:
    """Tests for reference-data codes."""

    def test_partnered_marital_statuses(self):
        """Should treat married and common-law as partnered."""
        codes = CodesConfig()
        assert codes.partnered_marital_statuses == frozenset({"1", "2"})

    def test_email_communication_methods(self):
        """Should require verified email for benefit administrator email and digital mailbox."""
        codes = CodesConfig(communication_method_sunlife_email="SL-EMAIL", communication_method_gc_digital="GC-DIGITAL")
        assert codes.email_communication_methods == frozenset({"SL-EMAIL", "GC-DIGITAL"})


class TestFlowConfig:
    """Tests for flow settings."""

    def test_apply_url_by_locale(self):
        """Should pick the French apply URL only for French."""
        config = FlowConfig(apply_url_en="https://example.com/en", apply_url_fr="https://example.com/fr")
        assert config.apply_url("en") == "https://example.com/en"
        assert config.apply_url("fr") == "https://example.com/fr"
        assert config.apply_url("es") == "https://example.com/en"

    def test_rejects_non_positive_ttl(self):
        """Should reject a zero lifetime."""
        with pytest.raises(ValidationError):
            FlowConfig(state_ttl_minutes=0)
