"""Tests for review completeness checks."""

from datetime import date

import pytest

from cdcp_core.models import (
    AdultApplicationState,
    AdultChildApplicationState,
    ChildApplicationState,
)
from cdcp_core.review import (
    validate_adult_state_for_review,
    validate_children_state_for_review,
    validate_family_state_for_review,
)

TODAY = date(2026, 3, 15)
COVERAGE_START = date(2026, 6, 1)
ENTRY = "eligibility-requirements"
TYPE_OF_APPLICATION = "type-of-application"
NEW_CHILD_ID = "9d8c7b6a-2222-4c2a-9e61-2d3f4a5b6c7d"


def review_adult(state, config):
    return validate_adult_state_for_review(state, config, today=TODAY)


def email_preferences(method: str = "email") -> dict:
    return {
        "has_changed": True,
        "value": {"preferred_language": "en", "preferred_method": method, "preferred_notification_method": "mail"},
    }


def with_eligibility(config, **updates):
    """Copy of ``config`` with eligibility settings replaced."""
    return config.model_copy(update={"eligibility": config.eligibility.model_copy(update=updates)})


def born_on(state, date_of_birth: str):
    return state.applicant_information.model_copy(update={"date_of_birth": date_of_birth})


class TestAdultReview:
    """Tests for validate_adult_state_for_review."""

    def test_complete_state(self, make_state, config):
        """Should return the narrowed adult state."""
        result = review_adult(make_state(), config)
        assert result.is_ok
        assert isinstance(result.data, AdultApplicationState)

    @pytest.mark.parametrize(
        "overrides,step,reason",
        [
            ({"terms_and_conditions": None}, ENTRY, "terms_and_conditions_missing"),
            ({"type_of_application": "family"}, TYPE_OF_APPLICATION, "type_of_application_mismatch"),
            ({"has_filed_taxes": False}, ENTRY, "has_filed_taxes_missing"),
            ({"has_filed_taxes": None}, ENTRY, "has_filed_taxes_missing"),
            ({"applicant_information": None}, TYPE_OF_APPLICATION, "applicant_information_missing"),
            ({"partner_information": None}, "full-adult/marital-status", "partner_information_missing"),
            ({"marital_status": "3"}, "full-adult/marital-status", "partner_information_unexpected"),
            ({"phone_number": None}, "full-adult/contact-information", "phone_number_missing"),
            ({"mailing_address": None}, "full-adult/contact-information", "mailing_address_missing"),
            ({"communication_preferences": None}, "full-adult/contact-information", "communication_preferences_missing"),
            ({"dental_insurance": None}, "full-adult/dental-insurance", "dental_insurance_missing"),
            ({"dental_benefits": None}, "full-adult/dental-insurance", "dental_benefits_missing"),
        ],
    )
    def test_incomplete_state(self, make_state, config, base_url, overrides, step, reason):
        """Should redirect to the step that collects the missing answer."""
        result = review_adult(make_state(**overrides), config)
        assert result.is_redirect
        assert result.redirect_to == f"{base_url}/{step}"
        assert result.reason == reason

    def test_simplified_without_client_application(self, make_state, config, base_url):
        """Should send a simplified wizard without a client record to entry."""
        result = review_adult(make_state(input_model="simplified", client_application=None), config)
        assert result.redirect_to == f"{base_url}/{ENTRY}"
        assert result.reason == "client_application_missing"

    def test_child_aged_applicant(self, make_state, config, base_url):
        """Should send an applicant under 16 back to choose the type of application."""
        state = make_state()
        result = review_adult(make_state(applicant_information=born_on(state, "2012-01-01")), config)
        assert result.redirect_to == f"{base_url}/{TYPE_OF_APPLICATION}"
        assert result.reason == "applicant_under_age"

    def test_youth_applicant_passes(self, make_state, config):
        """Should accept an applicant aged 16 or 17."""
        state = make_state()
        assert review_adult(make_state(applicant_information=born_on(state, "2009-06-01")), config).is_ok

    def test_unverified_email(self, make_state, config, base_url):
        """Should require a verified email for email communication."""
        state = make_state(communication_preferences=email_preferences(), email="a@example.com", email_verified=False)
        result = review_adult(state, config)
        assert result.redirect_to == f"{base_url}/full-adult/contact-information"
        assert result.reason == "email_not_verified"

    def test_unverified_email_for_digital_mailbox(self, make_state, config):
        """Should require a verified email for the government digital mailbox."""
        state = make_state(communication_preferences=email_preferences("msca"), email_verified=None)
        assert review_adult(state, config).reason == "email_not_verified"

    def test_verified_email(self, make_state, config):
        """Should pass once the email is verified."""
        state = make_state(communication_preferences=email_preferences(), email="a@example.com", email_verified=True)
        assert review_adult(state, config).is_ok

    def test_mail_needs_no_email(self, make_state, config):
        """Should not require an email for mail communication."""
        state = make_state(communication_preferences=email_preferences("mail"))
        assert review_adult(state, config).is_ok

    def test_french_redirect(self, make_state, config, state_id):
        """Should build redirects in the requested language."""
        result = validate_adult_state_for_review(make_state(terms_and_conditions=None), config, locale="fr", today=TODAY)
        assert result.redirect_to == f"/fr/protected/application/{state_id}/eligibility-requirements"


class TestFamilyReview:
    """Tests for validate_family_state_for_review."""

    def test_complete_state(self, make_state, config, renewed_child_data):
        """Should return the narrowed family state."""
        state = make_state(type_of_application="family", children=[renewed_child_data])
        result = validate_family_state_for_review(state, config, today=TODAY)
        assert isinstance(result.data, AdultChildApplicationState)

    def test_new_children_left_out(self, make_state, config, renewed_child_data):
        """Should pass with a child still being added and return only completed children."""
        state = make_state(type_of_application="family", children=[renewed_child_data, {"id": NEW_CHILD_ID}])
        result = validate_family_state_for_review(state, config, today=TODAY)
        assert result.is_ok
        assert [child.id for child in result.data.children] == [renewed_child_data["id"]]
        assert len(state.children) == 2

    def test_no_children(self, make_state, config, base_url):
        """Should send a family without children to the children step."""
        result = validate_family_state_for_review(make_state(type_of_application="family"), config, today=TODAY)
        assert result.redirect_to == f"{base_url}/full-family/childrens-application"
        assert result.reason == "children_missing"

    def test_only_new_children(self, make_state, config):
        """Should ignore children that are still being added."""
        state = make_state(type_of_application="family", children=[{"id": NEW_CHILD_ID}])
        assert validate_family_state_for_review(state, config, today=TODAY).reason == "children_missing"

    def test_child_not_parented(self, make_state, config, base_url, renewed_child_data):
        """Should reject a child the applicant is not parent or guardian of."""
        renewed_child_data["information"]["is_parent"] = False
        state = make_state(type_of_application="family", children=[renewed_child_data])
        result = validate_family_state_for_review(state, config, today=TODAY)
        assert result.redirect_to == f"{base_url}/full-family/childrens-application"
        assert result.reason == "child_information_invalid"

    def test_adult_child(self, make_state, config, base_url, renewed_child_data):
        """Should send an adult-aged child back to choose the type of application."""
        renewed_child_data["information"]["date_of_birth"] = "2000-01-01"
        state = make_state(type_of_application="family", children=[renewed_child_data])
        result = validate_family_state_for_review(state, config, today=TODAY)
        assert result.redirect_to == f"{base_url}/{TYPE_OF_APPLICATION}"
        assert result.reason == "child_over_age"

    def test_applicant_checked_before_children(self, make_state, config):
        """Should report applicant problems first."""
        state = make_state(type_of_application="family", dental_insurance=None)
        assert validate_family_state_for_review(state, config, today=TODAY).reason == "dental_insurance_missing"


class TestChildrenReview:
    """Tests for validate_children_state_for_review."""

    def test_complete_without_applicant_coverage(self, make_state, config, renewed_child_data):
        """Should not require the parent's own coverage answers."""
        state = make_state(
            type_of_application="children",
            children=[renewed_child_data],
            dental_insurance=None,
            dental_benefits=None,
        )
        result = validate_children_state_for_review(state, config, today=TODAY)
        assert isinstance(result.data, ChildApplicationState)

    def test_parent_contact_missing(self, make_state, config, base_url, renewed_child_data):
        """Should send missing parent details to the parent-or-guardian step."""
        state = make_state(type_of_application="children", children=[renewed_child_data], phone_number=None)
        result = validate_children_state_for_review(state, config, today=TODAY)
        assert result.redirect_to == f"{base_url}/full-children/parent-or-guardian"
        assert result.reason == "phone_number_missing"

    def test_partner_missing(self, make_state, config, base_url, renewed_child_data):
        """Should send missing partner details to the parent-or-guardian step."""
        state = make_state(type_of_application="children", children=[renewed_child_data], partner_information=None)
        result = validate_children_state_for_review(state, config, today=TODAY)
        assert result.redirect_to == f"{base_url}/full-children/parent-or-guardian"
        assert result.reason == "partner_information_missing"


class TestAgeAssessmentDate:
    """Ages at review follow the configured current and coverage start dates."""

    def test_applicant_assessed_at_coverage_start(self, make_state, config):
        """Should accept an applicant who turns 16 by the time coverage starts."""
        state = make_state()
        state = make_state(applicant_information=born_on(state, "2010-05-01"))
        assert review_adult(state, config).reason == "applicant_under_age"

        starting_later = with_eligibility(config, coverage_start_date=COVERAGE_START)
        assert review_adult(state, starting_later).is_ok

    def test_child_assessed_at_coverage_start(self, make_state, config, renewed_child_data):
        """Should reject a child who turns 18 before coverage starts."""
        renewed_child_data["information"]["date_of_birth"] = "2008-04-01"
        state = make_state(type_of_application="family", children=[renewed_child_data])
        assert validate_family_state_for_review(state, config, today=TODAY).is_ok

        starting_later = with_eligibility(config, coverage_start_date=COVERAGE_START)
        result = validate_family_state_for_review(state, starting_later, today=TODAY)
        assert result.reason == "child_over_age"

    def test_coverage_start_in_the_past_is_ignored(self, make_state, config):
        """Should use today once coverage has started."""
        state = make_state()
        state = make_state(applicant_information=born_on(state, "2010-05-01"))
        started = with_eligibility(config, coverage_start_date=date(2026, 1, 1))
        assert review_adult(state, started).reason == "applicant_under_age"

    def test_configured_current_date(self, make_state, config):
        """Should use the configured current date when no date is given."""
        state = make_state()
        state = make_state(applicant_information=born_on(state, "2010-05-01"))
        pinned = with_eligibility(config, current_date=TODAY)
        assert validate_adult_state_for_review(state, pinned).reason == "applicant_under_age"
