"""Tests for wizard state and client record models."""

import json

import pytest
from pydantic import ValidationError

from cdcp_core.models import (
    IMMUTABLE_STATE_FIELDS,
    AddressState,
    ApplicationStatePatch,
    ClientApplication,
    DeclaredChange,
)


class TestDeclaredChange:
    """Tests for DeclaredChange."""

    def test_unchanged_without_value(self):
        """Should accept an unchanged answer with no value."""
        declared = DeclaredChange[AddressState](has_changed=False)
        assert declared.value is None

    def test_changed_requires_value(self):
        """Should reject a changed answer with no value."""
        with pytest.raises(ValidationError):
            DeclaredChange[AddressState](has_changed=True)

    def test_resolve(self):
        """Should pick the declared value only when changed."""
        address = AddressState(address="1 Main", city="Ottawa", country="CAN")
        existing = AddressState(address="2 Side", city="Ottawa", country="CAN")
        assert DeclaredChange[AddressState](has_changed=True, value=address).resolve(existing) == address
        assert DeclaredChange[AddressState](has_changed=False, value=address).resolve(existing) == existing

    def test_parses_camel_case(self):
        """Should read camelCase input."""
        declared = DeclaredChange[AddressState].model_validate(
            {"hasChanged": True, "value": {"address": "1 Main", "city": "Ottawa", "country": "CAN", "postalCode": "K1A"}}
        )
        assert declared.value.postal_code == "K1A"


class TestApplicationState:
    """Tests for ApplicationState."""

    def test_flow_key(self, make_state):
        """Should combine input model and type of application."""
        assert make_state().flow_key == "full-adult"
        assert make_state(input_model="simplified", type_of_application="children").flow_key == "simplified-children"
        assert make_state(type_of_application=None).flow_key is None

    def test_wire_format_is_json(self, make_state):
        """Should dump to camelCase JSON without empty fields."""
        wire = make_state().to_wire()
        json.dumps(wire)
        assert wire["typeOfApplication"] == "adult"
        assert wire["lastUpdatedOn"].startswith("2026-03-15T12:00:00")
        assert "email" not in wire

    def test_rejects_unknown_type(self, make_state):
        """Should reject an unknown type of application."""
        with pytest.raises(ValidationError):
            make_state(type_of_application="everyone")


class TestApplicationStatePatch:
    """Tests for ApplicationStatePatch."""

    @pytest.mark.parametrize("field", sorted(IMMUTABLE_STATE_FIELDS))
    def test_does_not_declare_immutable_fields(self, field):
        """Should not declare any field fixed at creation."""
        assert field not in ApplicationStatePatch.model_fields

    def test_rejects_unknown_fields(self):
        """Should forbid fields the state does not declare."""
        with pytest.raises(ValidationError):
            ApplicationStatePatch(favourite_colour="blue")

    def test_tracks_set_fields(self):
        """Should remember which fields the step set."""
        patch = ApplicationStatePatch(email=None, marital_status="1")
        assert patch.model_fields_set == {"email", "marital_status"}


class TestClientApplication:
    """Tests for the client record snapshot."""

    def test_parses_service_payload(self, client_application_data):
        """Should parse the camelCase payload of the benefits service."""
        client = ClientApplication.model_validate(client_application_data)
        assert client.applicant_information.client_number == "00000000001"
        assert client.children[0].information.client_number == "00000000101"
        assert client.contact_information.home_city == "Ottawa"
        assert client.copay_tier_earning_record is False
        assert client.t4_dental_indicator is None
