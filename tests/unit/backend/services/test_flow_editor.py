"""
Unit Tests for Flow Editor Operations.

The editor functions are pure: every test also checks that the input
document is left untouched.
"""

import copy

import pytest

from orderflow.backend.core.exceptions import ValidationError
from orderflow.backend.services import flow_editor


@pytest.fixture
def flow(default_flow_document):
    document = copy.deepcopy(default_flow_document)
    document.update(
        {
            "_id": "flow-1",
            "createdAt": "2026-01-01T00:00:00",
            "updatedAt": "2026-01-02T00:00:00",
        }
    )
    # Two destinations on the first step to exercise index addressing
    document["steps"][0]["forwardingDestinations"].append(
        {"type": "telegram_user", "identifier": "111", "name": "Ops", "isActive": True}
    )
    return document


@pytest.fixture
def original(flow):
    return copy.deepcopy(flow)


class TestCustomize:
    """Tests for customize()."""

    def test_drops_identity_and_marks_custom(self, flow, original):
        custom = flow_editor.customize(flow, shop_id="shop-1")

        assert "_id" not in custom
        assert "createdAt" not in custom
        assert custom["isDefault"] is False
        assert custom["isActive"] is True
        assert custom["shopId"] == "shop-1"
        assert flow == original

    def test_copy_is_deep(self, flow):
        custom = flow_editor.customize(flow)

        custom["steps"][0]["nextStatuses"].append("paid")

        assert "paid" not in flow["steps"][0]["nextStatuses"]
        assert "shopId" not in custom


class TestSteps:
    """Tests for step-level edits."""

    def test_add_blank_step_gets_next_order(self, flow, original):
        updated = flow_editor.add_step(flow)

        assert len(updated["steps"]) == len(flow["steps"]) + 1
        assert updated["steps"][-1]["order"] == len(flow["steps"])
        assert updated["steps"][-1]["isActive"] is True
        assert flow == original

    def test_replace_step(self, flow, original):
        step = {**flow["steps"][1], "name": "Confirmed by operator"}

        updated = flow_editor.replace_step(flow, 1, step)

        assert updated["steps"][1]["name"] == "Confirmed by operator"
        assert flow == original

    def test_replace_step_out_of_range(self, flow):
        with pytest.raises(IndexError):
            flow_editor.replace_step(flow, 99, {})

    def test_remove_step(self, flow, original):
        updated = flow_editor.remove_step(flow, 0)

        assert updated["steps"][0]["status"] == "confirmed"
        assert flow == original

    def test_update_step_by_status(self, flow, original):
        updated = flow_editor.update_step(flow, "packing", isActive=False)

        assert flow_editor._step_index(updated, "packing") == 2
        assert updated["steps"][2]["isActive"] is False
        assert flow == original

    def test_unknown_status_raises(self, flow):
        with pytest.raises(ValidationError) as exc_info:
            flow_editor.update_step(flow, "teleported", name="x")

        assert exc_info.value.details == {"status": "teleported"}


class TestDestinations:
    """Tests for destination edits."""

    def test_add_destination(self, flow, original):
        updated = flow_editor.add_destination(flow, "paid", "telegram_channel")

        assert updated["steps"][6]["forwardingDestinations"] == [
            {"type": "telegram_channel", "identifier": "", "name": "", "isActive": True}
        ]
        assert flow == original

    def test_update_index_1_leaves_index_0(self, flow, original):
        updated = flow_editor.update_destination(flow, "created", 1, identifier="222")

        destinations = updated["steps"][0]["forwardingDestinations"]
        assert destinations[0] == original["steps"][0]["forwardingDestinations"][0]
        assert destinations[1]["identifier"] == "222"
        assert destinations[1]["name"] == "Ops"
        assert flow == original

    def test_update_destination_out_of_range(self, flow):
        with pytest.raises(IndexError):
            flow_editor.update_destination(flow, "created", 5, identifier="x")

    def test_remove_destination(self, flow, original):
        updated = flow_editor.remove_destination(flow, "created", 0)

        destinations = updated["steps"][0]["forwardingDestinations"]
        assert [d["identifier"] for d in destinations] == ["111"]
        assert flow == original

    def test_change_type_clears_identifier_and_name(self, flow, original):
        updated = flow_editor.change_destination_type(flow, "created", 1, "telegram_group")

        destination = updated["steps"][0]["forwardingDestinations"][1]
        assert destination == {
            "type": "telegram_group",
            "identifier": "",
            "name": "",
            "isActive": True,
        }
        assert flow == original

    def test_change_to_unknown_type_raises(self, flow):
        with pytest.raises(ValidationError):
            flow_editor.change_destination_type(flow, "created", 0, "email")


class TestToggles:
    """Tests for checkbox-style role and next-status toggles."""

    def test_toggle_role_adds_then_removes(self, flow, original):
        added = flow_editor.toggle_role(flow, "created", "Courier")
        removed = flow_editor.toggle_role(added, "created", "Courier")

        assert added["steps"][0]["authorizedRoles"] == ["Operator", "Admin", "Courier"]
        assert removed["steps"][0]["authorizedRoles"] == ["Operator", "Admin"]
        assert flow == original

    def test_toggle_next_status(self, flow, original):
        updated = flow_editor.toggle_next_status(flow, "created", "rejected")

        assert updated["steps"][0]["nextStatuses"] == ["confirmed"]
        assert flow == original


class TestValidation:
    """Tests for validate_step, validate_flow and prepare_for_save."""

    def test_blank_step_fields_are_reported(self):
        with pytest.raises(ValidationError) as exc_info:
            flow_editor.validate_step(flow_editor.new_step())

        assert exc_info.value.details["missing_fields"] == ["status", "name"]

    def test_flow_without_steps_is_rejected(self, flow):
        flow["steps"] = []

        with pytest.raises(ValidationError) as exc_info:
            flow_editor.validate_flow(flow)

        assert "steps" in exc_info.value.details

    def test_flow_without_name_is_rejected(self, flow):
        flow["name"] = "  "

        with pytest.raises(ValidationError):
            flow_editor.validate_flow(flow)

    def test_prepare_for_save_renumbers_orders(self, flow, original):
        shuffled = copy.deepcopy(flow)
        for step in shuffled["steps"]:
            step["order"] = 42
        shuffled["steps"].reverse()

        saved = flow_editor.prepare_for_save(shuffled)

        assert [step["order"] for step in saved["steps"]] == list(range(len(saved["steps"])))
        assert saved["steps"][0]["status"] == "rejected"
        assert all(step["order"] == 42 for step in shuffled["steps"])


USERS = [
    {"telegramId": "123456", "username": "courier_kim", "firstName": "Kim", "lastName": "Lee"},
    {"telegramId": "987654", "username": "shopowner", "firstName": "Ana", "lastName": "Gomez"},
    {"telegramId": None, "username": None, "firstName": "No", "lastName": "Telegram"},
]

GROUPS = [
    {"chatId": "-100123", "title": "Corner Shop Orders"},
    {"chatId": "-100999", "title": None},
]


class TestSuggestions:
    """Tests for suggestion filtering and picking."""

    def test_user_matches_telegram_id_substring(self):
        assert flow_editor.filter_user_suggestions(USERS, "3456") == [USERS[0]]

    def test_user_matches_username_substring(self):
        assert flow_editor.filter_user_suggestions(USERS, "owner") == [USERS[1]]

    def test_user_matches_full_name_ignoring_case(self):
        assert flow_editor.filter_user_suggestions(USERS, "ana gom") == [USERS[1]]

    def test_username_match_is_case_sensitive(self):
        assert flow_editor.filter_user_suggestions(USERS, "COURIER") == []

    def test_empty_query_matches_nothing(self):
        assert flow_editor.filter_user_suggestions(USERS, "") == []
        assert flow_editor.filter_group_suggestions(GROUPS, "") == []

    def test_group_matches_chat_id_or_title(self):
        assert flow_editor.filter_group_suggestions(GROUPS, "999") == [GROUPS[1]]
        assert flow_editor.filter_group_suggestions(GROUPS, "corner") == [GROUPS[0]]

    def test_user_destination(self):
        assert flow_editor.user_destination(USERS[0]) == {"identifier": "123456", "name": "Kim Lee"}

    def test_group_destination_falls_back_to_chat_id(self):
        assert flow_editor.group_destination(GROUPS[1]) == {
            "identifier": "-100999",
            "name": "-100999",
        }
