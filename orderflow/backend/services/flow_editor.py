"""
Flow editor operations.

The admin dashboard edits a flow as a plain JSON document (camelCase keys,
the same shape the API returns) before saving it in one request. These
functions implement those edits. None of them mutate their arguments;
each returns a new document.

    flow = customize(current_flow)
    flow = update_destination(flow, "created", 0, identifier="-100123")
    payload = prepare_for_save(flow)
"""

import copy
from typing import Any

from orderflow.backend.core.exceptions import ValidationError
from orderflow.backend.core.utils import full_name

Flow = dict[str, Any]
Step = dict[str, Any]

DESTINATION_TYPES = ("telegram_user", "telegram_group", "telegram_channel")

# Server-managed fields that a copy must not carry over
_IDENTITY_FIELDS = ("_id", "id", "createdAt", "updatedAt", "shopId")


def customize(flow: Flow, shop_id: str | None = None) -> Flow:
    """Deep copy of flow as a non-default custom flow for shop_id."""
    copied = copy.deepcopy(flow)
    for field in _IDENTITY_FIELDS:
        copied.pop(field, None)
    copied["isDefault"] = False
    copied["isActive"] = True
    if shop_id is not None:
        copied["shopId"] = shop_id
    return copied


def new_step(order: int = 0) -> Step:
    """Blank step as the editor creates it."""
    return {
        "status": "",
        "name": "",
        "description": "",
        "forwardingDestinations": [],
        "authorizedRoles": [],
        "nextStatuses": [],
        "isActive": True,
        "order": order,
    }


def new_destination(destination_type: str = "telegram_group") -> dict[str, Any]:
    return {"type": destination_type, "identifier": "", "name": "", "isActive": True}


def _steps(flow: Flow) -> list[Step]:
    return [copy.deepcopy(step) for step in flow.get("steps", [])]


def _with_steps(flow: Flow, steps: list[Step]) -> Flow:
    updated = copy.deepcopy({key: value for key, value in flow.items() if key != "steps"})
    updated["steps"] = steps
    return updated


def _step_index(flow: Flow, status: str) -> int:
    for index, step in enumerate(flow.get("steps", [])):
        if step.get("status") == status:
            return index
    raise ValidationError(f"No step with status '{status}'", details={"status": status})


def add_step(flow: Flow, step: Step | None = None) -> Flow:
    steps = _steps(flow)
    steps.append(copy.deepcopy(step) if step is not None else new_step(len(steps)))
    return _with_steps(flow, steps)


def replace_step(flow: Flow, index: int, step: Step) -> Flow:
    steps = _steps(flow)
    if not 0 <= index < len(steps):
        raise IndexError(f"step index {index} out of range")
    steps[index] = copy.deepcopy(step)
    return _with_steps(flow, steps)


def remove_step(flow: Flow, index: int) -> Flow:
    steps = [step for i, step in enumerate(_steps(flow)) if i != index]
    return _with_steps(flow, steps)


def update_step(flow: Flow, status: str, **updates: Any) -> Flow:
    """Merge updates into the step with the given status."""
    index = _step_index(flow, status)
    steps = _steps(flow)
    steps[index] = {**steps[index], **copy.deepcopy(updates)}
    return _with_steps(flow, steps)


def _edit_destinations(flow: Flow, status: str, edit) -> Flow:
    index = _step_index(flow, status)
    steps = _steps(flow)
    destinations = steps[index].get("forwardingDestinations", [])
    steps[index]["forwardingDestinations"] = edit(destinations)
    return _with_steps(flow, steps)


def add_destination(flow: Flow, status: str, destination_type: str = "telegram_group") -> Flow:
    return _edit_destinations(
        flow,
        status,
        lambda destinations: [*destinations, new_destination(destination_type)],
    )


def update_destination(flow: Flow, status: str, index: int, **updates: Any) -> Flow:
    """Merge updates into one destination; the other indices are left as they were."""

    def edit(destinations: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not 0 <= index < len(destinations):
            raise IndexError(f"destination index {index} out of range")
        edited = list(destinations)
        edited[index] = {**destinations[index], **updates}
        return edited

    return _edit_destinations(flow, status, edit)


def remove_destination(flow: Flow, status: str, index: int) -> Flow:
    return _edit_destinations(
        flow,
        status,
        lambda destinations: [d for i, d in enumerate(destinations) if i != index],
    )


def change_destination_type(flow: Flow, status: str, index: int, destination_type: str) -> Flow:
    """Switch a destination's type; identifier and name are cleared."""
    if destination_type not in DESTINATION_TYPES:
        raise ValidationError(
            f"Unknown destination type '{destination_type}'",
            details={"type": destination_type},
        )
    return update_destination(
        flow, status, index, type=destination_type, identifier="", name=""
    )


def _toggle(values: list[str], value: str) -> list[str]:
    if value in values:
        return [v for v in values if v != value]
    return [*values, value]


def toggle_role(flow: Flow, status: str, role: str) -> Flow:
    index = _step_index(flow, status)
    roles = flow["steps"][index].get("authorizedRoles", [])
    return update_step(flow, status, authorizedRoles=_toggle(roles, role))


def toggle_next_status(flow: Flow, status: str, next_status: str) -> Flow:
    index = _step_index(flow, status)
    statuses = flow["steps"][index].get("nextStatuses", [])
    return update_step(flow, status, nextStatuses=_toggle(statuses, next_status))


def validate_step(step: Step) -> None:
    """
    Raises:
        ValidationError: If status or name is blank
    """
    missing = [
        field for field in ("status", "name")
        if not str(step.get(field) or "").strip()
    ]
    if missing:
        raise ValidationError(
            "Please fill in all required fields",
            details={"missing_fields": missing},
        )


def validate_flow(flow: Flow) -> None:
    """
    Raises:
        ValidationError: If the flow has no name, no steps, or an invalid step
    """
    if not str(flow.get("name") or "").strip():
        raise ValidationError("Flow name is required", details={"missing_fields": ["name"]})
    steps = flow.get("steps") or []
    if not steps:
        raise ValidationError(
            "Please add at least one step to the flow",
            details={"steps": "At least one step is required"},
        )
    for step in steps:
        validate_step(step)


def prepare_for_save(flow: Flow) -> Flow:
    """Validated copy of flow with each step's order set to its index."""
    validate_flow(flow)
    steps = [{**step, "order": index} for index, step in enumerate(_steps(flow))]
    return _with_steps(flow, steps)


def _contains(haystack: Any, needle: str) -> bool:
    return haystack is not None and needle in str(haystack)


def filter_user_suggestions(users: list[dict[str, Any]], query: str) -> list[dict[str, Any]]:
    """
    Users matching query on telegram ID, username, or full name.

    The telegram ID and username match is a plain substring; the full name
    match ignores case. An empty query matches nothing.
    """
    if not query:
        return []
    lowered = query.lower()
    return [
        user for user in users
        if _contains(user.get("telegramId"), query)
        or _contains(user.get("username"), query)
        or lowered in full_name(user.get("firstName"), user.get("lastName")).lower()
    ]


def filter_group_suggestions(groups: list[dict[str, Any]], query: str) -> list[dict[str, Any]]:
    """Groups whose chat ID contains query or whose title contains it ignoring case."""
    if not query:
        return []
    lowered = query.lower()
    return [
        group for group in groups
        if _contains(group.get("chatId"), query)
        or lowered in str(group.get("title") or "").lower()
    ]


def user_destination(user: dict[str, Any]) -> dict[str, Any]:
    """Destination fields for a picked user suggestion."""
    return {
        "identifier": str(user.get("telegramId") or ""),
        "name": full_name(user.get("firstName"), user.get("lastName")),
    }


def group_destination(group: dict[str, Any]) -> dict[str, Any]:
    chat_id = str(group.get("chatId") or "")
    return {"identifier": chat_id, "name": group.get("title") or chat_id}
