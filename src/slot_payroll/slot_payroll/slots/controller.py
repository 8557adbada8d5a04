from __future__ import annotations

from flask import Flask

from ..common.http import admin_required, json_body, login_required, ok, optional_str
from ..core.exceptions import ValidationError
from .model import Slot
from .timeparse import format_minutes


def slot_to_json(slot: Slot, *, admin: bool = False) -> dict:
    data = {
        "id": slot.slot_id,
        "name": slot.name,
        "startMinutes": slot.start_minutes,
        "endMinutes": slot.end_minutes,
        "startTime": format_minutes(slot.start_minutes),
        "endTime": format_minutes(slot.end_minutes),
        "salary": float(slot.salary),
        "isActive": slot.is_active,
    }
    if admin:
        data["sortOrder"] = slot.sort_order
    return data


def _time_field(body: dict, text_key: str, minutes_key: str):
    """``startTime``/``endTime`` strings win over ``startMinutes``/``endMinutes``."""
    text = optional_str(body, text_key)
    if text:
        return text
    value = body.get(minutes_key)
    if value is None or isinstance(value, (int, str)):
        return value
    raise ValidationError(f"{minutes_key} must be an integer or a time string")


def _bool_field(body: dict, key: str):
    value = body.get(key)
    if value is not None and not isinstance(value, bool):
        raise ValidationError(f"{key} must be a boolean")
    return value


def register(app: Flask, container) -> None:
    @app.route("/api/slots", methods=["GET"], endpoint="slots_active")
    @login_required
    def slots_active():
        slots = container.slot_service.list_slots(active_only=True)
        return ok({"slots": [slot_to_json(s) for s in slots]})

    @app.route("/api/admin/slots", methods=["GET"], endpoint="admin_slots")
    @admin_required
    def admin_slots():
        slots = container.slot_service.list_slots()
        return ok({"slots": [slot_to_json(s, admin=True) for s in slots]})

    @app.route("/api/admin/slots", methods=["POST"], endpoint="admin_slots_create")
    @admin_required
    def admin_slots_create():
        body = json_body()
        start = _time_field(body, "startTime", "startMinutes")
        end = _time_field(body, "endTime", "endMinutes")
        if start is None:
            raise ValidationError("Either startTime or startMinutes is required")
        if end is None:
            raise ValidationError("Either endTime or endMinutes is required")
        if body.get("salary") is None:
            raise ValidationError("salary is required")

        is_active = _bool_field(body, "isActive")
        slot = container.slot_service.create_slot(
            name=optional_str(body, "name") or "",
            start=start,
            end=end,
            salary=body["salary"],
            sort_order=body.get("sortOrder", 0),
            is_active=True if is_active is None else is_active,
        )
        return ok({"slot": slot_to_json(slot, admin=True)}, 201)

    @app.route("/api/admin/slots/<int:slot_id>", methods=["POST"], endpoint="admin_slots_update")
    @app.route("/api/admin/slots/<int:slot_id>/update", methods=["POST"], endpoint="admin_slots_update_alias")
    @admin_required
    def admin_slots_update(slot_id: int):
        body = json_body()
        slot = container.slot_service.update_slot(
            slot_id,
            name=optional_str(body, "name"),
            start=_time_field(body, "startTime", "startMinutes"),
            end=_time_field(body, "endTime", "endMinutes"),
            salary=body.get("salary"),
            sort_order=body.get("sortOrder"),
            is_active=_bool_field(body, "isActive"),
        )
        return ok({"updated": True, "slot": slot_to_json(slot, admin=True)})

    @app.route("/api/admin/slots/<int:slot_id>", methods=["DELETE"], endpoint="admin_slots_delete")
    @app.route("/api/admin/slots/<int:slot_id>/delete", methods=["POST"], endpoint="admin_slots_delete_alias")
    @admin_required
    def admin_slots_delete(slot_id: int):
        container.slot_service.delete_slot(slot_id)
        return ok({"deleted": True})
