from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import parse_iso_date
from ..common.web import (
    as_bool,
    as_int,
    current_role,
    current_user_id,
    json_body,
    login_required,
    ok,
    optional_int,
    required,
)
from ..core.enums import Decision, RequestKind
from ..core.exceptions import NotFoundError, ValidationError
from ..container import Container


def _decision(value) -> Decision:
    try:
        return Decision(value)
    except ValueError:
        raise ValidationError("decision must be 'approve' or 'reject'")


def register(app: Flask, container: Container) -> None:
    service = container.request_service

    def _resolve(kind: RequestKind, request_id: int):
        req = service.get_request(current_role=current_role(), user_id=current_user_id(), request_id=request_id)
        if req.kind != kind:
            raise NotFoundError("Request not found")
        data = json_body()
        return service.resolve(
            current_role=current_role(),
            approver_id=current_user_id(),
            request_id=request_id,
            decision=_decision(required(data, "decision")),
            rejection_reason=data.get("rejection_reason"),
        )

    # -------- Time off --------
    @app.route("/api/time-off-requests", methods=["POST"], endpoint="api_time_off_create")
    @login_required
    def create_time_off():
        data = json_body()
        req = service.submit_time_off(
            current_role=current_role(),
            requester_id=current_user_id(),
            start_date=parse_iso_date(required(data, "start_date")),
            end_date=parse_iso_date(required(data, "end_date")),
            reason=data.get("reason", ""),
        )
        return ok(req, status=201)

    @app.route("/api/time-off-requests", methods=["GET"], endpoint="api_time_off_mine")
    @login_required
    def my_time_off():
        return ok(service.list_my_requests(requester_id=current_user_id(), kind=RequestKind.TIME_OFF))

    @app.route("/api/time-off-requests/pending", methods=["GET"], endpoint="api_time_off_pending")
    @login_required
    def pending_time_off():
        return ok(service.list_pending(current_role=current_role(), kind=RequestKind.TIME_OFF))

    @app.route("/api/time-off-requests/<int:request_id>", methods=["PATCH"], endpoint="api_time_off_resolve")
    @login_required
    def resolve_time_off(request_id: int):
        return ok(_resolve(RequestKind.TIME_OFF, request_id))

    # -------- Shift swaps --------
    @app.route("/api/shifts/swap-requests", methods=["POST"], endpoint="api_swap_create")
    @login_required
    def create_swap():
        data = json_body()
        req = service.submit_shift_swap(
            current_role=current_role(),
            requester_id=current_user_id(),
            original_shift_id=as_int(required(data, "original_shift_id"), "original_shift_id"),
            reason=data.get("reason", ""),
            coverage_only=as_bool(data.get("coverage_only", False)),
            target_shift_id=optional_int(data.get("target_shift_id"), "target_shift_id"),
            target_employee_id=optional_int(data.get("target_employee_id"), "target_employee_id"),
        )
        return ok(req, status=201)

    @app.route("/api/shifts/swap-requests", methods=["GET"], endpoint="api_swap_mine")
    @login_required
    def my_swaps():
        return ok(service.list_my_requests(requester_id=current_user_id(), kind=RequestKind.SHIFT_SWAP))

    @app.route("/api/shifts/swap-requests/pending", methods=["GET"], endpoint="api_swap_pending")
    @login_required
    def pending_swaps():
        return ok(service.list_pending(current_role=current_role(), kind=RequestKind.SHIFT_SWAP))

    @app.route("/api/shifts/swap-requests/<int:request_id>", methods=["PATCH"], endpoint="api_swap_resolve")
    @login_required
    def resolve_swap(request_id: int):
        return ok(_resolve(RequestKind.SHIFT_SWAP, request_id))

    @app.route("/api/requests/<int:request_id>", methods=["GET"], endpoint="api_request")
    @login_required
    def get_request(request_id: int):
        return ok(service.get_request(current_role=current_role(), user_id=current_user_id(), request_id=request_id))
