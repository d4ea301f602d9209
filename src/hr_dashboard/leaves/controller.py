from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import arg_int, json_body
from ..common.serialization import to_jsonable
from ..core.constants import DEFAULT_PAGE_SIZE
from ..container import Container


def register(app: Flask, container: Container) -> None:
    svc = container.leave_service

    @app.route("/api/leaves", methods=["GET"], endpoint="list_leaves")
    def list_leaves():
        page = svc.list(
            status=request.args.get("status") or None,
            page=arg_int("page", 1),
            page_size=arg_int("pageSize", DEFAULT_PAGE_SIZE),
            search=request.args.get("search"),
        )
        return jsonify(to_jsonable(page))

    @app.route("/api/leaves", methods=["POST"], endpoint="create_leave")
    def create_leave():
        data = json_body()
        leave = svc.create(
            employee_id=data.get("employee_id", ""),
            leave_type=data.get("leave_type"),
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
            reason=data.get("reason", ""),
            partial_leave=data.get("partial_leave", False),
            deadline_extended=data.get("deadline_extended", False),
            num_days=data.get("num_days"),
        )
        return jsonify(to_jsonable(leave)), 201

    @app.route("/api/leaves/<request_id>", methods=["GET"], endpoint="get_leave")
    def get_leave(request_id: str):
        return jsonify(to_jsonable(svc.get(request_id)))

    @app.route("/api/leaves/<request_id>", methods=["PATCH"], endpoint="update_leave")
    def update_leave(request_id: str):
        return jsonify(to_jsonable(svc.update(request_id, json_body())))

    @app.route("/api/leaves/<request_id>/approve", methods=["POST"], endpoint="approve_leave")
    def approve_leave(request_id: str):
        return jsonify(to_jsonable(svc.approve(request_id)))

    @app.route("/api/leaves/<request_id>/reject", methods=["POST"], endpoint="reject_leave")
    def reject_leave(request_id: str):
        return jsonify(to_jsonable(svc.reject(request_id)))

    @app.route("/api/leaves/<request_id>", methods=["DELETE"], endpoint="delete_leave")
    def delete_leave(request_id: str):
        svc.delete(request_id)
        return "", 204
