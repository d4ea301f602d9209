from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import arg_int, json_body
from ..common.serialization import to_jsonable
from ..core.constants import DEFAULT_PAGE_SIZE
from ..container import Container


def register(app: Flask, container: Container) -> None:
    svc = container.employee_service

    @app.route("/api/employees", methods=["GET"], endpoint="list_employees")
    def list_employees():
        page = svc.list(
            page=arg_int("page", 1),
            page_size=arg_int("pageSize", DEFAULT_PAGE_SIZE),
            search=request.args.get("search"),
        )
        return jsonify(to_jsonable(page))

    @app.route("/api/employees", methods=["POST"], endpoint="create_employee")
    def create_employee():
        data = json_body()
        document_ids = data.pop("documentIdsToLink", None) or []
        employee = svc.create(data, document_ids=document_ids)
        return jsonify(to_jsonable(employee)), 201

    @app.route("/api/employees/<employee_id>", methods=["GET"], endpoint="get_employee")
    def get_employee(employee_id: str):
        return jsonify(to_jsonable(svc.get(employee_id)))

    @app.route("/api/employees/<employee_id>", methods=["PATCH"], endpoint="update_employee")
    def update_employee(employee_id: str):
        data = json_body()
        to_link = data.pop("documentIdsToLink", None) or []
        to_unlink = data.pop("deletedDocuments", None) or []
        employee = svc.update(
            employee_id,
            data,
            document_ids_to_link=to_link,
            deleted_document_ids=to_unlink,
        )
        return jsonify(to_jsonable(employee))

    @app.route("/api/employees/<employee_id>", methods=["DELETE"], endpoint="delete_employee")
    def delete_employee(employee_id: str):
        svc.delete(employee_id)
        return "", 204
