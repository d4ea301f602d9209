from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import utc_now
from ..common.http import arg_bool, arg_int, json_body
from ..common.serialization import to_jsonable
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    svc = container.medical_service
    receipts = container.receipt_service

    def _year() -> int:
        return arg_int("year", utc_now().year)

    # -------- Claims --------
    @app.route("/api/medical/records", methods=["GET"], endpoint="list_medical_records")
    def list_medical_records():
        page = svc.list_records(
            page=arg_int("page", 1),
            page_size=arg_int("pageSize", DEFAULT_PAGE_SIZE),
            employee_id=request.args.get("employeeId"),
            year=arg_int("year"),
            paid=arg_bool("paid"),
            category=request.args.get("category") or None,
        )
        return jsonify(to_jsonable(page))

    @app.route("/api/medical/records", methods=["POST"], endpoint="create_medical_record")
    def create_medical_record():
        data = json_body()
        record = svc.create_record(
            employee_id=data.get("employee_id", ""),
            date=data.get("date"),
            beneficiary=data.get("for", data.get("beneficiary")),
            medical_category=data.get("medical_category"),
            description=data.get("description", ""),
            cost_pkr=data.get("cost_pkr"),
            receipt=data.get("receipt", ""),
            payment_type=data.get("payment_type"),
            paid=data.get("paid", False),
        )
        return jsonify(to_jsonable(record)), 201

    @app.route("/api/medical/records/<record_id>", methods=["GET"], endpoint="get_medical_record")
    def get_medical_record(record_id: str):
        return jsonify(to_jsonable(svc.get_record(record_id)))

    @app.route("/api/medical/records/<record_id>", methods=["PATCH"], endpoint="update_medical_record")
    def update_medical_record(record_id: str):
        data = json_body()
        if "for" in data:
            data["beneficiary"] = data.pop("for")
        return jsonify(to_jsonable(svc.update_record(record_id, data)))

    @app.route("/api/medical/records/<record_id>/payment", methods=["PATCH"], endpoint="update_medical_payment")
    def update_medical_payment(record_id: str):
        paid = json_body().get("paid")
        if not isinstance(paid, bool):
            raise ValidationError("paid must be true or false")
        return jsonify(to_jsonable(svc.update_payment_status(record_id, paid)))

    @app.route("/api/medical/records/<record_id>", methods=["DELETE"], endpoint="delete_medical_record")
    def delete_medical_record(record_id: str):
        svc.delete_record(record_id)
        return "", 204

    # -------- Category limits --------
    @app.route("/api/medical/category-limits", methods=["GET"], endpoint="list_category_limits")
    def list_category_limits():
        return jsonify(to_jsonable(list(svc.list_category_limits())))

    @app.route("/api/medical/category-limits", methods=["PUT"], endpoint="upsert_category_limit")
    def upsert_category_limit():
        data = json_body()
        limit = svc.upsert_category_limit(medical_category=data.get("medical_category"), limit=data.get("limit"))
        return jsonify(to_jsonable(limit))

    @app.route("/api/medical/category-limits/<category>", methods=["DELETE"], endpoint="delete_category_limit")
    def delete_category_limit(category: str):
        svc.delete_category_limit(category)
        return "", 204

    # -------- Usage --------
    @app.route("/api/medical/summaries", methods=["GET"], endpoint="list_medical_summaries")
    def list_medical_summaries():
        return jsonify(to_jsonable(svc.get_all_employee_limit_summaries(_year())))

    @app.route("/api/medical/summaries/<employee_id>", methods=["GET"], endpoint="get_medical_summary")
    def get_medical_summary(employee_id: str):
        return jsonify(to_jsonable(svc.get_employee_limit_summary(employee_id, _year())))

    @app.route("/api/medical/limits/<employee_id>", methods=["GET"], endpoint="get_employee_medical_limits")
    def get_employee_medical_limits(employee_id: str):
        return jsonify(to_jsonable(list(svc.get_employee_limits(employee_id, _year()))))

    # -------- Receipts --------
    @app.route("/api/medical/receipts", methods=["POST"], endpoint="upload_medical_receipt")
    def upload_medical_receipt():
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            raise ValidationError("A file is required")
        path = receipts.upload_receipt(content=upload.read(), file_name=upload.filename)
        return jsonify({"path": path, "public_url": receipts.public_url(path)}), 201

    @app.route("/api/medical/receipts", methods=["DELETE"], endpoint="delete_medical_receipt")
    def delete_medical_receipt():
        path = json_body().get("path")
        if not path:
            raise ValidationError("path is required")
        receipts.delete_receipt(path)
        return "", 204
