from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import json_body
from ..common.serialization import to_jsonable
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    svc = container.document_service

    def _with_url(doc) -> dict:
        payload = to_jsonable(doc)
        payload["public_url"] = svc.public_url(doc.file_path)
        return payload

    @app.route("/api/documents", methods=["POST"], endpoint="upload_document")
    def upload_document():
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            raise ValidationError("A file is required")
        doc = svc.upload(
            content=upload.read(),
            file_name=upload.filename,
            name=request.form.get("name") or upload.filename,
            mime_type=upload.mimetype,
        )
        return jsonify(_with_url(doc)), 201

    @app.route("/api/employees/<employee_id>/documents", methods=["GET"], endpoint="list_employee_documents")
    def list_employee_documents(employee_id: str):
        return jsonify([_with_url(d) for d in svc.list_for_employee(employee_id)])

    @app.route("/api/documents/delete", methods=["POST"], endpoint="delete_documents")
    def delete_documents():
        ids = json_body().get("ids") or []
        if not isinstance(ids, list):
            raise ValidationError("ids must be a list")
        svc.soft_delete(ids)
        return "", 204
