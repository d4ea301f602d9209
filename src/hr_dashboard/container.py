from __future__ import annotations

from dataclasses import dataclass

from .database.connection import DBConfig, DatabaseConnection
from .documents.mysql_document_repository import MySQLDocumentRepository
from .documents.service import DocumentService
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.service import EmployeeService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveService
from .medical.limits import LimitPolicy
from .medical.mysql_medical_repository import MySQLMedicalRepository
from .medical.receipts import MedicalReceiptService
from .medical.service import MedicalBenefitsService
from .storage.base import ObjectStorage
from .storage.local_storage import LocalObjectStorage


@dataclass(frozen=True)
class Container:
    employee_service: EmployeeService
    leave_service: LeaveService
    medical_service: MedicalBenefitsService
    document_service: DocumentService
    receipt_service: MedicalReceiptService


def build_container(
    *,
    db_config: dict,
    storage_root: str,
    storage_public_url: str,
    annual_medical_limit: int,
    storage: ObjectStorage | None = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    storage = storage or LocalObjectStorage(storage_root, public_base_url=storage_public_url)

    employees_repo = MySQLEmployeeRepository(conn)
    documents_repo = MySQLDocumentRepository(conn)
    leaves_repo = MySQLLeaveRepository(conn)
    medical_repo = MySQLMedicalRepository(conn)

    document_service = DocumentService(documents_repo, storage)

    return Container(
        employee_service=EmployeeService(employees_repo, document_service),
        leave_service=LeaveService(leaves_repo),
        medical_service=MedicalBenefitsService(
            medical_repo,
            employees_repo,
            policy=LimitPolicy(annual_limit=int(annual_medical_limit)),
        ),
        document_service=document_service,
        receipt_service=MedicalReceiptService(storage),
    )
