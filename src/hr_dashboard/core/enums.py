from __future__ import annotations

from enum import Enum


class UserType(str, Enum):
    OWNER = "owner"
    EMPLOYEE = "employee"


class EmploymentStatus(str, Enum):
    CURRENT = "current"
    TERMINATED = "terminated"
    RESIGNED = "resigned"
    PROBATION = "probation"


class JobType(str, Enum):
    """Contract type of an employee."""

    FULL_TIME = "full_time"
    PART_TIME = "part_time"
    PROJECT_BASED = "project_based"


class Designation(str, Enum):
    FULL_STACK_DEVELOPER = "full_stack_developer"
    QA_ENGINEER = "qa_engineer"
    HR_MANAGER = "hr_manager"
    DEVOPS_ENGINEER = "devops_engineer"
    TECHNICAL_RECRUITER = "technical_recruiter"
    WORDPRESS_DEVELOPER = "wordpress_developer"
    REACT_NATIVE_DEVELOPER = "react_native_developer"
    FRONTEND_DEVELOPER = "frontend_developer"
    BACKEND_DEVELOPER = "backend_developer"


class LeaveStatus(str, Enum):
    """Approval flow for leave requests: decided once, never reopened."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LeaveType(str, Enum):
    CASUAL = "casual"
    SICK = "sick"
    PARENTAL = "parental"
    OTHER = "other"


class Beneficiary(str, Enum):
    """Who a medical claim was incurred for."""

    SELF = "self"
    SPOUSE = "spouse"
    PARENTS = "parents"
    SIBLINGS = "siblings"
    CHILDREN = "children"


class MedicalCategory(str, Enum):
    SURGERY_AND_HOSPITALIZATION = "surgery_and_hospitalization"
    MATERNITY_CARE = "maternity_care"
    DENTAL_CARE = "dental_care"
    VISION_CARE = "vision_care"
    PRESCRIPTION_MEDICINE = "prescription_medicine"
    LABS_AND_MEDICAL_TESTS = "labs_and_medical_tests"
    CONSULTATION = "consultation"


class PaymentType(str, Enum):
    ADVANCE = "advance"
    REIMBURSE = "reimburse"
