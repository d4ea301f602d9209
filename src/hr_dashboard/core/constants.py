"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ANNUAL_MEDICAL_LIMIT_PKR = 400_000
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 10_000

STORAGE_DOCUMENTS_PREFIX = "employees/documents"
STORAGE_DOCUMENTS_TEMP_PREFIX = "employees/documents/temp"
STORAGE_RECEIPTS_PREFIX = "medical"
