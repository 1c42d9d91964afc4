"""Domain presets – collection definitions for the practice's list screens."""

from clinic_collections.domains.invoices import INVOICE_STATUS_TRANSITIONS, INVOICES, InvoiceStatus
from clinic_collections.domains.patients import PATIENTS, PatientCodec
from clinic_collections.domains.users import USERS

__all__ = [
    "INVOICES",
    "INVOICE_STATUS_TRANSITIONS",
    "InvoiceStatus",
    "PATIENTS",
    "PatientCodec",
    "USERS",
]
