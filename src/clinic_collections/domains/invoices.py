"""Invoices (NFSe) list: definition, status graph and HTTP gateway factory."""
from __future__ import annotations

from enum import Enum

from clinic_collections.adapters.http import HttpCollectionGateway, HttpxHttpClient, param
from clinic_collections.application.query import (
    FilterDefinition,
    PaginationMode,
    QuerySchema,
    SortDirection,
    SortSpec,
    field_equals,
)
from clinic_collections.application.view import CollectionDefinition


class InvoiceStatus(str, Enum):
    DRAFT = "rascunho"
    PROCESSING = "processando"
    ISSUED = "emitida"
    CANCELLED = "cancelada"
    FAILED = "erro"


# Cancelled is terminal; a failed emission goes back to draft or is resent.
INVOICE_STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    InvoiceStatus.DRAFT.value: frozenset({InvoiceStatus.PROCESSING.value, InvoiceStatus.CANCELLED.value}),
    InvoiceStatus.PROCESSING.value: frozenset({InvoiceStatus.ISSUED.value, InvoiceStatus.FAILED.value}),
    InvoiceStatus.ISSUED.value: frozenset({InvoiceStatus.CANCELLED.value}),
    InvoiceStatus.FAILED.value: frozenset({InvoiceStatus.DRAFT.value, InvoiceStatus.PROCESSING.value}),
    InvoiceStatus.CANCELLED.value: frozenset(),
}

INVOICE_SCHEMA = QuerySchema(
    filters=(FilterDefinition("status", field_equals("status"), default="all"),),
    searchable_fields=("numero", "codigo_verificacao", "tomador_nome"),
)

INVOICES = CollectionDefinition(
    name="invoices",
    schema=INVOICE_SCHEMA,
    pagination=PaginationMode.CLIENT,
    default_sort=SortSpec("data_emissao", SortDirection.DESC),
    per_page=20,
)


def invoices_gateway(client: HttpxHttpClient) -> HttpCollectionGateway:
    return HttpCollectionGateway(client, "nfse", filter_params={"status": param("status")})


__all__ = [
    "INVOICES",
    "INVOICE_SCHEMA",
    "INVOICE_STATUS_TRANSITIONS",
    "InvoiceStatus",
    "invoices_gateway",
]
