"""Patients list: definition, wire codec and HTTP gateway factory.

The backend speaks Portuguese snake_case (``nome_completo``, ``favorito``,
``ativo``); entity data uses English snake_case (``name``, ``is_favorite``,
``is_active``).
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from clinic_collections.adapters.http import (
    FieldRoute,
    HttpCollectionGateway,
    HttpxHttpClient,
    JsonEntityCodec,
)
from clinic_collections.application.query import (
    FilterDefinition,
    PaginationMode,
    QuerySchema,
    SortSpec,
    field_truthy,
)
from clinic_collections.application.view import CollectionDefinition
from clinic_collections.kernel.types import Entity

# entity key -> wire key
_FIELDS: dict[str, str] = {
    "name": "nome_completo",
    "age": "idade",
    "cpf": "cpf",
    "rg": "rg",
    "email": "email",
    "birth_date": "data_nascimento",
    "convenio_id": "convenio_id",
    "blood_type": "tipo_sanguineo",
    "height_cm": "altura_cm",
    "weight_kg": "peso_kg",
    "is_smoker": "fumante",
    "allergies": "alergias",
    "chronic_diseases": "doencas_cronicas",
    "medications": "medicamentos_uso_continuo",
    "is_favorite": "favorito",
    "tags": "tags",
    "notes": "observacoes",
    "photo_url": "foto_url",
    "status_list": "status_list",
    "last_consultation_date": "ultima_consulta",
    "is_active": "ativo",
    "created_at": "created_at",
    "updated_at": "updated_at",
}
_ADDRESS_FIELDS = ("cep", "logradouro", "numero", "complemento", "bairro", "cidade", "uf")
_LIST_FIELDS = frozenset({"allergies", "chronic_diseases", "medications", "tags", "status_list"})

_GENDER_IN = {"masculino": "Masculino", "feminino": "Feminino", "outro": "Outro"}
_GENDER_OUT = {
    "Masculino": "masculino",
    "Feminino": "feminino",
    "Outro": "outro",
    "M": "masculino",
    "F": "feminino",
}


class PatientCodec(JsonEntityCodec):
    """Backend patient record <-> patient entity."""

    def decode(self, raw: Mapping[str, Any]) -> Entity:
        base = super().decode(raw)
        data: dict[str, Any] = {}
        for key, wire in _FIELDS.items():
            value = raw.get(wire)
            if value is None and key in _LIST_FIELDS:
                value = []
            data[key] = value
        data["phone"] = raw.get("telefone") or raw.get("celular")
        gender = raw.get("sexo")
        data["gender"] = _GENDER_IN.get(str(gender).lower(), gender) if gender else gender
        data["address"] = {part: raw.get(part) for part in _ADDRESS_FIELDS}
        data["address_line"] = ", ".join(
            str(raw[part]) for part in ("logradouro", "numero", "bairro", "cidade", "uf") if raw.get(part)
        )
        data["health_plan"] = {
            "name": raw.get("convenio_nome"),
            "number": raw.get("numero_carteira"),
            "valid_until": raw.get("validade_carteira"),
        }
        return Entity(id=base.id, data=data)

    def encode(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        wire: dict[str, Any] = {}
        for key, value in payload.items():
            if key in _FIELDS:
                wire[_FIELDS[key]] = value
            elif key == "phone":
                wire["telefone"] = value
            elif key == "gender":
                wire["sexo"] = _GENDER_OUT.get(value, "outro")
            elif key == "address" and isinstance(value, Mapping):
                wire.update({part: value.get(part) for part in _ADDRESS_FIELDS})
            elif key == "health_plan" and isinstance(value, Mapping):
                wire["numero_carteira"] = value.get("number")
                wire["validade_carteira"] = value.get("valid_until")
        wire.pop("created_at", None)
        wire.pop("updated_at", None)
        return wire


def _matches_status(entity: Entity, value: Any) -> bool:
    if value == "active":
        return entity.get("is_active") is not False
    if value == "inactive":
        return entity.get("is_active") is False
    return value in (entity.get("status_list") or ())


def _status_param(value: Any) -> dict[str, Any]:
    if value == "active":
        return {"ativo": True}
    if value == "inactive":
        return {"ativo": False}
    return {"status": value}


PATIENT_SCHEMA = QuerySchema(
    filters=(
        FilterDefinition("status", _matches_status, default="all"),
        FilterDefinition("favorites", field_truthy("is_favorite"), default=False),
    ),
    searchable_fields=("name", "cpf", "phone", "email"),
)

PATIENTS = CollectionDefinition(
    name="patients",
    schema=PATIENT_SCHEMA,
    pagination=PaginationMode.SERVER,
    default_sort=SortSpec("name"),
    per_page=50,
    restore_patch={"is_active": True},
)


def patients_gateway(client: HttpxHttpClient) -> HttpCollectionGateway:
    return HttpCollectionGateway(
        client,
        "patients",
        codec=PatientCodec(),
        filter_params={
            "status": _status_param,
            "favorites": lambda value: {"favorito": True} if value else {},
        },
        sort_fields={"name": "nome_completo", "last_consultation_date": "ultima_consulta"},
        field_routes={
            "is_favorite": FieldRoute("favorite", "is_favorite"),
            "status_list": FieldRoute("status", "status_list"),
        },
        restore_path="reactivate",
    )


__all__ = ["PATIENTS", "PATIENT_SCHEMA", "PatientCodec", "patients_gateway"]
