"""Unit tests – HTTP adapter: client error mapping, retry and REST gateway."""
from __future__ import annotations

import asyncio
import json

import httpx
import pytest
import respx

from clinic_collections.adapters.http import (
    FieldRoute,
    HttpCollectionGateway,
    HttpxHttpClient,
    TenacityRetryPolicy,
    choice,
    param,
)
from clinic_collections.application.query import FilterSpec, PageSpec, SortDirection, SortSpec
from clinic_collections.config.settings import CollectionSettings
from clinic_collections.kernel.errors import (
    ConflictError,
    ExternalServiceError,
    NetworkError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

BASE = "http://api.test/v1"


def _gateway(client: HttpxHttpClient, **kwargs) -> HttpCollectionGateway:
    kwargs.setdefault("filter_params", {"status": param("status"), "favorites": choice("favorito", {True: True})})
    return HttpCollectionGateway(client, "patients", **kwargs)


# ---------------------------------------------------------------------------
# Client – error mapping
# ---------------------------------------------------------------------------

class TestClientErrorMapping:
    @pytest.mark.parametrize(
        "status, error",
        [
            (404, NotFoundError),
            (409, ConflictError),
            (400, ValidationError),
            (422, ValidationError),
            (401, UnauthorizedError),
            (408, NetworkError),
            (429, NetworkError),
            (500, NetworkError),
            (503, NetworkError),
            (418, ExternalServiceError),
        ],
    )
    @respx.mock
    def test_status_mapping(self, status: int, error: type) -> None:
        respx.get(f"{BASE}/patients/p1").mock(return_value=httpx.Response(status, json={"message": "nope"}))

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                with pytest.raises(error):
                    await client.get("/patients/p1")

        asyncio.run(run())

    @respx.mock
    def test_validation_errors_carried(self) -> None:
        body = {"message": "Invalid", "errors": [{"field": "cpf", "message": "CPF inválido"}]}
        respx.post(f"{BASE}/patients").mock(return_value=httpx.Response(422, json=body))

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                with pytest.raises(ValidationError) as info:
                    await client.post("/patients", json={"cpf": "1"})
            assert info.value.fields == ["cpf"]
            assert info.value.message == "Invalid"

        asyncio.run(run())

    @respx.mock
    def test_retry_after_header(self) -> None:
        respx.get(f"{BASE}/patients").mock(return_value=httpx.Response(429, headers={"Retry-After": "3"}))

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                with pytest.raises(NetworkError) as info:
                    await client.get("/patients")
            assert info.value.status_code == 429
            assert info.value.retry_after_seconds == 3.0

        asyncio.run(run())

    @respx.mock
    def test_transport_failure(self) -> None:
        respx.get(f"{BASE}/patients").mock(side_effect=httpx.ConnectError("refused"))

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                with pytest.raises(NetworkError) as info:
                    await client.get("/patients")
            assert isinstance(info.value.__cause__, httpx.ConnectError)

        asyncio.run(run())

    @respx.mock
    def test_timeout(self) -> None:
        respx.get(f"{BASE}/patients").mock(side_effect=httpx.ReadTimeout("slow"))

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                with pytest.raises(NetworkError):
                    await client.get("/patients")

        asyncio.run(run())

    @respx.mock
    def test_empty_body_is_none(self) -> None:
        respx.delete(f"{BASE}/patients/p1").mock(return_value=httpx.Response(204))

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                assert await client.delete("/patients/p1") is None

        asyncio.run(run())

    @respx.mock
    def test_bearer_token(self) -> None:
        route = respx.get(f"{BASE}/patients").mock(return_value=httpx.Response(200, json={"items": []}))

        async def token() -> str:
            return "secret-token"

        async def run() -> None:
            async with HttpxHttpClient(BASE, token_provider=token) as client:
                await client.get("/patients")
            assert route.calls.last.request.headers["authorization"] == "Bearer secret-token"

        asyncio.run(run())


# ---------------------------------------------------------------------------
# Retry
# ---------------------------------------------------------------------------

class TestRetry:
    @respx.mock
    def test_retries_network_errors(self) -> None:
        route = respx.get(f"{BASE}/patients").mock(
            side_effect=[httpx.Response(503), httpx.ConnectError("reset"), httpx.Response(200, json={"ok": True})]
        )
        policy = TenacityRetryPolicy(max_retries=3, base_delay=0, jitter=0)

        async def run() -> None:
            async with HttpxHttpClient(BASE, retry=policy) as client:
                assert await client.get("/patients") == {"ok": True}

        asyncio.run(run())
        assert route.call_count == 3

    @respx.mock
    def test_gives_up_after_max_retries(self) -> None:
        route = respx.get(f"{BASE}/patients").mock(return_value=httpx.Response(500))
        policy = TenacityRetryPolicy(max_retries=2, base_delay=0, jitter=0)

        async def run() -> None:
            async with HttpxHttpClient(BASE, retry=policy) as client:
                with pytest.raises(NetworkError):
                    await client.get("/patients")

        asyncio.run(run())
        assert route.call_count == 3

    @respx.mock
    def test_does_not_retry_client_errors(self) -> None:
        route = respx.put(f"{BASE}/patients/p1").mock(return_value=httpx.Response(409))
        policy = TenacityRetryPolicy(max_retries=3, base_delay=0, jitter=0)

        async def run() -> None:
            async with HttpxHttpClient(BASE, retry=policy) as client:
                with pytest.raises(ConflictError):
                    await client.put("/patients/p1", json={})

        asyncio.run(run())
        assert route.call_count == 1

    def test_from_settings(self) -> None:
        client = HttpxHttpClient.from_settings(CollectionSettings(max_retries=0))
        assert client._retry is None
        client = HttpxHttpClient.from_settings(CollectionSettings(max_retries=2))
        assert client._retry is not None
        assert client._retry.max_attempts == 3


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------

class TestGatewayList:
    @respx.mock
    def test_query_params(self) -> None:
        route = respx.get(f"{BASE}/patients").mock(
            return_value=httpx.Response(200, json={"items": [{"id": "p1", "name": "Ana"}], "total": 41})
        )

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                result = await _gateway(client).list(
                    FilterSpec(values={"status": "active", "favorites": True}, search="  ana "),
                    SortSpec("name", SortDirection.DESC),
                    PageSpec(3, 20),
                )
            assert result.total == 41
            assert [e.id for e in result.items] == ["p1"]
            params = route.calls.last.request.url.params
            assert params["page"] == "3"
            assert params["per_page"] == "20"
            assert params["search"] == "ana"
            assert params["sort_by"] == "name"
            assert params["sort_order"] == "desc"
            assert params["status"] == "active"
            assert params["favorito"] == "true"

        asyncio.run(run())

    @respx.mock
    def test_no_page_params_without_page(self) -> None:
        route = respx.get(f"{BASE}/patients").mock(return_value=httpx.Response(200, json={"items": [], "total": 0}))

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                result = await _gateway(client).list(FilterSpec(), None, None)
            assert result.items == ()
            assert result.total == 0
            assert "page" not in route.calls.last.request.url.params
            assert "sort_by" not in route.calls.last.request.url.params

        asyncio.run(run())

    @respx.mock
    def test_bare_array_response(self) -> None:
        respx.get(f"{BASE}/patients").mock(return_value=httpx.Response(200, json=[{"id": 1}, {"id": 2}]))

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                result = await _gateway(client).list(FilterSpec(), None, None)
            assert result.total == 2

        asyncio.run(run())

    @respx.mock
    def test_malformed_response(self) -> None:
        respx.get(f"{BASE}/patients").mock(return_value=httpx.Response(200, json={"rows": []}))

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                with pytest.raises(ExternalServiceError):
                    await _gateway(client).list(FilterSpec(), None, None)

        asyncio.run(run())

    @respx.mock
    def test_unsupported_filter_rejected_before_request(self) -> None:
        route = respx.get(f"{BASE}/patients").mock(return_value=httpx.Response(200, json={"items": []}))

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                with pytest.raises(ValidationError) as info:
                    await _gateway(client).list(FilterSpec(values={"plan": "pro"}), None, None)
            assert info.value.fields == ["plan"]

        asyncio.run(run())
        assert route.call_count == 0

    def test_sort_field_renamed(self) -> None:
        gateway = HttpCollectionGateway(HttpxHttpClient(BASE), "users", sort_fields={"last_login": "lastLogin"})
        params = gateway.build_params(FilterSpec(), SortSpec("last_login", SortDirection.DESC), PageSpec())
        assert params["sort_by"] == "lastLogin"


class TestGatewayMutations:
    @respx.mock
    def test_create_and_update(self) -> None:
        create = respx.post(f"{BASE}/patients").mock(return_value=httpx.Response(201, json={"id": "p9", "name": "Davi"}))
        update = respx.put(f"{BASE}/patients/p9").mock(return_value=httpx.Response(200, json={"id": "p9", "name": "Davi S."}))

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                gateway = _gateway(client)
                created = await gateway.create({"id": "tmp-1", "name": "Davi"})
                updated = await gateway.update("p9", {"name": "Davi S."})
            assert created.id == "p9"
            assert json.loads(create.calls.last.request.content) == {"name": "Davi"}
            assert updated.get("name") == "Davi S."
            assert update.called

        asyncio.run(run())

    @respx.mock
    def test_get_missing(self) -> None:
        respx.get(f"{BASE}/patients/nope").mock(return_value=httpx.Response(404))

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                with pytest.raises(NotFoundError):
                    await _gateway(client).get_by_id("nope")

        asyncio.run(run())

    @respx.mock
    def test_remove_404_is_success(self) -> None:
        route = respx.delete(f"{BASE}/patients/p1").mock(
            side_effect=[httpx.Response(204), httpx.Response(404)]
        )

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                gateway = _gateway(client)
                await gateway.remove("p1")
                await gateway.remove("p1")

        asyncio.run(run())
        assert route.call_count == 2

    @respx.mock
    def test_set_field_patch(self) -> None:
        route = respx.patch(f"{BASE}/patients/p1").mock(
            return_value=httpx.Response(200, json={"id": "p1", "status": "active"})
        )

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                entity = await _gateway(client).set_field("p1", "status", "active")
            assert entity.get("status") == "active"
            assert json.loads(route.calls.last.request.content) == {"status": "active"}

        asyncio.run(run())

    @respx.mock
    def test_set_field_route_reads_back(self) -> None:
        favorite = respx.put(f"{BASE}/patients/p1/favorite").mock(
            return_value=httpx.Response(200, json={"success": True})
        )
        respx.get(f"{BASE}/patients/p1").mock(
            return_value=httpx.Response(200, json={"id": "p1", "is_favorite": True})
        )

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                gateway = _gateway(client, field_routes={"is_favorite": FieldRoute("favorite", "is_favorite")})
                entity = await gateway.set_field("p1", "is_favorite", True)
            assert entity.get("is_favorite") is True
            assert json.loads(favorite.calls.last.request.content) == {"is_favorite": True}

        asyncio.run(run())

    @respx.mock
    def test_update_conflict(self) -> None:
        respx.put(f"{BASE}/patients/p1").mock(return_value=httpx.Response(409, json={"message": "stale"}))

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                with pytest.raises(ConflictError) as info:
                    await _gateway(client).update("p1", {"name": "x"})
            assert info.value.message == "stale"

        asyncio.run(run())

    @respx.mock
    def test_restore_default_path(self) -> None:
        route = respx.put(f"{BASE}/patients/p1/restore").mock(
            return_value=httpx.Response(200, json={"id": "p1", "is_active": True})
        )

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                entity = await _gateway(client).restore("p1")
            assert entity.id == "p1"
            assert entity.get("is_active") is True

        asyncio.run(run())
        assert route.call_count == 1

    @respx.mock
    def test_restore_custom_path_reads_back(self) -> None:
        reactivate = respx.put(f"{BASE}/patients/p1/reactivate").mock(return_value=httpx.Response(204))
        respx.get(f"{BASE}/patients/p1").mock(
            return_value=httpx.Response(200, json={"id": "p1", "is_active": True})
        )

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                entity = await _gateway(client, restore_path="reactivate").restore("p1")
            assert entity.get("is_active") is True

        asyncio.run(run())
        assert reactivate.called

    @respx.mock
    def test_restore_missing(self) -> None:
        respx.put(f"{BASE}/patients/p9/restore").mock(return_value=httpx.Response(404, json={"message": "gone"}))

        async def run() -> None:
            async with HttpxHttpClient(BASE) as client:
                with pytest.raises(NotFoundError):
                    await _gateway(client).restore("p9")

        asyncio.run(run())
