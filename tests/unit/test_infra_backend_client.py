import httpx
import pytest

from travel_checkout.infra.backend_client import (
    BackendAuthError,
    BackendConnectionError,
    BackendNotFoundError,
    BackendRequestError,
)


@pytest.mark.asyncio
async def test_call_sends_bearer_and_parses_json(backend, backend_mock):
    route = backend_mock.get("/Booking/1").respond(json={"Id": 1})
    assert await backend.get("/Booking/1") == {"Id": 1}
    assert route.calls.last.request.headers["Authorization"] == "Bearer fake-token"

@pytest.mark.asyncio
async def test_empty_and_text_bodies(backend, backend_mock):
    backend_mock.put("/Booking/1/status").respond(204)
    backend_mock.get("/health").respond(200, text="Healthy")
    assert await backend.put("/Booking/1/status", json="paid") is None
    assert await backend.get("/health") == "Healthy"

@pytest.mark.asyncio
@pytest.mark.parametrize("status,exc_type", [
    (401, BackendAuthError),
    (403, BackendAuthError),
    (404, BackendNotFoundError),
    (400, BackendRequestError),
    (500, BackendRequestError),
])
async def test_status_mapping(backend, backend_mock, status, exc_type):
    backend_mock.get("/Booking/1").respond(status, json={"message": "nope"})
    with pytest.raises(exc_type) as exc:
        await backend.get("/Booking/1")
    assert exc.value.status_code == status
    assert exc.value.payload == {"message": "nope"}

@pytest.mark.asyncio
async def test_transport_errors_are_connection_errors(backend, backend_mock):
    route = backend_mock.get("/Booking/1")
    route.mock(side_effect=httpx.ConnectError("refused"))
    with pytest.raises(BackendConnectionError):
        await backend.get("/Booking/1")
    route.mock(side_effect=httpx.ReadTimeout("slow"))
    with pytest.raises(BackendConnectionError) as exc:
        await backend.get("/Booking/1")
    assert "backend_timeout" in str(exc.value)
