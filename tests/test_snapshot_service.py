import httpx
import pytest

from skyscope.errors import ConfigurationError
from skyscope.ingestors.auth import TokenCache
from skyscope.ingestors.fetcher import ResilientFetcher
from skyscope.services.snapshots import SnapshotService, snapshot_for_request

TOKEN_URL = "https://auth.example.test/token"
STATES_URL = "https://opensky.example.test/api/states/all"

STATE = [
    "abc123", "AC 123 ", "CA", 1000, 1000, -114.1, 51.0, 1100.0, False,
    200.0, 90.0, 0.0, None, 1150.0, None, False, 0,
]


async def _no_sleep(delay: float) -> None:
    return None


def _copy(response: httpx.Response) -> httpx.Response:
    return httpx.Response(
        response.status_code, headers=response.headers, content=response.content
    )


class Upstream:
    """Fake OpenSky: token endpoint plus a scripted states endpoint."""

    def __init__(self, states_response=None, token_response=None):
        self.states_response = states_response or httpx.Response(
            200, json={"time": 1714765200, "states": [STATE]}
        )
        self.token_response = token_response or httpx.Response(
            200, json={"access_token": "secret-token", "expires_in": 1800}
        )
        self.token_calls: list[httpx.Request] = []
        self.state_calls: list[httpx.Request] = []

    def __call__(self, request: httpx.Request):
        if str(request.url) == TOKEN_URL:
            self.token_calls.append(request)
            return _copy(self.token_response)
        self.state_calls.append(request)
        if isinstance(self.states_response, Exception):
            raise self.states_response
        return _copy(self.states_response)


def _service(upstream, credentials=("id", "secret")):
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
    fetcher = ResilientFetcher(client, timeout=5.0, max_retries=1, sleep=_no_sleep)

    def provider():
        if credentials is None:
            raise ConfigurationError("OpenSky credentials missing")
        return credentials

    token_cache = TokenCache(fetcher, token_url=TOKEN_URL, credentials_provider=provider)
    return SnapshotService(fetcher=fetcher, token_cache=token_cache, states_url=STATES_URL)


@pytest.mark.anyio
async def test_snapshot_queries_region_box_with_bearer_token():
    upstream = Upstream()
    service = _service(upstream)

    snapshot = await service.get_snapshot("CALGARY")

    request = upstream.state_calls[0]
    assert request.headers["Authorization"] == "Bearer secret-token"
    assert request.url.params["lamin"] == "50.0"
    assert request.url.params["lamax"] == "52.3"
    assert request.url.params["lomin"] == "-115.8"
    assert request.url.params["lomax"] == "-112.6"

    assert snapshot.region_key == "calgary"
    assert snapshot.region.reference_elevation_m == 1084
    assert snapshot.data_timestamp == 1714765200
    assert snapshot.error is None
    assert len(snapshot.aircraft) == 1
    record = snapshot.aircraft[0]
    assert record.callsign == "AC 123"
    assert record.altitude_agl_m == 66


@pytest.mark.anyio
async def test_unknown_region_uses_default_box():
    upstream = Upstream()
    service = _service(upstream)

    snapshot = await service.get_snapshot("atlantis")

    assert snapshot.region_key == "calgary"
    assert upstream.state_calls[0].url.params["lamin"] == "50.0"


@pytest.mark.anyio
async def test_token_reused_across_snapshots():
    upstream = Upstream()
    service = _service(upstream)

    await service.get_snapshot("calgary")
    await service.get_snapshot("toronto")

    assert len(upstream.token_calls) == 1
    assert len(upstream.state_calls) == 2


@pytest.mark.anyio
async def test_rate_limit_yields_degraded_snapshot():
    upstream = Upstream(
        states_response=httpx.Response(429, headers={"Retry-After": "60"}, text="Too many requests")
    )
    service = _service(upstream)

    snapshot = await service.get_snapshot("vancouver")

    assert snapshot.aircraft == ()
    assert snapshot.error is not None
    assert snapshot.upstream_status == 429
    assert snapshot.region_key == "vancouver"
    assert len(upstream.state_calls) == 1


@pytest.mark.anyio
async def test_rate_limit_does_not_raise_past_endpoint_boundary():
    upstream = Upstream(states_response=httpx.Response(429, text="Too many requests"))
    service = _service(upstream)

    status_code, snapshot = await snapshot_for_request(service, "calgary")

    assert status_code == 200
    assert snapshot.aircraft == ()
    assert snapshot.upstream_status == 429
    assert snapshot.model_dump(by_alias=True)["error"]


@pytest.mark.anyio
async def test_unauthorized_states_response_invalidates_token():
    upstream = Upstream(states_response=httpx.Response(401))
    service = _service(upstream)

    snapshot = await service.get_snapshot("calgary")
    assert snapshot.upstream_status == 401
    assert service.token_cache.token is None

    upstream.states_response = httpx.Response(200, json={"time": 1, "states": []})
    await service.get_snapshot("calgary")

    assert len(upstream.token_calls) == 2


@pytest.mark.anyio
async def test_null_states_mean_no_aircraft():
    upstream = Upstream(states_response=httpx.Response(200, json={"time": 1714765200, "states": None}))
    service = _service(upstream)

    snapshot = await service.get_snapshot("alberta")

    assert snapshot.aircraft == ()
    assert snapshot.error is None
    assert snapshot.data_timestamp == 1714765200


@pytest.mark.anyio
async def test_missing_time_gives_null_timestamp():
    upstream = Upstream(states_response=httpx.Response(200, json={"states": [STATE]}))
    service = _service(upstream)

    snapshot = await service.get_snapshot("calgary")

    assert snapshot.data_timestamp is None
    assert len(snapshot.aircraft) == 1


@pytest.mark.anyio
async def test_boundary_maps_missing_credentials_to_500():
    upstream = Upstream()
    service = _service(upstream, credentials=None)

    status_code, snapshot = await snapshot_for_request(service, "calgary")

    assert status_code == 500
    assert snapshot.aircraft == ()
    assert "credentials" in snapshot.error
    assert upstream.token_calls == []


@pytest.mark.anyio
async def test_boundary_maps_auth_failure_to_degraded_response():
    upstream = Upstream(token_response=httpx.Response(400, json={"error": "invalid_client"}))
    service = _service(upstream)

    status_code, snapshot = await snapshot_for_request(service, "calgary")

    assert status_code == 200
    assert snapshot.error == "Failed to authenticate with OpenSky Network"
    assert snapshot.upstream_status == 400
    assert upstream.state_calls == []


@pytest.mark.anyio
async def test_boundary_maps_transport_exhaustion_to_degraded_response():
    upstream = Upstream(states_response=httpx.ConnectError("unreachable"))
    service = _service(upstream)

    status_code, snapshot = await snapshot_for_request(service, "toronto")

    assert status_code == 200
    assert snapshot.error == "Failed to fetch data from OpenSky Network"
    assert snapshot.upstream_status is None
    assert len(upstream.state_calls) == 2


@pytest.mark.anyio
async def test_boundary_maps_invalid_json_to_502():
    upstream = Upstream(states_response=httpx.Response(200, text="<html>maintenance</html>"))
    service = _service(upstream)

    status_code, snapshot = await snapshot_for_request(service, "calgary")

    assert status_code == 502
    assert snapshot.aircraft == ()
    assert snapshot.error


@pytest.mark.anyio
async def test_boundary_maps_unexpected_errors_to_500(monkeypatch):
    service = _service(Upstream())

    async def boom(region_key):
        raise RuntimeError("bug")

    monkeypatch.setattr(service, "get_snapshot", boom)

    status_code, snapshot = await snapshot_for_request(service, "calgary")

    assert status_code == 500
    assert snapshot.error == "Unexpected error while fetching aircraft data"
