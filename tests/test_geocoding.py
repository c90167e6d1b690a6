import httpx
import pytest

from donorfinder.errors import NotFoundError, ProviderError, UpstreamTimeoutError
from donorfinder.services.geocoding import NominatimGeocoder, check_health


def _geocoder(handler) -> NominatimGeocoder:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return NominatimGeocoder(base_url="https://geo.test", client=client)


def test_resolve_uses_first_match():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        return httpx.Response(
            200,
            json=[
                {"lat": "12.9716", "lon": "77.5946", "display_name": "Bengaluru"},
                {"lat": "13.5", "lon": "78.0", "display_name": "Elsewhere"},
            ],
        )

    coordinate = _geocoder(handler).resolve("560001")

    assert coordinate.latitude == pytest.approx(12.9716)
    assert coordinate.longitude == pytest.approx(77.5946)
    assert seen["url"].path == "/search"
    assert seen["url"].params["postalcode"] == "560001"
    assert seen["url"].params["format"] == "json"


def test_resolve_accepts_numeric_fields():
    coordinate = _geocoder(lambda request: httpx.Response(200, json=[{"lat": 1.5, "lon": 2.5}])).resolve("1")

    assert (coordinate.latitude, coordinate.longitude) == (1.5, 2.5)


def test_resolve_raises_not_found_for_empty_result():
    with pytest.raises(NotFoundError) as excinfo:
        _geocoder(lambda request: httpx.Response(200, json=[])).resolve("000000")

    assert excinfo.value.stage == "geocoding"


def test_resolve_raises_provider_error_on_http_failure():
    with pytest.raises(ProviderError):
        _geocoder(lambda request: httpx.Response(503, text="rate limited")).resolve("560001")


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"error": "bad request"}),
        httpx.Response(200, json=[{"lat": "north", "lon": "77.5"}]),
        httpx.Response(200, json=[{"display_name": "no coordinates"}]),
        httpx.Response(200, json=[{"lat": "123.0", "lon": "77.5"}]),
    ],
)
def test_resolve_raises_provider_error_on_malformed_payload(response):
    with pytest.raises(ProviderError):
        _geocoder(lambda request: response).resolve("560001")


def test_resolve_raises_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(UpstreamTimeoutError) as excinfo:
        _geocoder(handler).resolve("560001")

    assert isinstance(excinfo.value, TimeoutError)


def test_resolve_raises_provider_error_on_network_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ProviderError):
        _geocoder(handler).resolve("560001")


def test_check_health_uses_configured_postal_code_and_timeout(monkeypatch):
    from donorfinder.services import geocoding

    seen = {}
    real_client = httpx.Client

    def handler(request: httpx.Request) -> httpx.Response:
        seen["postalcode"] = request.url.params["postalcode"]
        return httpx.Response(200, json=[{"lat": "12.9", "lon": "77.6"}])

    def client_factory(**kwargs):
        seen["timeout"] = kwargs["timeout"]
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(geocoding.settings, "geocoding_timeout_seconds", 2.5)
    monkeypatch.setattr(geocoding.settings, "geocoding_health_postal_code", "110001")
    monkeypatch.setattr(geocoding.httpx, "Client", client_factory)

    assert geocoding.check_health(base_url="https://geo.test") is True
    assert seen["postalcode"] == "110001"
    assert seen["timeout"].read == 2.5


def test_check_health_reports_failure():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(503)))

    assert check_health(base_url="https://geo.test", client=client) is False
