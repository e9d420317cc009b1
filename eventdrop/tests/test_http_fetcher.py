import httpx

from eventdrop.services.fetch.http_fetcher import fetch_url_text, html_to_text

_RealClient = httpx.Client


def _patch_transport(monkeypatch, handler) -> list[str]:
    seen: list[str] = []

    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return handler(request)

    def fake_client(*args, **kwargs):
        return _RealClient(*args, transport=httpx.MockTransport(recording), **kwargs)

    monkeypatch.setattr(httpx, "Client", fake_client)
    return seen


def test_fetch_url_text_success(monkeypatch) -> None:
    _patch_transport(monkeypatch, lambda request: httpx.Response(200, text="ok"))

    text, error, status = fetch_url_text("https://example.com")
    assert text == "ok"
    assert error is None
    assert status == 200


def test_fetch_url_text_error(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    _patch_transport(monkeypatch, handler)

    text, error, status = fetch_url_text("https://example.com")
    assert text is None
    assert error is not None
    assert status is None


def test_fetch_url_text_http_status_error(monkeypatch) -> None:
    _patch_transport(monkeypatch, lambda request: httpx.Response(404, text="missing"))

    text, error, status = fetch_url_text("https://example.com/missing")
    assert text is None
    assert error is not None
    assert status == 404


def test_fetch_url_text_follows_public_redirects(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/old":
            return httpx.Response(301, headers={"location": "/new"})
        return httpx.Response(200, text="moved here")

    seen = _patch_transport(monkeypatch, handler)

    text, error, status = fetch_url_text("https://example.com/old")
    assert text == "moved here"
    assert error is None
    assert seen == ["https://example.com/old", "https://example.com/new"]


def test_fetch_url_text_refuses_redirect_to_internal_host(monkeypatch) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(302, headers={"location": "http://169.254.169.254/latest/meta-data"})

    seen = _patch_transport(monkeypatch, handler)

    text, error, status = fetch_url_text("https://example.com/go")
    assert text is None
    assert error is not None
    assert seen == ["https://example.com/go"]


def test_fetch_url_text_refuses_internal_url_without_request(monkeypatch) -> None:
    seen = _patch_transport(monkeypatch, lambda request: httpx.Response(200, text="secret"))

    text, error, status = fetch_url_text("http://localhost:8080/admin")
    assert text is None
    assert error is not None
    assert seen == []


def test_fetch_url_text_stops_after_too_many_redirects(monkeypatch) -> None:
    _patch_transport(monkeypatch, lambda request: httpx.Response(302, headers={"location": "/loop"}))

    text, error, status = fetch_url_text("https://example.com/loop")
    assert text is None
    assert error == "too many redirects"


def test_fetch_url_text_aborts_oversized_body(monkeypatch) -> None:
    _patch_transport(monkeypatch, lambda request: httpx.Response(200, content=b"x" * 2048))

    text, error, status = fetch_url_text("https://example.com/big", max_bytes=1024)
    assert text is None
    assert "exceeds" in error


def test_html_to_text_strips_markup_and_scripts() -> None:
    html = "<html><head><script>var x = 1;</script><style>p {}</style></head><body><h1>Jazz  Night</h1>\n<p>Friday 20:00</p></body></html>"

    assert html_to_text(html) == "Jazz Night Friday 20:00"
    assert html_to_text(html, limit=4) == "Jazz"
