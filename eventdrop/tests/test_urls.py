import pytest

from eventdrop.core.errors import ForbiddenHost, InvalidUrl
from eventdrop.core.urls import extract_domain, is_forbidden_host, validate_external_url


@pytest.mark.parametrize(
    "url",
    [
        "http://127.0.0.1/admin",
        "http://10.1.2.3/",
        "http://192.168.0.5:8080/x",
        "http://169.254.169.254/latest/meta-data/",
        "http://metadata.google.internal/computeMetadata/v1/",
        "http://localhost:5432",
        "https://LOCALHOST./",
        "http://172.16.4.2/",
        "http://[::1]/",
        "http://[fe80::1]/",
        "http://[::ffff:127.0.0.1]/",
        "http://0.0.0.0/",
        "http://2130706433/",
        "http://0x7f.0.0.1/",
        "http://db.internal/",
        "http://printer.local/",
        "http://api.localhost/",
    ],
)
def test_validate_external_url_rejects_internal_hosts(url: str) -> None:
    with pytest.raises(ForbiddenHost):
        validate_external_url(url)


@pytest.mark.parametrize(
    "url",
    [
        "",
        "   ",
        "ftp://example.com/file",
        "file:///etc/passwd",
        "javascript:alert(1)",
        "example.com/no-scheme",
        "http://",
        "http://example.com:notaport/",
    ],
)
def test_validate_external_url_rejects_malformed_urls(url: str) -> None:
    with pytest.raises(InvalidUrl):
        validate_external_url(url)


def test_validate_external_url_returns_stripped_url() -> None:
    assert validate_external_url("  https://example.com/events?id=1 ") == "https://example.com/events?id=1"


def test_validate_external_url_accepts_public_hosts() -> None:
    assert validate_external_url("http://93.184.216.34/poster.jpg") == "http://93.184.216.34/poster.jpg"
    assert validate_external_url("https://tickets.example.org/e/42") == "https://tickets.example.org/e/42"


def test_is_forbidden_host_allows_numeric_looking_domains() -> None:
    assert is_forbidden_host("123.example.com") is False
    assert is_forbidden_host("internal-events.com") is False


def test_extract_domain_lowercases_and_handles_missing_scheme() -> None:
    assert extract_domain("https://Example.COM/Path") == "example.com"
    assert extract_domain("Example.COM/path") == "example.com"


def test_validate_external_url_rejects_overlong_urls() -> None:
    with pytest.raises(InvalidUrl):
        validate_external_url("https://example.com/" + "a" * 1000)
