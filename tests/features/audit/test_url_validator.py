import pytest

from app.platform.utils.url_validator import validate_url


@pytest.mark.parametrize("url", [
    "https://claystudio.test",
    "http://localhost:8000/path?q=1",
    "  https://claystudio.test/shop  ",
])
def test_accepts_http_urls(url):
    is_valid, cleaned, error = validate_url(url)
    assert is_valid is True
    assert cleaned == url.strip()
    assert error == ""


@pytest.mark.parametrize("url,message", [
    ("", "URL cannot be empty"),
    ("   ", "URL cannot be empty"),
    ("ftp://claystudio.test", "Invalid URL scheme: ftp (must be http or https)"),
    ("claystudio.test", "Invalid URL scheme: none (must be http or https)"),
    ("javascript:alert(1)", "Invalid URL scheme: javascript (must be http or https)"),
    ("https://", "Invalid URL format: missing domain"),
    ("https://clay studio.test", "Invalid URL format: contains whitespace"),
])
def test_rejects_invalid_urls(url, message):
    is_valid, _, error = validate_url(url)
    assert is_valid is False
    assert error == message


def test_rejects_bad_port():
    is_valid, _, error = validate_url("https://claystudio.test:99999/")
    assert is_valid is False
    assert error.startswith("URL parsing error")
