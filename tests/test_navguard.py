import pytest

from tome.navguard import is_internal_url


def test_dev_server_is_internal():
    assert is_internal_url("http://localhost:1420/") is True
    assert is_internal_url("http://localhost:1420/index.html") is True
    assert is_internal_url("http://127.0.0.1:1420/") is True


def test_production_shell_is_internal():
    assert is_internal_url("tauri://localhost/") is True
    assert is_internal_url("https://tauri.localhost/") is True


def test_pmtiles_protocols_are_internal():
    assert is_internal_url("tome-pmtiles://localhost/world.pmtiles") is True
    assert is_internal_url("pmtiles://example/") is True


def test_data_blob_about_are_internal():
    assert is_internal_url("about:blank") is True
    assert is_internal_url("data:text/plain,hello") is True
    assert is_internal_url("blob:http://localhost/abc") is True


def test_dev_hmr_websocket_is_internal():
    assert is_internal_url("ws://localhost:1420/") is True


def test_wikipedia_is_external():
    assert is_internal_url("https://en.wikipedia.org/wiki/Photon") is False
    assert is_internal_url("http://en.wikipedia.org/wiki/Photon") is False


def test_random_https_is_external():
    assert is_internal_url("https://google.com/") is False
    assert is_internal_url("https://attacker.example/") is False


def test_impostor_tauri_localhost_subdomain_is_external():
    assert is_internal_url("https://tauri.localhost.attacker.com/") is False


def test_tauri_scheme_with_other_host_is_external():
    assert is_internal_url("tauri://example.org/") is False


def test_custom_schemes_are_external():
    assert is_internal_url("file:///etc/passwd") is False
    assert is_internal_url("ftp://example.org/") is False


def test_javascript_url_is_external():
    assert is_internal_url("javascript:alert(1)") is False


def test_relative_url_is_rejected():
    with pytest.raises(ValueError):
        is_internal_url("/index.html")