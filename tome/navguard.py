"""Navigation guard deciding which URLs may load inside the app webview.

Anything that is not the app shell, the local dev server or one of the app's
own protocols is treated as external and should go to the system browser.
"""

from __future__ import annotations

from urllib.parse import urlsplit

# Schemes whose URLs cannot navigate the user away, or that belong to the app.
_ALWAYS_INTERNAL = frozenset({"about", "data", "blob", "tome-pmtiles", "pmtiles"})
_DEV_HOSTS = frozenset({"localhost", "127.0.0.1"})


def is_internal_url(url: str) -> bool:
    """Return whether ``url`` may be loaded inside the webview.

    Accepted: ``about:``, ``data:`` and ``blob:`` URLs; the production shell
    (``tauri://localhost`` or ``https://tauri.localhost``); the dev server and
    its websocket on ``localhost`` or ``127.0.0.1``; and the offline map tile
    schemes. Hosts must match exactly. Everything else is external.

    Raises ``ValueError`` if ``url`` is not an absolute URL.
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if not scheme:
        raise ValueError(f"not an absolute URL: {url!r}")
    if scheme in _ALWAYS_INTERNAL:
        return True
    host = parts.hostname
    if scheme == "tauri":
        return host == "localhost"
    if scheme == "https":
        return host == "tauri.localhost"
    if scheme in ("http", "ws"):
        return host in _DEV_HOSTS
    return False