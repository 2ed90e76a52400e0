"""Shared fake Matomo server for the test suite."""

import asyncio

import httpx

BASE_URL = "http://matomo.test/"

CONFIG_INI_SOURCE = b"""; <?php exit; ?> DO NOT REMOVE THIS LINE
; file automatically generated or modified by Matomo; you can manually override the default values in global.ini.php
[database]
host = "127.0.0.1"
password = "secret"

[General]
salt = "0123456789abcdef"
"""

GIT_EXCLUDE = b"""# git ls-files --others --exclude-from=.git/info/exclude
# Lines that start with '#' are comments.
"""

TOKEN_CACHE = b"<?php exit; ?>a:1:{s:5:\"token\";s:32:\"abc\";}"

TRACKER_CACHE = b"<?php return unserialize(base64_decode('YToxOnt9'));"

EXPOSED = {
    "/config/config.ini.php": (200, CONFIG_INI_SOURCE),
    "/.git/info/exclude": (200, GIT_EXCLUDE),
    "/tmp/cache/token.php": (200, TOKEN_CACHE),
    "/cache/tracker/matomocache_general.php": (200, TRACKER_CACHE),
}


class FakeServer:
    """Serves a fixed path -> (status, body) map; anything else is a 404.

    A value may also be an exception class, raised for that path.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, content=b"Not Found")
        if isinstance(route, type) and issubclass(route, Exception):
            raise route("simulated failure", request=request)
        if callable(route):
            return route(request)
        status, body = route
        return httpx.Response(status, content=body)

    @property
    def paths(self):
        return [r.url.path for r in self.requests]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


class TrickleStream(httpx.AsyncByteStream):
    """Response body that sends one chunk per interval."""

    def __init__(self, chunks, interval):
        self.chunks = list(chunks)
        self.interval = interval

    async def __aiter__(self):
        for chunk in self.chunks:
            yield chunk
            await asyncio.sleep(self.interval)
