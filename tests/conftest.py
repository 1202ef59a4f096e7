import json

import pytest
from openpyxl import Workbook


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text

    def json(self):
        if self._payload is None:
            return json.loads(self.text)
        return self._payload


class FakeSession:
    """Stands in for requests.Session; answers GETs from a handler(params) callable."""

    def __init__(self, handler):
        self.handler = handler
        self.calls = []

    def get(self, url, params=None, headers=None, auth=None, timeout=None):
        self.calls.append(
            {
                "url": url,
                "params": dict(params or {}),
                "headers": dict(headers or {}),
                "auth": auth,
                "timeout": timeout,
            }
        )
        return self.handler(dict(params or {}))


def media_item(url, slug=None, title=None):
    item = {"source_url": url}
    if slug is not None:
        item["slug"] = slug
    if title is not None:
        item["title"] = {"rendered": title}
    return item


def paged_handler(items, per_page=100):
    """Serve ``items`` the way /wp/v2/media does, including the past-the-end 400."""

    def handler(params):
        page = int(params.get("page", 1))
        size = int(params.get("per_page", per_page))
        start = (page - 1) * size
        if page > 1 and start >= len(items):
            return FakeResponse(
                400,
                {"code": "rest_post_invalid_page_number", "message": "invalid page"},
            )
        return FakeResponse(200, items[start : start + size])

    return handler


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in (
        "WORDPRESS_SITE_URL",
        "WORDPRESS_USERNAME",
        "WORDPRESS_APP_PASSWORD",
        "WORDPRESS_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def make_workbook(tmp_path):
    def _make(rows, name="products.xlsx", title="Products"):
        wb = Workbook()
        ws = wb.active
        ws.title = title
        for row in rows:
            ws.append(row)
        path = tmp_path / name
        wb.save(path)
        return str(path)

    return _make
