import json

import pytest
import requests
from selenium.common.exceptions import TimeoutException

from lezhin_dl.data.models import Credentials
from lezhin_dl.utils.logger import logger


class FakeBrowser:
    """Stands in for core.browser.Browser; records every call."""

    def __init__(self, redirects=None, hidden=(), local_storage=None, pages=None, token="T"):
        self.redirects = redirects or {}
        self.hidden = set(hidden)
        self.local_storage = dict(local_storage or {})
        self.pages = pages or {}
        self.token = token
        self.url = "about:blank"
        self.visited = []
        self.scripts = []
        self.filled = {}
        self.clicked = []
        self.quit_count = 0

    def navigate(self, url):
        self.visited.append(url)
        self.url = self.redirects.get(url, url)

    def current_url(self):
        return self.url

    def page_source(self):
        return self.pages.get(self.url, "<html></html>")

    def wait_for_visible(self, locator, timeout=15):
        if locator in self.hidden:
            raise TimeoutException(f"{locator[1]} not visible")

    def fill(self, locator, text):
        self.filled[locator] = text

    def click(self, locator):
        self.clicked.append(locator)

    def execute_script(self, script, *args):
        self.scripts.append(script)
        if "__LZ_CONFIG__" in script:
            return self.token
        return None

    def read_local_storage(self, key):
        return self.local_storage.get(key)

    def quit(self):
        self.quit_count += 1


class FakeResponse:
    def __init__(self, status_code=200, content=b""):
        self.status_code = status_code
        self.content = content
        self.closed = False

    def raise_for_status(self):
        if not 200 <= self.status_code < 300:
            raise requests.HTTPError(f"{self.status_code} Error")

    def close(self):
        self.closed = True


class FakeSession:
    """
    ``responses`` maps a url to a list of outcomes consumed one per call;
    an outcome is a FakeResponse or an exception instance to raise.
    """

    def __init__(self, responses=None, default=None):
        self.responses = {url: list(items) for url, items in (responses or {}).items()}
        self.default = default
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append(url)
        queue = self.responses.get(url)
        outcome = queue.pop(0) if queue else self.default
        if outcome is None:
            outcome = FakeResponse(404)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def product_dict(episode_count=3, expired=False):
    """Catalog as rendered by the platform: latest episode first."""
    episodes = [
        {
            "id": 1000 + n,
            "name": str(n),
            "seq": n,
            "display": {"title": f"Episode {n}"},
            "purchased": n % 2 == 0,
            "coin": 0 if n == 1 else 3,
        }
        for n in range(episode_count, 0, -1)
    ]
    return {
        "id": 5651768999542784,
        "alias": "snail",
        "display": {"title": "아가씨와 우렁총각"},
        "artists": [{"name": "Artist", "role": "writer"}],
        "episodes": episodes,
    }


@pytest.fixture
def fake_browser():
    return FakeBrowser


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def product_json():
    return json.dumps(product_dict())


@pytest.fixture
def credentials():
    return Credentials(username="user@example.com", password="secret")


@pytest.fixture
def captured_logs():
    lines = []
    listener = lambda level, message: lines.append((level, message))
    logger.add_listener(listener)
    yield lines
    logger.remove_listener(listener)
