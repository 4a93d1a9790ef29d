import copy
import json
import os
import sys

import pytest
import requests

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from wp2contentful.migrators.contentful_migrator import ContentfulClient, Environment, RateLimiter, RetryPolicy
from wp2contentful.utils import errors
from wp2contentful.utils.errors import RemoteNotFound


class FakeEnvironment:
    """In-memory stand-in for a Contentful environment."""

    def __init__(self):
        self.assets = {}
        self.entries = {}
        self.calls = []
        self.data = {"sys": {"id": "master"}}

    def _count(self, name):
        return sum(1 for call in self.calls if call[0] == name)

    @property
    def created_assets(self):
        return self._count("create_asset_with_id")

    @property
    def created_entries(self):
        return self._count("create_entry_with_id")

    def get_asset(self, asset_id):
        self.calls.append(("get_asset", asset_id))
        if asset_id not in self.assets:
            raise RemoteNotFound(f"asset {asset_id} not found", status_code=404)
        return copy.deepcopy(self.assets[asset_id])

    def create_asset_with_id(self, asset_id, data):
        self.calls.append(("create_asset_with_id", asset_id))
        asset = {"sys": {"id": asset_id, "type": "Asset", "version": 1}, "fields": copy.deepcopy(data["fields"])}
        self.assets[asset_id] = asset
        return copy.deepcopy(asset)

    def process_asset_file(self, asset, locale):
        asset_id = asset["sys"]["id"]
        self.calls.append(("process_asset_file", asset_id))
        stored = self.assets[asset_id]
        file = stored["fields"]["file"][locale]
        file["url"] = "//images.ctfassets.net/space/" + file["fileName"]
        file.pop("upload", None)
        stored["sys"]["version"] += 1

    def get_entry(self, entry_id):
        self.calls.append(("get_entry", entry_id))
        if entry_id not in self.entries:
            raise RemoteNotFound(f"entry {entry_id} not found", status_code=404)
        return copy.deepcopy(self.entries[entry_id])

    def create_entry_with_id(self, content_type_id, entry_id, data):
        self.calls.append(("create_entry_with_id", entry_id))
        entry = {
            "sys": {
                "id": entry_id,
                "type": "Entry",
                "version": 1,
                "contentType": {"sys": {"type": "Link", "linkType": "ContentType", "id": content_type_id}},
            },
            "fields": copy.deepcopy(data["fields"]),
        }
        self.entries[entry_id] = entry
        return copy.deepcopy(entry)

    def publish_entry(self, entry):
        entry_id = entry["sys"]["id"]
        self.calls.append(("publish_entry", entry_id))
        stored = self.entries[entry_id]
        stored["sys"]["publishedVersion"] = stored["sys"]["version"]
        stored["sys"]["version"] += 1
        return copy.deepcopy(stored)


class FakeSpace:
    def __init__(self, environment):
        self.environment = environment

    def get_environment(self, environment_id):
        return self.environment


class FakeClient:
    def __init__(self, environment=None):
        self.environment = environment or FakeEnvironment()
        self.space_ids = []

    def get_space(self, space_id):
        self.space_ids.append(space_id)
        return FakeSpace(self.environment)


def make_response(status, body=None, headers=None):
    resp = requests.Response()
    resp.status_code = status
    resp._content = json.dumps(body).encode("utf-8") if body is not None else b""
    resp.headers.update(headers or {})
    resp.url = "https://api.contentful.com/test"
    return resp


class FakeSession:
    """Replays canned responses (or raises canned exceptions) in order."""

    def __init__(self, *responses):
        self.headers = {}
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def make_environment(*responses):
    session = FakeSession(*responses)
    client = ContentfulClient("token", session=session)
    return Environment(client, "space1", {"sys": {"id": "master"}}), session


def cdata(value):
    return {"_cdata": value}


def text(value):
    return {"_text": value}


def make_item(post_type, post_id, post_name, title, **extra):
    item = {
        "title": text(title),
        "link": text(f"https://example.com/{post_name}/"),
        "guid": {"_attributes": {"isPermaLink": "false"}, "_text": f"https://example.com/?p={post_id}"},
        "wp:post_id": text(str(post_id)),
        "wp:post_name": cdata(post_name),
        "wp:post_type": cdata(post_type),
        "wp:post_parent": text("0"),
        "wp:post_date": cdata("2019-05-04 10:11:12"),
        "wp:status": cdata("publish"),
        "content:encoded": cdata(""),
        "excerpt:encoded": cdata(""),
    }
    item.update(extra)
    return item


def post_meta(**values):
    return [{"wp:meta_key": cdata(key), "wp:meta_value": cdata(value)} for key, value in values.items()]


@pytest.fixture(autouse=True)
def report_dir(tmp_path, monkeypatch):
    """Keep JSONL reports and the run log out of the working tree."""
    path = tmp_path / "reports"
    monkeypatch.setattr(errors, "_REPORT_DIR", str(path))
    return path


@pytest.fixture
def environment():
    return FakeEnvironment()


@pytest.fixture
def limiter():
    return RateLimiter(min_interval=0)


@pytest.fixture
def fast_retry():
    return RetryPolicy(max_attempts=3, base_delay=0)


@pytest.fixture
def export_data():
    items = [
        make_item(
            "attachment", 10, "oak-chair-photo", "Oak chair photo",
            **{
                "wp:post_parent": text("20"),
                "wp:attachment_url": cdata("https://example.com/wp-content/uploads/oak-chair.jpg"),
            },
        ),
        make_item(
            "attachment", 11, "about-hero", "About hero",
            **{
                "wp:post_parent": text("30"),
                "wp:attachment_url": cdata("https://example.com/wp-content/uploads/hero.png"),
            },
        ),
        make_item(
            "furniture", 20, "oak-chair", "Oak chair",
            **{
                "content:encoded": cdata("<p>Solid <strong>oak</strong> chair.</p>"),
                "category": {"_attributes": {"domain": "category", "nicename": "chairs"}, "_cdata": "Chairs"},
                "wp:postmeta": post_meta(price="120.50", sold="1", dimensions="45x50x90"),
            },
        ),
        make_item(
            "page", 30, "about", "About",
            **{"content:encoded": cdata("About us<!--more-->\r\nMore text")},
        ),
        make_item("nav_menu_item", 40, "menu", "Menu"),
    ]
    return {
        "rss": {
            "channel": {
                "title": text("Shop"),
                "wp:category": [
                    {"wp:term_id": text("3"), "wp:cat_name": cdata("Chairs"), "wp:category_nicename": cdata("chairs")},
                    {"wp:term_id": text("4"), "wp:cat_name": cdata("Tables"), "wp:category_nicename": cdata("tables")},
                ],
                "item": items,
            }
        }
    }
