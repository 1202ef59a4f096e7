import pytest
import requests

from woo_sheet_tools.config import WordPressConfig
from woo_sheet_tools.errors import ConfigError


def test_from_env_reads_wordpress_settings(clean_env, monkeypatch):
    monkeypatch.setenv("WORDPRESS_SITE_URL", " https://shop.example.com/ ")
    monkeypatch.setenv("WORDPRESS_USERNAME", "editor")
    monkeypatch.setenv("WORDPRESS_APP_PASSWORD", "xxxx yyyy")
    monkeypatch.setenv("WORDPRESS_TIMEOUT", "12.5")
    config = WordPressConfig.from_env()
    assert config.site_url == "https://shop.example.com"
    assert config.username == "editor"
    assert config.app_password == "xxxx yyyy"
    assert config.timeout == 12.5
    assert config.has_credentials


def test_password_falls_back_to_local_file(clean_env):
    (clean_env / "wp.api").write_text("from-file\n", encoding="utf-8")
    config = WordPressConfig.from_env()
    assert config.app_password == "from-file"


def test_bad_timeout_is_a_config_error(clean_env, monkeypatch):
    monkeypatch.setenv("WORDPRESS_TIMEOUT", "soon")
    with pytest.raises(ConfigError):
        WordPressConfig.from_env()


def test_override_only_replaces_given_values():
    base = WordPressConfig(site_url="https://a.example", username="u", app_password="p")
    updated = base.override(site_url="https://b.example/", timeout=5)
    assert updated.site_url == "https://b.example"
    assert updated.username == "u"
    assert updated.app_password == "p"
    assert updated.timeout == 5


def test_basic_auth_needs_both_credentials():
    assert WordPressConfig(username="u").auth() is None
    assert WordPressConfig(app_password="p").auth() is None
    auth = WordPressConfig(username="u", app_password="p").auth()
    prepared = requests.Request("GET", "https://a.example", auth=auth).prepare()
    assert prepared.headers["Authorization"] == "Basic dTpw"


@pytest.mark.parametrize("site_url", ["", "shop.example.com"])
def test_require_site_url(site_url):
    with pytest.raises(ConfigError):
        WordPressConfig(site_url=site_url).require_site_url()
