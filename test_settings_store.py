"""Tests for highlight settings persistence."""

import json

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from searchlight.exceptions import SettingsStoreException
from searchlight.highlighting.store import (
    SETTINGS_KEY,
    InMemorySettingsStore,
    RedisSettingsStore,
    load_highlight_config,
    sanitize_text_field,
    save_highlight_settings,
)
from searchlight.schema.highlighting import HighlightConfig


class FakeRedis:
    """Minimal stand-in for redis.Redis get/set."""

    def __init__(self, fail=False):
        self.data = {}
        self.fail = fail

    def get(self, key):
        if self.fail:
            raise RedisConnectionError("connection refused")
        return self.data.get(key)

    def set(self, key, value):
        if self.fail:
            raise RedisConnectionError("connection refused")
        self.data[key] = value


def test_in_memory_store_copies_values():
    store = InMemorySettingsStore()
    value = {"highlight_tag": "em"}
    store.set(SETTINGS_KEY, value)
    value["highlight_tag"] = "i"

    fetched = store.get(SETTINGS_KEY)
    fetched["highlight_tag"] = "span"

    assert store.get(SETTINGS_KEY) == {"highlight_tag": "em"}
    assert store.get("missing") is None


def test_load_from_empty_store_uses_defaults():
    config = load_highlight_config(InMemorySettingsStore())
    assert config == HighlightConfig(tag="mark", color="", excerpt_enabled=False)


def test_load_reads_saved_option():
    store = InMemorySettingsStore(
        {SETTINGS_KEY: {"highlight_tag": "em", "highlight_color": "blue", "highlight_excerpt": "on"}}
    )
    config = load_highlight_config(store)
    assert (config.tag, config.color, config.excerpt_enabled) == ("em", "blue", True)


def test_load_degrades_when_persisted_tag_is_invalid():
    store = InMemorySettingsStore({SETTINGS_KEY: {"highlight_tag": "script"}})
    assert load_highlight_config(store).tag == "mark"


def test_redis_store_round_trip():
    client = FakeRedis()
    store = RedisSettingsStore(client, key_prefix="test:")
    store.set(SETTINGS_KEY, {"highlight_tag": "span"})

    assert json.loads(client.data["test:highlighting"]) == {"highlight_tag": "span"}
    assert store.get(SETTINGS_KEY) == {"highlight_tag": "span"}
    assert store.get("missing") is None


def test_redis_store_ignores_undecodable_payload():
    client = FakeRedis()
    client.data["searchlight:highlighting"] = b"{not json"
    assert RedisSettingsStore(client).get(SETTINGS_KEY) is None


def test_redis_errors_are_wrapped():
    store = RedisSettingsStore(FakeRedis(fail=True))
    with pytest.raises(SettingsStoreException):
        store.get(SETTINGS_KEY)
    with pytest.raises(SettingsStoreException):
        store.set(SETTINGS_KEY, {})


def test_load_degrades_when_store_is_down():
    config = load_highlight_config(RedisSettingsStore(FakeRedis(fail=True)))
    assert config == HighlightConfig()


def test_save_accepts_valid_values():
    store = InMemorySettingsStore()
    config = save_highlight_settings(
        store, {"highlight_tag": "strong", "highlight_color": "#abc", "highlight_excerpt": "on"}
    )

    assert config.tag == "strong"
    assert config.excerpt_enabled is True
    assert store.get(SETTINGS_KEY) == {
        "highlight_tag": "strong",
        "highlight_color": "#abc",
        "highlight_excerpt": "on",
    }


def test_save_keeps_current_tag_when_submitted_tag_is_invalid():
    store = InMemorySettingsStore({SETTINGS_KEY: {"highlight_tag": "em"}})
    config = save_highlight_settings(store, {"highlight_tag": "marquee"})

    assert config.tag == "em"
    assert store.get(SETTINGS_KEY)["highlight_tag"] == "em"


def test_save_without_excerpt_checkbox_turns_it_off():
    store = InMemorySettingsStore({SETTINGS_KEY: {"highlight_excerpt": "on"}})
    config = save_highlight_settings(store, {"highlight_tag": "mark", "highlight_excerpt": "yes"})

    assert config.excerpt_enabled is False
    assert store.get(SETTINGS_KEY)["highlight_excerpt"] == "off"
    assert store.get(SETTINGS_KEY)["highlight_color"] == ""


def test_sanitize_text_field():
    assert sanitize_text_field("  <b>red</b>\n\tish  ") == "red ish"
    assert sanitize_text_field(None) == ""


class UndecodableRedis(FakeRedis):
    """Returns a payload that is not valid UTF-8."""

    def get(self, key):
        return b"\xff\xfe{"


class DecodingRedis(FakeRedis):
    """Mimics a decode_responses client failing to decode inside get."""

    def get(self, key):
        return b"\xff\xfe{".decode("utf-8")


def test_redis_store_ignores_non_utf8_payload():
    assert RedisSettingsStore(UndecodableRedis()).get(SETTINGS_KEY) is None
    assert load_highlight_config(RedisSettingsStore(UndecodableRedis())) == HighlightConfig()


def test_redis_store_ignores_decode_failure_inside_client():
    assert RedisSettingsStore(DecodingRedis()).get(SETTINGS_KEY) is None
    assert load_highlight_config(RedisSettingsStore(DecodingRedis())) == HighlightConfig()


def test_json_true_does_not_enable_excerpt():
    """Only the stored string "on" turns excerpt rewriting on."""
    client = FakeRedis()
    client.data["searchlight:highlighting"] = json.dumps({"highlight_excerpt": True})

    assert load_highlight_config(RedisSettingsStore(client)).excerpt_enabled is False
    assert HighlightConfig(excerpt_enabled=True).excerpt_enabled is True
