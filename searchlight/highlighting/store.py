"""
Settings persistence for the highlight configuration.

Stores only expose get/set of the option mapping; everything else about
how options are kept lives behind the store.
"""

import copy
import json
import re
from typing import Any, Dict, Mapping, Optional, Protocol

import redis
import structlog
from bs4 import BeautifulSoup
from redis.exceptions import RedisError

from ..exceptions import SettingsStoreException
from ..schema.highlighting import EXCERPT_OFF, EXCERPT_ON, HighlightConfig
from ..utils.logging import log_highlight_event
from .tags import ALLOWED_TAGS, DEFAULT_TAG

logger = structlog.get_logger(__name__)

SETTINGS_KEY = "highlighting"


class SettingsStore(Protocol):
    def get(self, key: str) -> Optional[Dict[str, Any]]: ...

    def set(self, key: str, value: Dict[str, Any]) -> None: ...


class InMemorySettingsStore:
    """Dict-backed store for tests and single-process use."""

    def __init__(self, initial: Optional[Mapping[str, Dict[str, Any]]] = None):
        self._data: Dict[str, Dict[str, Any]] = copy.deepcopy(dict(initial or {}))

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    def set(self, key: str, value: Dict[str, Any]) -> None:
        self._data[key] = copy.deepcopy(value)


class RedisSettingsStore:
    """
    Redis-backed store keeping each option as a JSON string.
    """

    def __init__(self, client: redis.Redis, key_prefix: str = "searchlight:"):
        self.client = client
        self.key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "searchlight:") -> "RedisSettingsStore":
        return cls(redis.Redis.from_url(url, decode_responses=True), key_prefix=key_prefix)

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            raw = self.client.get(self._key(key))
        except UnicodeDecodeError as e:
            # decode_responses clients decode inside get
            log_highlight_event(logger, "option_decode_degraded", key=key, error=str(e))
            return None
        except RedisError as e:
            raise SettingsStoreException(f"Failed to read option '{key}': {e}", key=key) from e

        if raw is None:
            return None

        try:
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            value = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            log_highlight_event(logger, "option_decode_degraded", key=key, error=str(e))
            return None

        return value if isinstance(value, dict) else None

    def set(self, key: str, value: Dict[str, Any]) -> None:
        try:
            self.client.set(self._key(key), json.dumps(value))
        except RedisError as e:
            raise SettingsStoreException(f"Failed to write option '{key}': {e}", key=key) from e


def load_highlight_config(store: SettingsStore) -> HighlightConfig:
    """
    Read the highlight configuration, degrading to defaults on any store problem.
    """
    try:
        raw = store.get(SETTINGS_KEY)
    except SettingsStoreException as e:
        log_highlight_event(logger, "settings_load_degraded", key=SETTINGS_KEY, error=str(e))
        raw = None

    return HighlightConfig.from_option(raw)


def sanitize_text_field(value: Any) -> str:
    """Strip markup and collapse line breaks, tabs and repeated spaces."""
    if value is None:
        return ""
    text = BeautifulSoup(str(value), "html.parser").get_text()
    return re.sub(r"[\r\n\t ]+", " ", text).strip()


def save_highlight_settings(
    store: SettingsStore,
    submitted: Mapping[str, Any],
    current: Optional[HighlightConfig] = None,
) -> HighlightConfig:
    """
    Validate submitted settings and persist them.

    Args:
        store: Settings store to write to
        submitted: Submitted values keyed highlight_tag/highlight_color/highlight_excerpt
        current: Configuration to fall back on for a rejected tag (loaded from the store if None)

    Returns:
        The configuration that was saved

    Raises:
        SettingsStoreException: If the store cannot be written
    """
    if current is None:
        current = load_highlight_config(store)

    tag = submitted.get("highlight_tag")
    if not (isinstance(tag, str) and tag in ALLOWED_TAGS):
        tag = current.tag or DEFAULT_TAG

    excerpt = EXCERPT_ON if submitted.get("highlight_excerpt") == EXCERPT_ON else EXCERPT_OFF

    config = HighlightConfig(
        tag=sanitize_text_field(tag),
        color=sanitize_text_field(submitted.get("highlight_color")),
        excerpt_enabled=excerpt,
    )
    store.set(SETTINGS_KEY, config.to_option())

    log_highlight_event(logger, "settings_saved", **config.to_option())
    return config
