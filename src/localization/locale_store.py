from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class LocalizedText(str):
    """Localized string value.

    Entries written as JSON arrays in a locale file are joined with newlines
    and flagged ``is_multiline``; ``lines`` gives the original items back,
    which is how list-shaped entries such as weekday headers are read.
    """

    is_multiline: bool

    def __new__(cls, value: str, *, is_multiline: bool = False):
        obj = super().__new__(cls, value)
        obj.is_multiline = is_multiline
        return obj

    @property
    def lines(self) -> List[str]:
        return self.split("\n") if self.is_multiline else [str(self)]

    def format(self, *args: Any, **kwargs: Any) -> "LocalizedText":  # type: ignore[override]
        formatted_value = super().format(*args, **kwargs)
        return LocalizedText(formatted_value, is_multiline=self.is_multiline)


class LocaleStore:
    """Loads and serves localized strings from JSON files."""

    def __init__(self, locale_directory: Path, default_locale: str = "en"):
        self.locale_directory = locale_directory
        self.default_locale = default_locale
        self._translations: Dict[str, Dict[str, LocalizedText]] = {}
        self._load_locale(default_locale)

    @property
    def available_locales(self) -> Tuple[str, ...]:
        return tuple(sorted(path.stem for path in self.locale_directory.glob("*.json")))

    def has_key(self, key: str) -> bool:
        default_catalog = self._translations.get(self.default_locale, {})
        return key in default_catalog

    def translate(self, key: str, *, locale: Optional[str] = None, **kwargs: Any) -> LocalizedText:
        """Return a translated string, falling back to the default locale."""

        target_locale = locale or self.default_locale
        catalog = self._get_catalog(target_locale)
        entry = catalog.get(key)

        if entry is None and target_locale != self.default_locale:
            entry = self._translations[self.default_locale].get(key)

        if entry is None:
            raise KeyError(f"Translation key '{key}' not found for locale '{target_locale}'")

        if kwargs:
            return entry.format(**kwargs)

        return entry

    def _get_catalog(self, locale: str) -> Dict[str, LocalizedText]:
        if locale not in self._translations:
            self._load_locale(locale)
        return self._translations.get(locale, self._translations[self.default_locale])

    def _load_locale(self, locale: str) -> None:
        locale_file = self.locale_directory / f"{locale}.json"
        if not locale_file.exists():
            logger.warning("Locale file for '%s' not found at %s", locale, locale_file)
            return

        with locale_file.open("r", encoding="utf-8") as file:
            raw_data = json.load(file)

        catalog: Dict[str, LocalizedText] = {}
        for key, raw_value in self._flatten_keys(raw_data).items():
            if isinstance(raw_value, list):
                catalog[key] = LocalizedText("\n".join(str(item) for item in raw_value), is_multiline=True)
            else:
                catalog[key] = LocalizedText(str(raw_value))

        self._translations[locale] = catalog

    def _flatten_keys(self, data: Dict[str, Any], parent_key: str = "") -> Dict[str, Any]:
        items: Dict[str, Any] = {}
        for key, value in data.items():
            new_key = f"{parent_key}.{key}" if parent_key else key
            if isinstance(value, dict):
                items.update(self._flatten_keys(value, new_key))
            else:
                items[new_key] = value
        return items


class LocaleKeyAccessor:
    """Provides attribute access to translation keys, e.g. ``Key.calendar.month_label``."""

    def __init__(self, store: LocaleStore, locale: Optional[str] = None, prefix: str = ""):
        self._store = store
        self._locale = locale
        self._prefix = prefix

    def for_locale(self, locale: Optional[str]) -> "LocaleKeyAccessor":
        return LocaleKeyAccessor(self._store, locale=locale, prefix=self._prefix)

    def __getattr__(self, item: str) -> Any:
        if item.startswith("__"):
            raise AttributeError(item)

        candidate_key = f"{self._prefix}.{item}" if self._prefix else item

        if self._store.has_key(candidate_key):
            return self._store.translate(candidate_key, locale=self._locale)

        return LocaleKeyAccessor(self._store, locale=self._locale, prefix=candidate_key)
