import json
import logging
import os
from typing import Any, Dict, Optional

from app.config.settings import config

logger = logging.getLogger(__name__)

LOCALES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "locales")


class I18n:
    """Simple internationalization helper"""

    def __init__(self, locales_dir: str = LOCALES_DIR):
        self.locales: Dict[str, Dict[str, Any]] = {}
        self.default_locale = config.i18n.default_locale
        self.load_locales(locales_dir)

    def load_locales(self, locales_dir: str) -> None:
        """Load <locale>.json catalogs from the locales directory"""
        if not os.path.isdir(locales_dir):
            logger.warning(f"Locales directory not found at {locales_dir}")
            return

        for filename in os.listdir(locales_dir):
            if filename.endswith(".json"):
                locale_code = filename[:-5]
                try:
                    with open(os.path.join(locales_dir, filename), "r", encoding="utf-8") as f:
                        self.locales[locale_code] = json.load(f)
                except (OSError, ValueError) as e:
                    logger.error(f"Error loading locale {locale_code}: {e}")

    def lookup(self, key: str, locale: Optional[str] = None) -> Optional[str]:
        """Raw catalog entry for a dotted key, or None"""
        value: Any = self.locales.get(locale or self.default_locale, {})
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return None
            value = value[part]
        return value if isinstance(value, str) else None

    def get(self, key: str, locale: Optional[str] = None, default: Optional[str] = None, **kwargs) -> str:
        """Get translated string by key with optional interpolation"""
        if not locale or locale not in self.locales:
            locale = self.default_locale

        translation = self.lookup(key, locale)
        if translation is None and locale != self.default_locale:
            translation = self.lookup(key, self.default_locale)
        if translation is None:
            translation = default if default is not None else key

        try:
            return translation.format(**kwargs)
        except (KeyError, IndexError, ValueError):
            return translation


i18n = I18n()
