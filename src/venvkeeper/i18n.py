from __future__ import annotations  # Python 3.6+ compatibility

# In venvkeeper/i18n.py - gettext wrapper shared by the CLI and error messages

import gettext
import locale
from pathlib import Path

LOCALE_DIR = Path(__file__).parent / "locale"
DOMAIN = "venvkeeper"

LANG_INFO = {
    "en": {"name": "English", "native": "English"},
    "de": {"name": "German", "native": "Deutsch"},
    "es": {"name": "Spanish", "native": "Español"},
    "fr": {"name": "French", "native": "Français"},
    "ja": {"name": "Japanese", "native": "日本語"},
    "zh_CN": {"name": "Chinese (Simplified)", "native": "中文 (简体)"},
}

SUPPORTED_LANGUAGES = {code: data["native"] for code, data in LANG_INFO.items()}


class Translator:
    """
    A callable class that holds the global translation function.
    Missing catalogs fall back to the untranslated English text.
    """

    def __init__(self):
        self._translator = lambda s: s
        self.current_lang = "en"
        self.set_language()

    def set_language(self, lang_code=None):
        try:
            if lang_code is None:
                lang_env = locale.getlocale()[0] or "en_US"
                lang_code = lang_env.split(".")[0]

            normalized_code = lang_code.replace("-", "_")
            langs_to_try = [normalized_code]
            if "_" in normalized_code:
                langs_to_try.append(normalized_code.split("_")[0])
            langs_to_try.append("en")

            translation = gettext.translation(
                DOMAIN, localedir=str(LOCALE_DIR), languages=langs_to_try, fallback=True
            )
            self._translator = translation.gettext
            self.current_lang = translation.info().get("language", "en")
        except (ValueError, OSError):
            self.current_lang = "en"
            self._translator = lambda s: s

    def __call__(self, text):
        return self._translator(text)

    def get_language_code(self):
        return self.current_lang

    def get_native_name(self, code=None):
        if code is None:
            code = self.current_lang
        return LANG_INFO.get(code, {}).get("native", code)

    def is_supported(self, code):
        return code in LANG_INFO


_ = Translator()
