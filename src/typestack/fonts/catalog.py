"""
Language Catalog
================

Read-only reference table of the languages a font stack can be configured for.
A language's position in the catalog is its canonical index, which fixes the
display and export order everywhere else.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

import yaml

from src.typestack.core.exceptions import (
    ConfigFileNotFoundError,
    EmptyConfigFileError,
    InvalidYamlError,
)
from src.typestack.core.models import Language

logger = logging.getLogger(__name__)

OTHER_GROUP = "Other"

LANGUAGE_GROUPS = (
    "Western Latin (Americas & Western Europe)",
    "APAC - CJK (East Asia)",
    "EEMEA - Right-to-Left (Middle East & South Asia)",
    "EEMEA - Cyrillic, Greek & Eastern Europe",
    "APAC - South & Southeast Asia (Complex Scripts)",
    "Sub-Saharan Africa",
    "Nordic & Baltic (Northern Europe)",
    OTHER_GROUP,
)

LANGUAGE_GROUP_SHORT_NAMES = {
    "Western Latin (Americas & Western Europe)": "Western Latin",
    "APAC - CJK (East Asia)": "APAC - CJK",
    "EEMEA - Right-to-Left (Middle East & South Asia)": "EEMEA - RTL",
    "EEMEA - Cyrillic, Greek & Eastern Europe": "EEMEA - Cyrillic",
    "APAC - South & Southeast Asia (Complex Scripts)": "APAC - SE Asia",
    "Sub-Saharan Africa": "Africa",
    "Nordic & Baltic (Northern Europe)": "Nordic & Baltic",
    OTHER_GROUP: OTHER_GROUP,
}

# (id, name, code, group index)
DEFAULT_LANGUAGES: tuple[tuple[str, str, str, int], ...] = (
    ("en-US", "English (US)", "en-US", 0),
    ("en-GB", "English (UK)", "en-GB", 0),
    ("es", "Spanish", "es", 0),
    ("es-ES", "Spanish (Spain)", "es-ES", 0),
    ("es-MX", "Spanish (Mexico)", "es-MX", 0),
    ("es-AR", "Spanish (Argentina)", "es-AR", 0),
    ("fr-FR", "French", "fr-FR", 0),
    ("fr-CA", "French (Canada)", "fr-CA", 0),
    ("pt-BR", "Portuguese (Brazil)", "pt-BR", 0),
    ("pt-PT", "Portuguese (Portugal)", "pt-PT", 0),
    ("de-DE", "German", "de-DE", 0),
    ("it-IT", "Italian", "it-IT", 0),
    ("nl-NL", "Dutch", "nl-NL", 0),
    ("ga-IE", "Irish", "ga-IE", 0),
    ("mt-MT", "Maltese", "mt-MT", 0),
    ("zh-Hans", "Chinese (Simplified)", "zh-Hans", 1),
    ("zh-Hant", "Chinese (Traditional)", "zh-Hant", 1),
    ("ja-JP", "Japanese", "ja-JP", 1),
    ("ko-KR", "Korean", "ko-KR", 1),
    ("ar", "Arabic", "ar", 2),
    ("he-IL", "Hebrew", "he-IL", 2),
    ("fa-IR", "Persian", "fa-IR", 2),
    ("ur-PK", "Urdu", "ur-PK", 2),
    ("ru-RU", "Russian", "ru-RU", 3),
    ("el-GR", "Greek", "el-GR", 3),
    ("uk-UA", "Ukrainian", "uk-UA", 3),
    ("pl-PL", "Polish", "pl-PL", 3),
    ("tr-TR", "Turkish", "tr-TR", 3),
    ("cs-CZ", "Czech", "cs-CZ", 3),
    ("sk-SK", "Slovak", "sk-SK", 3),
    ("hu-HU", "Hungarian", "hu-HU", 3),
    ("ro-RO", "Romanian", "ro-RO", 3),
    ("bg-BG", "Bulgarian", "bg-BG", 3),
    ("hr-HR", "Croatian", "hr-HR", 3),
    ("sl-SI", "Slovenian", "sl-SI", 3),
    ("kk-KZ", "Kazakh", "kk-KZ", 3),
    ("hi-IN", "Hindi", "hi-IN", 4),
    ("mr-IN", "Marathi", "mr-IN", 4),
    ("bn-BD", "Bengali (Bangladesh)", "bn-BD", 4),
    ("bn-IN", "Bengali (India)", "bn-IN", 4),
    ("pa-IN", "Punjabi", "pa-IN", 4),
    ("gu-IN", "Gujarati", "gu-IN", 4),
    ("ta-IN", "Tamil", "ta-IN", 4),
    ("te-IN", "Telugu", "te-IN", 4),
    ("kn-IN", "Kannada", "kn-IN", 4),
    ("ml-IN", "Malayalam", "ml-IN", 4),
    ("th-TH", "Thai", "th-TH", 4),
    ("vi-VN", "Vietnamese", "vi-VN", 4),
    ("id-ID", "Indonesian", "id-ID", 4),
    ("ms-MY", "Malay", "ms-MY", 4),
    ("tl-PH", "Filipino", "tl-PH", 4),
    ("sw-KE", "Swahili", "sw-KE", 5),
    ("am-ET", "Amharic", "am-ET", 5),
    ("zu-ZA", "Zulu", "zu-ZA", 5),
    ("yo-NG", "Yoruba", "yo-NG", 5),
    ("af-ZA", "Afrikaans", "af-ZA", 5),
    ("sv-SE", "Swedish", "sv-SE", 6),
    ("da-DK", "Danish", "da-DK", 6),
    ("nb-NO", "Norwegian (Bokmål)", "nb-NO", 6),
    ("fi-FI", "Finnish", "fi-FI", 6),
    ("et-EE", "Estonian", "et-EE", 6),
    ("lv-LV", "Latvian", "lv-LV", 6),
    ("lt-LT", "Lithuanian", "lt-LT", 6),
)


class LanguageCatalog:
    """
    Ordered, immutable table of languages.

    Lookups by unknown ids never raise: ``get`` returns None, ``index_of``
    returns None and ``group`` returns ``"Other"``.
    """

    def __init__(self, entries: Iterable[tuple[str, str, str, str]]):
        """
        Build a catalog.

        Args:
            entries: ``(id, name, code, group)`` tuples in canonical order
        """
        self._languages: list[Language] = []
        self._by_id: dict[str, Language] = {}
        self._groups: dict[str, str] = {}

        for language_id, name, code, group in entries:
            if language_id in self._by_id:
                logger.warning(f"Duplicate catalog entry ignored: {language_id}")
                continue
            language = Language(
                id=language_id, name=name, code=code, canonical_index=len(self._languages)
            )
            self._languages.append(language)
            self._by_id[language_id] = language
            self._groups[language_id] = group if group in LANGUAGE_GROUPS else OTHER_GROUP

    @classmethod
    def default(cls) -> "LanguageCatalog":
        """Catalog with the bundled language table."""
        return cls(
            (language_id, name, code, LANGUAGE_GROUPS[group_index])
            for language_id, name, code, group_index in DEFAULT_LANGUAGES
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "LanguageCatalog":
        """
        Load a catalog from a YAML list of ``{id, name, code, group}`` mappings.

        Raises:
            ConfigFileNotFoundError: If the file does not exist
            EmptyConfigFileError: If the file holds no entries
            InvalidYamlError: If the YAML cannot be parsed
        """
        path = Path(path)
        if not path.exists():
            raise ConfigFileNotFoundError(str(path))

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidYamlError(str(path), str(e)) from e

        if not data:
            raise EmptyConfigFileError(str(path))

        return cls(
            (
                str(item["id"]),
                str(item.get("name", item["id"])),
                str(item.get("code", item["id"])),
                str(item.get("group", OTHER_GROUP)),
            )
            for item in data
        )

    def all(self) -> list[Language]:
        return list(self._languages)

    def get(self, language_id: str) -> Language | None:
        return self._by_id.get(language_id)

    def __contains__(self, language_id: object) -> bool:
        return language_id in self._by_id

    def __len__(self) -> int:
        return len(self._languages)

    def index_of(self, language_id: str) -> int | None:
        language = self._by_id.get(language_id)
        return language.canonical_index if language else None

    def sort_key(self, language_id: str) -> float:
        """Canonical index, with unknown languages sorting last."""
        index = self.index_of(language_id)
        return float("inf") if index is None else index

    def sort_ids(self, language_ids: Iterable[str]) -> list[str]:
        """Sort ids by canonical index; ties (unknown ids) keep their given order."""
        return sorted(language_ids, key=self.sort_key)

    def group(self, language_id: str) -> str:
        return self._groups.get(language_id, OTHER_GROUP)

    def code_for(self, language_id: str) -> str:
        language = self._by_id.get(language_id)
        return language.code if language else language_id

    def grouped(
        self, languages: Iterable[Language] | None = None, search: str = ""
    ) -> list[tuple[str, list[Language]]]:
        """
        Group languages by script group in group order, skipping empty groups.

        Args:
            languages: Languages to group (defaults to the whole catalog)
            search: Case-insensitive filter on name or id

        Returns:
            ``(group, languages)`` pairs
        """
        grouped: dict[str, list[Language]] = {group: [] for group in LANGUAGE_GROUPS}
        needle = search.lower()

        for language in self._languages if languages is None else languages:
            if needle and needle not in language.name.lower() and needle not in language.id.lower():
                continue
            grouped[self.group(language.id)].append(language)

        return [(group, items) for group, items in grouped.items() if items]
