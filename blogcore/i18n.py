# blogcore/i18n.py
# Bilingual (en/ar) field resolution shared by list, search and detail paths.
from typing import Any, Dict, Iterable, Mapping, Optional

DEFAULT_LANGUAGE = "en"
SUPPORTED_LANGUAGES = ("en", "ar")


def localized(row: Mapping[str, Any], field: str, lang: Optional[str]) -> Any:
    """`<field>_ar` only when Arabic was asked for and is non-null, else `<field>_en`."""
    if lang == "ar":
        value = row.get(f"{field}_ar")
        if value is not None:
            return value
    return row.get(f"{field}_en")


def project(row: Mapping[str, Any], fields: Iterable[str], lang: Optional[str]) -> Dict[str, Any]:
    out = dict(row)
    for field in fields:
        out[field] = localized(row, field, lang)
    return out
