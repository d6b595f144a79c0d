"""Static OS/2 language table and ``-l`` option decoding.

WHY: The country block records a language family id and a language
version (sub) id. Only pairs that OS/2 defines are meaningful, so the
CLI validates the user's ``-l FAMILY,SUB`` option against the same
static table the original tool prints in its long help.

HOW: LANGUAGES is a tuple of LanguageInfo rows. decode_language_option()
parses the option text, defaults a missing sub id to 1 (with a warning),
range-checks the family and then looks the pair up in the table.

RULES:
- Family ids are valid in 1..34; anything else is LanguageOutOfRangeError
- A family/sub pair missing from the table is LanguageSubIdOutOfRangeError
- Without a comma the whole option is the family id and sub id is 1
- Non-numeric text decodes like C atoi (leading digits, else 0)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from msgfile_compiler.core.scanner import atoi
from msgfile_compiler.errors import (
    LanguageOutOfRangeError,
    LanguageSubIdOutOfRangeError,
)

logger = logging.getLogger(__name__)

MIN_LANGUAGE_FAMILY = 1
MAX_LANGUAGE_FAMILY = 34


@dataclass(frozen=True)
class LanguageInfo:
    """One row of the language table."""

    code: str
    family: int
    sub: int
    language: str
    country: str


LANGUAGES: tuple[LanguageInfo, ...] = (
    LanguageInfo("ARA", 1, 1, "Arabic", "Arab Countries"),
    LanguageInfo("BGR", 2, 1, "Bulgarian", "Bulgaria"),
    LanguageInfo("CAT", 3, 1, "Catalan", "Spain"),
    LanguageInfo("CHT", 4, 1, "Traditional Chinese", "R.O.C."),
    LanguageInfo("CHS", 4, 2, "Simplified Chinese", "P.R.C."),
    LanguageInfo("CSY", 5, 1, "Czech", "Czech Republic"),
    LanguageInfo("DAN", 6, 1, "Danish", "Denmark"),
    LanguageInfo("DEU", 7, 1, "German", "Germany"),
    LanguageInfo("DES", 7, 2, "Swiss German", "Switzerland"),
    LanguageInfo("ELL", 8, 1, "Greek", "Greece"),
    LanguageInfo("ENU", 9, 1, "US English", "United States"),
    LanguageInfo("ENG", 9, 2, "UK English", "United Kingdom"),
    LanguageInfo("ESP", 10, 1, "Castilian Spanish", "Spain"),
    LanguageInfo("ESM", 10, 2, "Mexican Spanish", "Mexico"),
    LanguageInfo("FIN", 11, 1, "Finnish", "Finland"),
    LanguageInfo("FRA", 12, 1, "French", "France"),
    LanguageInfo("FRB", 12, 2, "Belgian French", "Belgium"),
    LanguageInfo("FRC", 12, 3, "Canadian French", "Canada"),
    LanguageInfo("FRS", 12, 4, "Swiss French", "Switzerland"),
    LanguageInfo("HEB", 13, 1, "Hebrew", "Israel"),
    LanguageInfo("HUN", 14, 1, "Hungarian", "Hungary"),
    LanguageInfo("ISL", 15, 1, "Icelandic", "Iceland"),
    LanguageInfo("ITA", 16, 1, "Italian", "Italy"),
    LanguageInfo("ITS", 16, 2, "Swiss Italian", "Switzerland"),
    LanguageInfo("JPN", 17, 1, "Japanese", "Japan"),
    LanguageInfo("KOR", 18, 1, "Korean", "Korea"),
    LanguageInfo("NLD", 19, 1, "Dutch", "Netherlands"),
    LanguageInfo("NLB", 19, 2, "Belgian Dutch", "Belgium"),
    LanguageInfo("NOR", 20, 1, "Norwegian (Bokmal)", "Norway"),
    LanguageInfo("NON", 20, 2, "Norwegian (Nynorsk)", "Norway"),
    LanguageInfo("PLK", 21, 1, "Polish", "Poland"),
    LanguageInfo("PTB", 22, 1, "Brazilian Portuguese", "Brazil"),
    LanguageInfo("PTG", 22, 2, "Portuguese", "Portugal"),
    LanguageInfo("RMS", 23, 1, "Rhaeto-Romanic", "Switzerland"),
    LanguageInfo("ROM", 24, 1, "Romanian", "Romania"),
    LanguageInfo("RUS", 25, 1, "Russian", "Russia"),
    LanguageInfo("SHL", 26, 1, "Croato-Serbian (Latin)", "Croatia"),
    LanguageInfo("SHC", 26, 2, "Serbo-Croatian (Cyrillic)", "Serbia"),
    LanguageInfo("SKY", 27, 1, "Slovak", "Slovakia"),
    LanguageInfo("SQI", 28, 1, "Albanian", "Albania"),
    LanguageInfo("SVE", 29, 1, "Swedish", "Sweden"),
    LanguageInfo("THA", 30, 1, "Thai", "Thailand"),
    LanguageInfo("TRK", 31, 1, "Turkish", "Turkey"),
    LanguageInfo("URD", 32, 1, "Urdu", "Pakistan"),
    LanguageInfo("BAH", 33, 1, "Bahasa", "Indonesia"),
    LanguageInfo("SLO", 34, 1, "Slovene", "Slovenia"),
)


def find_language(family: int, sub: int) -> LanguageInfo | None:
    """Return the table row for a family/sub pair, or None."""
    for info in LANGUAGES:
        if info.family == family and info.sub == sub:
            return info
    return None


def decode_language_option(value: str) -> LanguageInfo:
    """Decode and validate a ``FAMILY[,SUB]`` language option.

    WHY: The country block needs a valid family/sub pair; catching a
    typo here is far friendlier than shipping a catalog tagged with a
    language OS/2 does not know.

    HOW: Split on the first comma, atoi both halves, range-check the
    family, then look the pair up in LANGUAGES.

    RULES:
    - "9,2" → ENG row
    - "9"   → sub id defaults to 1, logs a warning
    - family outside 1..34 raises LanguageOutOfRangeError
    - unknown pair raises LanguageSubIdOutOfRangeError

    Args:
        value: The raw option text.

    Returns:
        The matching LanguageInfo row.
    """
    if "," in value:
        family_text, sub_text = value.split(",", 1)
        family = atoi(family_text)
        sub = atoi(sub_text)
    else:
        logger.warning("No language sub id given, using 1")
        family = atoi(value)
        sub = 1

    if not MIN_LANGUAGE_FAMILY <= family <= MAX_LANGUAGE_FAMILY:
        raise LanguageOutOfRangeError(
            f"language family {family} is outside {MIN_LANGUAGE_FAMILY}..{MAX_LANGUAGE_FAMILY}"
        )

    info = find_language(family, sub)
    if info is None:
        raise LanguageSubIdOutOfRangeError(
            f"language sub id {sub} is not defined for family {family}"
        )
    return info
