"""Ingredient name normalization: base names, prep notes and canonical keys."""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from grocerylist.models import SALT_AND_PEPPER

# =============================================================================
# Vocabularies
# =============================================================================

PREP_ADVERBS = ("finely", "roughly", "coarsely", "thinly", "freshly", "lightly", "very")

PREP_VERBS = (
    "minced",
    "chopped",
    "diced",
    "sliced",
    "grated",
    "crushed",
    "halved",
    "quartered",
    "seeded",
    "deseeded",
    "riced",
    "spiralized",
    "trimmed",
    "rinsed",
    "drained",
    "peeled",
    "deveined",
    "crumbled",
    "julienned",
    "shredded",
    "cubed",
    "zested",
    "juiced",
    "pitted",
    "softened",
    "melted",
    "beaten",
    "divided",
)

# Trailing phrases that are not part of an ingredient's identity
TRAILING_PHRASES = (
    "for garnish",
    "for serving",
    "for topping",
    "to taste",
    "as needed",
    "optional",
)

# Leading prep verbs that are split off into the prep note
LEADING_PREP_VERBS = ("minced", "chopped", "diced", "sliced", "grated", "shredded", "crumbled")

LEADING_DESCRIPTORS = (
    "fresh",
    "large",
    "small",
    "medium",
    "extra large",
    "extra-large",
    "organic",
    "dried",
    "boneless",
    "skinless",
    "lean",
)

LEADING_PHRASES = ("juice of", "zest of", "wedges of", "wedges from")

# "-ies" plurals whose singular ends in "i", not "y"
IES_PLURALS_OF_I = ("chilies", "chillies")

_ADVERB = rf"(?:(?:{'|'.join(PREP_ADVERBS)})\s+)"
_VERB = rf"(?:{'|'.join(PREP_VERBS)}|cut\s+into|into\s+noodles)"
_PREP_PHRASE = rf"{_ADVERB}?{_VERB}(?:\s*(?:,\s*|and\s+|&\s*)+{_ADVERB}?{_VERB})*"
_TRAILING = "|".join(p.replace(" ", r"\s+") for p in TRAILING_PHRASES)
_LEADING_PHRASES = "|".join(p.replace(" ", r"\s+") for p in LEADING_PHRASES)
_LEADING_DESCRIPTORS = "|".join(re.escape(d) for d in LEADING_DESCRIPTORS)

OPTIONAL_PREFIX_PATTERN = re.compile(r"^\s*optional\s*:\s*", re.IGNORECASE)
PARENTHETICAL_PATTERN = re.compile(r"\(([^()]*)\)")
PREP_CLAUSE_PATTERN = re.compile(
    rf",\s*((?:{_PREP_PHRASE}|{_TRAILING})\b.*)$",
    re.IGNORECASE,
)
TRAILING_PHRASE_PATTERN = re.compile(rf"[\s,]+({_TRAILING})\s*$", re.IGNORECASE)
LEADING_PREP_PATTERN = re.compile(
    rf"^({_ADVERB}?(?:{'|'.join(LEADING_PREP_VERBS)}))\s+",
    re.IGNORECASE,
)
LEADING_DESCRIPTOR_PATTERN = re.compile(
    rf"^(?:{_LEADING_DESCRIPTORS}|{_LEADING_PHRASES})(?=[\s,])[\s,]*",
    re.IGNORECASE,
)

_SEASONING_SALT = r"(?:(?:kosher|sea|table)\s+)?salt"
_SEASONING_PEPPER = r"(?:(?:freshly\s+)?(?:ground\s+)?(?:black\s+)?)pepper"
SALT_AND_PEPPER_PATTERNS = (
    re.compile(rf"^{_SEASONING_SALT}\s*(?:and|&|/)\s*{_SEASONING_PEPPER}\b", re.IGNORECASE),
    re.compile(rf"^{_SEASONING_PEPPER}\s*(?:and|&|/)\s*{_SEASONING_SALT}\b", re.IGNORECASE),
    re.compile(rf"^{_SEASONING_SALT},?\s+to\s+taste\b", re.IGNORECASE),
    re.compile(rf"^{_SEASONING_PEPPER},?\s+to\s+taste\s*$", re.IGNORECASE),
)


def _build_synonyms() -> Mapping[str, str]:
    groups: dict[str, tuple[str, ...]] = {
        "garlic": (
            "garlic",
            "garlic clove",
            "garlic cloves",
            "clove garlic",
            "cloves garlic",
            "clove of garlic",
            "cloves of garlic",
        ),
        "green onions": (
            "green onion",
            "green onions",
            "scallion",
            "scallions",
            "spring onion",
            "spring onions",
        ),
        "zucchini": ("zucchini", "zucchinis", "zucchini noodles", "courgette", "courgettes"),
        "bell pepper": (
            "bell pepper",
            "bell peppers",
            "red bell pepper",
            "yellow bell pepper",
            "orange bell pepper",
            "green bell pepper",
            "capsicum",
        ),
        "basil": ("basil", "basil leaf", "basil leaves"),
        "feta cheese": ("feta", "feta cheese"),
        "parmesan cheese": ("parmesan", "parmesan cheese", "parmigiano reggiano"),
        "ginger": ("ginger", "ginger root"),
        "lime": ("lime", "lime wedge", "lime wedges", "lime juice"),
        "lemon": ("lemon", "lemon wedge", "lemon wedges", "lemon juice"),
        "broccoli": ("broccoli", "broccoli floret", "broccoli florets"),
        "chickpea": ("chickpea", "garbanzo bean", "garbanzo beans"),
        "eggplant": ("eggplant", "aubergine", "aubergines"),
        "arugula": ("arugula", "rocket"),
        "olive oil": ("olive oil", "extra virgin olive oil", "extra-virgin olive oil"),
        "black pepper": ("black pepper", "ground black pepper", "freshly ground black pepper"),
        SALT_AND_PEPPER: ("salt and pepper", "salt & pepper", "salt/pepper"),
    }
    table = {variant: canonical for canonical, variants in groups.items() for variant in variants}
    return MappingProxyType(table)


SYNONYMS: Mapping[str, str] = _build_synonyms()


@dataclass(frozen=True)
class NormalizedName:
    """Result of normalizing one ingredient phrase."""

    base_name: str
    canonical_name: str
    prep_note: str | None = None


# =============================================================================
# Normalization Steps
# =============================================================================


def _squash(text: str) -> str:
    return " ".join(text.split()).strip(" ,;")


def strip_optional_prefix(name: str) -> str:
    """Remove an "Optional:" prefix."""
    return OPTIONAL_PREFIX_PATTERN.sub("", name)


def extract_base_name_and_prep(name: str) -> tuple[str, str | None]:
    """
    Split an ingredient phrase into its base name and preparation note.

    "garlic, minced" -> ("garlic", "minced")
    "4 large bell peppers, halved and seeded" keeps "halved and seeded" verbatim.
    """
    original = _squash(strip_optional_prefix(name))
    base_name = original
    prep_parts: list[str] = []

    asides = [a.strip() for a in PARENTHETICAL_PATTERN.findall(base_name) if a.strip()]
    base_name = _squash(PARENTHETICAL_PATTERN.sub(" ", base_name))

    clause_match = PREP_CLAUSE_PATTERN.search(base_name)
    if clause_match:
        prep_parts.append(_squash(clause_match.group(1)))
        base_name = base_name[: clause_match.start()]

    trailing_match = TRAILING_PHRASE_PATTERN.search(base_name)
    if trailing_match:
        prep_parts.append(_squash(trailing_match.group(1)))
        base_name = base_name[: trailing_match.start()]

    # Peel descriptors and leading prep verbs ("large", "finely chopped") in any order
    leading_prep: list[str] = []
    while True:
        prep_match = LEADING_PREP_PATTERN.match(base_name)
        if prep_match and base_name[prep_match.end() :].strip():
            leading_prep.append(_squash(prep_match.group(1)))
            base_name = base_name[prep_match.end() :]
            continue
        stripped = LEADING_DESCRIPTOR_PATTERN.sub("", base_name, count=1)
        if stripped == base_name or not stripped.strip():
            break
        base_name = stripped

    prep_parts = leading_prep + prep_parts + asides
    base_name = _squash(base_name) or original
    prep_note = ", ".join(prep_parts) if prep_parts else None
    return base_name, prep_note


def is_salt_and_pepper(text: str) -> bool:
    """Check if a phrase is one of the salt/pepper seasoning variants."""
    lowered = _squash(strip_optional_prefix(text).lower())
    return any(pattern.search(lowered) for pattern in SALT_AND_PEPPER_PATTERNS)


def singularize(text: str) -> str:
    """Naive singular form of a phrase; only its final letters change."""
    if text.endswith("ss") or text.endswith("us") or not text.endswith("s"):
        return text
    if text.endswith("ies") and len(text) > 4:
        if text.rsplit(" ", 1)[-1] in IES_PLURALS_OF_I:
            return text[:-2]
        return text[:-3] + "y"
    if text.endswith("oes") and len(text) > 4:
        return text[:-2]
    return text[:-1]


def canonicalize(base_name: str) -> str:
    """
    Derive the canonical grouping key from a base name.

    Lower-cases, resolves synonyms for both the singular and the original
    form, and applies the salt-and-pepper collapse. Names with no table entry
    fall back to their singular form.
    """
    normalized = _squash(base_name.lower())

    if is_salt_and_pepper(normalized):
        return SALT_AND_PEPPER

    singular = singularize(normalized)
    for candidate in (singular, normalized):
        if candidate in SYNONYMS:
            return SYNONYMS[candidate]

    return singular


def normalize_name(raw_name: str) -> NormalizedName:
    """Run the full normalization for one ingredient phrase."""
    base_name, prep_note = extract_base_name_and_prep(raw_name)
    if is_salt_and_pepper(raw_name):
        canonical_name = SALT_AND_PEPPER
    else:
        canonical_name = canonicalize(base_name)
    return NormalizedName(base_name=base_name, canonical_name=canonical_name, prep_note=prep_note)
