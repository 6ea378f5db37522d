"""Grocery section assignment: external classification plus deterministic overrides."""

import re
from dataclasses import dataclass
from typing import Any

from rapidfuzz import fuzz, process

from grocerylist.config import get_settings
from grocerylist.llm.base import CompletionClient, LLMError
from grocerylist.llm.json_recovery import MalformedResponseError, parse_json_response
from grocerylist.llm.prompts import classification_messages
from grocerylist.logging_config import get_logger
from grocerylist.models import DEFAULT_SECTION, AggregatedIngredient
from grocerylist.schemas import coerce_section

logger = get_logger(__name__)


# =============================================================================
# Override Table
# =============================================================================


@dataclass(frozen=True)
class SectionRule:
    """A keyword rule: any keyword present and no excluded word present."""

    section: str
    keywords: tuple[str, ...]
    excludes: tuple[str, ...] = ()

    def matches(self, texts: tuple[str, ...]) -> bool:
        if not any(keyword in text for text in texts for keyword in self.keywords):
            return False
        return not any(word in text for text in texts for word in self.excludes)


# Evaluated top to bottom, first match wins. Keyword sets overlap on purpose
# ("onion" / "onion powder"), so the order is part of the behavior.
SECTION_OVERRIDES: tuple[SectionRule, ...] = (
    SectionRule("Produce", ("bell pepper",)),
    SectionRule("Meat/Fish", ("salmon", "shrimp", "chicken", "beef", "pork")),
    SectionRule("Meat/Fish", ("turkey",), excludes=("broth",)),
    SectionRule("Meat/Fish", ("fish",), excludes=("sauce",)),
    SectionRule("Produce", ("zucchini",)),
    SectionRule("Produce", ("onion",), excludes=("powder",)),
    SectionRule("Produce", ("garlic",), excludes=("powder",)),
    SectionRule(
        "Produce",
        (
            "lemon",
            "lime",
            "cilantro",
            "parsley",
            "basil",
            "broccoli",
            "spinach",
            "carrot",
        ),
    ),
    SectionRule("Produce", ("tomato",), excludes=("paste",)),
    SectionRule(
        "Produce",
        ("lettuce", "cucumber", "avocado", "cauliflower", "snap pea", "green onion"),
    ),
    SectionRule("Dairy", ("parmesan", "feta", "mozzarella")),
    SectionRule("Dairy", ("cheese",), excludes=("sauce",)),
    SectionRule(
        "Pantry",
        (
            "olive oil",
            "sesame oil",
            "coconut oil",
            "vinegar",
            "broth",
            "stock",
            "coconut milk",
            "fish sauce",
            "soy sauce",
        ),
    ),
    SectionRule(
        "Spices",
        (
            "cumin",
            "paprika",
            "turmeric",
            "cinnamon",
            "chili",
            "coriander",
            "garlic powder",
            "onion powder",
        ),
    ),
)


def apply_section_overrides(
    display_name: str,
    section: str,
    canonical_name: str | None = None,
    base_name: str | None = None,
) -> str:
    """
    Correct a classifier answer with the fixed override table.

    Checks the display name and the canonical name (or the base name when no
    canonical name is known), case-insensitively.
    """
    texts = tuple(
        text.lower() for text in (display_name, canonical_name or base_name) if text
    )
    for rule in SECTION_OVERRIDES:
        if rule.matches(texts):
            if rule.section != section:
                logger.debug(f"Override {display_name!r}: {section} -> {rule.section}")
            return rule.section
    return section


# =============================================================================
# Classification Name Cleanup
# =============================================================================

CLASSIFICATION_PREP_WORDS = (
    "minced",
    "chopped",
    "diced",
    "sliced",
    "grated",
    "zested",
    "juiced",
    "halved",
    "seeded",
    "spiralized",
    "rinsed",
    "drained",
    "for garnish",
    "optional",
    "pitted",
    "trimmed",
    "peeled",
    "deveined",
    "crumbled",
    "riced",
    "for serving",
    "cut into",
    "thick slices",
    "thin slices",
)

_PREP_WORDS_PATTERN = re.compile(
    r"\b(?:" + "|".join(re.escape(w) for w in CLASSIFICATION_PREP_WORDS) + r")\b",
    re.IGNORECASE,
)
_AMOUNT = r"\d+(?:\s+\d+)?(?:[./]\d+)?"
_AMOUNT_UNIT_PATTERN = re.compile(
    rf"\s*{_AMOUNT}\s*(?:oz|lbs?|cups?|tbsp|tsp|tablespoons?|teaspoons?|cloves?|heads?"
    r"|bunch(?:es)?|cans?|fillets?|breasts?|inch(?:es)?)\b\.?\s*",
    re.IGNORECASE,
)
_LEADING_AMOUNT_PATTERN = re.compile(rf"^\s*{_AMOUNT}\s*")


def clean_for_classification(name: str) -> str:
    """Strip quantities, units, parentheticals and prep words from a name."""
    text = re.sub(r"^\s*optional\s*:\s*", "", name, flags=re.IGNORECASE)
    text = re.sub(r"\([^)]*\)", " ", text)
    text = text.split(",", 1)[0]
    text = _PREP_WORDS_PATTERN.sub(" ", text)
    text = _AMOUNT_UNIT_PATTERN.sub(" ", text)
    text = _LEADING_AMOUNT_PATTERN.sub("", text)
    text = re.sub(r"\s*\d+/\d+\s*", " ", text)
    return " ".join(text.split()).lower()


# =============================================================================
# Stage 1: External Classification
# =============================================================================


class SectionClassifier:
    """Asks the classification service for a section per name, in one call."""

    FUZZY_THRESHOLD = 90

    def __init__(
        self,
        client: CompletionClient,
        tokens_per_name: int | None = None,
        min_tokens: int | None = None,
        temperature: float | None = None,
    ):
        settings = get_settings()
        self.client = client
        self.tokens_per_name = tokens_per_name or settings.classification_tokens_per_name
        self.min_tokens = min_tokens or settings.classification_min_tokens
        self.temperature = temperature if temperature is not None else settings.llm_temperature

    async def classify(self, names: list[str]) -> dict[str, str] | None:
        """
        Classify cleaned names.

        Returns:
            Mapping of each requested name to a section (Other when the
            response has no usable entry), or None when the whole call failed.
        """
        if not names:
            return {}

        logger.info(f"Classifying {len(names)} ingredient(s) with {self.client.name}")

        try:
            response = await self.client.complete(
                classification_messages(names),
                temperature=self.temperature,
                max_tokens=max(len(names) * self.tokens_per_name, self.min_tokens),
            )
            payload = parse_json_response(response, prefer="object")
        except (LLMError, MalformedResponseError) as e:
            logger.warning(f"Batch classification failed for {len(names)} name(s): {e}")
            return None
        except Exception as e:
            logger.error(f"Unexpected classification error: {e}", exc_info=True)
            return None

        if not isinstance(payload, dict):
            logger.warning(f"Classification response was {type(payload).__name__}, expected object")
            return None

        return self._map_response(names, payload)

    def _map_response(self, names: list[str], payload: dict[str, Any]) -> dict[str, str]:
        """Match response keys back to the requested names."""
        answers = {str(key).strip().lower(): value for key, value in payload.items()}
        keys = list(answers)
        sections: dict[str, str] = {}

        for name in names:
            key = name.lower()
            if key not in answers and keys:
                match = process.extractOne(
                    key,
                    keys,
                    scorer=fuzz.ratio,
                    score_cutoff=self.FUZZY_THRESHOLD,
                )
                if match:
                    logger.debug(f"Fuzzy matched {name!r} to response key {match[0]!r} ({match[1]:.0f})")
                    key = match[0]
            sections[name] = coerce_section(answers.get(key))

        unmapped = sum(1 for name in names if sections[name] == DEFAULT_SECTION)
        if unmapped:
            logger.debug(f"{unmapped} name(s) classified as {DEFAULT_SECTION}")
        return sections


# =============================================================================
# Categorizer
# =============================================================================


class IngredientCategorizer:
    """
    Assigns grocery sections in two stages.

    Stage 1 asks the classification service (skipped when no classifier is
    configured); stage 2 applies the override table unconditionally.
    """

    def __init__(self, classifier: SectionClassifier | None = None):
        self.classifier = classifier

    @property
    def use_ai(self) -> bool:
        return self.classifier is not None

    @staticmethod
    def _classification_name(
        display_name: str,
        canonical_name: str | None = None,
        base_name: str | None = None,
    ) -> str:
        cleaned = clean_for_classification(canonical_name or base_name or display_name)
        return cleaned or display_name.lower()

    async def categorize_ingredient(
        self,
        display_name: str,
        canonical_name: str | None = None,
        base_name: str | None = None,
    ) -> str:
        """Categorize a single ingredient."""
        sections = await self._categorize([(display_name, canonical_name, base_name)])
        return sections[0]

    async def categorize_ingredients(self, items: list[AggregatedIngredient]) -> list[str]:
        """Categorize aggregated entries; the result is aligned with the input."""
        return await self._categorize(
            [(item.display_name, item.canonical_name, item.base_name) for item in items]
        )

    async def assign_sections(self, items: list[AggregatedIngredient]) -> list[AggregatedIngredient]:
        """
        Set the section of each entry in place.

        A pre-seeded section is kept when categorization only yields Other.
        """
        sections = await self.categorize_ingredients(items)
        for item, section in zip(items, sections):
            if section == DEFAULT_SECTION and item.section != DEFAULT_SECTION:
                continue
            item.section = section
        return items

    async def _categorize(
        self,
        entries: list[tuple[str, str | None, str | None]],
    ) -> list[str]:
        stage_one: dict[str, str] = {}

        if self.classifier is not None and entries:
            # Distinct names only, in first-seen order
            names = list(dict.fromkeys(self._classification_name(*entry) for entry in entries))
            result = await self.classifier.classify(names)
            if result is None:
                logger.warning("Classification unavailable, using overrides only")
            else:
                stage_one = result

        sections: list[str] = []
        for display_name, canonical_name, base_name in entries:
            name = self._classification_name(display_name, canonical_name, base_name)
            section = stage_one.get(name, DEFAULT_SECTION)
            sections.append(apply_section_overrides(display_name, section, canonical_name, base_name))
        return sections
