"""Prompts for ingredient interpretation and section classification."""

from grocerylist.llm.base import ChatMessage
from grocerylist.models import SECTIONS

INTERPRETATION_SYSTEM_PROMPT = "You are an ingredient parser. Always return valid JSON only."
CLASSIFICATION_SYSTEM_PROMPT = "You are an ingredient categorizer. Always return valid JSON only."

SECTION_DESCRIPTIONS: dict[str, str] = {
    "Produce": "Fresh fruits and vegetables (garlic, onion, bell pepper, zucchini, tomatoes, lettuce, herbs, etc.)",
    "Meat/Fish": "Raw meat, poultry, fish, seafood (chicken, beef, salmon, shrimp, pork, etc.)",
    "Dry Goods": "Grains, pasta, rice, beans, canned goods, nuts, seeds (quinoa, lentils, chickpeas, pine nuts, etc.)",
    "Dairy": "Milk, cheese, yogurt, butter (parmesan, feta, mozzarella, etc.)",
    "Spices": "Herbs, spices, seasonings (garlic powder, onion powder, oregano, paprika, salt, pepper, etc.)",
    "Pantry": "Oils, vinegars, condiments, broths, sauces (olive oil, balsamic vinegar, coconut milk, tomato paste, etc.)",
    "Other": "Everything else",
}


def _numbered(items: list[str]) -> str:
    return "\n".join(f"{i}. {item.strip()}" for i, item in enumerate(items, start=1))


def get_ingredient_parsing_prompt(lines: list[str]) -> str:
    """Prompt asking for {name, quantity, unit, originalText} per line."""
    return f"""Parse the following ingredient lines into structured JSON format. Extract the quantity, unit, and ingredient name from each line.

Ingredient lines:
{_numbered(lines)}

For each line, return a JSON object with:
- "name": The ingredient name (normalized, lowercase)
- "quantity": The numeric quantity (if present, as a number, otherwise null)
- "unit": The unit of measurement (if present, lowercase, otherwise null)
- "originalText": The original line text

Examples:
- "2 lb boneless skinless chicken thighs" -> {{"name": "boneless skinless chicken thighs", "quantity": 2, "unit": "lb", "originalText": "2 lb boneless skinless chicken thighs"}}
- "1 can black beans" -> {{"name": "black beans", "quantity": 1, "unit": "can", "originalText": "1 can black beans"}}
- "Salt to taste" -> {{"name": "salt", "quantity": null, "unit": null, "originalText": "Salt to taste"}}
- "2-3 large tomatoes" -> {{"name": "large tomatoes", "quantity": 2.5, "unit": null, "originalText": "2-3 large tomatoes"}}
- "1/2 cup, plus 2 tablespoons olive oil" -> {{"name": "olive oil", "quantity": 0.5, "unit": "cup", "originalText": "1/2 cup, plus 2 tablespoons olive oil"}}

Return ONLY a JSON array of {len(lines)} objects, one for each line, in the same order. Return ONLY the JSON array, no other text."""


def get_ingredient_categorization_prompt(names: list[str]) -> str:
    """Prompt asking for a name -> section JSON object."""
    categories = "\n".join(f'- "{s}": {SECTION_DESCRIPTIONS[s]}' for s in SECTIONS)
    return f"""Categorize the following ingredients into shopping sections. Return ONLY a JSON object mapping each ingredient name to its category.

Ingredients:
{_numbered(names)}

Categories:
{categories}

Important rules and examples:
- "garlic" -> "Produce" (fresh garlic)
- "garlic powder" -> "Spices" (dried/powdered)
- "onion" -> "Produce"
- "onion powder" -> "Spices"
- "bell pepper" -> "Produce" (fresh vegetable)
- "pepper" or "black pepper" -> "Spices" (seasoning)
- "chicken broth" -> "Pantry" (not Meat/Fish)
- "fresh herbs" (basil, cilantro, parsley) -> "Produce"
- "dried herbs" or "dried oregano" -> "Spices"
- "tomato paste" -> "Pantry" (not Produce)
- "quinoa" or "red lentils" -> "Dry Goods"

Return ONLY a JSON object with ingredient names as keys (use the exact ingredient name from the list above) and category names as values:
{{
  "chicken thighs": "Meat/Fish",
  "cilantro": "Produce",
  "olive oil": "Pantry"
}}

Return ONLY the JSON object, no other text."""


def interpretation_messages(lines: list[str]) -> list[ChatMessage]:
    return [
        ChatMessage(role="system", content=INTERPRETATION_SYSTEM_PROMPT),
        ChatMessage(role="user", content=get_ingredient_parsing_prompt(lines)),
    ]


def classification_messages(names: list[str]) -> list[ChatMessage]:
    return [
        ChatMessage(role="system", content=CLASSIFICATION_SYSTEM_PROMPT),
        ChatMessage(role="user", content=get_ingredient_categorization_prompt(names)),
    ]
