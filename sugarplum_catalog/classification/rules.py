"""
Rule tables for apparel classification.

Each axis is an ordered list of rules evaluated first-match-wins. The order
of every list is part of the output contract: reordering changes results.
"""
import re
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class KeywordRule:
    """
    Maps any of a set of lowercase substrings to a result.
    """
    result: str
    keywords: Tuple[str, ...]
    
    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


def first_match(rules: Tuple[KeywordRule, ...], text: str) -> Optional[str]:
    """
    Return the result of the first rule matching ``text``.
    
    Args:
        rules (Tuple[KeywordRule, ...]): Rules in priority order
        text (str): Lowercased text to scan
    
    Returns:
        Optional[str]: The winning result, or None when nothing matches
    """
    for rule in rules:
        if rule.matches(text):
            return rule.result
    return None


# Boundaries that treat apostrophes as part of a word, so "dad's" has no "s" token
def _token(pattern: str) -> "re.Pattern":
    return re.compile(rf"(?<![\w']){pattern}(?![\w'])", re.IGNORECASE)


# ---------- Domain filter ----------

# Longer garment words match anywhere ("undershirt"); the short ones need a
# word start so "steel" and "screw" stay out
APPAREL_KEYWORD_PATTERN = re.compile(
    r"shirt|hoodie|long sleeve|(?<![\w'])(tee|crew|tank)",
    re.IGNORECASE,
)

SIZE_KEYWORD_PATTERN = _token(
    r"(x{0,3}-?small|medium|x{0,3}-?large|[2-5]?xl|xxl|xs|[sml]|youth|toddler|adult|\d{1,2}t)"
)

PLACEHOLDER_ITEM_NAME = "T-Shirt"
PLACEHOLDER_COLOR = "regular"


# ---------- Garment type ----------

DEFAULT_GARMENT_TYPE = "T-Shirt"

GARMENT_TYPE_RULES = (
    KeywordRule("Hoodie", ("hoodie",)),
    KeywordRule("Sweatshirt", ("sweatshirt", "crew")),
    KeywordRule("Long Sleeve", ("long sleeve",)),
    KeywordRule("Tank", ("tank",)),
)


# ---------- Variation parsing ----------

VARIATION_SEPARATORS = re.compile(r"[,/]")

LETTER_SIZES = {
    "xs": "XS",
    "s": "S",
    "m": "M",
    "l": "L",
    "xl": "XL",
    "xxl": "2XL",
    "2xl": "2XL",
    "xxxl": "3XL",
    "3xl": "3XL",
    "4xl": "4XL",
    "5xl": "5XL",
}

SIZE_WORDS = {
    "x-small": "XS",
    "xsmall": "XS",
    "extra small": "XS",
    "small": "S",
    "medium": "M",
    "large": "L",
    "x-large": "XL",
    "xlarge": "XL",
    "extra large": "XL",
    "xx-large": "2XL",
    "2x-large": "2XL",
    "xxx-large": "3XL",
    "3x-large": "3XL",
}

# A part mentioning any of these is a size, even with extra words around it
SIZE_PART_PATTERN = _token(r"(youth|toddler|x{0,3}-?small|medium|x{0,3}-?large|[2-5]?xl|\d{1,2}t)")

NUMERIC_SIZE_PATTERN = re.compile(r"^\d{1,2}$")
TODDLER_SIZE_PATTERN = re.compile(r"^(\d{1,2})t$", re.IGNORECASE)

# "<color> Youth X-Small": the color would otherwise be swallowed by the size phrase
COLOR_BEFORE_KIDS_SIZE_PATTERN = re.compile(
    r"^(?P<color>.*?\S)\s+(?P<size>(?:youth|toddler)\s+\S.*)$", re.IGNORECASE
)

GARMENT_WORD_PATTERN = _token(r"(t-shirt|sweatshirt|shirt|tee|tank|hoodie)s?")

PRINT_LOCATION_PATTERN = re.compile(
    r"\b(front|back|left chest|pocket|sleeve)\s+(print|design|only)\b", re.IGNORECASE
)


# ---------- Audience ----------

# Description tags: a manual override when any of them is present
AUDIENCE_TAG_RULES = (
    KeywordRule("Women", ("women", "womens")),
    KeywordRule("Men/Unisex", ("men/unisex", "men", "unisex")),
    KeywordRule("Kids", ("kids", "youth")),
)

KIDS_SIZE_KEYWORDS = ("youth", "toddler", "4t", "3t", "2t")
KIDS_NAME_KEYWORDS = ("youth", "toddler", "kid", "4t", "3t", "2t")

FEMALE_NAME_KEYWORDS = (
    "mama",
    "wife",
    "girly",
    "girl",
    "swiftie",
    "bow",
    "ballerina",
    "cheer",
    "dance",
)

FEMALE_COLOR_KEYWORDS = (
    "pink",
    "hot pink",
    "light pink",
    "dark pink",
    "peach",
    "coral",
    "mint",
    "lavender",
    "purple",
    "rose",
)

EXPLICIT_WOMEN_KEYWORDS = ("women", "ladies", "female")


# ---------- Subcategory ----------

SUBCATEGORY_RULES = (
    KeywordRule("Christmas", ("grinch", "christmas", "xmas", "santa", "elf", "reindeer")),
    KeywordRule("Thanksgiving", ("thanksgiving", "turkey", "gobble", "thankful", "fall", "autumn")),
    KeywordRule("Halloween", ("halloween", "witch", "ghost", "pumpkin", "spooky", "boo", "skeleton")),
    KeywordRule("Valentine", ("valentine", "valentines", "love", "heart", "cupid")),
    KeywordRule("Easter", ("easter", "bunny", "egg", "resurrection")),
    KeywordRule(
        "Patriotic",
        ("usa", "american", "america", "flag", "patriotic", "freedom", "merica",
         "4th of july", "independence"),
    ),
    KeywordRule(
        "Faith",
        ("faith", "jesus", "cross", "blessed", "bible", "pray", "prayer", "church", "god "),
    ),
    KeywordRule(
        "Animals",
        ("dog", "dogs", "cat", "cow", "goat", "chicken", "horse", "animal", "paw"),
    ),
    KeywordRule(
        "Hunting & Fishing",
        ("hunt", "hunting", "deer", "buck", "duck", "antler", "fishing", "fish", "bass",
         "crappie", "rifle", "bowhunting", "bow hunting"),
    ),
    KeywordRule(
        "Sports",
        ("football", "baseball", "softball", "basketball", "soccer", "sports", "touchdown",
         "homerun", "home run"),
    ),
    KeywordRule(
        "Humor / Trendy",
        ("sarcasm", "funny", "humor", "snark", "trendy", "meme", "coffee", "wine"),
    ),
)
