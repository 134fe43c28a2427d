"""
Apparel classifier.

Pure functions that decide whether a vendor catalog item belongs in the shop
and derive display metadata from its free-text name, description and
variation names.
"""
from typing import Iterable, List, NamedTuple, Optional, Tuple

from sugarplum_catalog.classification import rules
from sugarplum_catalog.data.models.catalog import AUDIENCES, CatalogItem, Variation
from sugarplum_catalog.data.models.vendor import VendorCatalogItem
from sugarplum_catalog.utils.logging_config import get_logger

# Set up logging
logger = get_logger(__name__)


class ParsedVariation(NamedTuple):
    """Size, color and print location parsed from a variation name."""
    size: Optional[str] = None
    color: Optional[str] = None
    print_location: Optional[str] = None


def _is_size_part(part: str) -> bool:
    lower = " ".join(part.lower().split())
    if lower in rules.LETTER_SIZES or lower in rules.SIZE_WORDS:
        return True
    if rules.NUMERIC_SIZE_PATTERN.match(lower) or rules.TODDLER_SIZE_PATTERN.match(lower):
        return True
    return bool(rules.SIZE_PART_PATTERN.search(lower))


def _normalize_size(part: str) -> str:
    """
    Map a size token to its canonical short form.

    Letter sizes and the words small/medium/large become S/M/L style codes,
    toddler ages become "2T".."5T"; anything else (youth phrases, numeric
    sizes) is kept as written.
    """
    raw = " ".join(part.split())
    lower = raw.lower()
    if lower.startswith("adult "):
        adult_size = lower[len("adult "):]
        if adult_size in rules.LETTER_SIZES or adult_size in rules.SIZE_WORDS:
            lower = adult_size
    if lower in rules.LETTER_SIZES:
        return rules.LETTER_SIZES[lower]
    if lower in rules.SIZE_WORDS:
        return rules.SIZE_WORDS[lower]
    toddler = rules.TODDLER_SIZE_PATTERN.match(lower)
    if toddler:
        return f"{int(toddler.group(1))}T"
    return raw


def parse_variation(name: Optional[str]) -> ParsedVariation:
    """
    Parse a variation name such as "Black / XL" into size and color.

    The name is split on commas and slashes. The first part that looks like
    a size becomes the size and the first remaining part that is not a
    garment word becomes the color; every other part is dropped.

    Args:
        name (Optional[str]): The vendor variation name

    Returns:
        ParsedVariation: Parsed size, color and print location (each may be None)
    """
    if not name:
        return ParsedVariation()

    size = None
    color = None
    print_location = None

    parts = [p.strip() for p in rules.VARIATION_SEPARATORS.split(name)]
    for part in parts:
        if not part:
            continue

        if _is_size_part(part):
            if size is not None:
                continue
            combined = rules.COLOR_BEFORE_KIDS_SIZE_PATTERN.match(part)
            if combined and not _is_size_part(combined.group("color")):
                size = _normalize_size(combined.group("size"))
                if color is None:
                    color = combined.group("color").strip()
            else:
                size = _normalize_size(part)
            continue

        location = rules.PRINT_LOCATION_PATTERN.search(part)
        if location:
            if print_location is None:
                print_location = location.group(1).title()
            continue

        if rules.GARMENT_WORD_PATTERN.search(part):
            continue

        if color is None:
            color = part

    return ParsedVariation(size=size, color=color, print_location=print_location)


def is_placeholder_template(item: VendorCatalogItem) -> bool:
    """
    Recognize the vendor's untitled "T-Shirt" template item.

    The template has no image, no parsable sizes and only "Regular"
    variations.
    """
    if item.name != rules.PLACEHOLDER_ITEM_NAME:
        return False
    if item.image_url or item.image_ids:
        return False
    parsed = [parse_variation(n) for n in item.variation_names]
    all_sizes_missing = all(p.size is None for p in parsed)
    all_colors_regular = all((p.color or "").lower() == rules.PLACEHOLDER_COLOR for p in parsed)
    return all_sizes_missing and all_colors_regular


def is_in_domain(item: VendorCatalogItem) -> bool:
    """
    Decide whether a vendor item is apparel sold by this shop.

    Args:
        item (VendorCatalogItem): The raw vendor item

    Returns:
        bool: True if the item has variations and either its name or a
        variation name mentions a garment, or a variation name mentions a size
    """
    if not item.variations:
        return False
    if is_placeholder_template(item):
        return False

    texts = [item.name] + item.variation_names
    if any(rules.APPAREL_KEYWORD_PATTERN.search(text) for text in texts):
        return True
    return bool(rules.SIZE_KEYWORD_PATTERN.search(" ".join(item.variation_names)))


def infer_garment_type(name: Optional[str]) -> str:
    """Return the garment type for an item name; T-Shirt when nothing matches."""
    matched = rules.first_match(rules.GARMENT_TYPE_RULES, (name or "").lower())
    return matched or rules.DEFAULT_GARMENT_TYPE


def _has_word_or_tag(text: str, word: str) -> bool:
    padded = f" {text} "
    return f" {word} " in padded or f"[{word}]" in padded


def _ordered_audiences(found: Iterable[str]) -> Tuple[str, ...]:
    found = set(found)
    return tuple(a for a in AUDIENCES if a in found)


def infer_audience(
    name: Optional[str],
    variation_names: Iterable[str],
    description: Optional[str]
) -> Tuple[str, ...]:
    """
    Infer who an item is for.

    Audience words or [tags] in the description are a manual override: when
    any is present only those audiences are returned. Otherwise kids sizes
    (youth, toddler, 2T..5T) or kids words in the name give "Kids", and an
    adult-sized item whose name or colors read as feminine gives "Women".

    Args:
        name (Optional[str]): Item name
        variation_names (Iterable[str]): Raw variation names
        description (Optional[str]): Item description

    Returns:
        Tuple[str, ...]: Audiences in canonical order; empty when nothing
        was detected (presented as Men/Unisex by the storefront)
    """
    n = (name or "").lower()
    d = (description or "").lower()

    tagged = [
        rule.result
        for rule in rules.AUDIENCE_TAG_RULES
        if any(_has_word_or_tag(d, keyword) for keyword in rule.keywords)
    ]
    if tagged:
        return _ordered_audiences(tagged)

    size_names = [(v or "").lower() for v in variation_names]
    has_youth = False
    has_adult = False
    for s in size_names:
        if any(k in s for k in rules.KIDS_SIZE_KEYWORDS) or rules.TODDLER_SIZE_PATTERN.match(s.strip()):
            has_youth = True
        elif s.strip():
            has_adult = True

    if any(k in n for k in rules.KIDS_NAME_KEYWORDS):
        has_youth = True

    found = []
    if has_youth:
        found.append("Kids")

    variation_text = " ".join(size_names)
    looks_female = (
        any(k in n for k in rules.FEMALE_NAME_KEYWORDS)
        or any(c in variation_text for c in rules.FEMALE_COLOR_KEYWORDS)
        or any(k in n for k in rules.EXPLICIT_WOMEN_KEYWORDS)
    )
    if has_adult and looks_female:
        found.append("Women")

    return _ordered_audiences(found)


def infer_subcategory(name: Optional[str], description: Optional[str]) -> Optional[str]:
    """Return the first theme whose keywords appear in the name or description."""
    text = f"{name or ''} {description or ''}".lower()
    return rules.first_match(rules.SUBCATEGORY_RULES, text)


def classify_item(item: VendorCatalogItem, image_url: Optional[str] = None) -> Optional[CatalogItem]:
    """
    Turn a raw vendor item into a catalog item without quantities.

    Args:
        item (VendorCatalogItem): The raw vendor item
        image_url (Optional[str]): Resolved image URL, if any

    Returns:
        Optional[CatalogItem]: The classified item, or None if it is not apparel
    """
    if not is_in_domain(item):
        return None

    variations: List[Variation] = []
    seen_ids = set()
    for raw in item.variations:
        if not raw.id or raw.id in seen_ids:
            logger.warning(f"Skipping variation with missing or duplicate id on item {item.id}: {raw.id!r}")
            continue
        seen_ids.add(raw.id)
        parsed = parse_variation(raw.name)
        variations.append(Variation(
            id=raw.id,
            name=raw.name,
            price_cents=raw.price_cents,
            size=parsed.size,
            color=parsed.color,
            sku=raw.sku,
            print_location=parsed.print_location,
        ))

    if not variations:
        return None

    return CatalogItem(
        id=item.id,
        name=item.name,
        description=item.description,
        image_url=image_url if image_url is not None else item.image_url,
        variations=tuple(variations),
        garment_type=infer_garment_type(item.name),
        audience=infer_audience(item.name, item.variation_names, item.description),
        subcategory=infer_subcategory(item.name, item.description),
    )


def normalize_size(size: Optional[str]) -> Optional[str]:
    """Canonical form of a free-text size, for matching against parsed variations."""
    if not size or not size.strip():
        return None
    return _normalize_size(size.strip())
