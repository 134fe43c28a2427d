"""
Apparel classification: domain filter, garment type, audience, subcategory
and variation-name parsing.
"""
from sugarplum_catalog.classification.classifier import (
    ParsedVariation,
    is_in_domain,
    is_placeholder_template,
    infer_garment_type,
    parse_variation,
    normalize_size,
    infer_audience,
    infer_subcategory,
    classify_item
)
