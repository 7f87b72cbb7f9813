from .parser import (
    VcfSourceError,
    VcfTooLargeError,
    extract_variants,
    extract_variants_from_bytes,
    extract_variants_from_path,
    iter_variants,
    parse_record,
    tokenize_info,
)

__all__ = [
    "VcfSourceError",
    "VcfTooLargeError",
    "extract_variants",
    "extract_variants_from_bytes",
    "extract_variants_from_path",
    "iter_variants",
    "parse_record",
    "tokenize_info",
]
