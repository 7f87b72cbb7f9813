from __future__ import annotations

import gzip
import io
import logging
import re
import zlib
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

from pharmarisk.services.pharmacogenomics.models import (
    TARGET_PHARMACOGENES,
    UNKNOWN,
    Variant,
)

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# Constants & Configuration
# ----------------------------------------------------------------------

COMMENT_MARKER = "#"
MISSING_ID = "."
MIN_COLUMNS = 8

ID_COLUMN = 2
INFO_COLUMN = 7

GZIP_MAGIC = b"\x1f\x8b"

# Tag vocabulary recognised in the INFO column. A tag whose value does not
# match its pattern is treated as absent.
TAG_PATTERNS: Dict[str, re.Pattern] = {
    "GENE": re.compile(r"[A-Za-z0-9_.-]+"),
    "STAR": re.compile(r"\*?\w+"),
    "RS": re.compile(r"rs\d+"),
}

_TARGET_GENES = frozenset(TARGET_PHARMACOGENES)


class VcfSourceError(OSError):
    """The variant file could not be read or decoded."""


class VcfTooLargeError(VcfSourceError):
    """Decompressed content is larger than the configured limit."""


# ----------------------------------------------------------------------
# INFO tokenizer
# ----------------------------------------------------------------------

def tokenize_info(info: str) -> Dict[str, str]:
    """
    Split a semicolon-separated INFO string into the known KEY=value tags.

    Only keys in TAG_PATTERNS are kept; the first occurrence of a key wins,
    and only the prefix of the value matching the tag pattern is retained.
    """
    tags: Dict[str, str] = {}
    if info in (".", ""):
        return tags
    for item in info.split(";"):
        key, sep, value = item.partition("=")
        if not sep:
            continue
        key = key.strip()
        pattern = TAG_PATTERNS.get(key)
        if pattern is None or key in tags:
            continue
        m = pattern.match(value.strip())
        if m:
            tags[key] = m.group(0)
    return tags


# ----------------------------------------------------------------------
# Record parsing
# ----------------------------------------------------------------------

def parse_record(line: str) -> Optional[Variant]:
    """
    Parse one data line. Returns None for lines with too few columns or
    without a whitelisted GENE tag.
    """
    cols = line.split("\t")
    if len(cols) < MIN_COLUMNS:
        # Malformed line → skip gracefully
        return None

    vid = cols[ID_COLUMN].strip()
    info_s = cols[INFO_COLUMN]
    tags = tokenize_info(info_s)

    gene = tags.get("GENE")
    if gene not in _TARGET_GENES:
        return None

    star = tags.get("STAR", UNKNOWN)

    # RS tag beats the ID column
    rsid = tags.get("RS")
    if rsid is None:
        rsid = vid if vid and vid != MISSING_ID else UNKNOWN

    return Variant(gene=gene, rsid=rsid, allele=star, raw_info=info_s)


def iter_variants(lines: Iterable[str]) -> Iterator[Variant]:
    """Yield Variant records for the target pharmacogenes, in input order."""
    skipped = 0
    for raw in lines:
        line = raw.rstrip("\r\n")
        if line.startswith(COMMENT_MARKER):
            continue
        variant = parse_record(line)
        if variant is None:
            skipped += 1
            continue
        yield variant
    if skipped:
        logger.debug("Skipped %d non-pharmacogene or malformed lines", skipped)


def extract_variants(lines: Iterable[str]) -> List[Variant]:
    return list(iter_variants(lines))


def _gunzip(content: bytes, max_bytes: Optional[int]) -> bytes:
    # At most one byte past the cap is inflated
    limit = -1 if max_bytes is None else max_bytes + 1
    try:
        with gzip.GzipFile(fileobj=io.BytesIO(content)) as f:
            data = f.read(limit)
    except (OSError, EOFError, zlib.error) as e:
        raise VcfSourceError(f"Unable to decompress VCF upload: {e}") from e
    if max_bytes is not None and len(data) > max_bytes:
        raise VcfTooLargeError(f"Decompressed VCF upload exceeds the {max_bytes} byte limit")
    return data


def extract_variants_from_bytes(
    content: bytes,
    *,
    encoding: str = "utf-8",
    max_bytes: Optional[int] = None,
) -> List[Variant]:
    """
    Decode an uploaded file (plain or gzip) and extract its variants.

    Lines end only at \\n, \\r or \\r\\n, the same as the path reader. When
    max_bytes is given, gzip content that inflates past it raises
    VcfTooLargeError. Decoding errors are fatal.
    """
    if content[:2] == GZIP_MAGIC:
        content = _gunzip(content, max_bytes)
    try:
        text = content.decode(encoding)
    except UnicodeDecodeError as e:
        raise VcfSourceError(f"VCF upload is not valid {encoding} text: {e}") from e
    return extract_variants(io.StringIO(text, newline=""))


def extract_variants_from_path(path: Union[str, Path], *, encoding: str = "utf-8") -> List[Variant]:
    """
    Streaming extractor for VCF files on disk (plain or gzip).

    A missing or unreadable file raises OSError; undecodable or truncated
    content raises VcfSourceError.
    """
    p = Path(path)
    if p.suffix.lower() == ".gz":
        opener, open_kwargs = gzip.open, {"mode": "rt", "encoding": encoding, "newline": ""}
    else:
        opener, open_kwargs = open, {"mode": "r", "encoding": encoding, "newline": ""}
    with opener(p, **open_kwargs) as f:
        try:
            return extract_variants(f)
        except UnicodeDecodeError as e:
            raise VcfSourceError(f"{p} is not valid {encoding} text: {e}") from e
        except (EOFError, zlib.error) as e:
            raise VcfSourceError(f"{p} is a truncated or corrupt gzip file: {e}") from e
