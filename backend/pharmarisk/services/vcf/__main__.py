from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from pharmarisk.core.config import get_config
from pharmarisk.services.pharmacogenomics.knowledge_base import load_knowledge_base
from pharmarisk.services.pharmacogenomics.risk_engine import normalize_drug_name, resolve_risk

from .parser import extract_variants_from_path


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m pharmarisk.services.vcf",
        description="Extract pharmacogene variants from a VCF file and optionally resolve drug risk.",
    )
    parser.add_argument("path", type=Path, help="Path to a .vcf or .vcf.gz file")
    parser.add_argument("--drug", help="Drug name to resolve risk for (e.g. codeine)")
    parser.add_argument("--kb", type=Path, default=None, help="Knowledge base JSON (defaults to the bundled one)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    if not args.path.exists():
        print(f"File not found: {args.path}", file=sys.stderr)
        return 2

    variants = extract_variants_from_path(args.path)

    payload = {
        "variant_count": len(variants),
        "detected_variants": [v.to_dict() for v in variants],
    }

    if args.drug:
        kb = load_knowledge_base(args.kb or get_config().knowledge_base_path)
        profile = resolve_risk(variants, args.drug, kb)
        payload["drug"] = normalize_drug_name(args.drug)
        payload["risk_profile"] = {
            "risk_level": profile.risk_level,
            "severity": profile.severity.value,
            "recommendation": profile.recommendation,
            "primary_gene": profile.primary_gene,
            "phenotype": profile.phenotype,
            "matched_variant": profile.matched_variant.to_dict() if profile.matched_variant else None,
        }

    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
