"""
Risk Engine - maps extracted variants plus a drug name onto a RiskProfile.

Deterministic and side-effect free: no I/O, no logging, no mutation of the
variant list or the knowledge base. Identical inputs always produce an
identical (equal) RiskProfile.
"""

from typing import Iterable

from .knowledge_base import KnowledgeBase
from .models import RiskProfile, Variant


def normalize_drug_name(drug: str) -> str:
    return (drug or "").strip().upper()


def resolve_risk(
    variants: Iterable[Variant],
    drug: str,
    knowledge_base: KnowledgeBase,
) -> RiskProfile:
    """
    Scan variants in file order and return the profile of the first variant
    whose (gene, allele) rule covers the drug.

    Later variants are never considered once a match is found, even if they
    would imply a more severe classification. With no match the default
    Safe profile is returned.
    """
    drug_key = normalize_drug_name(drug)

    for variant in variants:
        allele_rule = knowledge_base.lookup(variant.gene, variant.allele)
        if allele_rule is None:
            continue
        drug_rule = allele_rule.rule_for(drug_key)
        if drug_rule is None:
            continue
        return RiskProfile(
            risk_level=drug_rule.risk_level,
            recommendation=drug_rule.recommendation,
            primary_gene=variant.gene,
            phenotype=allele_rule.phenotype,
            matched_variant=variant,
        )

    return RiskProfile()


class RiskEngine:
    """
    Binds a loaded knowledge base to the resolver.
    """

    def __init__(self, knowledge_base: KnowledgeBase):
        self.knowledge_base = knowledge_base

    def evaluate_risk(self, variants: Iterable[Variant], drug: str) -> RiskProfile:
        return resolve_risk(variants, drug, self.knowledge_base)

    def supports_drug(self, drug: str) -> bool:
        return normalize_drug_name(drug) in self.knowledge_base.drugs


def create_risk_engine(knowledge_base: KnowledgeBase) -> RiskEngine:
    """Factory function to create a RiskEngine instance."""
    return RiskEngine(knowledge_base)
