"""
Pharmacogenomics Service

CPIC-aligned knowledge base and deterministic, rule-based risk resolution
for a fixed six-gene pharmacogene panel.
"""

from .models import (
    TARGET_PHARMACOGENES,
    UNKNOWN,
    Variant,
    DrugRiskRule,
    AlleleRule,
    RiskProfile,
    Severity,
    severity_for,
)
from .knowledge_base import KnowledgeBase, KnowledgeBaseError, load_knowledge_base
from .risk_engine import RiskEngine, create_risk_engine, resolve_risk, normalize_drug_name

__all__ = [
    # Models
    'TARGET_PHARMACOGENES',
    'UNKNOWN',
    'Variant',
    'DrugRiskRule',
    'AlleleRule',
    'RiskProfile',
    'Severity',
    'severity_for',

    # Knowledge base
    'KnowledgeBase',
    'KnowledgeBaseError',
    'load_knowledge_base',

    # Risk Engine
    'RiskEngine',
    'create_risk_engine',
    'resolve_risk',
    'normalize_drug_name',
]
