"""
Internal data models for the pharmacogenomics service.
These are the immutable values passed between the VCF extractor, the
knowledge base and the risk engine.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional

UNKNOWN = "Unknown"

# The fixed pharmacogene panel. Variants for any other gene are ignored.
TARGET_PHARMACOGENES = (
    "CYP2D6",
    "CYP2C19",
    "CYP2C9",
    "SLCO1B1",
    "TPMT",
    "DPYD",
)

DEFAULT_RISK_LEVEL = "Safe"
DEFAULT_RECOMMENDATION = (
    "Standard dosing guidelines apply. No specific genetic risk found in provided data."
)
DEFAULT_PRIMARY_GENE = "None detected"
DEFAULT_PHENOTYPE = "Normal Metabolizer"


class Severity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


_SEVERITY_BY_RISK_LEVEL: Dict[str, Severity] = {
    "Toxic": Severity.HIGH,
    "Ineffective": Severity.HIGH,
    "Adjust Dosage": Severity.MEDIUM,
}


def severity_for(risk_level: str) -> Severity:
    """Toxic/Ineffective -> High, Adjust Dosage -> Medium, anything else -> Low."""
    return _SEVERITY_BY_RISK_LEVEL.get(risk_level, Severity.LOW)


@dataclass(frozen=True)
class Variant:
    """One observed pharmacogene call, in file order."""
    gene: str
    rsid: str = UNKNOWN
    allele: str = UNKNOWN
    raw_info: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "gene": self.gene,
            "rsid": self.rsid,
            "variant": self.allele,
            "raw_info": self.raw_info,
        }


@dataclass(frozen=True)
class DrugRiskRule:
    risk_level: str
    recommendation: str


@dataclass(frozen=True)
class AlleleRule:
    """Knowledge-base entry for one (gene, star allele) pair."""
    phenotype: str
    drug_rules: Mapping[str, DrugRiskRule] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def rule_for(self, drug: str) -> Optional[DrugRiskRule]:
        return self.drug_rules.get(drug)


@dataclass(frozen=True)
class RiskProfile:
    """Resolved classification for one drug given one patient's variants."""
    risk_level: str = DEFAULT_RISK_LEVEL
    recommendation: str = DEFAULT_RECOMMENDATION
    primary_gene: str = DEFAULT_PRIMARY_GENE
    phenotype: str = DEFAULT_PHENOTYPE
    matched_variant: Optional[Variant] = None

    @property
    def severity(self) -> Severity:
        return severity_for(self.risk_level)

    @property
    def is_match(self) -> bool:
        return self.matched_variant is not None
