"""
CPIC Knowledge Base - immutable gene -> allele -> drug rule table.

Loaded once at process start and passed by reference to the risk engine.
Nothing in the table can be mutated after load, so a single instance is safe
to share between concurrent requests.
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from .models import AlleleRule, DrugRiskRule

logger = logging.getLogger(__name__)


class KnowledgeBaseError(ValueError):
    pass


# ===== File schema =====

class DrugRuleEntry(BaseModel):
    risk_level: str = Field(..., min_length=1)
    recommendation: str = Field(..., min_length=1)


class AlleleEntry(BaseModel):
    phenotype: str = Field(..., min_length=1)
    drugs: Dict[str, DrugRuleEntry] = Field(default_factory=dict)


_GENE_TABLE = TypeAdapter(Dict[str, Dict[str, AlleleEntry]])


class KnowledgeBase:
    """
    Read-only lookup table keyed by gene symbol, then star allele code.
    Drug names inside each allele rule are stored trimmed and upper-cased.
    """

    def __init__(
        self,
        genes: Mapping[str, Mapping[str, AlleleRule]],
        *,
        version: str = "unversioned",
        source: str = "unknown",
    ):
        self._genes = MappingProxyType({
            gene: MappingProxyType(dict(alleles)) for gene, alleles in genes.items()
        })
        self._version = version
        self._source = source

    @property
    def version(self) -> str:
        return self._version

    @property
    def source(self) -> str:
        return self._source

    @property
    def genes(self) -> List[str]:
        return sorted(self._genes)

    def lookup(self, gene: str, allele: str) -> Optional[AlleleRule]:
        """Rule for (gene, allele), or None when either is unknown."""
        alleles = self._genes.get(gene)
        if alleles is None:
            return None
        return alleles.get(allele)

    def alleles_for(self, gene: str) -> List[str]:
        return sorted(self._genes.get(gene, {}))

    @property
    def drugs(self) -> List[str]:
        """All drug names with at least one rule."""
        found = set()
        for alleles in self._genes.values():
            for rule in alleles.values():
                found.update(rule.drug_rules)
        return sorted(found)

    def __len__(self) -> int:
        return sum(len(alleles) for alleles in self._genes.values())

    def __repr__(self) -> str:
        return (
            f"KnowledgeBase(version={self._version!r}, genes={len(self._genes)}, "
            f"alleles={len(self)})"
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KnowledgeBase":
        """
        Build from the parsed JSON resource. Accepts either the versioned form
        {"version", "source", "genes": {...}} or a bare {gene: {allele: ...}} table.
        """
        if not isinstance(data, dict):
            raise KnowledgeBaseError("Knowledge base must be a JSON object")

        if "genes" in data:
            table = data["genes"]
            version = str(data.get("version", "unversioned"))
            source = str(data.get("source", "unknown"))
        else:
            table = data
            version = "unversioned"
            source = "unknown"

        try:
            parsed = _GENE_TABLE.validate_python(table)
        except ValidationError as e:
            raise KnowledgeBaseError(f"Invalid knowledge base schema: {e}") from e

        genes: Dict[str, Dict[str, AlleleRule]] = {}
        for gene, alleles in parsed.items():
            genes[gene.strip()] = {
                allele.strip(): _build_allele_rule(entry)
                for allele, entry in alleles.items()
            }
        return cls(genes, version=version, source=source)


def _build_allele_rule(entry: AlleleEntry) -> AlleleRule:
    drug_rules = {
        drug.strip().upper(): DrugRiskRule(
            risk_level=rule.risk_level,
            recommendation=rule.recommendation,
        )
        for drug, rule in entry.drugs.items()
    }
    return AlleleRule(phenotype=entry.phenotype, drug_rules=MappingProxyType(drug_rules))


def load_knowledge_base(path: Union[str, Path]) -> KnowledgeBase:
    """Load the knowledge base from a JSON file. Raises on a missing or invalid file."""
    kb_file = Path(path)
    if not kb_file.exists():
        raise FileNotFoundError(f"Knowledge base file not found at {kb_file}")

    with open(kb_file, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise KnowledgeBaseError(f"Knowledge base at {kb_file} is not valid JSON: {e}") from e

    kb = KnowledgeBase.from_dict(data)
    logger.info(
        "Knowledge base loaded: %d genes, %d alleles, %d drugs (version %s)",
        len(kb.genes), len(kb), len(kb.drugs), kb.version,
    )
    return kb
