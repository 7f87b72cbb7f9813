"""
Shared fixtures: a small in-memory knowledge base and sample VCF content.
"""

import pytest

from pharmarisk.services.pharmacogenomics.knowledge_base import KnowledgeBase


KB_DATA = {
    "version": "test-1",
    "source": "unit tests",
    "genes": {
        "CYP2D6": {
            "*4": {
                "phenotype": "Poor Metabolizer",
                "drugs": {
                    "CODEINE": {
                        "risk_level": "Ineffective",
                        "recommendation": "Avoid; select non-CYP2D6 analgesic.",
                    },
                },
            },
            "*1xN": {
                "phenotype": "Ultrarapid Metabolizer",
                "drugs": {
                    "CODEINE": {
                        "risk_level": "Toxic",
                        "recommendation": "Avoid codeine due to risk of morphine toxicity.",
                    },
                },
            },
        },
        "CYP2C9": {
            "*2": {
                "phenotype": "Intermediate Metabolizer",
                "drugs": {
                    "CODEINE": {
                        "risk_level": "Toxic",
                        "recommendation": "Hypothetical rule used to test match ordering.",
                    },
                    "warfarin ": {
                        "risk_level": "Adjust Dosage",
                        "recommendation": "Reduce initial warfarin dose.",
                    },
                },
            },
        },
    },
}


VCF_TEXT = "\n".join([
    "##fileformat=VCFv4.2",
    "##source=unit-test",
    "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO",
    "chr22\t42130692\t.\tG\tA\t99\tPASS\tGENE=CYP2D6;STAR=*4;RS=rs3892097",
    "chr10\t94942290\trs1799853\tC\tT\t99\tPASS\tGENE=CYP2C9;STAR=*2",
    "chr1\t97450058\t.\tC\tT\t99\tPASS\tGENE=BRCA1;STAR=*1",
    "chr12\t21178615\trs4149056\tT\tC",
    "chr6\t18130918\t.\tT\tC\t99\tPASS\tGENE=TPMT",
    "",
])


@pytest.fixture
def kb_data():
    return KB_DATA


@pytest.fixture
def knowledge_base():
    return KnowledgeBase.from_dict(KB_DATA)


@pytest.fixture
def vcf_text():
    return VCF_TEXT


@pytest.fixture
def vcf_lines():
    return VCF_TEXT.splitlines()
