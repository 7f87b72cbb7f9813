"""PharmaRisk - pharmacogenomic drug-risk classification from VCF uploads."""

__version__ = "1.0.0"
