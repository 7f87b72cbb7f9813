from pharmarisk.services.pharmacogenomics.models import UNKNOWN, RiskProfile

MAX_FIELD_LENGTH = 64
MAX_PROMPT_LENGTH = 1200


def _clip(value: object) -> str:
    text = " ".join(str(value if value is not None else UNKNOWN).split())
    return text[:MAX_FIELD_LENGTH]


def build_prompt(profile: RiskProfile, drug: str) -> str:
    """
    Constructs a prompt for the LLM to generate a clinical explanation.

    Every interpolated field is whitespace-collapsed and clipped, so the prompt
    length is bounded regardless of what the uploaded file contained.

    Args:
        profile: The resolved risk profile (must carry a matched variant to be useful).
        drug: The drug name as requested.

    Returns:
        A formatted prompt string.
    """
    variant = profile.matched_variant
    allele = variant.allele if variant else UNKNOWN
    rsid = variant.rsid if variant else UNKNOWN

    prompt = (
        f"You are an expert clinical pharmacogeneticist. "
        f"A patient is prescribed {_clip(drug)}. "
        f"Their genetic profile shows they have the {_clip(allele)} variant on the "
        f"{_clip(profile.primary_gene)} gene (rsID: {_clip(rsid)}), making them a "
        f"{_clip(profile.phenotype)}. "
        f"The clinical risk level is classified as: {_clip(profile.risk_level)}.\n\n"
        f"In 2 to 3 concise sentences, explain the biological mechanism behind this risk. "
        f"You must explicitly cite the gene and variant. Do not provide disclaimers. "
        f"Speak directly to the clinician."
    )
    return prompt[:MAX_PROMPT_LENGTH]
