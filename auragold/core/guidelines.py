"""
Clinical guideline citations per treatment.

Lookup is exact and case-sensitive: the treatment name must match the
catalogue spelling shown to the patient.
"""

from types import MappingProxyType
from typing import Mapping

DEFAULT_GUIDELINES_REFERENCE = "2025 Aesthetic Treatment Guidelines"

GUIDELINES: Mapping[str, str] = MappingProxyType({
    # Aesthetic procedures
    "Morpheus8": "2025 Aesthetic Guidelines for RF Microneedling",
    "Botox Cosmetic": "2025 Neurotoxin Administration Guidelines",
    "Botox": "2025 Neurotoxin Administration Guidelines",
    "HydraFacial": "2025 Non-Invasive Facial Treatment Standards",
    "Dermal Fillers": "2025 Hyaluronic Acid Filler Guidelines",
    "IPL": "2025 Intense Pulsed Light Treatment Protocols",
    "Chemical Peel": "2025 Chemical Exfoliation Guidelines",
    "Microneedling": "2025 Collagen Induction Therapy Standards",
    "PDO Threads": "2025 Thread Lift Procedural Guidelines",
    "Kybella": "2025 Deoxycholic Acid Treatment Protocols",
    "Sculptra": "2025 Poly-L-Lactic Acid Guidelines",

    # Peptides
    "BPC-157": "2025 Peptide Therapy Clinical Standards",
    "GHK-Cu": "2025 Copper Peptide Protocols",
    "Epithalon": "2025 Telomerase Peptide Guidelines",
    "TB-500": "2025 Thymosin Beta-4 Treatment Standards",

    # IV therapy
    "Glow Drip": "2025 IV Vitamin Therapy Guidelines",
    "NAD+ Infusion": "2025 NAD+ Administration Protocols",
    "Myers Cocktail": "2025 IV Nutrient Therapy Standards",
    "Glutathione Push": "2025 Antioxidant IV Guidelines",
})


def guidelines_reference(treatment_name: str) -> str:
    """Citation for a treatment, or the generic aesthetic guidelines."""
    return GUIDELINES.get(treatment_name, DEFAULT_GUIDELINES_REFERENCE)
