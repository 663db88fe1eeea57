"""
AuraGold Clinic - Treatment Transparency & Staff Session Service

Explains cosmetic-treatment recommendations (safety interlocks, data
provenance, guideline citations) and guards the clinic staff session.

IMPORTANT: Recommendations are informational and must be reviewed by a
licensed provider before any treatment.
"""

__version__ = "1.0.0"
__author__ = "AuraGold Team"
