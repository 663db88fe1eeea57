"""
Transparency engine for treatment recommendations.

Compiles the clinical criteria, data provenance, safety interlocks and
guideline citation that justify (or block) a suggested treatment. The
result is rebuilt from scratch on every call and is safe to compute on
every render.
"""

from typing import Iterable, Optional

from auragold.core.guidelines import guidelines_reference
from auragold.core.interlocks import InterlockBuilder
from auragold.models.schemas import (
    SafetyStatus,
    SkinAnalysisSnapshot,
    TransparencyRecord
)
from auragold.utils.logger import get_logger

logger = get_logger("transparency")


class TransparencyCompiler:
    """
    Builds immutable TransparencyRecord objects.

    Interlocks are emitted in a fixed sequence:
    - generic clearance when no safety screening is available
    - contraindication clearance, or one block per blocked reason
    - one warning per caution reason
    - a lab work warning listing the required tests
    - a clearance for each common condition the patient does NOT report

    The common-condition clearances are a display-only absence check and
    run regardless of the safety screening, even if that repeats a
    clearance already given.
    """

    DATA_SOURCE_PREFIX = "AI Image Analysis + Health Questionnaire | "
    DEFAULT_DATA_SOURCE = "AI Facial Analysis"

    STANDARD_PROTOCOLS = "Standard safety protocols apply"
    NO_CONTRAINDICATIONS = "No absolute contraindications detected"
    LAB_WORK_PREFIX = "Lab work required: "

    # (condition code, label) in display order
    COMMON_CONDITIONS = (
        ("pacemaker", "Pacemaker/defibrillator"),
        ("active_skin_infection", "Active skin infection"),
        ("pregnancy", "Pregnancy"),
    )

    def compile(
        self,
        treatment_name: str,
        clinical_reason: str,
        safety_status: Optional[SafetyStatus] = None,
        patient_conditions: Iterable[str] = (),
        skin_iq_data: Optional[SkinAnalysisSnapshot] = None
    ) -> TransparencyRecord:
        """
        Compile the transparency record for one treatment/patient pairing.

        Args:
            treatment_name: Treatment name, matched exactly for the citation
            clinical_reason: Clinical justification, passed through verbatim
            safety_status: Contraindication screening result, if available
            patient_conditions: Patient condition codes; unknown codes are ignored
            skin_iq_data: Skin analysis descriptors, if available

        Returns:
            TransparencyRecord
        """
        conditions = frozenset(patient_conditions or ())

        builder = InterlockBuilder()
        self._add_safety_interlocks(builder, safety_status)
        self._add_condition_clearances(builder, conditions)

        record = TransparencyRecord(
            clinical_criteria=clinical_reason,
            data_source=self._data_source(skin_iq_data),
            safety_interlocks=builder.build(),
            guidelines_reference=guidelines_reference(treatment_name)
        )

        logger.debug(
            "Transparency record compiled",
            treatment=treatment_name,
            interlocks=len(record.safety_interlocks),
            screened=safety_status is not None
        )

        return record

    def _data_source(self, skin_iq_data: Optional[SkinAnalysisSnapshot]) -> str:
        if skin_iq_data is None:
            source = self.DEFAULT_DATA_SOURCE
        else:
            source = (
                f"Skin IQ Analysis (Texture: {skin_iq_data.texture}, "
                f"Pores: {skin_iq_data.pores}, "
                f"Pigment: {skin_iq_data.pigment}, "
                f"Redness: {skin_iq_data.redness})"
            )
        return self.DATA_SOURCE_PREFIX + source

    def _add_safety_interlocks(
        self,
        builder: InterlockBuilder,
        safety_status: Optional[SafetyStatus]
    ) -> None:
        if safety_status is None:
            builder.cleared(self.STANDARD_PROTOCOLS)
            return

        if safety_status.is_blocked:
            builder.blocks(safety_status.blocked_reasons)
        else:
            builder.cleared(self.NO_CONTRAINDICATIONS)

        if safety_status.has_cautions:
            builder.warnings(safety_status.caution_reasons)

        if safety_status.requires_lab_work:
            builder.warning(
                self.LAB_WORK_PREFIX + ", ".join(safety_status.required_lab_tests)
            )

    def _add_condition_clearances(
        self,
        builder: InterlockBuilder,
        conditions: frozenset
    ) -> None:
        for code, label in self.COMMON_CONDITIONS:
            if code not in conditions:
                builder.cleared(label)


# Singleton instance
transparency_compiler = TransparencyCompiler()


def compile_transparency(
    treatment_name: str,
    clinical_reason: str,
    safety_status: Optional[SafetyStatus] = None,
    patient_conditions: Iterable[str] = (),
    skin_iq_data: Optional[SkinAnalysisSnapshot] = None
) -> TransparencyRecord:
    """Module-level shortcut for transparency_compiler.compile()."""
    return transparency_compiler.compile(
        treatment_name,
        clinical_reason,
        safety_status=safety_status,
        patient_conditions=patient_conditions,
        skin_iq_data=skin_iq_data
    )
