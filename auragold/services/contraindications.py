"""
Contraindication screening for AuraGold Clinic.

Matches a patient's reported health conditions against the treatment
contraindication matrices and produces the SafetyStatus consumed by the
transparency engine. Also answers the scheduling questions asked by the
dosing screen: treatment interactions, post-care suggestions and the
skin-type and cold-sore checks.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

from auragold.models.schemas import (
    ConditionCategory,
    ConditionSeverity,
    HealthConditionInfo,
    InteractionCheckResult,
    PostCareRecommendation,
    SafetyStatus
)
from auragold.utils.logger import get_logger

logger = get_logger("contraindications")


@dataclass(frozen=True)
class ContraindicationRule:
    """Red flags and cautions for one treatment."""

    treatment: str
    absolute_red_flags: Tuple[str, ...]
    caution_flags: Tuple[str, ...]
    requires_lab_work: bool = False
    lab_work_type: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TreatmentInteractionRule:
    """Treatments that must not be combined with ``treatment``."""

    treatment: str
    incompatible_with: Tuple[str, ...]
    wait_period_days: int
    warning_message: str


# =============================================================================
# Health condition catalogue
# =============================================================================

_MEDICAL = ConditionCategory.MEDICAL
_MEDICATION = ConditionCategory.MEDICATION
_ALLERGY = ConditionCategory.ALLERGY
_LIFESTYLE = ConditionCategory.LIFESTYLE
_LAB = ConditionCategory.LAB
_ABSOLUTE = ConditionSeverity.ABSOLUTE
_CAUTION = ConditionSeverity.CAUTION

_CONDITION_ROWS = (
    ("pacemaker", "Pacemaker or internal defibrillator", _MEDICAL, _ABSOLUTE),
    ("internal_defibrillator", "Internal defibrillator", _MEDICAL, _ABSOLUTE),
    ("active_skin_cancer", "Active skin cancer", _MEDICAL, _ABSOLUTE),
    ("pregnancy", "Pregnant or possibly pregnant", _MEDICAL, _ABSOLUTE),
    ("breastfeeding", "Currently breastfeeding", _MEDICAL, _CAUTION),
    ("keloid_history", "History of keloid scarring", _MEDICAL, _ABSOLUTE),
    ("myasthenia_gravis", "Myasthenia Gravis", _MEDICAL, _ABSOLUTE),
    ("als", "ALS (Amyotrophic Lateral Sclerosis)", _MEDICAL, _ABSOLUTE),
    ("eaton_lambert", "Eaton-Lambert Syndrome", _MEDICAL, _ABSOLUTE),
    ("autoimmune_disease_active", "Active autoimmune disease flare", _MEDICAL, _ABSOLUTE),
    ("autoimmune_disease", "Autoimmune disease (controlled)", _MEDICAL, _CAUTION),
    ("active_malignancy", "Active cancer/malignancy", _MEDICAL, _ABSOLUTE),
    ("tumor_history", "History of tumors", _MEDICAL, _ABSOLUTE),
    ("kidney_disease_stage3plus", "Stage 3+ kidney disease", _MEDICAL, _ABSOLUTE),
    ("kidney_failure_esrd", "End-stage renal disease (ESRD)", _MEDICAL, _ABSOLUTE),
    ("kidney_disease", "Kidney disease (mild)", _MEDICAL, _CAUTION),
    ("congestive_heart_failure", "Congestive heart failure", _MEDICAL, _ABSOLUTE),
    ("cardiovascular_disease", "Cardiovascular disease", _MEDICAL, _CAUTION),
    ("diabetes_uncontrolled", "Uncontrolled diabetes", _MEDICAL, _CAUTION),
    ("diabetes", "Diabetes (controlled)", _MEDICAL, _CAUTION),
    ("g6pd_deficiency", "G6PD deficiency", _MEDICAL, _ABSOLUTE),
    ("bleeding_disorder", "Bleeding/clotting disorder", _MEDICAL, _ABSOLUTE),
    ("blood_clotting_disorder", "Blood clotting disorder", _MEDICAL, _ABSOLUTE),
    ("seizure_disorder_light_triggered", "Light-triggered seizure disorder", _MEDICAL, _ABSOLUTE),
    ("photosensitivity_disorder", "Photosensitivity disorder", _MEDICAL, _ABSOLUTE),
    ("liver_disease", "Liver disease", _MEDICAL, _CAUTION),
    ("difficulty_swallowing", "Difficulty swallowing", _MEDICAL, _ABSOLUTE),

    ("infection_injection_site", "Active infection at treatment site", _MEDICAL, _ABSOLUTE),
    ("active_skin_infection", "Active skin infection", _MEDICAL, _ABSOLUTE),
    ("active_infection", "Active systemic infection", _MEDICAL, _ABSOLUTE),
    ("severe_active_acne", "Severe active acne", _MEDICAL, _ABSOLUTE),
    ("active_acne", "Active acne (mild/moderate)", _MEDICAL, _CAUTION),
    ("active_herpes_outbreak", "Active herpes/cold sore outbreak", _MEDICAL, _ABSOLUTE),
    ("cold_sores_history", "History of cold sores", _MEDICAL, _CAUTION),
    ("eczema_psoriasis", "Eczema or psoriasis", _MEDICAL, _CAUTION),
    ("open_wounds", "Open wounds in treatment area", _MEDICAL, _ABSOLUTE),
    ("sunburn", "Current sunburn", _MEDICAL, _CAUTION),
    ("melasma", "Melasma", _MEDICAL, _CAUTION),

    ("accutane_6months", "Accutane use (within last 6 months)", _MEDICATION, _ABSOLUTE),
    ("accutane_12months", "Accutane use (within last 12 months)", _MEDICATION, _ABSOLUTE),
    ("blood_thinners", "Blood thinners (Warfarin, Aspirin, etc.)", _MEDICATION, _CAUTION),
    ("aminoglycoside_antibiotics", "Aminoglycoside antibiotics", _MEDICATION, _CAUTION),
    ("retinol_48h", "Retinol/AHA use (last 48 hours)", _MEDICATION, _CAUTION),
    ("immunosuppressed", "Immunosuppressive medications", _MEDICATION, _CAUTION),

    ("shellfish_allergy", "Shellfish allergy", _ALLERGY, _ABSOLUTE),
    ("sulfa_allergy", "Sulfa drug allergy", _ALLERGY, _ABSOLUTE),
    ("allergy_to_plla", "Allergy to PLLA", _ALLERGY, _ABSOLUTE),
    ("copper_sensitivity", "Copper sensitivity", _ALLERGY, _ABSOLUTE),
    ("magnesium_sensitivity", "Magnesium sensitivity", _ALLERGY, _CAUTION),

    ("recent_tan", "Recent sun tan (last 2 weeks)", _LIFESTYLE, _CAUTION),
    ("recent_facial_surgery", "Recent facial surgery", _LIFESTYLE, _CAUTION),
    ("recent_botox_fillers_14days", "Botox/Fillers within 14 days", _LIFESTYLE, _CAUTION),
    ("recent_dental_work", "Recent dental work", _LIFESTYLE, _CAUTION),
    ("recent_waxing", "Recent waxing in treatment area", _LIFESTYLE, _CAUTION),
    ("metal_implants_face", "Metal implants in face", _LIFESTYLE, _CAUTION),
    ("upcoming_event_3days", "Important event within 3 days", _LIFESTYLE, _CAUTION),
    ("recent_filler_4weeks", "Dermal filler within last 4 weeks", _LIFESTYLE, _CAUTION),
    ("recent_rf_treatment", "Recent radiofrequency treatment", _LIFESTYLE, _CAUTION),
    ("recent_deep_peel", "Deep chemical peel (same day)", _LIFESTYLE, _CAUTION),

    ("fitzpatrick_iv", "Fitzpatrick Skin Type IV", _MEDICAL, _CAUTION),
    ("fitzpatrick_v_vi", "Fitzpatrick Skin Type V or VI (darker skin)", _MEDICAL, _ABSOLUTE),
    ("active_cystic_acne", "Active cystic acne", _MEDICAL, _ABSOLUTE),
    ("thin_fragile_skin", "Thin or fragile skin", _MEDICAL, _ABSOLUTE),
    ("rosacea_active", "Active rosacea flare", _MEDICAL, _ABSOLUTE),
    ("active_dental_infection", "Active dental infection", _MEDICAL, _ABSOLUTE),
    ("immunosuppressed_severe", "Severely immunosuppressed", _MEDICAL, _ABSOLUTE),
    ("allergy_to_calcium_hydroxylapatite", "Allergy to calcium hydroxylapatite", _ALLERGY, _ABSOLUTE),

    ("lab_work_available", "Recent lab work available (CBC/CMP)", _LAB, _CAUTION),
    ("lab_work_unavailable", "No recent lab work", _LAB, _CAUTION),

    ("platelet_dysfunction", "Platelet dysfunction", _MEDICAL, _ABSOLUTE),
    ("anemia", "Anemia", _MEDICAL, _CAUTION),
    ("nsaid_use_recent", "NSAID use (last 7 days)", _MEDICATION, _CAUTION),
    ("asthma_severe", "Severe asthma", _MEDICAL, _ABSOLUTE),
    ("hemochromatosis", "Hemochromatosis (iron overload)", _MEDICAL, _ABSOLUTE),
    ("oxalate_kidney_stones", "History of oxalate kidney stones", _MEDICAL, _ABSOLUTE),
    ("bipolar_disorder", "Bipolar disorder", _MEDICAL, _CAUTION),
    ("anxiety_disorder", "Anxiety disorder", _MEDICAL, _CAUTION),
    ("wilson_disease", "Wilson disease", _MEDICAL, _CAUTION),
    ("hormone_sensitive_conditions", "Hormone-sensitive conditions", _MEDICAL, _CAUTION),
    ("autoimmune_flare", "Autoimmune flare-up", _MEDICAL, _CAUTION),
    ("carpal_tunnel", "Carpal tunnel syndrome", _MEDICAL, _CAUTION),
    ("organ_transplant_immunosuppressed", "Organ transplant recipient", _MEDICAL, _ABSOLUTE),
    ("diabetic_retinopathy", "Diabetic retinopathy", _MEDICAL, _ABSOLUTE),
    ("prior_neck_surgery", "Prior neck surgery", _LIFESTYLE, _CAUTION),
    ("enlarged_thyroid", "Enlarged thyroid", _MEDICAL, _CAUTION),
    ("infection_treatment_area", "Infection in treatment area", _MEDICAL, _ABSOLUTE),
)

HEALTH_CONDITIONS: Tuple[HealthConditionInfo, ...] = tuple(
    HealthConditionInfo(id=code, label=label, category=category, severity=severity)
    for code, label, category, severity in _CONDITION_ROWS
)

# Human-readable labels for condition codes
CONDITION_LABELS: Mapping[str, str] = MappingProxyType(
    {condition.id: condition.label for condition in HEALTH_CONDITIONS}
)


# =============================================================================
# Contraindication matrices
# =============================================================================

_NEUROTOXIN_RED_FLAGS = (
    "myasthenia_gravis", "als", "eaton_lambert", "infection_injection_site", "pregnancy",
)
_NEUROTOXIN_CAUTIONS = (
    "recent_facial_surgery", "aminoglycoside_antibiotics", "blood_thinners",
)
_FILLER_RED_FLAGS = (
    "active_skin_infection", "pregnancy", "autoimmune_disease_active", "bleeding_disorder",
)
_FILLER_CAUTIONS = ("blood_thinners", "recent_dental_work", "cold_sores_history")
_LIGHT_RED_FLAGS = (
    "active_skin_cancer", "photosensitivity_disorder", "seizure_disorder_light_triggered",
)
_IPL_RED_FLAGS = (
    "pregnancy", "active_skin_cancer", "photosensitivity_disorder",
    "seizure_disorder_light_triggered", "fitzpatrick_v_vi",
)
_THREAD_RED_FLAGS = (
    "autoimmune_disease_active", "active_infection", "pregnancy",
    "blood_clotting_disorder", "keloid_history", "active_dental_infection",
)
_THREAD_CAUTIONS = ("blood_thinners", "recent_facial_surgery", "diabetes_uncontrolled")
_BIOSTIMULATOR_CAUTIONS = (
    "blood_thinners", "immunosuppressed", "recent_filler_4weeks", "recent_rf_treatment",
)

AESTHETIC_CONTRAINDICATIONS: Tuple[ContraindicationRule, ...] = (
    ContraindicationRule(
        treatment="Morpheus8",
        absolute_red_flags=(
            "pacemaker", "internal_defibrillator", "active_skin_cancer",
            "pregnancy", "keloid_history",
        ),
        caution_flags=("recent_tan", "accutane_6months", "metal_implants_face"),
    ),
    ContraindicationRule(
        treatment="Botox Cosmetic",
        absolute_red_flags=_NEUROTOXIN_RED_FLAGS,
        caution_flags=_NEUROTOXIN_CAUTIONS,
    ),
    ContraindicationRule(
        treatment="HydraFacial",
        absolute_red_flags=("shellfish_allergy", "accutane_12months", "severe_active_acne"),
        caution_flags=("retinol_48h", "recent_botox_fillers_14days", "sunburn"),
    ),
    ContraindicationRule(
        treatment="Dermal Fillers",
        absolute_red_flags=_FILLER_RED_FLAGS,
        caution_flags=_FILLER_CAUTIONS,
    ),
    ContraindicationRule(
        treatment="IPL",
        absolute_red_flags=_IPL_RED_FLAGS,
        caution_flags=("recent_tan", "accutane_6months", "melasma", "fitzpatrick_iv"),
    ),
    ContraindicationRule(
        treatment="Red Light Therapy",
        absolute_red_flags=_LIGHT_RED_FLAGS,
        caution_flags=("retinol_48h", "pregnancy"),
    ),
    ContraindicationRule(
        treatment="LED Therapy",
        absolute_red_flags=_LIGHT_RED_FLAGS,
        caution_flags=("retinol_48h", "pregnancy"),
    ),
    ContraindicationRule(
        treatment="Clear + Brilliant",
        absolute_red_flags=(
            "pregnancy", "active_skin_infection", "accutane_6months", "keloid_history",
        ),
        caution_flags=("recent_tan", "upcoming_event_3days", "retinol_48h", "melasma"),
    ),
    ContraindicationRule(
        treatment="MOXI Laser",
        absolute_red_flags=(
            "pregnancy", "active_skin_infection", "accutane_6months", "keloid_history",
        ),
        caution_flags=("recent_tan", "upcoming_event_3days", "retinol_48h", "fitzpatrick_v_vi"),
    ),
    ContraindicationRule(
        treatment="Chemical Peel",
        absolute_red_flags=(
            "pregnancy", "active_herpes_outbreak", "open_wounds", "accutane_12months",
        ),
        caution_flags=("retinol_48h", "recent_waxing", "eczema_psoriasis"),
    ),
    ContraindicationRule(
        treatment="Microneedling",
        absolute_red_flags=(
            "active_skin_infection", "keloid_history",
            "blood_clotting_disorder", "accutane_6months",
        ),
        caution_flags=("blood_thinners", "active_acne", "eczema_psoriasis"),
    ),
    ContraindicationRule(
        treatment="Microdermabrasion",
        absolute_red_flags=(
            "active_cystic_acne", "thin_fragile_skin", "rosacea_active",
            "active_skin_infection", "eczema_psoriasis",
        ),
        caution_flags=("active_acne", "recent_tan", "retinol_48h", "blood_thinners"),
    ),
    ContraindicationRule(
        treatment="Dermaplaning",
        absolute_red_flags=(
            "active_cystic_acne", "active_skin_infection", "blood_clotting_disorder",
        ),
        caution_flags=("active_acne", "recent_deep_peel", "eczema_psoriasis", "retinol_48h"),
    ),
    ContraindicationRule(
        treatment="PDO Threads",
        absolute_red_flags=_THREAD_RED_FLAGS,
        caution_flags=_THREAD_CAUTIONS,
    ),
    ContraindicationRule(
        treatment="Radiesse",
        absolute_red_flags=(
            "allergy_to_calcium_hydroxylapatite", "active_skin_infection",
            "keloid_history", "autoimmune_disease_active", "pregnancy",
        ),
        caution_flags=_BIOSTIMULATOR_CAUTIONS,
    ),
    ContraindicationRule(
        treatment="Exosome Therapy",
        absolute_red_flags=(
            "active_malignancy", "active_skin_infection", "immunosuppressed_severe",
        ),
        caution_flags=("autoimmune_disease", "pregnancy", "immunosuppressed"),
    ),
    ContraindicationRule(
        treatment="Baby Botox",
        absolute_red_flags=_NEUROTOXIN_RED_FLAGS,
        caution_flags=_NEUROTOXIN_CAUTIONS,
    ),
    ContraindicationRule(
        treatment="Lip Flip",
        absolute_red_flags=_NEUROTOXIN_RED_FLAGS,
        caution_flags=("cold_sores_history", "recent_facial_surgery", "blood_thinners"),
    ),
    ContraindicationRule(
        treatment="Kybella",
        absolute_red_flags=(
            "infection_treatment_area", "pregnancy",
            "difficulty_swallowing", "bleeding_disorder",
        ),
        caution_flags=("prior_neck_surgery", "blood_thinners", "enlarged_thyroid"),
    ),
    ContraindicationRule(
        treatment="Sculptra",
        absolute_red_flags=(
            "allergy_to_plla", "active_skin_infection",
            "keloid_history", "autoimmune_disease_active",
        ),
        caution_flags=_BIOSTIMULATOR_CAUTIONS,
    ),
    ContraindicationRule(
        treatment="Wrinkle Relaxers",
        absolute_red_flags=_NEUROTOXIN_RED_FLAGS,
        caution_flags=_NEUROTOXIN_CAUTIONS,
    ),
    ContraindicationRule(
        treatment="Botox",
        absolute_red_flags=_NEUROTOXIN_RED_FLAGS,
        caution_flags=_NEUROTOXIN_CAUTIONS,
    ),
    ContraindicationRule(
        treatment="Dermal Filler",
        absolute_red_flags=_FILLER_RED_FLAGS,
        caution_flags=_FILLER_CAUTIONS,
    ),
    ContraindicationRule(
        treatment="Lip Filler",
        absolute_red_flags=_FILLER_RED_FLAGS + ("active_herpes_outbreak",),
        caution_flags=("blood_thinners", "cold_sores_history", "recent_dental_work"),
    ),
    ContraindicationRule(
        treatment="Plasma BioFiller",
        absolute_red_flags=(
            "active_skin_infection", "pregnancy", "bleeding_disorder",
            "blood_clotting_disorder", "active_malignancy", "platelet_dysfunction",
        ),
        caution_flags=("blood_thinners", "nsaid_use_recent", "anemia", "autoimmune_disease"),
        requires_lab_work=True,
        lab_work_type=("CBC", "Platelet Count"),
    ),
    ContraindicationRule(
        treatment="Stellar IPL",
        absolute_red_flags=_IPL_RED_FLAGS,
        caution_flags=(
            "recent_tan", "accutane_6months", "melasma", "fitzpatrick_iv", "retinol_48h",
        ),
    ),
    ContraindicationRule(
        treatment="ResurFX",
        absolute_red_flags=(
            "pregnancy", "active_skin_infection", "accutane_6months",
            "keloid_history", "active_herpes_outbreak",
        ),
        caution_flags=(
            "recent_tan", "fitzpatrick_iv", "fitzpatrick_v_vi",
            "retinol_48h", "eczema_psoriasis",
        ),
    ),
    ContraindicationRule(
        treatment="RF Microneedling",
        absolute_red_flags=(
            "pacemaker", "internal_defibrillator", "active_skin_infection",
            "keloid_history", "blood_clotting_disorder", "accutane_6months", "pregnancy",
        ),
        caution_flags=(
            "blood_thinners", "active_acne", "eczema_psoriasis", "metal_implants_face",
        ),
    ),
    ContraindicationRule(
        treatment="Endolift",
        absolute_red_flags=(
            "pregnancy", "active_skin_infection", "bleeding_disorder",
            "autoimmune_disease_active", "pacemaker", "internal_defibrillator",
        ),
        caution_flags=(
            "blood_thinners", "recent_facial_surgery",
            "diabetes_uncontrolled", "immunosuppressed",
        ),
    ),
    ContraindicationRule(
        treatment="PDO Thread Lift",
        absolute_red_flags=_THREAD_RED_FLAGS,
        caution_flags=_THREAD_CAUTIONS,
    ),
    ContraindicationRule(
        treatment="DiamondGlow",
        absolute_red_flags=("active_skin_infection", "active_herpes_outbreak", "open_wounds"),
        caution_flags=(
            "retinol_48h", "recent_botox_fillers_14days", "sunburn",
            "rosacea_active", "eczema_psoriasis",
        ),
    ),
    ContraindicationRule(
        treatment="Facials",
        absolute_red_flags=("active_skin_infection", "active_herpes_outbreak", "open_wounds"),
        caution_flags=("retinol_48h", "recent_deep_peel", "sunburn", "rosacea_active"),
    ),
    ContraindicationRule(
        treatment="Chemical Peels",
        absolute_red_flags=(
            "pregnancy", "active_herpes_outbreak", "open_wounds", "accutane_12months",
        ),
        caution_flags=("retinol_48h", "recent_waxing", "eczema_psoriasis", "fitzpatrick_v_vi"),
    ),
    ContraindicationRule(
        treatment="Anti-Aging Treatments",
        absolute_red_flags=("pregnancy", "active_skin_infection"),
        caution_flags=("retinol_48h", "recent_tan", "autoimmune_disease"),
    ),
)

PEPTIDE_CONTRAINDICATIONS: Tuple[ContraindicationRule, ...] = (
    ContraindicationRule(
        treatment="BPC-157",
        absolute_red_flags=("active_malignancy", "tumor_history", "kidney_disease_stage3plus"),
        caution_flags=("diabetes_uncontrolled", "cardiovascular_disease", "autoimmune_flare"),
        requires_lab_work=True,
        lab_work_type=("CBC", "CMP"),
    ),
    ContraindicationRule(
        treatment="GHK-Cu",
        absolute_red_flags=("active_malignancy", "copper_sensitivity"),
        caution_flags=("wilson_disease", "liver_disease"),
    ),
    ContraindicationRule(
        treatment="Epithalon",
        absolute_red_flags=("active_malignancy", "tumor_history", "pregnancy"),
        caution_flags=("autoimmune_disease", "hormone_sensitive_conditions"),
        requires_lab_work=True,
        lab_work_type=("CBC", "CMP", "Thyroid Panel"),
    ),
    ContraindicationRule(
        treatment="TB-500",
        absolute_red_flags=("active_malignancy", "tumor_history", "pregnancy"),
        caution_flags=("cardiovascular_disease", "autoimmune_flare"),
        requires_lab_work=True,
        lab_work_type=("CBC", "CMP"),
    ),
    ContraindicationRule(
        treatment="Thymosin Alpha-1",
        absolute_red_flags=("organ_transplant_immunosuppressed", "active_malignancy"),
        caution_flags=("autoimmune_disease", "pregnancy"),
        requires_lab_work=True,
        lab_work_type=("CBC", "CMP", "Immune Panel"),
    ),
    ContraindicationRule(
        treatment="Ipamorelin",
        absolute_red_flags=("active_malignancy", "tumor_history", "diabetic_retinopathy"),
        caution_flags=("diabetes_uncontrolled", "cardiovascular_disease", "carpal_tunnel"),
        requires_lab_work=True,
        lab_work_type=("CBC", "CMP", "IGF-1", "HbA1c"),
    ),
)

IV_CONTRAINDICATIONS: Tuple[ContraindicationRule, ...] = (
    ContraindicationRule(
        treatment="Glow Drip",
        absolute_red_flags=("congestive_heart_failure", "kidney_failure_esrd", "sulfa_allergy"),
        caution_flags=("diabetes", "pregnancy", "kidney_disease"),
        requires_lab_work=True,
        lab_work_type=("CBC", "CMP"),
    ),
    ContraindicationRule(
        treatment="NAD+ Infusion",
        absolute_red_flags=("congestive_heart_failure", "kidney_failure_esrd"),
        caution_flags=("bipolar_disorder", "anxiety_disorder", "pregnancy"),
        requires_lab_work=True,
        lab_work_type=("CBC", "CMP"),
    ),
    ContraindicationRule(
        treatment="Myers Cocktail",
        absolute_red_flags=("congestive_heart_failure", "kidney_failure_esrd", "g6pd_deficiency"),
        caution_flags=("diabetes", "pregnancy", "magnesium_sensitivity"),
        requires_lab_work=True,
        lab_work_type=("CBC", "CMP"),
    ),
    ContraindicationRule(
        treatment="Glutathione Push",
        absolute_red_flags=("sulfa_allergy", "asthma_severe"),
        caution_flags=("pregnancy", "breastfeeding"),
    ),
    ContraindicationRule(
        treatment="Vitamin C Drip",
        absolute_red_flags=(
            "g6pd_deficiency", "kidney_failure_esrd",
            "hemochromatosis", "oxalate_kidney_stones",
        ),
        caution_flags=("kidney_disease", "diabetes", "pregnancy"),
        requires_lab_work=True,
        lab_work_type=("CBC", "CMP", "G6PD Screen"),
    ),
)

CONTRAINDICATION_MATRIX: Tuple[ContraindicationRule, ...] = (
    AESTHETIC_CONTRAINDICATIONS + PEPTIDE_CONTRAINDICATIONS + IV_CONTRAINDICATIONS
)


# =============================================================================
# Scheduling rules
# =============================================================================

_BIOSTIMULATOR_WAIT = "Wait 4 weeks after dermal filler before biostimulator in the same area."
_BIOSTIMULATOR_RF = "Do not combine biostimulators with same-day radiofrequency treatments."

TREATMENT_INTERACTIONS: Tuple[TreatmentInteractionRule, ...] = (
    TreatmentInteractionRule("Sculptra", ("Dermal Fillers", "Radiesse"), 28, _BIOSTIMULATOR_WAIT),
    TreatmentInteractionRule("Radiesse", ("Dermal Fillers", "Sculptra"), 28, _BIOSTIMULATOR_WAIT),
    TreatmentInteractionRule(
        "Dermaplaning", ("Chemical Peel",), 1,
        "Do not schedule dermaplaning on the same day as a deep chemical peel "
        "to avoid over-exfoliation."
    ),
    TreatmentInteractionRule("Sculptra", ("Morpheus8",), 0, _BIOSTIMULATOR_RF),
    TreatmentInteractionRule("Radiesse", ("Morpheus8",), 0, _BIOSTIMULATOR_RF),
)

TREATMENT_RECOMMENDATIONS: Tuple[PostCareRecommendation, ...] = (
    PostCareRecommendation(
        trigger_treatment="Morpheus8",
        recommend_treatment="Red Light Therapy",
        reason="LED/Red Light therapy post-microneedling reduces inflammation "
               "and accelerates healing.",
    ),
    PostCareRecommendation(
        trigger_treatment="Microneedling",
        recommend_treatment="Exosome Therapy",
        reason="Exosomes applied after microneedling can speed up recovery by up to 50%.",
    ),
    PostCareRecommendation(
        trigger_treatment="Microneedling",
        recommend_treatment="Red Light Therapy",
        reason="LED therapy post-procedure reduces redness and promotes faster healing.",
    ),
    PostCareRecommendation(
        trigger_treatment="Chemical Peel",
        recommend_treatment="Red Light Therapy",
        reason="Red light therapy accelerates skin recovery after chemical exfoliation.",
    ),
)


class ContraindicationChecker:
    """
    Screens treatments against reported patient conditions.

    Absolute red flags block a treatment, caution flags attach warnings,
    and lab-dependent treatments are conditional until results are on file.
    Treatments missing from the matrix are reported as clear.
    """

    IPL_BLOCKING_SKIN_TYPE = "fitzpatrick_v_vi"
    COLD_SORE_HISTORY = "cold_sores_history"

    def __init__(
        self,
        rules: Iterable[ContraindicationRule] = CONTRAINDICATION_MATRIX,
        interactions: Iterable[TreatmentInteractionRule] = TREATMENT_INTERACTIONS,
        recommendations: Iterable[PostCareRecommendation] = TREATMENT_RECOMMENDATIONS
    ):
        self._rules = {}
        for rule in rules:
            # First rule wins for duplicate names
            self._rules.setdefault(rule.treatment.lower(), rule)
        self._interactions = tuple(interactions)
        self._recommendations = tuple(recommendations)

    def find_rule(self, treatment: str) -> Optional[ContraindicationRule]:
        """Case-insensitive rule lookup."""
        return self._rules.get(treatment.lower())

    def check_treatment_safety(
        self,
        treatment: str,
        patient_conditions: Iterable[str],
        has_lab_work: bool = False
    ) -> SafetyStatus:
        """
        Screen one treatment.

        Args:
            treatment: Treatment name
            patient_conditions: Reported condition codes
            has_lab_work: Whether recent lab results are available

        Returns:
            SafetyStatus for the treatment
        """
        rule = self.find_rule(treatment)
        if rule is None:
            logger.debug("No contraindication rule", treatment=treatment)
            return SafetyStatus(treatment=treatment)

        conditions = set(patient_conditions)

        blocked_reasons = self._matching_labels(rule.absolute_red_flags, conditions)
        caution_reasons = self._matching_labels(rule.caution_flags, conditions)

        required_lab_tests = list(rule.lab_work_type) if rule.requires_lab_work else []
        is_conditional = rule.requires_lab_work and not has_lab_work

        conditional_message = None
        if is_conditional:
            conditional_message = (
                f"{treatment} recommendation is conditional pending review of "
                f"{', '.join(required_lab_tests)} lab results."
            )

        status = SafetyStatus(
            treatment=treatment,
            is_blocked=bool(blocked_reasons),
            blocked_reasons=blocked_reasons,
            has_cautions=bool(caution_reasons),
            caution_reasons=caution_reasons,
            requires_lab_work=rule.requires_lab_work,
            required_lab_tests=required_lab_tests,
            is_conditional=is_conditional,
            conditional_message=conditional_message,
            explainable_reason=self.explainable_reason(treatment, blocked_reasons) or None
        )

        logger.info(
            "Treatment screened",
            treatment=treatment,
            blocked=status.is_blocked,
            cautions=len(caution_reasons),
            conditional=is_conditional
        )

        return status

    def check_treatment_interaction(
        self,
        selected_treatment: str,
        existing_treatments: Iterable[str]
    ) -> InteractionCheckResult:
        """
        Check a treatment against treatments already on the plan.

        Rules for the selected treatment are tried in table order and the
        first incompatible booking found is reported. Names compare
        case-insensitively.
        """
        selected = selected_treatment.lower()
        existing = list(existing_treatments)

        for rule in self._interactions:
            if rule.treatment.lower() != selected:
                continue
            incompatible = {name.lower() for name in rule.incompatible_with}
            for booked in existing:
                if booked.lower() in incompatible:
                    logger.info(
                        "Treatment interaction",
                        treatment=selected_treatment,
                        conflicts_with=booked,
                        wait_period_days=rule.wait_period_days
                    )
                    return InteractionCheckResult(
                        has_conflict=True,
                        conflicting_treatment=booked,
                        wait_period_days=rule.wait_period_days,
                        conflict_message=rule.warning_message
                    )

        return InteractionCheckResult()

    def post_care_recommendations(self, treatment: str) -> List[PostCareRecommendation]:
        """Post-care follow-ups suggested after ``treatment``, in table order."""
        name = treatment.lower()
        return [
            rec for rec in self._recommendations
            if rec.is_post_care and rec.trigger_treatment.lower() == name
        ]

    def should_block_ipl_for_skin_type(self, patient_conditions: List[str]) -> bool:
        """IPL is unsafe for Fitzpatrick V/VI skin."""
        return self.IPL_BLOCKING_SKIN_TYPE in patient_conditions

    def requires_antiviral_for_lip_flip(self, patient_conditions: List[str]) -> bool:
        """A cold sore history calls for antiviral prophylaxis before a Lip Flip."""
        return self.COLD_SORE_HISTORY in patient_conditions

    @staticmethod
    def explainable_reason(treatment: str, blocked_reasons: List[str]) -> str:
        """Patient-facing explanation of why a treatment is blocked."""
        if not blocked_reasons:
            return ""
        reason_list = ", ".join(blocked_reasons)
        return (
            f"{treatment} is contraindicated due to your reported history of "
            f"{reason_list}, which increases the risk of adverse reactions."
        )

    @staticmethod
    def _matching_labels(flags: Iterable[str], conditions: set) -> List[str]:
        return [CONDITION_LABELS.get(flag, flag) for flag in flags if flag in conditions]


# Singleton instance
contraindication_checker = ContraindicationChecker()
