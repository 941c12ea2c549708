"""
Concrete screens

Each module declares the fields, defaults, rules and filters of one clinic
screen and wires the generic controllers together.
"""

from clinic_admin.screens.patients import PATIENT_FORM, patient_form, patient_list
from clinic_admin.screens.treatments import (
    TREATMENT_FORM,
    TreatmentEditor,
    deactivate_treatment,
    reactivate_treatment,
    treatment_list,
)
from clinic_admin.screens.profile import PASSWORD_FORM, PROFILE_FORM, ProfileEditor

__all__ = [
    "PATIENT_FORM",
    "patient_form",
    "patient_list",
    "TREATMENT_FORM",
    "TreatmentEditor",
    "treatment_list",
    "deactivate_treatment",
    "reactivate_treatment",
    "PROFILE_FORM",
    "PASSWORD_FORM",
    "ProfileEditor",
]
