from dataclasses import replace
from docai.types import PatientInfo
from docai.utils import text_field

id = "history"
title = "Medical History"
fields = ("allergies", "past_medical_history", "current_medications")


def inputs(info: PatientInfo) -> PatientInfo:
    allergies = text_field("Allergies", "allergies", info.allergies, area=True)
    history = text_field("Past Medical History", "past_medical_history", info.past_medical_history, area=True)
    meds = text_field("Current Medications", "current_medications", info.current_medications, area=True)
    return replace(info, allergies=allergies, past_medical_history=history, current_medications=meds)
