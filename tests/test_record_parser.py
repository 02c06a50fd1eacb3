import sys
from pathlib import Path

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from docai.record_parser import extract_patient_fields


def test_strict_fields():
    text = (
        "Patient Name: Amina Yusuf\n"
        "Age: 34   Sex: F\n"
        "Height: 168 cm  Weight: 61.5 kg\n"
        "Allergies: Penicillin, peanuts\n"
        "Current Medications: Salbutamol inhaler\n"
    )
    assert extract_patient_fields(text) == {
        "age": "34",
        "sex": "Female",
        "height": "168",
        "weight": "61.5",
        "allergies": "Penicillin, peanuts",
        "current_medications": "Salbutamol inhaler",
    }


def test_loose_demographics():
    text = "AGE (years) 52\nGender Male\nHeight approx 175\nWeight approx 80"
    found = extract_patient_fields(text)
    assert found["age"] == "52"
    assert found["sex"] == "Male"
    assert found["height"] == "175"
    assert found["weight"] == "80"


def test_nothing_recognised():
    assert extract_patient_fields("") == {}
    assert extract_patient_fields("Lab results attached.") == {}
