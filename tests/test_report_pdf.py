import re
import sys
from pathlib import Path

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from docai.report import DISCLAIMER, TITLE, build_pdf, export_blocks
from docai.types import Answer, Condition, Medicine, PatientInfo, QuestionItem
from docai.views import condition_markdown, medicine_markdown, top_condition_banner

PATIENT = PatientInfo(
    age="34", sex="Female", height="170", weight="60",
    allergies="Penicillin", past_medical_history="Asthma", current_medications="Salbutamol",
)
ITEMS = [
    QuestionItem("Do you have a fever? [YES/NO]", Answer(choice="yes", details="3 days")),
    QuestionItem("How many days?", Answer(choice="5")),
]
FLU = Condition(
    name="Influenza",
    likelihood="High",
    description="A viral infection of the respiratory tract.",
    treatments=["Rest", "Fluids"],
    medicines=[Medicine("Oseltamivir", "75 mg twice daily", ["Zanamivir", "Baloxavir"])],
)


def _pages(pdf: bytes) -> int:
    return len(re.findall(rb"/Type /Page\b", pdf))


def test_export_block_order():
    blocks = export_blocks(PATIENT, "fever and cough", ITEMS, [FLU])
    texts = [t for _, t in blocks]

    assert blocks[0] == ("title", TITLE)
    order = [
        texts.index("Patient Information:"),
        texts.index("Age: 34"),
        texts.index("Symptoms:"),
        texts.index("fever and cough"),
        texts.index("Do you have a fever?"),
        texts.index("Additional details: 3 days"),
        texts.index("How many days?"),
        texts.index("Answer: 5"),
        texts.index("Analysis:"),
        texts.index("1. Influenza (High)"),
        texts.index("Oseltamivir"),
        texts.index("Baloxavir"),
    ]
    assert order == sorted(order)
    assert blocks[-1] == ("disclaimer", DISCLAIMER)

    # only the first answer carries details
    assert sum(t.startswith("Additional details:") for t in texts) == 1
    second = texts.index("How many days?")
    assert not texts[second + 2].startswith("Additional details:")


def test_condition_block_contents():
    blocks = export_blocks(PATIENT, "fever and cough", ITEMS, [FLU])
    start = blocks.index(("condition", "1. Influenza (High)"))
    body = blocks[start:-1]
    assert [t for s, t in body if s == "bullet"] == ["Rest", "Fluids", "Oseltamivir"]
    assert ("detail", "Dosage: 75 mg twice daily") in body
    assert [t for s, t in body if s == "sub_bullet"] == ["Zanamivir", "Baloxavir"]


def test_conditions_are_numbered_and_likelihood_optional():
    blocks = export_blocks(PATIENT, "x", [], [FLU, Condition(name="Common cold")])
    headings = [t for s, t in blocks if s == "condition"]
    assert headings == ["1. Influenza (High)", "2. Common cold"]
    assert ("section", "Medical History Questions:") not in blocks


def test_no_conditions_no_analysis_section():
    blocks = export_blocks(PATIENT, "x", ITEMS, [])
    assert ("section", "Analysis:") not in blocks


def test_pdf_is_deterministic():
    a = build_pdf(PATIENT, "fever and cough", ITEMS, [FLU])
    b = build_pdf(PATIENT, "fever and cough", ITEMS, [FLU])
    assert a.startswith(b"%PDF")
    assert a == b


def test_long_reports_paginate():
    many = [
        Condition(name=f"Condition {i}", likelihood="Low", description="word " * 120,
                  treatments=["Rest"] * 5, medicines=[Medicine("Drug", "10 mg", ["Other"] * 3)])
        for i in range(12)
    ]
    pdf = build_pdf(PATIENT, "symptom " * 400, ITEMS, many)
    assert _pages(pdf) > 1
    assert _pages(build_pdf(PATIENT, "short", [], [])) == 1


def test_markup_characters_are_escaped():
    pdf = build_pdf(PATIENT, "pain <b>here</b> & there\nsecond line", ITEMS, [Condition(name="A & B <c>")])
    assert pdf.startswith(b"%PDF")


def test_letter_page_size():
    pdf = build_pdf(PATIENT, "x", [], [], page_size="letter")
    assert b"612 792" in pdf


def test_interactive_markdown_for_example_condition():
    md = condition_markdown(1, FLU)
    assert md.startswith("### 1. Influenza")
    assert "**Likelihood:** High" in md
    assert [line for line in md.splitlines() if line.startswith("- ")] == ["- Rest", "- Fluids"]

    card = medicine_markdown(FLU.medicines[0])
    assert "Dosage: 75 mg twice daily" in card
    assert [line for line in card.splitlines() if line.startswith("- ")] == ["- Zanamivir", "- Baloxavir"]


def test_interactive_markdown_omits_absent_parts():
    md = condition_markdown(2, Condition(name="Cold"))
    assert md == "### 2. Cold"
    assert medicine_markdown(Medicine(name="Paracetamol")) == "**Paracetamol**"


def test_top_condition_banner_escapes_model_text():
    text, level = top_condition_banner([Condition(name="<img src=x onerror=alert(1)>", likelihood="High")])
    assert "<img" not in text
    assert "&lt;img src=x onerror=alert(1)&gt;" in text
    assert level == "high"


def test_top_condition_banner_needs_a_likelihood():
    assert top_condition_banner([]) is None
    assert top_condition_banner([Condition(name="Cold")]) is None
    assert top_condition_banner([FLU]) == ("Most likely: Influenza (High)", "high")
