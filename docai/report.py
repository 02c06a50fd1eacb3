import io
from typing import List, Tuple
from xml.sax.saxutils import escape

from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer

from docai.types import Condition, PatientInfo, QuestionItem

TITLE = "Symptom Analysis Report"
DISCLAIMER = "Disclaimer: Screening & education only; not medical advice."
PAGE_SIZES = {"A4": A4, "LETTER": LETTER}

Block = Tuple[str, str]


def _patient_lines(p: PatientInfo) -> List[str]:
    return [
        f"Age: {p.age}",
        f"Sex: {p.sex}",
        f"Height: {p.height}",
        f"Weight: {p.weight}",
        f"Allergies: {p.allergies}",
        f"Past Medical History: {p.past_medical_history}",
        f"Current Medications: {p.current_medications}",
    ]


def _condition_blocks(rank: int, c: Condition) -> List[Block]:
    heading = f"{rank}. {c.name}"
    if c.likelihood:
        heading += f" ({c.likelihood})"
    blocks: List[Block] = [("condition", heading)]
    if c.description:
        blocks.append(("body", c.description))
    if c.treatments:
        blocks.append(("label", "Treatments:"))
        blocks += [("bullet", t) for t in c.treatments]
    if c.medicines:
        blocks.append(("label", "Medicines:"))
        for m in c.medicines:
            blocks.append(("bullet", m.name))
            if m.dosage:
                blocks.append(("detail", f"Dosage: {m.dosage}"))
            if m.alternatives:
                blocks.append(("detail", "Alternatives:"))
                blocks += [("sub_bullet", a) for a in m.alternatives]
    return blocks


def export_blocks(
    patient: PatientInfo,
    symptoms: str,
    items: List[QuestionItem],
    conditions: List[Condition],
) -> List[Block]:
    """Linearize a session into (style, text) blocks in export order."""
    blocks: List[Block] = [("title", TITLE)]

    blocks.append(("section", "Patient Information:"))
    blocks += [("body", line) for line in _patient_lines(patient)]

    blocks.append(("section", "Symptoms:"))
    blocks.append(("body", symptoms))

    if items:
        blocks.append(("section", "Medical History Questions:"))
        for item in items:
            blocks.append(("label", item.prompt))
            blocks.append(("body", f"Answer: {item.answer.choice}"))
            if item.answer.details:
                blocks.append(("body", f"Additional details: {item.answer.details}"))

    if conditions:
        blocks.append(("section", "Analysis:"))
        for i, c in enumerate(conditions, start=1):
            blocks += _condition_blocks(i, c)

    blocks.append(("disclaimer", DISCLAIMER))
    return blocks


def _styles():
    base = getSampleStyleSheet()
    normal = base["Normal"]
    return {
        "title": ParagraphStyle("ReportTitle", parent=base["Title"], alignment=TA_CENTER),
        "section": base["Heading2"],
        "condition": base["Heading3"],
        "body": ParagraphStyle("Body", parent=normal, spaceAfter=2),
        "label": ParagraphStyle("Label", parent=normal, fontName="Helvetica-Bold", spaceBefore=4),
        "bullet": ParagraphStyle("Item", parent=normal, leftIndent=18, bulletIndent=8),
        "detail": ParagraphStyle("Detail", parent=normal, leftIndent=28),
        "sub_bullet": ParagraphStyle("SubItem", parent=normal, leftIndent=42, bulletIndent=32),
        "disclaimer": base["Italic"],
    }


def _markup(text: str) -> str:
    return escape(text).replace("\n", "<br/>")


def build_pdf(
    patient: PatientInfo,
    symptoms: str,
    items: List[QuestionItem],
    conditions: List[Condition],
    page_size: str = "A4",
) -> bytes:
    buf = io.BytesIO()
    # invariant=1 pins the creation date and document id so output is byte-stable
    doc = SimpleDocTemplate(
        buf,
        pagesize=PAGE_SIZES.get(page_size.upper(), A4),
        title=TITLE,
        invariant=1,
    )
    styles = _styles()
    story = []

    for style, text in export_blocks(patient, symptoms, items, conditions):
        if style in ("section", "disclaimer"):
            story.append(Spacer(1, 8))
        if style in ("bullet", "sub_bullet"):
            story.append(Paragraph(_markup(text), styles[style], bulletText="-"))
        else:
            story.append(Paragraph(_markup(text), styles[style]))

    doc.build(story)
    return buf.getvalue()
