from typing import List

from docai.report_parser import serialize_report
from docai.types import AnalysisRequest, Condition, Medicine, PatientInfo, YES_NO_MARKER

_FORMAT_EXAMPLE = [
    Condition(
        name="Condition Name",
        likelihood="High / Medium / Low",
        description="Brief description of the condition",
        treatments=["Treatment 1", "Treatment 2"],
        medicines=[
            Medicine(
                name="Medicine Name",
                dosage="Recommended dosage",
                alternatives=["Alternative 1", "Alternative 2"],
            )
        ],
    )
]

REPORT_INSTRUCTIONS = """
Based on this information, provide a professional report indicating:
1. Possible conditions, listed from most to least likely
2. For each condition, list possible treatments and medicine options with dosage and alternatives

Take the patient's allergies and current medications into account.
Return ONLY the report, formatted exactly as follows (repeat the condition block for each condition
and the medicine block for each medicine):
""".strip()


def build_question_prompt(symptoms: str, count: int = 4, translation_language: str = "") -> str:
    if translation_language:
        lang = f" in both English and {translation_language}"
        line = f"English question ({translation_language} translation) {YES_NO_MARKER} if applicable"
    else:
        lang = ""
        line = f"Question {YES_NO_MARKER} if applicable"
    fmt = "\n".join(f"{i}. {line}" for i in range(1, count + 1))
    return (
        f"Based on the following symptoms, generate {count} relevant follow-up questions{lang} "
        f"to gather more information. For yes/no questions, indicate {YES_NO_MARKER} at the end:\n\n"
        f"Symptoms: {symptoms}\n\n"
        f"Generate the questions in the following format, one per line:\n{fmt}"
    )


def _patient_block(p: PatientInfo) -> List[str]:
    return [
        f"Age: {p.age}",
        f"Sex: {p.sex}",
        f"Height: {p.height}",
        f"Weight: {p.weight}",
        f"Allergies: {p.allergies}",
        f"Past Medical History: {p.past_medical_history}",
        f"Current Medications: {p.current_medications}",
    ]


def build_report_prompt(request: AnalysisRequest) -> str:
    qa = []
    for question, answer in zip(request.questions, request.answers):
        entry = f"{question}\nAnswer: {answer.choice}"
        if answer.details:
            entry += f"\nAdditional details: {answer.details}"
        qa.append(entry)
    return (
        "Analyze the following patient information, symptoms and answers:\n"
        "Patient Information:\n" + "\n".join(_patient_block(request.patient)) + "\n\n"
        f"Symptoms: {request.symptoms}\n"
        "Questions and Answers:\n" + "\n\n".join(qa) + "\n\n"
        f"{REPORT_INSTRUCTIONS}\n{serialize_report(_FORMAT_EXAMPLE)}"
    )
