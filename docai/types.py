from dataclasses import dataclass, field, fields
from typing import Protocol, List, Dict, Any, Optional, Tuple

YES_NO_MARKER = "[YES/NO]"
SEX_OPTIONS: Tuple[str, ...] = ("Male", "Female")


@dataclass
class PatientInfo:
    age: str = ""
    sex: str = ""  # "Male"/"Female"
    height: str = ""
    weight: str = ""
    allergies: str = ""
    past_medical_history: str = ""
    current_medications: str = ""

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    def to_payload(self) -> Dict[str, str]:
        return {
            "age": self.age,
            "sex": self.sex,
            "height": self.height,
            "weight": self.weight,
            "allergies": self.allergies,
            "pastMedicalHistory": self.past_medical_history,
            "currentMedications": self.current_medications,
        }


@dataclass
class Answer:
    choice: str = ""
    details: Optional[str] = None  # only kept when choice == "yes"


@dataclass
class QuestionItem:
    text: str
    answer: Answer = field(default_factory=Answer)

    @property
    def is_yes_no(self) -> bool:
        return YES_NO_MARKER.lower() in self.text.lower()

    @property
    def prompt(self) -> str:
        i = self.text.lower().find(YES_NO_MARKER.lower())
        if i < 0:
            return self.text.strip()
        return (self.text[:i] + self.text[i + len(YES_NO_MARKER):]).strip()


@dataclass
class Medicine:
    name: str = ""
    dosage: str = ""
    alternatives: List[str] = field(default_factory=list)


@dataclass
class Condition:
    name: str = ""
    likelihood: str = ""
    description: str = ""
    treatments: List[str] = field(default_factory=list)
    medicines: List[Medicine] = field(default_factory=list)


@dataclass
class AnalysisRequest:
    symptoms: str
    items: List[QuestionItem]
    patient: PatientInfo

    @property
    def questions(self) -> List[str]:
        return [q.text for q in self.items]

    @property
    def answers(self) -> List[Answer]:
        return [q.answer for q in self.items]

    def to_payload(self) -> Dict[str, Any]:
        answers = []
        for a in self.answers:
            entry: Dict[str, Any] = {"choice": a.choice}
            if a.details:
                entry["details"] = a.details
            answers.append(entry)
        return {
            "symptoms": self.symptoms,
            "questions": self.questions,
            "answers": answers,
            "patientInfo": self.patient.to_payload(),
        }


class IntakeStep(Protocol):
    id: str
    title: str
    fields: Tuple[str, ...]
    def inputs(self, info: PatientInfo) -> PatientInfo: ...


class QuestionSource(Protocol):
    def generate_questions(self, prompt: str) -> str: ...


class ReportSource(Protocol):
    def generate_report(self, request: AnalysisRequest) -> str: ...
