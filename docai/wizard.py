import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from docai.config import Settings
from docai.llm import AnalysisTimeout, CollaboratorError
from docai.prompts import build_question_prompt
from docai.report import build_pdf
from docai.report_parser import parse_report
from docai.types import (
    Answer,
    AnalysisRequest,
    Condition,
    IntakeStep,
    PatientInfo,
    QuestionItem,
    QuestionSource,
    ReportSource,
    SEX_OPTIONS,
)

logger = logging.getLogger(__name__)

QUESTIONS_ERROR = "There was an error generating questions. Please try again."
ANALYSIS_ERROR = "There was an error analyzing your symptoms. Please try again."
TIMEOUT_ERROR = "The analysis timed out. Please try again."


class StepKind(str, Enum):
    INTAKE = "intake"
    SYMPTOMS = "symptoms"
    QUESTION = "question"
    REVIEW = "review"
    ANALYSIS = "analysis"


class WizardStateError(RuntimeError):
    pass


@dataclass
class WizardState:
    cursor: int = 0
    patient: PatientInfo = field(default_factory=PatientInfo)
    symptoms: str = ""
    items: List[QuestionItem] = field(default_factory=list)
    report: str = ""
    is_generating_questions: bool = False
    is_analyzing: bool = False
    error_message: str = ""


class WizardController:
    def __init__(
        self,
        intake_steps: Sequence[IntakeStep],
        question_source: QuestionSource,
        report_source: ReportSource,
        settings: Optional[Settings] = None,
    ):
        self.intake_steps = list(intake_steps)
        self.question_source = question_source
        self.report_source = report_source
        self.settings = settings or Settings()
        self.state = WizardState()

    # ---------- step arithmetic ----------

    @property
    def intake_count(self) -> int:
        return len(self.intake_steps)

    @property
    def symptom_step(self) -> int:
        return self.intake_count

    @property
    def review_step(self) -> int:
        return self.intake_count + 1 + len(self.state.items)

    @property
    def analysis_step(self) -> int:
        return self.review_step + 1

    @property
    def total_steps(self) -> int:
        return self.intake_count + 1 + len(self.state.items) + 2

    def step_kind(self, step: Optional[int] = None) -> StepKind:
        s = self.state.cursor if step is None else step
        if not 0 <= s < self.total_steps:
            raise WizardStateError(f"step {s} outside [0, {self.total_steps})")
        if s < self.symptom_step:
            return StepKind.INTAKE
        if s == self.symptom_step:
            return StepKind.SYMPTOMS
        if s < self.review_step:
            return StepKind.QUESTION
        if s == self.review_step:
            return StepKind.REVIEW
        return StepKind.ANALYSIS

    def question_index(self, step: Optional[int] = None) -> Optional[int]:
        s = self.state.cursor if step is None else step
        if self.step_kind(s) != StepKind.QUESTION:
            return None
        return s - self.symptom_step - 1

    def current_intake_step(self) -> Optional[IntakeStep]:
        if self.step_kind() != StepKind.INTAKE:
            return None
        return self.intake_steps[self.state.cursor]

    def current_item(self) -> Optional[QuestionItem]:
        i = self.question_index()
        return None if i is None else self.state.items[i]

    def step_titles(self) -> List[str]:
        titles = [s.title for s in self.intake_steps]
        titles.append("Symptoms")
        titles += [f"Question {i + 1}" for i in range(len(self.state.items))]
        titles += ["Review", "Analysis"]
        return titles

    @property
    def busy(self) -> bool:
        return self.state.is_generating_questions or self.state.is_analyzing

    # ---------- gating ----------

    def can_advance(self) -> bool:
        if self.busy:
            return False
        kind = self.step_kind()
        if kind == StepKind.INTAKE:
            step = self.intake_steps[self.state.cursor]
            return all(str(getattr(self.state.patient, f)).strip() for f in step.fields)
        if kind == StepKind.SYMPTOMS:
            return bool(self.state.symptoms.strip())
        if kind == StepKind.QUESTION:
            return bool(self.current_item().answer.choice.strip())
        return kind == StepKind.REVIEW

    def can_retreat(self) -> bool:
        return self.state.cursor > 0 and not self.busy and self.step_kind() != StepKind.ANALYSIS

    # ---------- navigation ----------

    def advance(self) -> bool:
        if not self.can_advance():
            return False
        kind = self.step_kind()
        if kind == StepKind.SYMPTOMS:
            if not self.generate_questions():
                return False
            self.state.cursor += 1
            return True
        if kind == StepKind.REVIEW:
            return self.submit_for_analysis()
        self.state.cursor += 1
        return True

    def retreat(self) -> bool:
        if not self.can_retreat():
            return False
        self.state.cursor -= 1
        return True

    # ---------- edits ----------

    def _check_unlocked(self, what: str) -> None:
        if self.state.is_analyzing or self.state.report:
            raise WizardStateError(f"{what} is locked once analysis has begun")

    def update_patient(self, **values: str) -> None:
        self._check_unlocked("patient info")
        known = PatientInfo.field_names()
        for name, value in values.items():
            if name not in known:
                raise WizardStateError(f"unknown patient field: {name}")
            if name == "sex" and value and value not in SEX_OPTIONS:
                raise WizardStateError(f"sex must be one of {SEX_OPTIONS}")
            setattr(self.state.patient, name, value)

    def set_symptoms(self, text: str) -> None:
        self._check_unlocked("symptoms")
        self.state.symptoms = text

    def set_answer(self, index: int, answer: Answer) -> None:
        self._check_unlocked("answers")
        if not 0 <= index < len(self.state.items):
            raise IndexError(f"question index {index} out of range")
        item = self.state.items[index]
        choice = answer.choice
        if item.is_yes_no:
            choice = choice.strip().lower()
            if choice not in ("", "yes", "no"):
                raise WizardStateError("yes/no questions only accept 'yes' or 'no'")
        details = (answer.details or "").strip() if choice == "yes" else ""
        item.answer = Answer(choice=choice, details=details or None)

    def record_answer(self, index: int, answer: Answer) -> bool:
        """Store an answer and, when it belongs to the current step, move on."""
        self.set_answer(index, answer)
        if self.question_index() != index:
            return False
        return self.advance()

    # ---------- model calls ----------

    def generate_questions(self) -> bool:
        q = self.settings.questions
        prompt = build_question_prompt(self.state.symptoms, q.count, q.translation_language)
        self.state.is_generating_questions = True
        self.state.error_message = ""
        try:
            raw = self.question_source.generate_questions(prompt)
        except CollaboratorError as e:
            logger.error(f"Error generating questions: {e}")
            self.state.error_message = QUESTIONS_ERROR
            return False
        finally:
            self.state.is_generating_questions = False

        lines = [line.strip() for line in raw.split("\n") if line.strip()]
        self.state.items = [QuestionItem(text) for text in lines]
        logger.info(f"Generated {len(lines)} follow-up questions.")
        return True

    def analysis_request(self) -> AnalysisRequest:
        return AnalysisRequest(
            symptoms=self.state.symptoms,
            items=self.state.items,
            patient=self.state.patient,
        )

    def submit_for_analysis(self) -> bool:
        if self.step_kind() != StepKind.REVIEW:
            raise WizardStateError("analysis can only be submitted from the review step")
        self.state.is_analyzing = True
        self.state.error_message = ""
        try:
            request = self.analysis_request()
            logger.debug(f"Analysis request: {json.dumps(request.to_payload())}")
            report = self.report_source.generate_report(request)
        except AnalysisTimeout as e:
            logger.error(f"Analysis timed out: {e}")
            self.state.error_message = TIMEOUT_ERROR
            return False
        except CollaboratorError as e:
            logger.error(f"Error analyzing symptoms: {e}")
            self.state.error_message = ANALYSIS_ERROR
            return False
        finally:
            self.state.is_analyzing = False

        self.state.report = report
        self.state.cursor = self.analysis_step
        logger.info("Analysis report received.")
        return True

    # ---------- results ----------

    def conditions(self) -> List[Condition]:
        return parse_report(self.state.report)

    def export_pdf(self) -> bytes:
        s = self.state
        return build_pdf(
            s.patient, s.symptoms, s.items, self.conditions(),
            page_size=self.settings.export.page_size,
        )

    def reset(self) -> None:
        self.state = WizardState()
        logger.info("Wizard reset for a new patient.")
