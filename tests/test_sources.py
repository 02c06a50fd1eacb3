import sys
import threading
from pathlib import Path
from types import SimpleNamespace

import pytest

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import docai.llm as llm_mod
from docai.config import AnalysisSettings, LLMSettings, Settings
from docai.llm import (
    AnalysisError,
    AnalysisTimeout,
    GroqQuestionSource,
    GroqReportSource,
    QuestionGenerationError,
    build_sources,
)
from docai.types import AnalysisRequest, Answer, PatientInfo, QuestionItem

REQUEST = AnalysisRequest(
    symptoms="fever and cough",
    items=[QuestionItem("How many days?", Answer(choice="5"))],
    patient=PatientInfo(age="34", sex="Male"),
)


class FakeLLM:
    def __init__(self, content="ok", error=None, gate=None):
        self.content = content
        self.error = error
        self.gate = gate
        self.calls = []

    def invoke(self, messages):
        self.calls.append(messages)
        if self.gate is not None:
            self.gate.wait(5)
        if self.error:
            raise self.error
        return SimpleNamespace(content=self.content)


def fast(**overrides):
    values = {"poll_interval": 0.01, "max_polls": 50, "timeout": 5.0}
    values.update(overrides)
    return AnalysisSettings(**values)


def test_question_source_returns_content():
    fake = FakeLLM(content="1. Q one\n2. Q two")
    src = GroqQuestionSource(LLMSettings(), llm=fake)
    assert src.generate_questions("prompt text") == "1. Q one\n2. Q two"
    [messages] = fake.calls
    assert messages[0].content == "prompt text"


def test_question_source_wraps_failures():
    src = GroqQuestionSource(LLMSettings(), llm=FakeLLM(error=RuntimeError("503")))
    with pytest.raises(QuestionGenerationError) as exc:
        src.generate_questions("p")
    assert isinstance(exc.value.__cause__, RuntimeError)


def test_question_source_rejects_empty_response():
    src = GroqQuestionSource(LLMSettings(), llm=FakeLLM(content="  "))
    with pytest.raises(QuestionGenerationError):
        src.generate_questions("p")


def test_missing_credentials():
    with pytest.raises(QuestionGenerationError):
        GroqQuestionSource(LLMSettings()).generate_questions("p")
    with pytest.raises(AnalysisError):
        GroqReportSource(LLMSettings(), fast()).generate_report(REQUEST)


def test_report_source_returns_content():
    fake = FakeLLM(content="<report></report>")
    src = GroqReportSource(LLMSettings(), fast(), llm=fake)
    assert src.generate_report(REQUEST) == "<report></report>"
    prompt = fake.calls[0][0].content
    assert "fever and cough" in prompt
    assert "How many days?\nAnswer: 5" in prompt


def test_report_source_failure_is_not_a_timeout():
    src = GroqReportSource(LLMSettings(), fast(), llm=FakeLLM(error=ConnectionError("reset")))
    with pytest.raises(AnalysisError) as exc:
        src.generate_report(REQUEST)
    assert not isinstance(exc.value, AnalysisTimeout)


def test_report_source_times_out_after_max_polls():
    gate = threading.Event()
    src = GroqReportSource(LLMSettings(), fast(max_polls=3), llm=FakeLLM(gate=gate))
    try:
        with pytest.raises(AnalysisTimeout):
            src.generate_report(REQUEST)
    finally:
        gate.set()


def test_report_source_times_out_after_deadline():
    gate = threading.Event()
    src = GroqReportSource(LLMSettings(), fast(max_polls=10_000, timeout=0.05), llm=FakeLLM(gate=gate))
    try:
        with pytest.raises(AnalysisTimeout):
            src.generate_report(REQUEST)
    finally:
        gate.set()


def test_build_sources_without_key(monkeypatch):
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    monkeypatch.setattr(llm_mod, "load_dotenv", lambda: None)
    questions, reports = build_sources(Settings())
    assert questions.llm is None
    assert reports.llm is None
    assert reports.max_polls == 120
