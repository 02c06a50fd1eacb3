import os
import time
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Optional, Tuple

from dotenv import load_dotenv
from langchain_core.messages import HumanMessage
from langchain_groq import ChatGroq

from docai.config import Settings, LLMSettings, AnalysisSettings
from docai.prompts import build_report_prompt
from docai.types import AnalysisRequest

logger = logging.getLogger(__name__)

API_KEY_ENV = "GROQ_API_KEY"


class CollaboratorError(Exception):
    """An external model call failed; the wizard stays where it is."""


class QuestionGenerationError(CollaboratorError):
    pass


class AnalysisError(CollaboratorError):
    pass


class AnalysisTimeout(AnalysisError):
    pass


def _content(response) -> str:
    content = getattr(response, "content", None)
    if not isinstance(content, str) or not content.strip():
        raise ValueError("No response from model")
    return content


class GroqQuestionSource:
    def __init__(self, settings: LLMSettings, api_key: Optional[str] = None, llm=None):
        self.llm = llm
        if self.llm is None and api_key:
            self.llm = ChatGroq(
                model=settings.model,
                temperature=settings.question_temperature,
                max_tokens=settings.question_max_tokens,
                api_key=api_key,
            )

    def generate_questions(self, prompt: str) -> str:
        if self.llm is None:
            raise QuestionGenerationError(f"{API_KEY_ENV} is not set")
        try:
            return _content(self.llm.invoke([HumanMessage(content=prompt)]))
        except Exception as e:
            logger.error(f"Question generation failed: {e}")
            raise QuestionGenerationError("Failed to generate questions") from e


class GroqReportSource:
    def __init__(
        self,
        settings: LLMSettings,
        analysis: AnalysisSettings,
        api_key: Optional[str] = None,
        llm=None,
    ):
        self.poll_interval = analysis.poll_interval
        self.max_polls = analysis.max_polls
        self.timeout = analysis.timeout
        self.llm = llm
        if self.llm is None and api_key:
            self.llm = ChatGroq(
                model=settings.model,
                temperature=settings.report_temperature,
                api_key=api_key,
            )

    def _run(self, prompt: str) -> str:
        return _content(self.llm.invoke([HumanMessage(content=prompt)]))

    def generate_report(self, request: AnalysisRequest) -> str:
        if self.llm is None:
            raise AnalysisError(f"{API_KEY_ENV} is not set")
        prompt = build_report_prompt(request)

        pool = ThreadPoolExecutor(max_workers=1)
        try:
            job = pool.submit(self._run, prompt)
            deadline = time.monotonic() + self.timeout
            polls = 0
            while polls < self.max_polls and time.monotonic() < deadline:
                polls += 1
                wait([job], timeout=min(self.poll_interval, max(0.0, deadline - time.monotonic())))
                if not job.done():
                    continue
                try:
                    return job.result()
                except Exception as e:
                    logger.error(f"Report generation failed: {e}")
                    raise AnalysisError("Failed to analyze symptoms") from e
            logger.warning(f"Report generation still pending after {polls} polls; giving up.")
            raise AnalysisTimeout(f"Analysis timed out after {polls} polls")
        finally:
            # the in-flight call is left to finish on its own
            pool.shutdown(wait=False)


def build_sources(settings: Settings) -> Tuple[GroqQuestionSource, GroqReportSource]:
    load_dotenv()
    api_key = os.getenv(API_KEY_ENV)
    if not api_key:
        logger.warning(f"{API_KEY_ENV} is not set; model calls will fail until it is.")
    return (
        GroqQuestionSource(settings.llm, api_key=api_key),
        GroqReportSource(settings.llm, settings.analysis, api_key=api_key),
    )
