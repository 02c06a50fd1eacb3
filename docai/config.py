import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

# Python 3.11 has tomllib; fall back to toml if needed
try:
    import tomllib  # type: ignore
except Exception:  # pragma: no cover
    import toml as tomllib  # type: ignore

logger = logging.getLogger(__name__)

CONFIG_PATH = "config.toml"
DEFAULT_STEPS = ("general", "physical", "history")


@dataclass
class LLMSettings:
    model: str = "llama-3.3-70b-versatile"
    question_temperature: float = 0.6
    question_max_tokens: int = 200
    report_temperature: float = 0.3


@dataclass
class QuestionSettings:
    count: int = 4
    translation_language: str = "Somali"


@dataclass
class AnalysisSettings:
    poll_interval: float = 1.0
    max_polls: int = 120
    timeout: float = 120.0


@dataclass
class ExportSettings:
    file_name: str = "symptom_analysis_report.pdf"
    page_size: str = "A4"


@dataclass
class Settings:
    steps: List[str] = field(default_factory=lambda: list(DEFAULT_STEPS))
    llm: LLMSettings = field(default_factory=LLMSettings)
    questions: QuestionSettings = field(default_factory=QuestionSettings)
    analysis: AnalysisSettings = field(default_factory=AnalysisSettings)
    export: ExportSettings = field(default_factory=ExportSettings)
    log_level: str = "INFO"


def _section(cls, raw: Dict[str, Any]):
    known = {k: v for k, v in raw.items() if k in cls.__dataclass_fields__}
    return cls(**known)


def _enabled_steps(cfg: Dict[str, Any]) -> List[str]:
    step_cfg = cfg.get("steps", {})
    ordered = sorted(((s, v.get("order", 999)) for s, v in step_cfg.items() if v.get("enabled", True)), key=lambda x: x[1])
    return [name for name, _ in ordered]


def settings_from_dict(cfg: Dict[str, Any]) -> Settings:
    s = Settings(
        llm=_section(LLMSettings, cfg.get("llm", {})),
        questions=_section(QuestionSettings, cfg.get("questions", {})),
        analysis=_section(AnalysisSettings, cfg.get("analysis", {})),
        export=_section(ExportSettings, cfg.get("export", {})),
        log_level=str(cfg.get("logging", {}).get("level", "INFO")).upper(),
    )
    # a present [steps] table is authoritative, even when it disables every step
    if "steps" in cfg:
        s.steps = _enabled_steps(cfg)
    return s


def load_settings(path: str = CONFIG_PATH) -> Settings:
    p = Path(path)
    if not p.exists():
        logger.warning(f"{path} not found, using default settings.")
        return Settings()
    cfg = tomllib.loads(p.read_text(encoding="utf-8"))
    return settings_from_dict(cfg)
