from typing import List
from importlib import import_module

from docai.config import Settings
from docai.types import IntakeStep


def load_intake_steps(settings: Settings) -> List[IntakeStep]:
    steps = []
    for name in settings.steps:
        step = import_module(f"steps.{name}.{name}")
        steps.append(step)
    return steps
