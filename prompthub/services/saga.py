"""
Minimal saga runner for multi-step writes without a transaction.

Each step is a forward action paired with an optional compensation. Steps run
in order and share a context dict; the return value of each forward action is
stored in the context under the step name. When a step raises, the
compensations of the steps that already completed run in reverse order and
the original exception is re-raised. A failing compensation is logged and
never replaces the original error.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class SagaStep:
    name: str
    action: Callable[[Dict[str, Any]], Any]
    compensation: Optional[Callable[[Dict[str, Any]], None]] = None


class Saga:
    def __init__(self, name: str):
        self.name = name
        self.steps: List[SagaStep] = []

    def step(self, name, action, compensation=None) -> "Saga":
        self.steps.append(SagaStep(name, action, compensation))
        return self

    def run(self, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        context = {} if context is None else context
        completed: List[SagaStep] = []

        for step in self.steps:
            try:
                context[step.name] = step.action(context)
            except Exception as exc:
                logger.error("Saga %s failed at step %s: %s", self.name, step.name, exc)
                self._compensate(completed, context)
                raise
            completed.append(step)
            logger.debug("Saga %s completed step %s", self.name, step.name)

        return context

    def _compensate(self, completed, context):
        for step in reversed(completed):
            if step.compensation is None:
                continue
            try:
                step.compensation(context)
                logger.info("Saga %s compensated step %s", self.name, step.name)
            except Exception:
                logger.exception("Saga %s could not compensate step %s", self.name, step.name)
