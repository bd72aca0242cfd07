"""
Moteur de formulaire multi-étapes — machine à états.

    Step(1) ─next/prev/go_to─▶ Step(n) ─submit─▶ SUBMITTING ─ok─▶ SUBMITTED (terminal)
                                  ▲                   │
                                  └──── SUBMIT_ERROR ◀┘ (valeurs conservées, retry)

Les valeurs sont indexées par fieldName dans un FieldStore détenu par le moteur.
Une session = un moteur ; rien n'est partagé entre sessions.
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from pydantic import BaseModel, Field

from ..blocks import BlockRegistry, block_registry
from ..config import AUTO_ADVANCE_DELAY, SUBMIT_TIMEOUT
from ..core.document import ConfigIssue, duplicate_field_names, field_blocks
from ..core.schemas import BlockConfig, FormFlow, FormStep
from ..errors import ConfigurationError
from .analytics import AnalyticsTracker
from .submission import GENERIC_ERROR, SubmissionContext, SubmissionResult, SubmissionSink

log = logging.getLogger(__name__)


class FlowState(str, Enum):
    STEP         = "step"
    SUBMITTING   = "submitting"
    SUBMITTED    = "submitted"
    SUBMIT_ERROR = "submit_error"


class StepResult(BaseModel):
    ok:       bool
    step:     int
    advanced: bool = False
    errors:   Dict[str, str] = Field(default_factory=dict)


class SubmitResult(BaseModel):
    ok:            bool
    state:         FlowState
    errors:        Dict[str, str] = Field(default_factory=dict)
    submission_id: Optional[str] = None
    error:         Optional[str] = None
    ignored:       bool = False


class FieldStore:
    """Valeurs du formulaire, clé = fieldName."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = dict(initial or {})

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self._values[name] = value

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)


# ── Validation sans état ────────────────────────────────────────────────────

def _validate_blocks(blocks: Iterable[BlockConfig], values, registry: BlockRegistry) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for block in field_blocks(blocks, registry):
        name = registry.field_name_of(block)
        message = registry.validate_value(block, values.get(name))
        if message:
            errors[name] = message
    return errors


def validate_values(flow: FormFlow, values: Dict[str, Any],
                    registry: Optional[BlockRegistry] = None) -> Dict[str, str]:
    """Validation du formulaire complet (utilisée côté serveur à la réception)."""
    registry = registry or block_registry
    errors: Dict[str, str] = {}
    for step in flow.steps:
        errors.update(_validate_blocks(step.blocks, values, registry))
    return errors


def check_flow(flow: FormFlow, registry: Optional[BlockRegistry] = None) -> List[ConfigIssue]:
    """Problèmes qui empêchent un moteur de piloter ce formulaire."""
    registry = registry or block_registry
    issues = []
    if not flow.steps:
        issues.append(ConfigIssue(code="no_steps", message="Form flow has no steps"))
    for name in duplicate_field_names(flow, registry):
        issues.append(ConfigIssue(code="duplicate_field",
                                  message=f"Field name {name!r} is declared by more than one block"))
    return issues


# ── Moteur ──────────────────────────────────────────────────────────────────

class FormFlowEngine:
    def __init__(
        self,
        flow: FormFlow,
        *,
        registry: Optional[BlockRegistry] = None,
        sink: Optional[SubmissionSink] = None,
        analytics: Optional[AnalyticsTracker] = None,
        auto_advance_delay: float = AUTO_ADVANCE_DELAY,
        submit_timeout: float = SUBMIT_TIMEOUT,
        initial_values: Optional[Dict[str, Any]] = None,
    ):
        self.registry = registry or block_registry
        issues = check_flow(flow, self.registry)
        if issues:
            raise ConfigurationError("; ".join(i.message for i in issues), issues)

        self.flow               = flow
        self.sink               = sink
        self.analytics          = analytics
        self.auto_advance_delay = auto_advance_delay
        self.submit_timeout     = submit_timeout

        self.values                        = FieldStore(initial_values)
        self.errors: Dict[str, str]        = {}
        self.state                         = FlowState.STEP
        self.submit_error: Optional[str]   = None
        self.submission_id: Optional[str]  = None

        self._step = 1
        self._closed = False
        self._started = False
        self._pending: Optional[asyncio.Task] = None
        # fieldName → (n° d'étape, bloc)
        self._fields: Dict[str, Tuple[int, BlockConfig]] = {
            self.registry.field_name_of(b): (n, b)
            for n, step in enumerate(flow.steps, start=1)
            for b in field_blocks(step.blocks, self.registry)
        }

    # ── Lecture ─────────────────────────────────────────────────────────────

    @property
    def current_step(self) -> int:
        return self._step

    @property
    def total_steps(self) -> int:
        return len(self.flow.steps)

    @property
    def current_step_config(self) -> FormStep:
        return self.flow.steps[self._step - 1]

    @property
    def is_first_step(self) -> bool:
        return self._step == 1

    @property
    def is_last_step(self) -> bool:
        return self._step == self.total_steps

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def field_names(self) -> List[str]:
        return list(self._fields)

    def step_of(self, field_name: str) -> Optional[int]:
        entry = self._fields.get(field_name)
        return entry[0] if entry else None

    # Form handle lu par les blocs en mode live
    def value_of(self, field_name: str) -> Any:
        return self.values.get(field_name)

    def error_for(self, field_name: str) -> Optional[str]:
        return self.errors.get(field_name)

    def _locked(self) -> bool:
        return self._closed or self.state in (FlowState.SUBMITTING, FlowState.SUBMITTED)

    def _move_to(self, step: int) -> None:
        self._step = step
        if self.state == FlowState.SUBMIT_ERROR:
            self.state = FlowState.STEP
            self.submit_error = None

    # ── Valeurs ─────────────────────────────────────────────────────────────

    def set_value(self, field_name: str, value: Any) -> bool:
        """Enregistre une valeur et efface l'erreur du champ. Ignoré pendant/après soumission."""
        if self._locked():
            return False
        self.values.set(field_name, value)
        self.errors.pop(field_name, None)
        if not self._started:
            self._started = True
            if self.analytics:
                self.analytics.form_start()
        return True

    def on_field_committed(self, field_name: str, value: Any) -> Optional[asyncio.Task]:
        """
        Valeur validée par un champ (carte sélectionnée, adresse choisie…).
        Si le bloc demande l'auto-avance, next_step() est planifié après le délai
        de feedback ; la tâche est retournée pour pouvoir être attendue.
        """
        if not self.set_value(field_name, value):
            return None
        entry = self._fields.get(field_name)
        if entry is None:
            return None
        step, block = entry
        if step != self._step or not self.registry.auto_advance_of(block):
            return None

        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Pas de boucle : pas de délai à respecter, on avance tout de suite
            self.next_step()
            return None
        self._pending = loop.create_task(self._auto_advance(step))
        return self._pending

    async def _auto_advance(self, step: int) -> Optional[StepResult]:
        await asyncio.sleep(self.auto_advance_delay)
        if self._locked() or self._step != step:
            return None
        return self.next_step()

    # ── Validation ──────────────────────────────────────────────────────────

    def validate_step(self, n: Optional[int] = None) -> Dict[str, str]:
        """Erreurs des champs de l'étape n (courante par défaut)."""
        if n is None:
            n = self._step
        if not 1 <= n <= self.total_steps:
            return {}
        return _validate_blocks(self.flow.steps[n - 1].blocks, self.values, self.registry)

    def validate_all(self) -> Dict[str, str]:
        return validate_values(self.flow, self.values, self.registry)

    # ── Navigation ──────────────────────────────────────────────────────────

    def next_step(self) -> StepResult:
        """Valide l'étape courante seule ; avance si elle est valide et n'est pas la dernière."""
        if self._locked():
            return StepResult(ok=False, step=self._step)

        step = self._step
        step_fields = {self.registry.field_name_of(b) for b in field_blocks(self.current_step_config.blocks, self.registry)}
        for name in step_fields:
            self.errors.pop(name, None)
        errors = self.validate_step(step)
        if errors:
            self.errors.update(errors)
            return StepResult(ok=False, step=step, errors=errors)

        if self.analytics:
            self.analytics.step_completed(step, {n: self.values.get(n) for n in step_fields if n in self.values})

        if self.is_last_step:
            return StepResult(ok=True, step=step)
        self._move_to(step + 1)
        return StepResult(ok=True, step=self._step, advanced=True)

    def prev_step(self) -> bool:
        if self._locked() or self.is_first_step:
            return False
        self._move_to(self._step - 1)
        return True

    def go_to_step(self, k: int) -> bool:
        if self._locked() or not 1 <= k <= self.total_steps:
            return False
        self._move_to(k)
        return True

    # ── Soumission ──────────────────────────────────────────────────────────

    async def submit_form(self, context: Optional[SubmissionContext] = None) -> SubmitResult:
        """
        Valide tout le formulaire puis transmet les valeurs au sink.
        Ignoré pendant une soumission en cours, après succès, ou après close().
        """
        if self._locked():
            return SubmitResult(ok=False, state=self.state, ignored=True)

        self.state = FlowState.SUBMITTING
        self.submit_error = None

        errors = self.validate_all()
        if errors:
            self.errors = errors
            self.state = FlowState.STEP
            return SubmitResult(ok=False, state=self.state, errors=errors)

        if self.sink is None:
            log.error("No submission sink configured for this form")
            return self._fail(GENERIC_ERROR)

        payload = self.values.as_dict()
        try:
            result = await asyncio.wait_for(
                self.sink.submit(payload, context or SubmissionContext()),
                timeout=self.submit_timeout,
            )
        except asyncio.TimeoutError:
            log.warning("Submission timed out after %ss", self.submit_timeout)
            result = SubmissionResult(success=False, error="Submission timed out. Please try again.")
        except asyncio.CancelledError:
            if not self._closed:
                self._fail(GENERIC_ERROR)
            raise
        except Exception as e:
            log.warning("Submission failed: %s", e)
            result = SubmissionResult(success=False, error=GENERIC_ERROR)

        if self._closed:
            log.info("Submission result arrived after close, ignored")
            return SubmitResult(ok=result.success, state=self.state, submission_id=result.id, ignored=True)

        if not result.success:
            return self._fail(result.error or GENERIC_ERROR)

        self.state = FlowState.SUBMITTED
        self.submission_id = result.id
        self.errors = {}
        log.info("Form submitted (id=%s)", result.id)
        if self.analytics:
            self.analytics.form_submitted({"submissionId": result.id} if result.id else None)
        return SubmitResult(ok=True, state=self.state, submission_id=result.id)

    def _fail(self, message: str) -> SubmitResult:
        self.state = FlowState.SUBMIT_ERROR
        self.submit_error = message
        return SubmitResult(ok=False, state=self.state, error=message)

    def close(self) -> None:
        """Le consommateur n'attend plus rien : résultats tardifs ignorés, auto-avance annulée."""
        self._closed = True
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
