"""
Collaborateur de soumission — reçoit les valeurs du formulaire, retourne succès/échec.

Le moteur ne connaît que le protocol SubmissionSink ; HttpSubmissionSink poste
vers l'API (requests, dans un thread), CallableSubmissionSink adapte une
fonction locale (tests, écriture directe en base).
"""
import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Union

import requests
from pydantic import Field

from ..config import LEADPAGES_SUBMIT_URL, SUBMIT_TIMEOUT
from ..core.schemas import CamelModel

log = logging.getLogger(__name__)

GENERIC_ERROR = "Something went wrong. Please try again."

# Clés remontées au premier niveau pour les pages non-appraisal
CONTACT_KEYS = ("email", "firstName", "lastName", "phone")


class SubmissionContext(CamelModel):
    """Métadonnées fournies par l'appelant (page source, UTM, referrer…)."""
    source_page_id:  Optional[str] = None
    tracking_params: Dict[str, str] = Field(default_factory=dict)


class SubmissionResult(CamelModel):
    success: bool
    id:      Optional[str] = None
    error:   Optional[str] = None


class SubmissionSink(Protocol):
    async def submit(self, payload: Dict[str, Any], context: SubmissionContext) -> SubmissionResult: ...


def build_submission_payload(values: Dict[str, Any], context: SubmissionContext,
                             page_type: str = "custom") -> Dict[str, Any]:
    """
    Corps JSON posté à l'API.
    appraisal : valeurs à plat. Autres types : champs contact au premier niveau,
    tout le reste sous formData.
    """
    tracking = dict(context.tracking_params)
    if page_type == "appraisal":
        payload = {**values, **tracking}
    else:
        payload = {key: values.get(key) for key in CONTACT_KEYS if values.get(key) not in (None, "")}
        payload.update({"pageType": page_type, "formData": dict(values), **tracking})
    if context.source_page_id:
        payload["landingPageId"] = context.source_page_id
    return payload


class HttpSubmissionSink:
    """POST JSON vers l'endpoint de soumission ; les erreurs deviennent success=False."""

    def __init__(self, endpoint: str = LEADPAGES_SUBMIT_URL, timeout: float = SUBMIT_TIMEOUT,
                 page_type: str = "custom", session: Optional[requests.Session] = None):
        self.endpoint  = endpoint
        self.timeout   = timeout
        self.page_type = page_type
        self.session   = session or requests.Session()

    def _post(self, body: Dict[str, Any]) -> SubmissionResult:
        try:
            r = self.session.post(self.endpoint, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            log.warning("Submission transport error: %s", e)
            return SubmissionResult(success=False, error=GENERIC_ERROR)

        try:
            data = r.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not r.ok or data.get("success") is False:
            log.warning("Submission rejected (%s): %s", r.status_code, data.get("error"))
            return SubmissionResult(success=False, error=data.get("error") or "Submission failed")

        sub_id = data.get("id") or (data.get("data") or {}).get("id")
        return SubmissionResult(success=True, id=str(sub_id) if sub_id is not None else None)

    async def submit(self, payload: Dict[str, Any], context: SubmissionContext) -> SubmissionResult:
        body = build_submission_payload(payload, context, self.page_type)
        return await asyncio.to_thread(self._post, body)


SinkFn = Callable[[Dict[str, Any], SubmissionContext], Union[SubmissionResult, Awaitable[SubmissionResult], dict]]


class CallableSubmissionSink:
    """Adapte une fonction (sync ou async) au protocol SubmissionSink."""

    def __init__(self, fn: SinkFn):
        self.fn = fn

    async def submit(self, payload: Dict[str, Any], context: SubmissionContext) -> SubmissionResult:
        result = self.fn(payload, context)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, dict):
            result = SubmissionResult.model_validate(result)
        return result
