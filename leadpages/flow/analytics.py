"""
Suivi analytics du tunnel — fire-and-forget.

Un échec d'envoi est loggé en WARNING puis ignoré : il ne doit jamais
remonter jusqu'au parcours utilisateur.
"""
import asyncio
import logging
import uuid
from typing import Any, Dict, List, Optional, Protocol, Set

import requests

from ..config import ANALYTICS_TIMEOUT, LEADPAGES_ANALYTICS_URL

log = logging.getLogger(__name__)

EVENT_TYPES = ("page_view", "form_start", "step_complete", "form_submit", "cta_click")


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class AnalyticsSink(Protocol):
    def send(self, event: Dict[str, Any]) -> None: ...


class HttpAnalyticsSink:
    """POST de l'événement vers l'API de tracking (timeout court)."""

    def __init__(self, endpoint: str = LEADPAGES_ANALYTICS_URL, timeout: float = ANALYTICS_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.endpoint = endpoint
        self.timeout  = timeout
        self.session  = session or requests.Session()

    def send(self, event: Dict[str, Any]) -> None:
        r = self.session.post(self.endpoint, json=event, timeout=self.timeout)
        r.raise_for_status()


class MemoryAnalyticsSink:
    """Conserve les événements en mémoire (tests, prévisualisation admin)."""

    def __init__(self):
        self.events: List[Dict[str, Any]] = []

    def send(self, event: Dict[str, Any]) -> None:
        self.events.append(event)


class AnalyticsTracker:
    """
    Tracker d'une session : un événement par (type, étape) au plus.
    Une clé n'est marquée envoyée qu'après un envoi réussi (un échec peut être rejoué).

    Dans une boucle asyncio, l'envoi part dans l'executor par défaut et
    track() rend la main tout de suite ; la clé est réservée pendant l'envoi
    puis libérée s'il échoue. background=False force l'envoi synchrone
    (sink lié à une session SQLAlchemy non partageable entre threads).
    """

    def __init__(self, sink: Optional[AnalyticsSink], landing_page_id: Optional[str] = None,
                 session_id: Optional[str] = None, background: bool = True):
        self.sink            = sink
        self.landing_page_id = landing_page_id
        self.session_id      = session_id or str(uuid.uuid4())
        self.background      = background
        self._sent: Set[str] = set()
        self._inflight: Set[asyncio.Future] = set()

    def track(self, event_type: str, step_number: Optional[int] = None,
              event_data: Optional[Dict[str, Any]] = None) -> bool:
        """
        Envoie (ou met en file) l'événement. False s'il est dédoublonné,
        ou si l'envoi synchrone a échoué.
        """
        if event_type not in EVENT_TYPES:
            log.warning("Unknown analytics event type %r dropped", event_type)
            return False
        key = f"{event_type}-{step_number if step_number is not None else 'na'}"
        if key in self._sent or self.sink is None:
            return False

        event: Dict[str, Any] = {"sessionId": self.session_id, "eventType": event_type}
        if self.landing_page_id:
            event["landingPageId"] = self.landing_page_id
        if step_number is not None:
            event["stepNumber"] = step_number
        if event_data:
            event["eventData"] = event_data

        loop = _running_loop() if self.background else None
        if loop is None:
            return self._send(key, event)

        self._sent.add(key)
        future = loop.run_in_executor(None, self._send_background, key, event)
        self._inflight.add(future)
        future.add_done_callback(self._inflight.discard)
        return True

    def _send(self, key: str, event: Dict[str, Any]) -> bool:
        try:
            self.sink.send(event)
        except Exception as e:
            log.warning("Analytics tracking failed (%s): %s", event["eventType"], e)
            return False
        self._sent.add(key)
        return True

    def _send_background(self, key: str, event: Dict[str, Any]) -> None:
        if not self._send(key, event):
            self._sent.discard(key)

    async def drain(self) -> None:
        """Attend la fin des envois en cours."""
        if self._inflight:
            await asyncio.gather(*list(self._inflight))

    # ── Raccourcis ──────────────────────────────────────────────────────────

    def page_view(self) -> bool:
        return self.track("page_view")

    def form_start(self) -> bool:
        return self.track("form_start")

    def step_completed(self, step_number: int, data: Optional[Dict[str, Any]] = None) -> bool:
        return self.track("step_complete", step_number, data)

    def form_submitted(self, data: Optional[Dict[str, Any]] = None) -> bool:
        return self.track("form_submit", None, data)

    def cta_clicked(self, cta_id: str, text: Optional[str] = None) -> bool:
        return self.track("cta_click", None, {"ctaId": cta_id, "ctaText": text})
