# client/session.py
"""
Analysis session state machine.

The session holds exactly one state value:

    Idle ──select image──▶ Preview ──analyze──▶ Analyzing ──report──▶ Complete
                              ▲                     │
                              └──────failure────────┘
    Preview / Complete ──reset──▶ Idle

A failed analysis returns to Preview with the classified error and an
incremented retry counter. Retries are refused once the counter reaches
MAX_RETRIES. The in-flight request is aborted after the session timeout.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Union

from diagnosis.models import DiagnosisReport

from .api import ApiRequestError, HealPetClient
from .entitlements import EntitlementStore
from .errors import TIMEOUT_ERROR, ErrorInfo, classify_error
from .intake import EncodedImage, IntakeError, encode_image, load_image

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
ANALYSIS_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True)
class Idle:
    """Nothing selected. ``error`` holds a rejected selection, if any."""
    error: Optional[ErrorInfo] = None


@dataclass(frozen=True)
class Preview:
    image: EncodedImage
    symptoms: str = ""
    error: Optional[ErrorInfo] = None
    retry_count: int = 0


@dataclass(frozen=True)
class Analyzing:
    image: EncodedImage
    symptoms: str
    retry_count: int


@dataclass(frozen=True)
class Complete:
    report: DiagnosisReport
    symptoms: str = ""
    image: Optional[EncodedImage] = None
    image_url: Optional[str] = None


AnalysisState = Union[Idle, Preview, Analyzing, Complete]


class InvalidTransitionError(Exception):
    """Action is not allowed in the current state."""

    def __init__(self, action: str, state: AnalysisState):
        super().__init__(f"Cannot {action} while {type(state).__name__.lower()}")
        self.action = action
        self.state = state


class UpgradeRequiredError(Exception):
    """Free trial used up and no subscription; no request was sent."""

    def __init__(self, free_trial_used: int):
        super().__init__("Free trial used. Upgrade to Pro for unlimited diagnoses.")
        self.free_trial_used = free_trial_used


class AnalysisSession:
    """
    Drives one pet photo through intake, analysis and result display.

    Args:
        client: API client used for the analysis call
        entitlements: Optional client-local entitlement store; when given,
            analyses are gated on it and successful ones are counted
        user_id: Current user, or None for anonymous use
        timeout: Seconds before an in-flight analysis is aborted
        max_retries: Retries allowed per analysis attempt
    """

    def __init__(
        self,
        client: HealPetClient,
        entitlements: Optional[EntitlementStore] = None,
        user_id: Optional[str] = None,
        timeout: float = ANALYSIS_TIMEOUT_SECONDS,
        max_retries: int = MAX_RETRIES,
    ):
        self._client = client
        self._entitlements = entitlements
        self.user_id = user_id
        self.timeout = timeout
        self.max_retries = max_retries
        self._state: AnalysisState = Idle()

    @property
    def state(self) -> AnalysisState:
        return self._state

    @property
    def retries_left(self) -> int:
        if isinstance(self._state, Preview):
            return max(0, self.max_retries - self._state.retry_count)
        return 0

    @property
    def can_retry(self) -> bool:
        return isinstance(self._state, Preview) and self._state.error is not None and self.retries_left > 0

    # -- intake ---------------------------------------------------------------

    def select_image(self, data: bytes, mime_type: str, file_name: str) -> AnalysisState:
        """Idle/Preview → Preview with a new image. Rejections keep the state and record the error."""
        self._require("select image", Idle, Preview)
        try:
            image = encode_image(data, mime_type, file_name)
        except IntakeError as e:
            return self._reject_image(e.info)
        return self._set(Preview(image=image, symptoms=self._current_symptoms()))

    async def load_image(self, path: Union[str, Path], mime_type: Optional[str] = None) -> AnalysisState:
        """Like select_image, reading the file from disk."""
        self._require("load image", Idle, Preview)
        try:
            image = await load_image(path, mime_type)
        except IntakeError as e:
            return self._reject_image(e.info)
        return self._set(Preview(image=image, symptoms=self._current_symptoms()))

    def set_symptoms(self, symptoms: str) -> AnalysisState:
        state = self._require("edit symptoms", Preview)
        return self._set(replace(state, symptoms=symptoms))

    # -- analysis -------------------------------------------------------------

    async def analyze(self, retry: bool = False) -> AnalysisState:
        """
        Preview → Analyzing → Complete, or back to Preview on failure.

        Calls are not queued: a second call while one is in flight finds
        the session in Analyzing and is rejected, so it never overwrites
        the first result.

        Raises:
            InvalidTransitionError: If not in Preview
            UpgradeRequiredError: If entitlements block the analysis
        """
        state = self._require("analyze", Preview)
        self._check_entitlement()

        retry_count = state.retry_count if retry else 0
        analyzing = Analyzing(image=state.image, symptoms=state.symptoms, retry_count=retry_count)
        self._set(analyzing)

        try:
            report = await asyncio.wait_for(
                self._client.analyze(analyzing.image, analyzing.symptoms, self.user_id),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Analysis aborted after {self.timeout}s")
            return self._fail(analyzing, TIMEOUT_ERROR)
        except ApiRequestError as e:
            logger.warning(f"Analysis failed: {e.message}")
            return self._fail(analyzing, classify_error(e.message, e.kind))
        except Exception as e:
            logger.exception("Unexpected analysis failure")
            return self._fail(analyzing, classify_error(str(e)))

        if self._entitlements is not None:
            self._entitlements.record_analysis(self.user_id)

        return self._set(Complete(report=report, symptoms=analyzing.symptoms, image=analyzing.image))

    async def retry(self) -> AnalysisState:
        """Re-run a failed analysis. No-op once the retry budget is spent."""
        if not self.can_retry:
            return self._state
        return await self.analyze(retry=True)

    def reset(self) -> AnalysisState:
        """Preview/Complete → Idle, clearing image, symptoms, report, error and retries."""
        self._require("reset", Idle, Preview, Complete)
        return self._set(Idle())

    def view_record(self, record: dict) -> AnalysisState:
        """Open a stored history record as a completed analysis."""
        self._require("view record", Idle, Preview, Complete)
        report = DiagnosisReport.model_validate({
            "healthScore": record["healthScore"],
            "riskLevel": record["riskLevel"],
            "diagnosis": record.get("diagnosis") or "Diagnosis Result",
            "description": record.get("description") or "No detailed description available",
            "diseases": record.get("diseases") or [],
            "recommendations": record.get("recommendations") or [],
            "medications": record.get("medications") or [],
        })
        return self._set(Complete(
            report=report,
            symptoms=record.get("symptomsText") or "",
            image_url=record.get("imageUrl"),
        ))

    # -- helpers --------------------------------------------------------------

    def _set(self, state: AnalysisState) -> AnalysisState:
        self._state = state
        return state

    def _require(self, action: str, *allowed: type):
        if not isinstance(self._state, allowed):
            raise InvalidTransitionError(action, self._state)
        return self._state

    def _current_symptoms(self) -> str:
        return self._state.symptoms if isinstance(self._state, Preview) else ""

    def _reject_image(self, info: ErrorInfo) -> AnalysisState:
        return self._set(replace(self._state, error=info))

    def _fail(self, analyzing: Analyzing, info: ErrorInfo) -> AnalysisState:
        return self._set(Preview(
            image=analyzing.image,
            symptoms=analyzing.symptoms,
            error=info,
            retry_count=analyzing.retry_count + 1,
        ))

    def _check_entitlement(self) -> None:
        if self._entitlements is None:
            return
        state = self._entitlements.get_state(self.user_id)
        if not state.can_analyze:
            raise UpgradeRequiredError(state.free_trial_used)
