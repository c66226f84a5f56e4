"""
Form session state machine.

A FormSession holds everything one browser has typed or uploaded, the
current GenerationState and the last GeneratedResult. It has no Flask
dependency; app.py keeps one per session cookie and calls into it.

Transitions during a submission:
    idle → analyzing → generating → completed | error
"""
from dataclasses import dataclass
from enum import Enum

from errors import GENERIC_FAILURE_MESSAGE, GenerationError
from site_config import STATE_MESSAGES


class Status(str, Enum):
    IDLE       = "idle"
    ANALYZING  = "analyzing"
    GENERATING = "generating"
    COMPLETED  = "completed"
    ERROR      = "error"


IN_FLIGHT = {Status.ANALYZING, Status.GENERATING}


@dataclass(frozen=True)
class GenerationState:
    status:  Status      = Status.IDLE
    message: str | None  = None
    error:   str | None  = None

    @property
    def in_flight(self) -> bool:
        return self.status in IN_FLIGHT

    def as_dict(self) -> dict:
        return {"status": self.status.value, "message": self.message, "error": self.error}


class FormSession:
    def __init__(self):
        self.url     = ""
        self.notes   = ""
        self.image   = None   # encoder.UploadedImage
        self.result  = None   # generator.GeneratedResult, only set when completed
        self.failure = None   # exception behind the last error state
        self.state   = GenerationState()
        self.history = [Status.IDLE]   # states of the latest submission

    # ── Form inputs (editable in any state, never cancel a running request) ──

    def select_image(self, image) -> None:
        self.image = image

    def clear_image(self) -> None:
        self.image = None

    def update_fields(self, url: str | None = None, notes: str | None = None) -> None:
        if url is not None:
            self.url = url.strip()
        if notes is not None:
            self.notes = notes

    @property
    def preview_url(self) -> str | None:
        return self.image.preview_url if self.image is not None else None

    # ── Submission ───────────────────────────────────────────────────────────

    def can_submit(self) -> bool:
        return bool(self.url) and self.image is not None and not self.state.in_flight

    def _enter(self, status: Status, message: str | None = None, error: str | None = None) -> None:
        self.state = GenerationState(status, message, error)
        self.history.append(status)

    def submit(self, generate) -> bool:
        """Run one submission with `generate(encoded, url, notes, mime_type)`.

        Returns False without touching the state when the form is incomplete
        or a request is already running, True once the submission has ended in
        completed or error.

        `history` restarts with each submission: it holds the state the form
        was in, followed by the states this submission entered.

        The error message is the failure's own text. generate() already
        collapses every provider failure into the generic GenerationFailed
        message; an ImageReadError from encoding the screenshot happens before
        generate() is called and keeps its specific message, so the user
        knows to pick another file.
        """
        if not self.can_submit():
            return False

        image, url, notes = self.image, self.url, self.notes
        self.history = [self.state.status]
        self.result  = None
        self.failure = None
        self._enter(Status.ANALYZING, STATE_MESSAGES["analyzing"])
        try:
            encoded = image.encoded
            self._enter(Status.GENERATING, STATE_MESSAGES["generating"])
            result = generate(encoded, url, notes, image.mime_type)
        except GenerationError as e:
            self.failure = e
            self._enter(Status.ERROR, error=str(e) or GENERIC_FAILURE_MESSAGE)
            return True
        except Exception as e:
            self.failure = e
            self._enter(Status.ERROR, error=GENERIC_FAILURE_MESSAGE)
            raise

        self.result = result
        self._enter(Status.COMPLETED)
        return True
