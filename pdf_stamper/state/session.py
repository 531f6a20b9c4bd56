"""Lifecycle state of a stamping session."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pdf_stamper.errors import StamperError
from pdf_stamper.pdf.engine import EngineDocument


class SessionFinalizedError(StamperError):
    """Raised when a session is used after its output was produced."""


class TemplateNotLoadedError(StamperError):
    """Raised when an operation runs before a template was opened."""


class SessionState(str, Enum):
    EMPTY = "empty"
    OPEN = "open"
    CLOSED = "closed"


@dataclass(slots=True)
class DocumentSession:
    document: EngineDocument | None = None
    state: SessionState = SessionState.EMPTY

    @property
    def finalized(self) -> bool:
        return self.state is SessionState.CLOSED

    def attach(self, document: EngineDocument) -> None:
        if self.finalized:
            document.close()
            raise SessionFinalizedError("Session already finalized; create a new Stamper")
        if self.document is not None:
            self.document.close()
        self.document = document
        self.state = SessionState.OPEN

    def require_open(self) -> EngineDocument:
        if self.finalized:
            raise SessionFinalizedError("Session already finalized; create a new Stamper")
        if self.document is None:
            raise TemplateNotLoadedError("No template loaded")
        return self.document

    def finalize(self) -> bytes:
        document = self.require_open()
        # Closed before flattening: a failed finalize leaves nothing reusable.
        self.state = SessionState.CLOSED
        return document.flatten_and_close()

    def abandon(self) -> None:
        if self.document is not None and not self.finalized:
            self.document.close()
        self.state = SessionState.CLOSED
