"""Edit-source arbiter.

Two editors write to one document: the structured (form) editor and the raw JSON text editor.
The arbiter decides which write wins and keeps them from feeding each other:

* a structured edit installs the new document immediately, re-renders the text view and remembers
  that rendering as the expected echo;
* the first text change that equals the expected echo is the text view reporting our own
  rendering back, so it is dropped;
* any other text change waits for a quiescence window, goes through the schema gate, and on
  success replaces the document.

States::

    idle --text--> awaiting-quiescence --timer--> validating --settled--> idle
                   ^        |
                   +--text--+  (timer restarted)

Text arriving while ``validating`` is queued and restarts the cycle once validation settles.
A structured edit made while a text cycle is pending cancels the timer, and a validation already
in flight has its result discarded.
"""

from __future__ import annotations

import asyncio
import dataclasses
import inspect
from enum import Enum
from typing import Any, Callable

from scriptloom.codec import CanonicalCodec
from scriptloom.config import Settings
from scriptloom.document.results import EditResult
from scriptloom.document.wrapper import ScriptDocument
from scriptloom.errors import InvalidScriptError
from scriptloom.events import ChangeKind, ChangeSource
from scriptloom.logging import get_logger, log_exception, set_source
from scriptloom.schema.gate import SchemaGate

logger = get_logger(__name__)

DocumentListener = Callable[[ScriptDocument, ChangeSource], None]
TextListener = Callable[[str], None]
ValidityListener = Callable[[bool], None]
EventListener = Callable[[ChangeKind, ChangeSource | None, dict[str, Any]], None]


class ArbiterState(str, Enum):
    IDLE = "idle"
    AWAITING_QUIESCENCE = "awaiting-quiescence"
    VALIDATING = "validating"


class EditSourceArbiter:
    """Keep the structured view and the text view of one document consistent.

    Must be driven from inside a running asyncio event loop; text changes schedule tasks on it.
    """

    def __init__(
        self,
        document: ScriptDocument,
        gate: SchemaGate,
        codec: CanonicalCodec | None = None,
        settings: Settings | None = None,
        *,
        on_document_changed: DocumentListener | None = None,
        on_text_rendered: TextListener | None = None,
        on_validity_changed: ValidityListener | None = None,
        on_event: EventListener | None = None,
    ) -> None:
        settings = settings or Settings()
        self._gate = gate
        self._codec = codec or CanonicalCodec(gate, document.keys, settings.text_indent)
        self._debounce_s = settings.debounce_s

        self._on_document_changed = on_document_changed
        self._on_text_rendered = on_text_rendered
        self._on_validity_changed = on_validity_changed
        self._on_event = on_event

        self._document = document
        self._text = self._codec.encode_text(document)
        self._valid = True
        self._echo: str | None = None
        self._pending: str | None = None
        self._requeued = False
        self._generation = 0
        self._task: asyncio.Task[None] | None = None

        self.state = ArbiterState.IDLE
        self.last_source: ChangeSource | None = None

    @property
    def document(self) -> ScriptDocument:
        return self._document

    @property
    def text(self) -> str:
        """Latest text: our own rendering, or what the user typed (even if invalid)."""

        return self._text

    @property
    def is_text_valid(self) -> bool:
        return self._valid

    @property
    def codec(self) -> CanonicalCodec:
        return self._codec

    # ------------------------------------------------------------------ structured side

    def note_structured_edit(self, document: ScriptDocument) -> str:
        """Install a document produced by the structured editor and render it as text.

        Returns:
            The regenerated canonical text, which is also pushed to ``on_text_rendered``.
        """

        self._generation += 1
        self._cancel_timer()
        self._pending = None
        self._requeued = False

        self._document = document
        text = self._codec.encode_text(document)
        self._text = text
        self._echo = text
        self.last_source = ChangeSource.STRUCTURED
        set_source(ChangeSource.STRUCTURED.value)
        self._set_valid(True)
        self._emit(ChangeKind.STRUCTURED_EDIT, ChangeSource.STRUCTURED, {"actions": len(document)})

        if self._on_text_rendered is not None:
            self._on_text_rendered(text)
        return text

    def apply(self, result: EditResult) -> EditResult:
        """Forward a successful structured edit; failed edits leave everything untouched."""

        if result.ok:
            self.note_structured_edit(result.document)
        else:
            self._emit(
                ChangeKind.EDIT_REJECTED,
                ChangeSource.STRUCTURED,
                {"error": result.error, "message": result.message},
            )
        return result

    # ------------------------------------------------------------------ text side

    def on_text_changed(self, text: str) -> bool:
        """Report a change from the text editor.

        Returns:
            ``True`` if the text was scheduled for acceptance, ``False`` if it was dropped.
        """

        if self._echo is not None:
            echo, self._echo = self._echo, None
            if text == echo:
                self.last_source = None
                self._emit(ChangeKind.ECHO_SUPPRESSED, None, {})
                logger.debug("Dropped text echo of the last structured edit")
                return False

        if not text or not text.strip():
            logger.debug("Ignoring empty text")
            return False

        self._text = text
        self._pending = text
        if self.state is ArbiterState.VALIDATING:
            self._requeued = True
            return True

        self._restart_timer()
        return True

    async def wait_idle(self) -> None:
        """Wait until no text cycle is pending or running."""

        while self._task is not None and not self._task.done():
            task = self._task
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise

    def cancel(self) -> None:
        """Drop any pending text cycle. A validation in flight finishes but is discarded."""

        self._generation += 1
        self._cancel_timer()
        self._pending = None
        self._requeued = False

    # ------------------------------------------------------------------ internals

    def _restart_timer(self) -> None:
        self._cancel_timer()
        self.state = ArbiterState.AWAITING_QUIESCENCE
        self._task = asyncio.get_running_loop().create_task(self._run(self._generation))

    def _cancel_timer(self) -> None:
        if self.state is not ArbiterState.AWAITING_QUIESCENCE:
            return
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self.state = ArbiterState.IDLE

    async def _run(self, generation: int) -> None:
        await asyncio.sleep(self._debounce_s)

        text = self._pending
        self._pending = None
        if text is None:
            self.state = ArbiterState.IDLE
            return

        self.state = ArbiterState.VALIDATING
        try:
            accepted = await self._validate(text)
        finally:
            self.state = ArbiterState.IDLE

        if generation != self._generation or self._requeued:
            logger.debug("Discarding validation result for superseded text")
            self._emit(ChangeKind.TEXT_SUPERSEDED, ChangeSource.TEXT, {})
        elif accepted:
            self._accept(text)
        else:
            self._reject("schema validation failed")

        if self._requeued:
            self._requeued = False
            self._restart_timer()

    async def _validate(self, text: str) -> bool:
        try:
            outcome = self._gate.validate(text)
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except Exception:
            log_exception(logger, "Schema gate failed", chars=len(text))
            return False
        return bool(outcome)

    def _accept(self, text: str) -> None:
        try:
            document = self._codec.decode(text)
        except InvalidScriptError as e:
            self._reject(str(e))
            return

        changed = not document.canonically_equal(self._document)
        if changed:
            previous = self._document
            retired = previous.retired.union(previous.identities()).difference(document.identities())
            self._document = dataclasses.replace(document, retired=retired)
        self.last_source = ChangeSource.TEXT
        set_source(ChangeSource.TEXT.value)
        self._set_valid(True)
        self._emit(ChangeKind.TEXT_ACCEPTED, ChangeSource.TEXT, {"actions": len(self._document), "changed": changed})
        logger.info("Accepted text edit (%d root actions)", len(self._document))

        if changed and self._on_document_changed is not None:
            self._on_document_changed(self._document, ChangeSource.TEXT)

    def _reject(self, reason: str) -> None:
        logger.info("Rejected text edit: %s", reason)
        self._set_valid(False)
        self._emit(ChangeKind.TEXT_REJECTED, ChangeSource.TEXT, {"reason": reason})

    def _set_valid(self, valid: bool) -> None:
        if valid == self._valid:
            return
        self._valid = valid
        if self._on_validity_changed is not None:
            self._on_validity_changed(valid)

    def _emit(self, kind: ChangeKind, source: ChangeSource | None, data: dict[str, Any]) -> None:
        if self._on_event is not None:
            self._on_event(kind, source, data)
