"""Editing session for one site script.

Holds the record metadata (title, description, version), the document arbiter and the change
journal. The session is what a UI binds to: structured edits go through :meth:`apply`, text editor
changes through :meth:`on_text_changed`, and :attr:`can_save` gates persistence.
"""

from __future__ import annotations

import itertools
import uuid
from typing import Any

from scriptloom.codec import CanonicalCodec
from scriptloom.config import Settings
from scriptloom.document.results import EditResult
from scriptloom.document.wrapper import ScriptDocument
from scriptloom.events import ChangeEvent, ChangeKind, ChangeSource
from scriptloom.logging import get_logger, session_context
from scriptloom.models.script import SiteScript
from scriptloom.recording.file_recorder import FileEventRecorder
from scriptloom.schema.gate import SchemaGate
from scriptloom.sync.arbiter import ArbiterState, EditSourceArbiter, TextListener
from scriptloom.utils.ids import IdentityKeyGenerator

logger = get_logger(__name__)


class EditingSession:
    """One user editing one site script."""

    def __init__(
        self,
        site_script: SiteScript,
        gate: SchemaGate,
        settings: Settings | None = None,
        *,
        recorder: FileEventRecorder | None = None,
        on_text_rendered: TextListener | None = None,
        session_id: str | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self.gate = gate
        keys = IdentityKeyGenerator(self.settings.identity_prefix)
        self.codec = CanonicalCodec(gate, keys, indent=self.settings.text_indent)

        if recorder is None and self.settings.journal_dir is not None:
            recorder = FileEventRecorder.for_session(self.settings.journal_dir, self.session_id)
        self._recorder = recorder
        self._seq = itertools.count(1)
        self.events: list[ChangeEvent] = []

        self.id = site_script.id
        self.title = site_script.title
        self.description = site_script.description
        self.version = site_script.version

        with session_context(session_id=self.session_id):
            document = self.codec.decode(site_script.content)
            logger.info("Opened site script %r (%d actions)", self.title or self.id, len(document))

        self.arbiter = EditSourceArbiter(
            document,
            gate,
            self.codec,
            self.settings,
            on_text_rendered=on_text_rendered,
            on_event=self._record,
        )

    @property
    def document(self) -> ScriptDocument:
        return self.arbiter.document

    @property
    def text(self) -> str:
        return self.arbiter.text

    @property
    def can_save(self) -> bool:
        """Text is valid and no text edit is still waiting to be applied."""

        return self.arbiter.is_text_valid and self.arbiter.state is ArbiterState.IDLE

    # ------------------------------------------------------------------ metadata

    def set_title(self, title: str) -> None:
        self.title = title
        self._record(ChangeKind.METADATA_UPDATED, None, {"field": "title"})

    def set_description(self, description: str) -> None:
        self.description = description
        self._record(ChangeKind.METADATA_UPDATED, None, {"field": "description"})

    def set_version(self, version: str | int) -> bool:
        """Set the version from user input; non-integer input is ignored."""

        try:
            value = int(version)
        except (TypeError, ValueError):
            logger.debug("Ignoring non-integer version %r", version)
            return False
        if value < 0:
            return False
        self.version = value
        self._record(ChangeKind.METADATA_UPDATED, None, {"field": "version"})
        return True

    # ------------------------------------------------------------------ document

    def apply(self, result: EditResult) -> EditResult:
        """Apply the result of a structured edit made on :attr:`document`."""

        with session_context(session_id=self.session_id, source=ChangeSource.STRUCTURED.value):
            return self.arbiter.apply(result)

    def on_text_changed(self, text: str) -> bool:
        with session_context(session_id=self.session_id, source=ChangeSource.TEXT.value):
            return self.arbiter.on_text_changed(text)

    async def settle(self) -> None:
        """Wait for any pending text edit to be accepted or rejected."""

        await self.arbiter.wait_idle()

    def to_site_script(self) -> SiteScript:
        """Record to persist.

        Raises:
            ValueError: If the text view currently holds invalid content.
        """

        if not self.can_save:
            raise ValueError("site script text is invalid or still being applied")
        return SiteScript(
            id=self.id,
            title=self.title,
            description=self.description,
            version=self.version,
            content=self.codec.encode(self.document),
        )

    def close(self) -> None:
        self.arbiter.cancel()
        logger.info("Closed session %s after %d events", self.session_id, len(self.events))

    # ------------------------------------------------------------------ journal

    def _record(self, kind: ChangeKind, source: ChangeSource | None, data: dict[str, Any]) -> None:
        event = ChangeEvent(
            session_id=self.session_id,
            seq=next(self._seq),
            source=source,
            kind=kind,
            data=data or None,
        )
        self.events.append(event)
        if self._recorder is not None:
            self._recorder.append(event)
