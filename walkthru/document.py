"""
Test-case document writer.

The header is written once when the run starts; each executed step then
appends one block. Every write is flushed and fsynced before returning so a
block never references a screenshot the disk has not seen yet.
"""

import os
from typing import Dict, List, Optional

from .exceptions import DocumentError
from .logger import logger
from .narrator import NarrationResult
from .workspace import RunContext


def default_header_fields(context: RunContext) -> Dict[str, str]:
    return {
        "Test Case ID": context.run_name,
        "Title": f"Verify {context.feature} functionality for {context.role}",
        "Description": f"Automated walkthrough for {context.role} role.",
        "Preconditions": "User is on landing page.",
    }


class DocumentAssembler:
    def __init__(self, context: RunContext):
        self.context = context
        self.opened = False
        self.blocks_written = 0

    def open_document(self, header_fields: Optional[Dict[str, str]] = None):
        """Write the header. Calling this twice for the same run is a bug."""
        if self.opened:
            raise RuntimeError(f"Document already opened: {self.context.document_path}")
        fields = header_fields or default_header_fields(self.context)
        lines = [f"{key}: {value}" for key, value in fields.items()]
        self._write("\n".join(lines) + "\n\nTest Steps:\n\n", mode="w")
        self.opened = True

    def append_step(self, ordinal: int, narration: NarrationResult, screenshot_refs: List[str]):
        if not self.opened:
            raise RuntimeError("open_document() must be called before append_step()")
        images = ", ".join(screenshot_refs) if screenshot_refs else "none"
        block = f"{ordinal}. {narration.render()}\n(images: {images})\n\n"
        self._write(block, mode="a")
        self.blocks_written += 1
        logger.info(f"Documented step {ordinal} ({images})")

    def _write(self, text: str, mode: str):
        try:
            with open(self.context.document_path, mode, encoding="utf-8") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise DocumentError(str(self.context.document_path), e) from e
