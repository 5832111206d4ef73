import json
from typing import Optional

from .browser_manager import BrowserManager
from .config import WalkthroughConfig
from .document import DocumentAssembler
from .logger import logger
from .narrator import NarrationGenerator, Narrator, create_narrator
from .resolver import SelectorResolver
from .sequencer import StepSequencer
from .steps import build_walkthrough_steps
from .workspace import RunContext, allocate_run_workspace


class WalkthroughCapturer:
    def __init__(
        self,
        config: WalkthroughConfig,
        narrator: Optional[Narrator] = None,
        browser: Optional[BrowserManager] = None,
    ):
        self.config = config
        self.narrator = narrator or create_narrator(
            config.openai_api_key, config.narration_model, config.narration_timeout_s
        )
        self.browser = browser or BrowserManager(
            headless=config.headless,
            slow_mo_ms=config.slow_mo_ms,
            viewport=config.viewport,
        )

    async def run(self, role: str, feature: str) -> RunContext:
        """
        One complete walkthrough: allocate the run folder, write the document
        header, drive the steps, then always write the manifest and close the
        browser. Fatal errors propagate after cleanup.
        """
        context = allocate_run_workspace(self.config, role, feature)
        document = DocumentAssembler(context)
        document.open_document()

        steps = build_walkthrough_steps(self.config, role, context.feature_label or context.feature)
        sequencer = StepSequencer(
            resolver=SelectorResolver(self.config.resolve_timeout_ms),
            narration=NarrationGenerator(self.narrator),
            document=document,
            settle_timeout_ms=self.config.settle_timeout_ms,
        )

        logger.info(f"Starting walkthrough: {context.run_name}")
        status = "failed"
        try:
            page = await self.browser.start()
            await self.browser.navigate(self.config.base_url, timeout_ms=self.config.settle_timeout_ms)
            await sequencer.run(steps, page, context)
            status = "passed"
        finally:
            try:
                self._save_manifest(context, sequencer, status)
            finally:
                await self.browser.stop()

        logger.info(f"Walkthrough complete. Results saved to: {context.run_directory}")
        return context

    def _save_manifest(self, context: RunContext, sequencer: StepSequencer, status: str):
        manifest = {
            "run": context.run_name,
            "role": context.role,
            "feature": context.feature,
            "status": status,
            "document": context.document_path.name,
            "steps": [
                {
                    "ordinal": o.ordinal,
                    "skipped": o.skipped,
                    "selector": o.selector,
                    "narration_degraded": o.narration_degraded,
                }
                for o in sequencer.outcomes
            ],
            "captures": [c.to_dict() for c in sequencer.captures],
        }
        with open(context.run_directory / "manifest.json", "w", encoding="utf-8") as f:
            json.dump(manifest, f, indent=2)
