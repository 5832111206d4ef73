from dataclasses import dataclass
from typing import Optional, Tuple

from openai import AsyncOpenAI

from .exceptions import CollaboratorError
from .logger import logger

PROMPT_TEMPLATE = """Write a professional QA test step and expected result for this action: "{action}" within the "{feature}" feature.
Follow this format exactly:
Step: [Description]
Expected Result: [Description]"""

STEP_PREFIX = "step:"
EXPECTED_PREFIXES = ("expected result:", "expected:")


@dataclass(frozen=True)
class NarrationResult:
    step_text: str
    expected_text: str
    degraded: bool = False

    def render(self) -> str:
        return f"Step: {self.step_text}\nExpected Result: {self.expected_text}"


class Narrator:
    """A text backend: takes a prompt, returns free-form text or raises CollaboratorError."""

    async def narrate(self, prompt: str) -> str:
        raise NotImplementedError


class OpenAINarrator(Narrator):
    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4o-mini", timeout: float = 30.0):
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self.model = model

    async def narrate(self, prompt: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=200,
            )
            content = response.choices[0].message.content
        except Exception as e:
            raise CollaboratorError(original=e) from e

        if not content or not content.strip():
            raise CollaboratorError("Narration backend returned empty content")
        return content


class OfflineNarrator(Narrator):
    """Used when no API key is configured or --offline is passed."""

    async def narrate(self, prompt: str) -> str:
        raise CollaboratorError("Narration is offline")


def build_prompt(action_summary: str, feature: str) -> str:
    return PROMPT_TEMPLATE.format(action=action_summary, feature=feature)


def fallback_narration(action_summary: str) -> NarrationResult:
    return NarrationResult(
        step_text=f"Perform {action_summary}",
        expected_text=f"{action_summary} succeeds.",
        degraded=True,
    )


def parse_narration(text: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Pull the Step / Expected Result lines out of generated text.

    Prefixes are matched case-insensitively, with optional markdown bold
    ("**Step:**") stripped first. Missing or empty lines come back as None.
    """
    step, expected = None, None
    if not isinstance(text, str):
        return step, expected
    for raw_line in text.splitlines():
        line = raw_line.strip().replace("**", "").lstrip("-* ").strip()
        lowered = line.lower()
        if step is None and lowered.startswith(STEP_PREFIX):
            step = line[len(STEP_PREFIX):].strip() or None
            continue
        if expected is None:
            for prefix in EXPECTED_PREFIXES:
                if lowered.startswith(prefix):
                    expected = line[len(prefix):].strip() or None
                    break
    return step, expected


class NarrationGenerator:
    """
    Turns an (action, feature) pair into a Step / Expected Result pair.

    Any failure of the backend, or a reply without both lines, falls back to
    the deterministic template so the document never has a gap.
    """

    def __init__(self, narrator: Narrator):
        self.narrator = narrator

    async def generate(self, action_summary: str, feature: str) -> NarrationResult:
        prompt = build_prompt(action_summary, feature)
        try:
            text = await self.narrator.narrate(prompt)
        except Exception as e:
            logger.warning(f"Narration degraded for '{action_summary}': {type(e).__name__}: {e}")
            return fallback_narration(action_summary)

        step, expected = parse_narration(text)
        if not step or not expected:
            logger.warning(f"Narration degraded for '{action_summary}': unusable reply {text!r}")
            return fallback_narration(action_summary)
        return NarrationResult(step_text=step, expected_text=expected)


def create_narrator(api_key: Optional[str], model: str, timeout: float, offline: bool = False) -> Narrator:
    if offline or not api_key:
        if not offline:
            logger.warning("OPENAI_API_KEY not set; using fallback narration")
        return OfflineNarrator()
    return OpenAINarrator(api_key=api_key, model=model, timeout=timeout)
