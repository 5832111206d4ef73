"""Step descriptors and the fixed role -> login -> feature walkthrough."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .config import WalkthroughConfig


class ActionKind(str, Enum):
    SELECT = "select"
    FILL = "fill"
    CLICK = "click"
    NAVIGATE = "navigate"


@dataclass(frozen=True)
class StepDescriptor:
    ordinal: int
    target_selector: str
    action_kind: ActionKind
    action_summary: str
    feature: str
    slug: str
    fallback_selector: Optional[str] = None
    value: Optional[str] = None
    settle_selector: Optional[str] = None
    optional: bool = False

    @property
    def narration_context(self):
        return self.action_summary, self.feature


def slugify(text: str) -> str:
    """'Select the Student role' -> 'select-the-student-role'."""
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def _regex_escape(text: str) -> str:
    return re.sub(r"([.*+?^${}()|\[\]\\/])", r"\\\1", text)


def _css_string(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def build_walkthrough_steps(config: WalkthroughConfig, role: str, feature: str) -> List[StepDescriptor]:
    """
    The fixed sequence driven against the demo app:
    role selection, start, username, password, sign in, then an optional
    jump to the feature's link in the dashboard navigation. These are the
    three compound steps of the manual walkthrough (pick role, log in,
    navigate) split to one action each, so every action gets its own
    before/after pair.

    `feature` must equal the whole link text, ignoring case, so pass the
    label with its spaces kept.
    """
    role_key = config.resolve_role(role)
    profile = config.role_profile(role_key)
    label = profile.entry_label

    steps = [
        StepDescriptor(
            ordinal=1,
            target_selector=f'input[name="role"][value="{role_key}"]',
            fallback_selector=f'label:has-text("{label}") input',
            action_kind=ActionKind.SELECT,
            action_summary=f"Select the {label} role",
            feature=feature,
            slug="select-role",
        ),
        StepDescriptor(
            ordinal=2,
            target_selector="#start-btn",
            fallback_selector='button:has-text("Start")',
            action_kind=ActionKind.CLICK,
            action_summary="Click the Start button",
            feature=feature,
            slug="start",
            settle_selector="#login-page:not(.hidden)",
        ),
        StepDescriptor(
            ordinal=3,
            target_selector='input[placeholder="Username"]',
            fallback_selector='input[name="username"]',
            action_kind=ActionKind.FILL,
            action_summary="Enter the username",
            feature=feature,
            slug="username",
            value=profile.username,
        ),
        StepDescriptor(
            ordinal=4,
            target_selector='input[placeholder="Password"]',
            fallback_selector='input[type="password"]',
            action_kind=ActionKind.FILL,
            action_summary="Enter the password",
            feature=feature,
            slug="password",
            value=profile.password,
        ),
        StepDescriptor(
            ordinal=5,
            target_selector="#login-submit",
            fallback_selector='button:has-text("Sign in")',
            action_kind=ActionKind.CLICK,
            action_summary="Click Sign in",
            feature=feature,
            slug="sign-in",
            settle_selector="#dashboard:not(.hidden)",
        ),
        StepDescriptor(
            ordinal=6,
            target_selector=f'nav a:text-matches("^{_css_string(_regex_escape(feature))}$", "i")',
            fallback_selector=f'nav a:has-text("{_css_string(feature)}")',
            action_kind=ActionKind.NAVIGATE,
            action_summary=f"Navigate to the {feature} section from the dashboard",
            feature=feature,
            slug=f"nav-to-{slugify(feature)}",
            optional=True,
        ),
    ]
    return steps
