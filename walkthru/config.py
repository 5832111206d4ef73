"""
Run configuration.

A single WalkthroughConfig is built at run start (usually from the
environment and .env) and passed to every component that needs it.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

from .exceptions import ConfigError


@dataclass(frozen=True)
class RoleProfile:
    username: str
    password: str
    entry_label: str


def _default_roles() -> Dict[str, RoleProfile]:
    return {
        name: RoleProfile("test-user", "password123", name.capitalize())
        for name in ("student", "teacher", "parent")
    }


@dataclass
class WalkthroughConfig:
    base_url: str = "http://localhost:5500"
    output_root: Path = field(default_factory=lambda: Path.cwd() / "TestCases")
    category: str = "WalkThru"
    folder_prefix: str = "Auto_TC"
    roles: Dict[str, RoleProfile] = field(default_factory=_default_roles)
    base_role: str = "student"
    headless: bool = False
    slow_mo_ms: int = 800
    viewport: Dict[str, int] = field(default_factory=lambda: {"width": 1280, "height": 720})
    # Timeouts
    resolve_timeout_ms: int = 5000
    settle_timeout_ms: int = 10000
    # Narration
    narration_model: str = "gpt-4o-mini"
    narration_timeout_s: float = 30.0
    openai_api_key: Optional[str] = None

    def role_profile(self, role: str) -> RoleProfile:
        """Profile for `role`, or the base role's profile if it is unknown."""
        return self.roles.get(self.resolve_role(role), self.roles[self.base_role])

    def resolve_role(self, role: str) -> str:
        key = (role or "").strip().lower()
        return key if key in self.roles else self.base_role

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "WalkthroughConfig":
        load_dotenv(env_file)
        config = cls()

        if os.getenv("WALKTHRU_BASE_URL"):
            config.base_url = os.environ["WALKTHRU_BASE_URL"]
        if os.getenv("WALKTHRU_OUTPUT_DIR"):
            config.output_root = Path(os.environ["WALKTHRU_OUTPUT_DIR"]).resolve()
        if os.getenv("WALKTHRU_HEADLESS"):
            config.headless = os.environ["WALKTHRU_HEADLESS"].strip().lower() in ("1", "true", "yes")

        config.slow_mo_ms = _int_env("WALKTHRU_SLOW_MO", config.slow_mo_ms)
        config.resolve_timeout_ms = _int_env("WALKTHRU_RESOLVE_TIMEOUT_MS", config.resolve_timeout_ms)
        config.settle_timeout_ms = _int_env("WALKTHRU_SETTLE_TIMEOUT_MS", config.settle_timeout_ms)
        config.narration_timeout_s = _float_env("WALKTHRU_NARRATION_TIMEOUT", config.narration_timeout_s)
        config.narration_model = os.getenv("WALKTHRU_NARRATION_MODEL", config.narration_model)
        config.openai_api_key = os.getenv("OPENAI_API_KEY") or None

        roles_file = os.getenv("WALKTHRU_ROLES_FILE")
        if roles_file:
            config.roles = load_roles(Path(roles_file))
            if config.base_role not in config.roles:
                config.base_role = next(iter(config.roles))
        return config


def load_roles(path: Path) -> Dict[str, RoleProfile]:
    """Read a JSON mapping of role -> {username, password, entry_label}."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"Could not read roles file {path}: {e}") from e

    if not isinstance(raw, dict) or not raw:
        raise ConfigError(f"Roles file {path} must contain a non-empty JSON object")

    roles = {}
    for name, entry in raw.items():
        if not isinstance(entry, dict) or "username" not in entry or "password" not in entry:
            raise ConfigError(f"Role '{name}' needs 'username' and 'password'")
        key = name.strip().lower()
        roles[key] = RoleProfile(
            username=str(entry["username"]),
            password=str(entry["password"]),
            entry_label=str(entry.get("entry_label") or key.capitalize()),
        )
    return roles


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{value}'")


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got '{value}'")
