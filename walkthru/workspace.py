"""
Run workspace allocation.

Each run gets its own folder under
<output_root>/<category>/<Role>/<Feature>/<prefix>_<Role>_<Feature>-NNN
where NNN is the lowest free number. Probing is only safe within one process;
two processes racing on the same base directory can pick the same name.
"""

import itertools
from dataclasses import dataclass, field
from pathlib import Path

from .config import WalkthroughConfig
from .exceptions import WorkspaceAllocationError
from .logger import logger


def display_label(label: str) -> str:
    """'user SETTINGS' -> 'User settings'. Whitespace is kept for on-page text."""
    label = " ".join((label or "").split())
    return label[:1].upper() + label[1:].lower()


def capitalize_label(label: str) -> str:
    """'coURSES' -> 'Courses'. Spaces become underscores so labels stay path-safe."""
    return display_label(label).replace(" ", "_")


@dataclass
class RunContext:
    role: str
    feature: str
    run_directory: Path
    document_path: Path
    feature_label: str = ""
    _sequence: "itertools.count[int]" = field(
        default_factory=lambda: itertools.count(1), repr=False, compare=False
    )

    @property
    def run_name(self) -> str:
        return self.run_directory.name

    def next_sequence(self) -> int:
        """Monotonic capture counter, starting at 1."""
        return next(self._sequence)


def next_folder_name(base_dir: Path, prefix: str, role: str, feature: str) -> str:
    """Lowest-numbered `<prefix>_<role>_<feature>-NNN` not present under base_dir."""
    for counter in itertools.count(1):
        folder_name = f"{prefix}_{role}_{feature}-{counter:03d}"
        if not (base_dir / folder_name).exists():
            return folder_name


def allocate_run_workspace(config: WalkthroughConfig, role: str, feature: str) -> RunContext:
    """Pick a free run folder, create it (with any missing parents) and return its context."""
    role_cap = capitalize_label(config.resolve_role(role))
    feature_cap = capitalize_label(feature)
    if not feature_cap:
        raise WorkspaceAllocationError(str(config.output_root), ValueError("empty feature label"))

    feature_dir = Path(config.output_root) / config.category / role_cap / feature_cap
    folder_name = next_folder_name(feature_dir, config.folder_prefix, role_cap, feature_cap)
    run_dir = feature_dir / folder_name

    try:
        run_dir.mkdir(parents=True, exist_ok=False)
    except OSError as e:
        raise WorkspaceAllocationError(str(run_dir), e) from e

    logger.info(f"Run workspace: {run_dir}")
    return RunContext(
        role=role_cap,
        feature=feature_cap,
        run_directory=run_dir.resolve(),
        document_path=run_dir.resolve() / f"{folder_name}.txt",
        feature_label=display_label(feature),
    )
