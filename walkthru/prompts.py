"""Terminal prompts for the role and feature of a run."""

from typing import Callable, Iterable

CUSTOM_SENTINEL = "custom"
DEFAULT_FEATURES = ("Profile", "Courses", "Dashboard", "Settings")


def ask_role(roles: Iterable[str], input_fn: Callable[[str], str] = input) -> str:
    return input_fn(f"Select Role ({'/'.join(roles)}): ").strip()


def ask_feature(input_fn: Callable[[str], str] = input) -> str:
    feature = input_fn(
        f"Select Feature ({'/'.join(DEFAULT_FEATURES)} or type \"Custom\"): "
    ).strip()
    if feature.lower() == CUSTOM_SENTINEL:
        feature = input_fn("Enter the custom feature name to test: ").strip()
    return feature
