"""Model identifiers: a closed set of known names with a raw-string fallback."""

from __future__ import annotations

from enum import Enum


class KnownModel(str, Enum):
    """Models known to support the Responses API."""

    O3 = "o3"
    O4_MINI = "o4-mini"
    O3_MINI = "o3-mini"
    O1 = "o1"
    O1_MINI = "o1-mini"
    GPT_4_1 = "gpt-4.1"
    GPT_4_1_MINI = "gpt-4.1-mini"
    GPT_4_1_NANO = "gpt-4.1-nano"
    GPT_4O = "gpt-4o"
    GPT_4O_MINI = "gpt-4o-mini"
    GPT_4_TURBO = "gpt-4-turbo"
    GPT_4 = "gpt-4"
    GPT_3_5_TURBO = "gpt-3.5-turbo"


def parse_model(name: str | KnownModel) -> KnownModel | str:
    """Return the KnownModel for `name`, or `name` itself when unknown."""
    if isinstance(name, KnownModel):
        return name
    try:
        return KnownModel(name)
    except ValueError:
        return name


def model_name(model: KnownModel | str) -> str:
    """Inverse of parse_model."""
    return model.value if isinstance(model, KnownModel) else model
