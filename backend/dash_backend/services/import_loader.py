"""Turn pasted plan text into a plain Python tree."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^```(?:ya?ml)?[ \t]*\n?", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\n?```$")

_INT_TAG = "tag:yaml.org,2002:int"
# YAML 1.1 integers minus the base-60 form, which would turn 17:00 into 1020.
_INT_WITHOUT_SEXAGESIMAL = re.compile(
    r"""^(?:[-+]?0b[0-1_]+
    |[-+]?0[0-7_]+
    |[-+]?(?:0|[1-9][0-9_]*)
    |[-+]?0x[0-9a-fA-F_]+)$""",
    re.X,
)


class PlanDocumentLoader(yaml.SafeLoader):
    """SafeLoader that keeps clock times such as ``17:00`` as strings."""


PlanDocumentLoader.yaml_implicit_resolvers = {
    first_char: [(tag, regexp) for tag, regexp in resolvers if tag != _INT_TAG]
    for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
PlanDocumentLoader.add_implicit_resolver(_INT_TAG, _INT_WITHOUT_SEXAGESIMAL, list("-+0123456789"))


@dataclass
class LoadedDocument:
    tree: Any
    error: Optional[str]


def strip_code_fences(text: str) -> str:
    """Drop one surrounding markdown fence, as chat UIs add when copying output."""
    cleaned = text.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def load_document(text: str) -> LoadedDocument:
    """Parse raw text into a generic tree. Never raises on malformed input."""
    cleaned = strip_code_fences(text)
    try:
        tree = yaml.load(cleaned, Loader=PlanDocumentLoader)
    except (yaml.YAMLError, ValueError) as exc:
        # ValueError covers scalars that match a tag but cannot be built, e.g. 2024-13-45.
        logger.info("Plan document failed to parse: %s", exc)
        return LoadedDocument(tree=None, error=str(exc) or "Invalid YAML syntax")
    return LoadedDocument(tree=tree, error=None)
