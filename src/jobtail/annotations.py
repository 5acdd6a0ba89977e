"""Extraction of runner annotation directives (::error file=...::message)."""

from __future__ import annotations

import re
from enum import StrEnum
from typing import TYPE_CHECKING

from jobtail.classifier import split_timestamp
from jobtail.models import Annotation, AnnotationLevel

if TYPE_CHECKING:
    from collections.abc import Sequence

_DIRECTIVE_RE = re.compile(r"^::(error|warning|notice)(?:\s+(.*?))?::(.*)$", re.DOTALL)

_LEVELS: dict[str, AnnotationLevel] = {
    "error": AnnotationLevel.FAILURE,
    "warning": AnnotationLevel.WARNING,
    "notice": AnnotationLevel.NOTICE,
}


class AnnotationFilter(StrEnum):
    """Level filter for the annotation list."""

    ALL = "all"
    FAILURE = "failure"
    WARNING = "warning"
    NOTICE = "notice"


def _parse_params(block: str | None) -> dict[str, str]:
    """Parse 'file=a.go,line=10' into a dict. Entries without '=' are skipped."""
    params: dict[str, str] = {}
    if not block:
        return params
    for entry in block.split(","):
        key, sep, value = entry.partition("=")
        if sep and key.strip():
            params[key.strip()] = value.strip()
    return params


def _int_param(params: dict[str, str], key: str) -> int | None:
    value = params.get(key)
    if value is None or not value.isdigit():
        return None
    return int(value)


def parse_annotation_line(raw: str, index: int) -> Annotation | None:
    """Parse one raw line; None when it is not an annotation directive."""
    _, content = split_timestamp(raw.rstrip("\r"))
    match = _DIRECTIVE_RE.match(content)
    if match is None:
        return None
    level, block, message = match.groups()
    params = _parse_params(block)
    return Annotation(
        annotation_level=_LEVELS[level],
        path=params.get("file") or None,
        start_line=_int_param(params, "line"),
        end_line=_int_param(params, "endLine"),
        column=_int_param(params, "col"),
        message=message.strip(),
        title=params.get("title") or message.split(":", 1)[0],
        line=index,
    )


def parse_annotations(text: str) -> list[Annotation]:
    """Scan the cumulative text for annotation directives, in line order.

    Best effort: lines that do not match are skipped. ``line`` is the
    zero-based index of the directive in the newline-split text.
    """
    annotations: list[Annotation] = []
    if not text:
        return annotations
    for index, raw in enumerate(text.split("\n")):
        annotation = parse_annotation_line(raw, index)
        if annotation is not None:
            annotations.append(annotation)
    return annotations


def filter_annotations(annotations: Sequence[Annotation], level: AnnotationFilter) -> list[Annotation]:
    """Keep the annotations of one level, or all of them."""
    if level == AnnotationFilter.ALL:
        return list(annotations)
    return [a for a in annotations if a.annotation_level.value == level.value]


def level_counts(annotations: Sequence[Annotation]) -> dict[AnnotationLevel, int]:
    """Number of annotations per level."""
    counts: dict[AnnotationLevel, int] = {}
    for annotation in annotations:
        counts[annotation.annotation_level] = counts.get(annotation.annotation_level, 0) + 1
    return counts
