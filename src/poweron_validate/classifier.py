# Copyright (c) Syntropy Systems
"""PowerOn file classification and text helpers."""

from __future__ import annotations

import re
from pathlib import PurePath

# Standalone specfiles.
SPECFILE_EXTENSIONS = frozenset({".PO"})

# Fragments pulled in with #INCLUDE; never validated on their own.
INCLUDE_EXTENSIONS = frozenset({".DEF", ".PRO", ".SET", ".FMP", ".SUB"})

POWERON_EXTENSIONS = SPECFILE_EXTENSIONS | INCLUDE_EXTENSIONS

PROCEDURE_KEYWORD = "PROCEDURE"

_FIRST_TOKEN_RE = re.compile(r"\s*([A-Za-z_@#$][\w@#$]*)")
_TARGET_RE = re.compile(r"^[ \t]*TARGET[ \t]*=", re.IGNORECASE | re.MULTILINE)
_PRINT_TITLE_RE = re.compile(r"^[ \t]*PRINT[ \t]+TITLE\b", re.IGNORECASE | re.MULTILINE)


def extension_of(path: str | PurePath) -> str:
    """Upper-cased extension of ``path`` including the dot, or ``""``."""
    return PurePath(path).suffix.upper()


def is_poweron_file(path: str | PurePath) -> bool:
    """Return True if ``path`` carries a PowerOn extension (any case)."""
    return extension_of(path) in POWERON_EXTENSIONS


def extension_requires_skip(path: str | PurePath) -> bool:
    """Return True for include/procedure fragments."""
    return extension_of(path) in INCLUDE_EXTENSIONS


def strip_comments(text: str) -> str:
    """Remove ``[ ... ]`` comments from PowerOn source.

    Brackets inside double-quoted strings are left alone. Comments may
    nest and span lines; an unterminated comment runs to end of text.
    Newlines inside comments are kept so line anchors still work.
    """
    out: list[str] = []
    depth = 0
    in_string = False
    for ch in text:
        if depth:
            if ch == "[":
                depth += 1
            elif ch == "]":
                depth -= 1
            elif ch == "\n":
                out.append(ch)
            continue
        if in_string:
            out.append(ch)
            if ch == '"' or ch == "\n":
                in_string = False
            continue
        if ch == "[":
            depth = 1
        elif ch == '"':
            in_string = True
            out.append(ch)
        else:
            out.append(ch)
    return "".join(out)


def first_token(text: str) -> str | None:
    """First identifier-like token in ``text``, or None if there is none."""
    match = _FIRST_TOKEN_RE.match(text)
    if match is None:
        return None
    return match.group(1)


def starts_with_procedure(text: str) -> bool:
    """True when the comment-stripped text opens with PROCEDURE."""
    token = first_token(strip_comments(text))
    return token is not None and token.upper() == PROCEDURE_KEYWORD


def has_target_division(text: str) -> bool:
    return _TARGET_RE.search(text) is not None


def has_print_title_division(text: str) -> bool:
    return _PRINT_TITLE_RE.search(text) is not None
