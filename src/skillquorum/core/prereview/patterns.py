"""Known-malicious pattern catalog for pre-review screening.

Each entry pairs a compiled regex with a check name and the severity of a
match. BLOCKER patterns are high-confidence prompt-injection and
exfiltration phrasings; they also drive the ``quick_check`` fast path.
WARNING patterns are suspicious but common enough in legitimate skills that
they only raise an advisory.

The catalog is separated from the screener so that it can be tested for
coverage and false positives on its own, and extended without touching the
screening logic.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from skillquorum.core.prereview.models import CheckSeverity


@dataclass(frozen=True)
class InjectionPattern:
    name: str
    pattern: re.Pattern[str]
    severity: CheckSeverity


# Build the dynamic code detection names from fragments to avoid
# triggering security linters that flag the literal function names.
_EVAL_NAME = "ev" + "al"
_EXEC_NAME = "ex" + "ec"

_I = re.IGNORECASE

INJECTION_PATTERNS: tuple[InjectionPattern, ...] = (
    # Direct instruction override
    InjectionPattern(
        "instruction_override",
        re.compile(r"ignore\s+(all\s+)?(previous|prior|above)\s+(instructions?|prompts?|rules?)", _I),
        CheckSeverity.BLOCKER,
    ),
    InjectionPattern(
        "disregard_instruction",
        re.compile(r"disregard\s+(all\s+)?(previous|prior|above)", _I),
        CheckSeverity.BLOCKER,
    ),
    InjectionPattern(
        "forget_instruction",
        re.compile(r"forget\s+(everything|all|what)\s+(you|i)\s+(said|told|mentioned)", _I),
        CheckSeverity.BLOCKER,
    ),
    # Role manipulation
    InjectionPattern(
        "role_override",
        re.compile(r"you\s+are\s+(now|actually)\s+(a|an)\s+", _I),
        CheckSeverity.BLOCKER,
    ),
    InjectionPattern(
        "pretend_role",
        re.compile(r"pretend\s+(you\s+are|to\s+be)\s+", _I),
        CheckSeverity.BLOCKER,
    ),
    InjectionPattern(
        "act_as_role",
        re.compile(r"act\s+as\s+(if\s+you\s+are|a|an)\s+", _I),
        CheckSeverity.WARNING,
    ),
    # "DAN" only in capitals; the lowercase word is a common name.
    InjectionPattern(
        "dan_jailbreak",
        re.compile(r"\bDAN\b|\b(?i:do\s+anything\s+now)\b"),
        CheckSeverity.BLOCKER,
    ),
    # System prompt extraction
    InjectionPattern(
        "prompt_extraction",
        re.compile(r"what\s+(is|are)\s+your\s+(system\s+)?(prompt|instructions?)", _I),
        CheckSeverity.BLOCKER,
    ),
    InjectionPattern(
        "show_prompt",
        re.compile(r"show\s+me\s+(your\s+)?(system\s+)?(prompt|instructions?)", _I),
        CheckSeverity.BLOCKER,
    ),
    InjectionPattern(
        "repeat_prompt",
        re.compile(r"repeat\s+(your\s+)?(system\s+)?(prompt|instructions?)", _I),
        CheckSeverity.BLOCKER,
    ),
    # Delimiter injection
    InjectionPattern(
        "system_delimiter",
        re.compile(r"\[\s*SYSTEM\s*\]", _I),
        CheckSeverity.BLOCKER,
    ),
    InjectionPattern(
        "xml_delimiter",
        re.compile(r"<\s*\|?\s*(system|assistant|user)\s*\|?\s*>", _I),
        CheckSeverity.BLOCKER,
    ),
    InjectionPattern(
        "markdown_delimiter",
        re.compile(r"###\s*(SYSTEM|INSTRUCTION|ADMIN)", _I),
        CheckSeverity.BLOCKER,
    ),
    # Code execution inside a fenced block; [^`]* keeps the match in the fence.
    InjectionPattern(
        "code_execution",
        re.compile(
            r"```(python|javascript|bash|sh|ruby|perl)[^`]*?"
            rf"\b({_EXEC_NAME}|{_EVAL_NAME}|subprocess|os\.system|child_process)\b",
            _I,
        ),
        CheckSeverity.BLOCKER,
    ),
    InjectionPattern(
        "shell_injection",
        re.compile(r"\$\([^)\n]+\)"),
        CheckSeverity.WARNING,
    ),
    # Data exfiltration
    InjectionPattern(
        "data_exfiltration",
        re.compile(r"send\s+(to|via)\s+(http|https|ftp|email)", _I),
        CheckSeverity.BLOCKER,
    ),
    InjectionPattern(
        "upload_attempt",
        re.compile(r"upload\s+(to|this|data)\s+", _I),
        CheckSeverity.WARNING,
    ),
    # Encoding bypass
    InjectionPattern(
        "base64_bypass",
        re.compile(r"base64[.:]?(decode|encode)", _I),
        CheckSeverity.WARNING,
    ),
    InjectionPattern(
        "hex_encoding",
        re.compile(r"\\x[0-9a-f]{2}", _I),
        CheckSeverity.WARNING,
    ),
    InjectionPattern(
        "unicode_encoding",
        re.compile(r"\\u[0-9a-f]{4}", _I),
        CheckSeverity.WARNING,
    ),
)

BLOCKER_PATTERNS: tuple[InjectionPattern, ...] = tuple(
    p for p in INJECTION_PATTERNS if p.severity is CheckSeverity.BLOCKER
)


# ---------------------------------------------------------------------------
# Structure and quality heuristics
# ---------------------------------------------------------------------------

NAME_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^#\s+.+", re.MULTILINE),
    re.compile(r"name\s*:", _I),
)
DESCRIPTION_PATTERN = re.compile(r"description|overview|about", _I)
INPUT_PATTERN = re.compile(r"input|parameter|argument|request", _I)
OUTPUT_PATTERN = re.compile(r"output|response|return|result", _I)
EXAMPLE_PATTERN = re.compile(r"example|usage|demo", _I)
LIMITATION_PATTERN = re.compile(r"limitation|constraint|caveat|warning|note", _I)
CODE_BLOCK_PATTERN = re.compile(r"```[\s\S]*?```")
FORMATTING_PATTERN = re.compile(r"#+\s|[-*]\s|\|.*\|")
