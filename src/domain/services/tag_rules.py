"""
Rule tables for automatic snippet tagging.

Each table maps a category label to an ordered tuple of compiled,
case-insensitive patterns. A category applies when any of its patterns
matches the raw code text. Tables are built once at import time and are
read-only afterwards.

Patterns must stay free of nested quantifiers so matching time remains
linear in the size of the code.
"""

from __future__ import annotations

import re
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Pattern, Tuple


class Category(str, Enum):
    LOOP = "loop"
    API = "api"
    ERROR_HANDLING = "error-handling"
    ARRAY_OPS = "array-ops"
    DEBUGGING = "debugging"
    ASYNC = "async"
    DATABASE = "database"
    AUTH = "auth"
    VALIDATION = "validation"
    UTILITY = "utility"
    UI = "ui"
    TESTING = "testing"


CATEGORY_VOCABULARY = frozenset(c.value for c in Category)

RuleTable = Mapping[str, Tuple[Pattern[str], ...]]


def _compile_table(raw: Dict[Category, Iterable[str]]) -> RuleTable:
    table: Dict[str, Tuple[Pattern[str], ...]] = {}
    for category, patterns in raw.items():
        table[category.value] = tuple(re.compile(p, re.IGNORECASE) for p in patterns)
    return MappingProxyType(table)


COMMON_RULES: RuleTable = _compile_table({
    Category.LOOP: [
        r"\b(for|while)\s*\(",
        r"\b(forEach|map|filter|reduce)\s*\(",
        r"\bdo\s*\{",
    ],
    Category.API: [
        r"\b(fetch|axios|XMLHttpRequest)\s*\(",
        r"\b(http|https)\.(get|post|put|delete|patch)",
    ],
    Category.ERROR_HANDLING: [
        r"\btry\s*\{",
        r"\bcatch\s*\(",
        r"\bthrow\s+",
    ],
    Category.ARRAY_OPS: [
        r"\b(map|filter|reduce|find|some|every|includes)\s*\(",
        r"\b(push|pop|shift|unshift|splice|slice)\s*\(",
    ],
    Category.DEBUGGING: [
        r"\bconsole\.(log|error|warn|info|debug)\s*\(",
        r"\bdebugger\b",
    ],
    Category.ASYNC: [
        r"\basync\s+function\b",
        r"\bawait\s+",
        r"\bPromise\.(all|race|resolve|reject)\b",
    ],
    Category.DATABASE: [
        r"\b(mongodb|mongoose|sql|sequelize|prisma)\b",
        r"\b(select|insert|update|delete|find|create|save)\b",
    ],
    Category.AUTH: [
        r"\b(jwt|token|auth|login|register|password|hash)\b",
        r"\b(session|cookie|oauth|google|github)\b",
    ],
    Category.VALIDATION: [
        r"\b(validate|validation|isValid|required|optional)\b",
        r"\b(zod|joi|yup|validator)\b",
    ],
    Category.UTILITY: [
        r"\b(utils|helpers|format|parse|stringify|encode|decode)\b",
        r"\b(date|time|number|string|array|object)\b",
    ],
    Category.UI: [
        r"\b(react|vue|angular|svelte)\b",
        r"\b(component|render|props|state|style|css)\b",
    ],
    Category.TESTING: [
        r"\b(jest|mocha|chai|cypress|test|spec|expect)\b",
        r"\b(describe|it|before|after|mock|spy)\b",
    ],
})


LANGUAGE_RULES: Mapping[str, RuleTable] = MappingProxyType({
    "javascript": _compile_table({
        Category.ASYNC: [
            r"\bnew\s+Promise\b",
            r"\b\.then\(",
            r"\b\.catch\(",
        ],
    }),
    "typescript": _compile_table({
        Category.VALIDATION: [
            r"\b(interface|type|enum)\b",
            r"\b(extends|implements)\b",
        ],
        Category.ASYNC: [
            r"\bnew\s+Promise\b",
            r"\bPromise\s*<",
            r"\b\.then\(",
        ],
    }),
    "python": _compile_table({
        Category.ASYNC: [
            r"\basync\s+def\b",
            r"\bawait\b",
        ],
        Category.LOOP: [
            r"\bfor\s+\w+\s+in\b",
            r"\bwhile\s+\w+\s*:",
        ],
        Category.ERROR_HANDLING: [
            r"\btry\s*:",
            r"\bexcept\b",
            r"\braise\b",
        ],
        Category.TESTING: [
            r"\b(pytest|unittest)\b",
            r"(?m)^\s*assert\b",
        ],
    }),
    "go": _compile_table({
        Category.ASYNC: [
            r"\bgo\s+(func\b|\w+\s*\()",
            r"\bchan\b",
            r"\bsync\.WaitGroup\b",
        ],
        Category.LOOP: [
            r"\bfor\b[^{\n]*\brange\b",
        ],
        Category.ERROR_HANDLING: [
            r"\bif\s+err\s*!=\s*nil\b",
            r"\bpanic\s*\(",
        ],
    }),
    "rust": _compile_table({
        Category.ASYNC: [
            r"\basync\s+(fn|move)\b",
            r"\.await\b",
        ],
        Category.LOOP: [
            r"\bloop\s*\{",
            r"\bfor\s+\w+\s+in\b",
        ],
        Category.ERROR_HANDLING: [
            r"\bResult\s*<",
            r"\?\s*;",
            r"\.(unwrap|expect)\s*\(",
        ],
    }),
    "ruby": _compile_table({
        Category.LOOP: [
            r"\.(each|times|each_with_index)\s+do\b",
            r"\buntil\b",
        ],
        Category.ERROR_HANDLING: [
            r"\bbegin\b",
            r"\brescue\b",
            r"\braise\b",
        ],
    }),
    "csharp": _compile_table({
        Category.ASYNC: [
            r"\basync\s+Task\b",
            r"\bawait\b",
        ],
        Category.LOOP: [
            r"\bforeach\s*\(",
        ],
    }),
    "java": _compile_table({
        Category.ASYNC: [
            r"\bCompletableFuture\b",
            r"\bExecutorService\b",
        ],
    }),
    "kotlin": _compile_table({
        Category.ASYNC: [
            r"\bsuspend\s+fun\b",
            r"\blaunch\s*\{",
        ],
        Category.LOOP: [
            r"\bfor\s*\(\s*\w+\s+in\b",
            r"\brepeat\s*\(",
        ],
    }),
    "bash": _compile_table({
        Category.LOOP: [
            r"\bfor\s+\w+\s+in\b",
            r";\s*do\b",
        ],
        Category.ERROR_HANDLING: [
            r"\bset\s+-e\b",
            r"\btrap\b",
        ],
    }),
})
