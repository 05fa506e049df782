"""Text signal extraction from free-form resume text.

Tokenization, sentence statistics, achievement/impact vocabulary counts,
and explicit section/inline-list extraction. Every extractor returns an
empty or zero value when the input or section is missing.
"""

import re

_TOKEN_SPLIT_RE = re.compile(r"[^a-z0-9+.#]")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")


def tokenize(text: str | None) -> list[str]:
    """Lower-case and split on anything outside ``[a-z0-9+.#]``.

    Order-preserving, not deduplicated.
    """
    if not text:
        return []
    return [t for t in _TOKEN_SPLIT_RE.split(str(text).lower()) if t]


def split_sentences(text: str | None) -> list[str]:
    if not text:
        return []
    return [s.strip() for s in _SENTENCE_SPLIT_RE.split(str(text)) if s.strip()]


def count_words(text: str | None) -> int:
    return len(tokenize(text))


# ---------------------------------------------------------------------------
# Achievement vocabularies
# ---------------------------------------------------------------------------

# "30%", "3x", "2.5 million", "120 users", "6 months", "4 projects"
QUANTIFIED_RE = re.compile(
    r"\b\d+(?:\.\d+)?\s?"
    r"(%|x|k|m|million|billion|days?|months?|years?|users?|customers?|people|clients?|projects?)"
    r"(?![a-z0-9])",
    re.IGNORECASE,
)

IMPACT_VERBS: tuple[str, ...] = (
    "led", "built", "delivered", "improved", "increased", "reduced", "optimized",
    "launched", "scaled", "managed", "designed", "implemented", "automated",
    "streamlined", "grew",
)

BUSINESS_OUTCOME_TERMS: tuple[str, ...] = (
    "revenue", "cost", "conversion", "retention", "latency", "performance",
    "uptime", "customer", "sla", "efficiency", "throughput", "churn", "roi", "kpi",
)

BUZZWORDS: tuple[str, ...] = (
    "synergy", "go-getter", "rockstar", "ninja", "guru", "hardworking",
    "results-driven", "dynamic", "fast learner", "team player", "detail-oriented",
)


def count_quantified(text: str | None) -> int:
    """Number of number+unit hits such as ``30%`` or ``12 months``."""
    if not text:
        return 0
    return len(QUANTIFIED_RE.findall(str(text)))


def count_terms(text: str | None, vocabulary: tuple[str, ...]) -> int:
    """Number of vocabulary terms found as case-insensitive substrings."""
    if not text:
        return 0
    lower = str(text).lower()
    return sum(1 for term in vocabulary if term in lower)


# ---------------------------------------------------------------------------
# Section and inline-list extraction
# ---------------------------------------------------------------------------

SECTION_HEADINGS: dict[str, list[str]] = {
    "skills": ["skills", "technical skills", "core skills", "key skills"],
    "experience": ["experience", "work experience", "professional experience", "employment history"],
    "education": ["education", "academic background"],
    "certifications": ["certifications", "certificates", "licenses"],
    "summary": ["summary", "professional summary", "profile", "objective"],
    "projects": ["projects", "key projects"],
    "achievements": ["achievements", "awards"],
}

_KNOWN_HEADING_RE = re.compile(
    r"^\s*(?:{})\s*[:\-]?\s*$".format(
        "|".join(re.escape(v) for variants in SECTION_HEADINGS.values() for v in variants)
    ),
    re.IGNORECASE,
)
# Short capitalized line terminated by a colon or dash: "Languages:", "Volunteering -"
_TERMINATED_HEADING_RE = re.compile(r"^\s*[A-Z][A-Za-z &/]{1,40}\s*[:\-]\s*$")


def _heading_pattern(names: list[str]) -> re.Pattern:
    combined = "|".join(re.escape(n) for n in names)
    return re.compile(rf"^\s*(?:{combined})\s*[:\-]?\s*$", re.IGNORECASE)


def looks_like_heading(line: str) -> bool:
    return bool(_KNOWN_HEADING_RE.match(line) or _TERMINATED_HEADING_RE.match(line))


def extract_section_block(text: str | None, names: list[str]) -> str:
    """Return the trimmed text under the first heading matching ``names``.

    The block ends at the next heading-like line or at end of text.
    Returns '' when no such heading exists.
    """
    if not text or not names:
        return ""
    start = _heading_pattern(names)
    block: list[str] = []
    in_section = False

    for line in str(text).splitlines():
        if not in_section:
            if start.match(line):
                in_section = True
            continue
        if looks_like_heading(line):
            break
        block.append(line)

    return "\n".join(block).strip()


def extract_inline_list(text: str | None, keys: list[str]) -> list[str]:
    """Values of the first single-line ``Key: a, b; c | d`` entry for ``keys``."""
    if not text or not keys:
        return []
    combined = "|".join(re.escape(k) for k in keys)
    pattern = re.compile(rf"^\s*(?:{combined})\s*[:\-]\s*(.+)$", re.IGNORECASE)
    for line in str(text).splitlines():
        match = pattern.match(line)
        if match:
            return [part.strip() for part in re.split(r"[;,|]", match.group(1)) if part.strip()]
    return []


_BULLET_PREFIX_RE = re.compile(r"^[-•*·▪]\s*")


def strip_bullet(line: str) -> str:
    return _BULLET_PREFIX_RE.sub("", line.strip()).strip()


# ---------------------------------------------------------------------------
# Single-value extraction
# ---------------------------------------------------------------------------

_NAME_LINE_RE = re.compile(r"^\s*name\s*[:\-]\s*(.+)$", re.IGNORECASE)
_YEARS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*\+?\s*(?:years|yrs)\b", re.IGNORECASE)
_ROLE_LINE_RE = re.compile(r"^(?:role|title|position)\s*[:\-]\s*(.+)$", re.IGNORECASE)


def extract_name(text: str | None) -> str:
    if not text:
        return ""
    for line in str(text).splitlines():
        match = _NAME_LINE_RE.match(line)
        if match:
            return match.group(1).strip()
    return ""


def extract_experience_years(text: str | None) -> float:
    """First explicit ``N years`` / ``N+ yrs`` mention, else 0."""
    if not text:
        return 0.0
    match = _YEARS_RE.search(str(text))
    return float(match.group(1)) if match else 0.0


def extract_role_lines(block: str) -> list[str]:
    """``Role:`` / ``Title:`` / ``Position:`` values from an experience block."""
    roles: list[str] = []
    for line in block.splitlines():
        match = _ROLE_LINE_RE.match(line.strip())
        if match:
            roles.append(match.group(1).strip())
    return roles
