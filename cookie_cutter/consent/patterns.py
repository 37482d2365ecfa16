"""Fixed pattern sets and markers used to classify consent controls.

Accept and save patterns are written without anchors and are applied
with ``fullmatch`` against a normalised (trimmed, lower-cased) label.
Exclusion patterns are applied with ``search`` so that any mention of
a settings/reject/navigation intent inside a label disqualifies it.
Context keywords are plain substrings matched against ancestor text.
"""

from __future__ import annotations

import re


def _compile(*sources: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(src, re.IGNORECASE) for src in sources)


# Labels longer than this are paragraphs, not button captions.
MAX_LABEL_LENGTH = 50

ACCEPT_PATTERNS: tuple[re.Pattern[str], ...] = _compile(
    r"accept(\s+all)?(\s+cookies?)?(\s*(and\s+|&\s*)?continue)?",
    r"agree(\s+to\s+all)?",
    r"allow(\s+all)?",
    r"i\s+(agree|accept)",
    r"(got\s+it|ok(ay)?|yes|continue|understood)",
    r"consent",
    r"yes,?\s+i'?m\s+happy",
    r"that'?s\s+(ok|fine|okay)",
    r"i\s+understand",
    r"(enable|allow)\s+all",
    # German
    r"(alle\s+)?akzeptieren",
    r"(allen\s+)?zustimmen",
    r"verstanden",
    r"ich\s+stimme\s+zu",
    r"einverstanden",
    # French
    r"(tout\s+)?accepter(\s+et\s+continuer)?",
    r"j'accepte",
    r"compris",
    r"d'accord",
    # Spanish
    r"aceptar(\s+todo)?",
    r"acepto",
    r"de\s+acuerdo",
    # Italian
    r"accetta(\s+tutto)?",
    r"accetto",
    # Dutch
    r"(alles\s+)?accepteren",
    r"akkoord",
    # Portuguese
    r"aceitar(\s+tudo)?",
    r"concordo",
    # Polish
    r"(zaakceptuj|zgadzam\s+się)",
    # Russian
    r"(принять|согласен)",
)

# Follow-up controls for two-step CMPs (e.g. Ketch).
SAVE_PATTERNS: tuple[re.Pattern[str], ...] = _compile(
    r"save(\s+(choices|preferences|settings|selection))?",
    r"confirm(\s+(choices|preferences|selection|my\s+choice))?",
    r"submit",
    r"done",
    r"close",
    r"(auswahl\s+)?speichern",
    r"bestätigen",
    r"sauvegarder",
    r"confirmer",
    r"opslaan",
    r"bevestigen",
)

EXCLUSION_PATTERNS: tuple[re.Pattern[str], ...] = _compile(
    r"settings|preferences|customize|customise|manage|options",
    r"cookie\s*settings|manage\s*cookies",
    r"reject|decline|deny|refuse|no\s*thanks",
    r"necessary\s*only|essential\s*only",
    r"policy|privacy|terms|conditions|learn\s*more|read\s*more|details",
    r"sign\s*(up|in)|log\s*(in|out)|register",
    r"follow|subscribe|like|share|comment|reply|post",
    r"download|install|buy|purchase|add\s*to\s*cart|checkout",
)

CONTEXT_KEYWORDS: tuple[str, ...] = (
    "cookie",
    "cookies",
    "consent",
    "gdpr",
    "dsgvo",
    "ccpa",
    "privacy",
    "tracking",
    "personalization",
    "personalisation",
    "personal data",
    "your data",
    "advertising",
    "partners",
    "we use",
    "this site uses",
    "this website uses",
    "your experience",
    "improve your experience",
    "asks for your consent",
)

SCROLL_LOCK_CLASSES: tuple[str, ...] = (
    "modal-open",
    "no-scroll",
    "overflow-hidden",
    "cookie-consent-active",
    "gdpr-active",
    "popin-gdpr-no-scroll",
    "sp-message-open",
)

# Sourcepoint renders its message in a cross-origin iframe that can
# neither be inspected nor clicked; the only remedy is removal.
SOURCEPOINT_IFRAME_ID_PREFIX = "sp_message_iframe"
SOURCEPOINT_CONTAINER_MARKER = "sp_message_container"

# Inline styles forced onto a matched-but-hidden accept control and
# onto its hidden ancestors.
FORCE_VISIBLE_STYLE = "display:inline-block!important;visibility:visible!important;opacity:1!important"
FORCE_VISIBLE_ANCESTOR_STYLE = "display:block!important;visibility:visible!important"


def matches_keyword(text: str) -> bool:
    """Return ``True`` if lower-cased *text* contains a context keyword."""
    return any(kw in text for kw in CONTEXT_KEYWORDS)
