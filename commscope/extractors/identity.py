"""
commscope/extractors/identity.py
Recovers communication partners from free-text "Parties" / "Participants"
cells.

Each line of the cell names at most one partner. The platform hint picks
the rule set:

  snapchat  - username, then display name
  whatsapp  - 5-20 digit phone, optional @s.whatsapp.net, optional name
  signal    - 36-char UUID or phone, then name
  (other)   - phone first, then username

Call-log lines may start with a role prefix (From: / To: / General:),
which is stripped before matching and kept on the identity.

Identifiers are normalized (whitespace, hyphens and dots removed; phones
also lose a leading '+') so the same partner written two ways collapses
to one key. Lines that match nothing are skipped silently.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Pattern, Tuple

from commscope.models.record import ExtractedIdentity

logger = logging.getLogger(__name__)

UNKNOWN_NAME = 'Inconnu'

ID_USERNAME = 'username'
ID_UUID = 'uuid'
ID_PHONE = 'phone'

ROLE_PREFIX = re.compile(r'^(From|To|General):\s*(.+)$')
SEPARATORS = re.compile(r'[\s\-.]')
UUID_LENGTH = 36


@dataclass(frozen=True)
class ExtractionRule:
    """One compiled pattern. Group 1 is the identifier token, group 2 the name."""
    name:     str
    pattern:  Pattern
    classify: Callable[[str], str]


USERNAME_RULE = ExtractionRule(
    name     = 'username',
    pattern  = re.compile(r'(\S+)\s+(.*)'),
    classify = lambda token: ID_USERNAME,
)
WHATSAPP_RULE = ExtractionRule(
    name     = 'whatsapp',
    pattern  = re.compile(r'(\+?\d{5,20})(?:@s\.whatsapp\.net)?(?:\s+(.+))?'),
    classify = lambda token: ID_PHONE,
)
SIGNAL_RULE = ExtractionRule(
    name     = 'signal',
    pattern  = re.compile(r'([A-Fa-f0-9\-]{36}|\+?\d[\d\s\-.]{8,}|\d{5,20})\s*(.*)'),
    classify = lambda token: ID_UUID if len(token) == UUID_LENGTH else ID_PHONE,
)
PHONE_RULE = ExtractionRule(
    name     = 'phone',
    pattern  = re.compile(r'(\+?\d[\d\s\-.]{8,}|\d{5,20})\s*(.*)'),
    classify = lambda token: ID_PHONE,
)

PLATFORM_RULES: Dict[str, Tuple[ExtractionRule, ...]] = {
    'snapchat': (USERNAME_RULE,),
    'whatsapp': (WHATSAPP_RULE,),
    'signal':   (SIGNAL_RULE,),
}
FALLBACK_RULES: Tuple[ExtractionRule, ...] = (PHONE_RULE, USERNAME_RULE)


def rules_for(platform_hint: Optional[str]) -> Tuple[ExtractionRule, ...]:
    """Rule set for a platform hint; unknown or missing hints get the fallback."""
    if not platform_hint:
        return FALLBACK_RULES
    return PLATFORM_RULES.get(platform_hint.strip().lower(), FALLBACK_RULES)


def normalize_identifier(token: str, id_kind: str = ID_USERNAME) -> str:
    """Strip separators so '555-123-4567' and '5551234567' share one key."""
    cleaned = SEPARATORS.sub('', token or '')
    if id_kind == ID_PHONE:
        cleaned = cleaned.lstrip('+')
    return cleaned


def parse_line(
    line: str,
    platform_hint: Optional[str] = None,
    with_roles: bool = False,
) -> Optional[ExtractedIdentity]:
    """
    Extract one identity from one line, or None when nothing matches.
    with_roles enables role-prefix stripping (call logs only).
    """
    text = (line or '').strip()
    if not text:
        return None

    role: Optional[str] = None
    if with_roles:
        m = ROLE_PREFIX.match(text)
        if m:
            role = m.group(1)
            text = m.group(2).strip()

    for rule in rules_for(platform_hint):
        m = rule.pattern.search(text)
        if not m:
            continue
        token = (m.group(1) or '').strip()
        id_kind = rule.classify(token)
        identifier = normalize_identifier(token, id_kind)
        if not identifier:
            return None
        name = (m.group(2) or '').strip() or UNKNOWN_NAME
        return ExtractedIdentity(
            identifier   = identifier,
            display_name = name,
            id_kind      = id_kind,
            role_prefix  = role,
        )

    return None


def extract_identities(
    text: str,
    platform_hint: Optional[str] = None,
    with_roles: bool = False,
) -> List[ExtractedIdentity]:
    """
    Extract every partner named in a multi-line cell.

    Repeated identifiers within the cell are collapsed - the first line
    naming a partner wins - so one row never counts a partner twice.
    """
    found: Dict[str, ExtractedIdentity] = {}
    if not text:
        return []

    for line in text.splitlines():
        ident = parse_line(line, platform_hint, with_roles)
        if ident is None:
            continue
        if ident.identifier in found:
            continue
        found[ident.identifier] = ident

    return list(found.values())
