"""
commscope/models/record.py
Shared dataclass schema. All parsers, extractors, aggregators and exporters
use these types. Do not add logic here - data only.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class CallRow:
    """Normalized call log row."""
    number:      str            # '#' column
    parties:     str
    date:        str
    time:        str
    duration:    str            # HH:MM:SS
    direction:   str            # Incoming / Outgoing
    source:      str            # 'Natif' when absent
    video_call:  str = ''
    deleted:     str = ''


@dataclass(frozen=True)
class MessageRow:
    """Normalized conversation/message row."""
    number:                  str
    source:                  str    # left empty when absent - defaulted at tally time
    participants:            str
    time:                    str
    date:                    str
    sender:                  str    # 'From' column
    recipient:               str    # 'To' column
    body:                    str = ''
    participants_timestamps: str = ''
    attachment:              str = ''
    attachment_details:      str = ''


@dataclass(frozen=True)
class ContactRow:
    """Normalized contact-list row."""
    number:               str
    name:                 str
    entries:              str
    source:               str       # 'Natif' when absent
    account:              str = ''
    interaction_statuses: str = ''
    deleted:              str = ''


@dataclass(frozen=True)
class ExtractedIdentity:
    """One partner recovered from one line of a parties/participants field."""
    identifier:   str               # normalized username / UUID / phone
    display_name: str
    id_kind:      str               # username / uuid / phone
    role_prefix:  Optional[str] = None   # From / To / General (call rows only)


@dataclass
class CallPartner:
    """Aggregated call activity for a single partner."""
    identifier:         str
    name:               str = ''
    total_count:        int = 0
    outgoing_count:     int = 0
    incoming_count:     int = 0
    total_duration_sec: int = 0


@dataclass
class MessagePartner:
    """Aggregated message activity for a single partner."""
    identifier:  str
    name:        str = ''
    total_count: int = 0


@dataclass(frozen=True)
class PlatformCount:
    """Row count for one source platform."""
    platform: str
    count:    int


@dataclass(frozen=True)
class LoadedLog:
    """
    Immutable result of one load. Passed explicitly into every analysis
    call - nothing is cached on a processor object.
    """
    kind:        str                # call / message / contact
    rows:        Tuple              # Tuple[CallRow | MessageRow | ContactRow, ...]
    source_hint: Optional[str] = None
    stats:       Dict[str, int] = field(default_factory=dict, compare=False, hash=False)

    @property
    def row_count(self) -> int:
        return len(self.rows)


# Record kinds accepted across the package
RECORD_KINDS: List[str] = ['call', 'message', 'contact']
