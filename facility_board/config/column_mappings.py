"""
Column Mappings and Text Rules Configuration

Central source of truth for export header -> logical field mappings and
the text markers used by the filter, mode detector, and display rules.

Naming conventions:
- Export headers: whatever the reservation system emits that day
  (mixed case, trailing colons, run-together words)
- Logical fields: snake_case names used inside the pipeline
- Output keys: camelCase names consumed by the board
"""

# =============================================================================
# EXPORT HEADERS -> LOGICAL FIELDS
# =============================================================================

# Synonyms are matched as case-insensitive substrings of the normalized
# header. Within a field, earlier synonyms are more specific and win.
HEADER_SYNONYMS = {
    "location": ("location", "site", "building"),
    "facility": ("facility", "resource"),
    "reserved_time": ("reserved time", "reservedtime", "time"),
    "reservee": ("reservee", "reserved by", "customer"),
    "purpose": ("reservation purpose", "reservationpurpose", "purpose"),
}

# Resolution order: "time" and "purpose" are loose synonyms, so the fields
# with distinctive headers claim their columns first.
FIELD_RESOLUTION_ORDER = [
    "facility",
    "reservee",
    "purpose",
    "location",
    "reserved_time",
]

REQUIRED_FIELDS = [
    "location",
    "facility",
    "reserved_time",
    "reservee",
    "purpose",
]

# Delimiters tried when parsing the export, in tie-break order
CANDIDATE_DELIMITERS = [",", ";", "\t"]


# =============================================================================
# OUTPUT: board feed keys
# =============================================================================
SLOT_COLUMNS = [
    "roomId",
    "startMinute",
    "endMinute",
    "title",
    "subtitle",
    "org",
    "contact",
]

ROOM_COLUMNS = [
    "id",
    "label",
    "group",
]

# Slots are considered duplicates when these match (case-insensitive text)
SLOT_IDENTITY_COLUMNS = [
    "roomId",
    "startMinute",
    "endMinute",
    "title",
    "subtitle",
]


# =============================================================================
# ROW FILTER: target building and administrative markers
# =============================================================================

# Only the Athletic & Event Center appears on the board
TARGET_LOCATION_NAMES = {
    "athletic & event center",
    "athletic and event center",
    "athletic & events center",
    "athletic and events center",
    "ac",
}
TARGET_LOCATION_PATTERN = r"athletic\s*(?:&|and)\s*events?\s*center"

# Facility labels carry this prefix when location is left blank
TARGET_FACILITY_PREFIX_PATTERN = r"^AC\b"

# Internal bookings that never reach the board
ADMINISTRATIVE_MARKERS = (
    "internal hold",
    "staff hold",
    "system hold",
    "do not book",
    "blackout",
)


# =============================================================================
# MODE DETECTION: sentinel rows
# =============================================================================

# The fieldhouse-wide season booking whose purpose names the installed surface
MODE_SENTINEL_FACILITY_PATTERN = r"^AC\s*Fieldhouse\s*-?\s*Court\s*3\s*-\s*8$"

TURF_SENTINEL_PHRASES = (
    "turf install",
    "turf season",
)

COURT_SENTINEL_PHRASES = (
    "court install",
    "court season",
)


# =============================================================================
# GROUPING: volatile purpose text
# =============================================================================

# Confirmation / receipt numbers differ between rows of one booking
VOLATILE_PURPOSE_PATTERNS = (
    r"\(\s*(?:conf(?:irmation)?|receipt|booking|res(?:ervation)?)\.?\s*(?:#|no\.?|number)?\s*:?\s*\d{4,}\s*\)",
    r"\b(?:conf(?:irmation)?|receipt|booking|res(?:ervation)?)\.?\s*(?:#|no\.?|number)\s*:?\s*\d{4,}",
    r"#\s*\d{4,}",
)


# =============================================================================
# DISPLAY TEXT
# =============================================================================

# Left segment of "Org, Contact" reservee text that marks an organization
ORGANIZATION_KEYWORDS = (
    "llc",
    "inc",
    "corp",
    "co",
    "foundation",
    "association",
    "academy",
    "club",
    "basketball",
    "volleyball",
    "training",
    "gym",
    "league",
    "program",
    "rec",
    "school",
    "church",
    "team",
)

PICKLEBALL_TITLE = "Open Pickleball"

# Words stripped from pickleball purpose text before it becomes a subtitle
PICKLEBALL_BOILERPLATE = (
    r"open",
    r"pickle\s*ball",
    r"drop[\s-]*in",
    r"play",
    r"raec",
    r"front\s*desk",
)

CATCH_CORNER_TITLE = "Catch Corner"

# Administrative annotations removed from subtitles
INTERNAL_NOTE_PATTERNS = (
    r"\binternal\s+holds?\b",
    r"\bstaff\s+only\b",
    r"\bdo\s+not\s+publish\b",
    r"\[[^\]]*internal[^\]]*\]",
    r"\*\*[^*]*\*\*",
)

DEFAULT_TITLE = "Reserved"
