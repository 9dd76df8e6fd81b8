"""Literal tokens of the KeyNote line format and its containers."""

# File tags found in the first bytes of a file.
TAG_PLAIN = b"GFKNT"
TAG_PLAIN_LEGACY = b"GFKNX"
TAG_ENCRYPTED = b"GFKNE"

# First line of a file: "#!" + tag + " " + version.
HEADER_PREFIX = "#!"

COMMENT = "#"

# Section markers, matched against the stripped line.
NOTE_BEGIN = "%-"
SECTION_BEGIN = "%+"
CONTENT_BEGIN = "%:"
END_OF_FILE = "%%"

# Sentinel lines.
EOF_SENTINEL = "#!EOF!#"
FLAT_NOTE_SENTINEL = "#!RTF!#"
TREE_NOTE_SENTINEL = "#!TRE!#"
NODE_BEGIN = "#!BeginNode!#"
NODE_END = "#!EndNode!#"
NODE_VIRTUAL = "#!VirtualNode!#"

SENTINELS = frozenset(
    {EOF_SENTINEL, FLAT_NOTE_SENTINEL, TREE_NOTE_SENTINEL, NODE_BEGIN, NODE_END, NODE_VIRTUAL}
)

# Header field codes (the character after the leading '#').
HDR_DESCRIPTION = "D"
HDR_COMMENT = "/"
HDR_AUTHOR = "?"
HDR_ACTIVE_NOTE = "$"
HDR_CREATED = "C"
HDR_FLAGS = "^"
HDR_FORMAT = "F"
HDR_BOOKMARK = "B"
HDR_VERSION = "!"

DATE_FORMAT = "%d-%m-%Y %H:%M:%S"

# Note property codes ("XX=value").
PROP_TITLE = "TT"
PROP_NAME = "ND"
PROP_ID = "ID"
PROP_LEVEL = "LV"
PROP_CREATED = "DC"
PROP_FLAGS = "FL"

# Tree node property codes.
PROP_VIRTUAL_MODE = "VM"
PROP_VIRTUAL_SOURCE = "VF"

RTF_SIGNATURE = "{\\rtf"

# DartNotes container.
DART_SIGNATURE = b"_DART_ID"
DART_FIELD_SEPARATOR = b"\0"
