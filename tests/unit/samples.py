"""Sample note files used across the tests."""

SAMPLE_KNT = """\
#!GFKNT 2.0
#D Test notes
#C 05-03-2021 14:30:00
#$1
#^0100
#B0|2|15|Shopping
%-
ND=Welcome
ID=1
DC=05-03-2021 14:30:00
%+
TT=Intro
%:
Hello there
Second line
%+
TT=Details
%:
{\\rtf1\\ansi
%%
not the end}
#!TRE!#
ND=Projects
ID=2
#!BeginNode!#
ND=Alpha
LV=0
%:
alpha text
#!EndNode!#
#!BeginNode!#
ND=Beta
LV=1
%:
beta text
#!EndNode!#
#!BeginNode!#
ND=Gamma
LV=0
#!VirtualNode!#
VM=mirror
VF=C:\\notes\\gamma.txt
%:
#!EndNode!#
%%
"""

GAMMA_SOURCE = "C:\\notes\\gamma.txt"


def dart_block(data: bytes) -> bytes:
    """One DartNotes block: decimal length line, then the bytes."""
    return str(len(data)).encode("ascii") + b"\n" + data


def build_dartnotes(
    notes: list[tuple[str, str, str]],
    *,
    last_tab: bytes = b"0",
    signature: bytes = b"_DART_ID",
) -> bytes:
    """Build a DartNotes container from (name, created, content) triples."""
    out = dart_block(b"\0".join([signature, b"1.0", b"", last_tab]))
    for name, created, content in notes:
        out += dart_block(f"{name}\0{created}".encode())
        out += dart_block(content.encode())
    return out
