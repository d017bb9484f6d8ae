"""Institute letterhead: logo outline and postal address for the cover page."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

import pymupdf

from coverpage.layout.fonts import BLACK, Color

# Logo outline as SVG path data, y axis pointing up, about 3200 x 4200 units.
LOGO_HEIGHT = 4200

LOGO_FRAME = (
    "M629 4183 l-586 -3 -6 -83 c-9 -106 -9 -3955 -1 -4024 l7 -53 1613 0 1614 "
    "0 -2 2074 c-2 1141 -6 2078 -10 2082 -8 8 -1697 13 -2629 7z m2570 -77 c9 "
    "-10 11 -524 9 -2014 -2 -1100 -5 -2003 -8 -2005 -11 -11 -1679 -19 -2372 "
    "-12 l-738 7 0 1997 c0 1098 3 2006 6 2019 l6 22 1543 0 c1298 0 1544 -2 "
    "1554 -14z"
)

LOGO_EMBLEM_DOT = (
    "M1598 3790 c-71 -21 -131 -87 -144 -157 -17 -91 32 -189 113 -225 169 -75 "
    "347 92 278 260 -42 101 -147 152 -247 122z"
)

LOGO_EMBLEM = (
    "M1798 3372 c-15 -3 -18 -19 -20 -125 l-3 -122 -123 -3 -122 -3 -10 26 c-6 "
    "15 -10 72 -10 127 l0 101 -67 -6 c-152 -13 -355 -87 -497 -180 -494 -323 "
    "-655 -985 -375 -1540 55 -108 109 -179 222 -290 l109 -108 -95 -102 c-270 "
    "-292 -357 -389 -357 -400 0 -7 16 -25 35 -40 90 -72 99 -195 20 -289 -14 "
    "-16 -25 -35 -25 -42 0 -10 122 -14 572 -19 728 -9 1456 -9 1631 0 153 7 "
    "160 11 105 66 -53 53 -68 87 -68 149 0 52 4 62 35 97 19 21 49 44 65 51 "
    "17 7 30 20 30 28 0 9 -109 124 -242 255 l-243 238 31 27 c17 15 58 51 92 "
    "79 153 133 285 355 343 578 29 111 31 133 32 290 0 121 -4 192 -16 245 "
    "-92 425 -365 729 -770 859 -98 31 -248 60 -279 53z m-300 -532 c1 -135 0 "
    "-255 -3 -266 -4 -20 -13 -22 -152 -27 -82 -3 -164 -10 -183 -16 -142 -43 "
    "-241 -200 -210 -333 7 -29 21 -69 30 -88 37 -73 128 -134 229 -155 30 -6 "
    "56 -16 59 -23 5 -17 -258 -293 -277 -290 -20 4 -122 135 -166 213 -60 108 "
    "-77 174 -82 331 -6 166 8 251 64 379 80 183 233 349 403 436 88 45 215 89 "
    "250 86 l35 -2 3 -245z m423 221 c257 -87 430 -233 545 -463 96 -190 122 "
    "-420 69 -603 -49 -169 -101 -262 -174 -310 -112 -75 -245 -17 -301 131 "
    "-30 81 -26 246 8 311 29 55 80 94 134 99 24 3 58 7 76 10 l32 5 0 149 0 "
    "150 -250 0 -250 0 0 275 c0 220 3 275 13 275 7 0 51 -13 98 -29z m-147 "
    "-549 c2 -4 8 -337 12 -740 6 -661 9 -732 23 -732 29 1 185 38 251 60 36 "
    "12 108 42 160 66 56 27 103 43 115 40 21 -6 433 -412 425 -419 -17 -15 "
    "-2234 -12 -2228 2 4 13 376 413 398 429 16 11 24 10 62 -14 112 -71 331 "
    "-147 464 -160 l64 -7 0 736 0 736 23 4 c40 8 226 7 231 -1z m676 -1802 "
    "c181 0 270 -4 260 -10 -18 -11 -2063 -14 -2125 -2 -53 9 733 20 1210 15 "
    "209 -1 504 -3 655 -3z m63 -57 c130 -5 167 -9 167 -20 0 -11 -177 -13 "
    "-1044 -13 -906 0 -1045 2 -1049 15 -5 12 10 15 81 18 172 6 1683 7 1845 "
    "0z m51 -80 c70 -4 105 -10 103 -17 -5 -16 -2059 -16 -2064 1 -3 7 10 13 "
    "34 16 66 7 1815 7 1927 0z m110 -79 c9 -3 16 -12 16 -20 0 -12 -156 -14 "
    "-1027 -14 -566 0 -1038 3 -1050 6 -27 7 -30 21 -5 27 26 7 2048 8 2066 1z "
    "m63 -78 c4 -3 3 -9 -1 -13 -10 -10 -1948 -17 -2084 -8 -91 6 -101 9 -90 "
    "22 12 14 126 15 1091 11 593 -3 1081 -8 1084 -12z"
)

INSTITUTE_NAME = "INDIRA GANDHI INSTITUTE OF DEVELOPMENT RESEARCH"
INSTITUTE_ADDRESS = ("Film City Rd", "Mumbai 400065", "India")

_TOKEN_RE = re.compile(r"[MmLlCcZz]|[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_ARITY = {"M": 2, "L": 2, "C": 6}

Point = tuple[float, float]


def parse_path(data: str) -> Iterator[tuple]:
    """Yield absolute drawing commands for SVG path data.

    Handles moveto, lineto, cubic curveto and closepath, absolute and
    relative, including implicit repetition of the previous command (a
    moveto followed by extra pairs continues as lineto).

    Yields:
        ``("M", p)``, ``("L", p)``, ``("C", c1, c2, p)`` or ``("Z",)``.
    """
    tokens = _TOKEN_RE.findall(data)
    pos = 0
    command: str | None = None
    current: Point = (0.0, 0.0)
    start: Point = (0.0, 0.0)

    while pos < len(tokens):
        if tokens[pos].isalpha():
            command = tokens[pos]
            pos += 1
            if command in "Zz":
                current = start
                yield ("Z",)
                continue
        elif command is None or command in "Zz":
            raise ValueError(f"Unexpected number {tokens[pos]!r} in path data")

        op = command.upper()
        arity = _ARITY[op]
        args = [float(t) for t in tokens[pos:pos + arity]]
        if len(args) < arity:
            raise ValueError(f"Command {command!r} needs {arity} numbers")
        pos += arity

        dx, dy = current if command.islower() else (0.0, 0.0)
        points = [(args[i] + dx, args[i + 1] + dy) for i in range(0, arity, 2)]

        if op == "M":
            current = start = points[0]
            yield ("M", current)
            command = "l" if command.islower() else "L"
        elif op == "L":
            current = points[0]
            yield ("L", current)
        else:
            current = points[2]
            yield ("C", points[0], points[1], points[2])


def draw_path(
    page: pymupdf.Page,
    data: str,
    origin: Point,
    scale: tuple[float, float],
    color: Color = BLACK,
) -> None:
    """Fill SVG path data on ``page``.

    Path coordinates map to PDF user space as ``origin + scale * p``; the
    result is flipped to PyMuPDF's top-left origin for drawing.
    """
    height = page.rect.height

    def to_page(p: Point) -> pymupdf.Point:
        return pymupdf.Point(
            origin[0] + scale[0] * p[0],
            height - (origin[1] + scale[1] * p[1]),
        )

    shape = page.new_shape()
    current = start = None
    for command in parse_path(data):
        if command[0] == "M":
            current = start = to_page(command[1])
        elif command[0] == "L":
            end = to_page(command[1])
            shape.draw_line(current, end)
            current = end
        elif command[0] == "C":
            c1, c2, end = (to_page(p) for p in command[1:])
            shape.draw_bezier(current, c1, c2, end)
            current = end
        elif current is not None and current != start:
            shape.draw_line(current, start)
            current = start

    shape.finish(color=None, fill=color, even_odd=True, closePath=True)
    shape.commit()


@dataclass(frozen=True)
class Letterhead:
    """What the cover page prints below the author block."""

    name: str = INSTITUTE_NAME
    address: tuple[str, ...] = INSTITUTE_ADDRESS
    logo: tuple[str, ...] = (LOGO_FRAME, LOGO_EMBLEM_DOT, LOGO_EMBLEM)
    # Mirrored horizontally so the outline sits just right of the page centre.
    logo_origin: Point = (397.5, 240.0)
    logo_scale: tuple[float, float] = (-0.05, 0.05)

    @property
    def logo_top(self) -> float:
        """Highest point of the logo in PDF user space."""
        return self.logo_origin[1] + self.logo_scale[1] * LOGO_HEIGHT

    def draw_logo(self, page: pymupdf.Page, color: Color = BLACK) -> None:
        for data in self.logo:
            draw_path(page, data, self.logo_origin, self.logo_scale, color)
