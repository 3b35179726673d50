"""Bitmap text with inline style markup.

Markup starts with ``$``: ``$$`` is a literal dollar sign and ``${...}``
changes the style of the text that follows:

* ``${^N}`` scale N percent, ``${%N}`` opacity N percent
* ``${#RRGGBB}`` solid color, ``${_N}`` a space N pixels wide
* ``${&...}`` rainbow colors (``=N`` speed percent, ``-N`` length, ``<`` reverse)
* ``${~...}`` wavy text (``^N`` size percent, ``-N`` length, ``=N`` speed percent)
* ``${!...}`` reset ``#`` color, ``^`` scale, ``%`` opacity, ``&`` rainbow,
  ``~`` wave, or ``*`` everything
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any

from .drawlist import DrawList

CHAR_COIN1 = "\x80"
CHAR_COIN2 = "\x81"
CHAR_COIN3 = "\x82"
CHAR_COIN4 = "\x83"
CHAR_LIVES = "\x7f"
CHAR_COINS = CHAR_COIN1 + CHAR_COIN2 + CHAR_COIN3 + CHAR_COIN4

CHAR_CATCOIN_TLO = "\x84"
CHAR_CATCOIN_TRO = "\x85"
CHAR_CATCOIN_BLO = "\x86"
CHAR_CATCOIN_BRO = "\x87"
CHAR_CATCOIN_TLF = "\x88"
CHAR_CATCOIN_TRF = "\x89"
CHAR_CATCOIN_BLF = "\x8a"
CHAR_CATCOIN_BRF = "\x8b"

CHAR_CATCOIN_TL = 0
CHAR_CATCOIN_TR = 1
CHAR_CATCOIN_BL = 2
CHAR_CATCOIN_BR = 3

CHAR_CATCOIN_O = CHAR_CATCOIN_TLO + CHAR_CATCOIN_TRO + CHAR_CATCOIN_BLO + CHAR_CATCOIN_BRO
CHAR_CATCOIN_F = CHAR_CATCOIN_TLF + CHAR_CATCOIN_TRF + CHAR_CATCOIN_BLF + CHAR_CATCOIN_BRF

GLYPH_SIZE = 10
GLYPHS_PER_ROW = 12
DEFAULT_SPACING = 8
WHITE = 0xFFFFFF

_TAU = 2 * math.pi
_HEX = "0123456789abcdefABCDEF"


@dataclass
class TextSegment:
    """A run of text sharing one style."""

    text: str = ""
    color: int = WHITE
    scale: float = 1.0
    opacity: float = 1.0
    spacing: int = DEFAULT_SPACING
    rainbow: bool = False
    rainbow_length: int = 0
    rainbow_speed: float = 0.0
    wavy: bool = False
    wave_length: int = 0
    wave_speed: float = 0.0
    wave_size: float = 0.0


class _Scanner:
    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def next(self) -> str | None:
        if self._pos >= len(self._text):
            self._pos = len(self._text)
            return None
        ch = self._text[self._pos]
        self._pos += 1
        return ch

    def _take_while(self, allowed: str) -> str:
        start = self._pos
        while self._pos < len(self._text) and self._text[self._pos] in allowed:
            self._pos += 1
        return self._text[start:self._pos]

    def number(self) -> int:
        digits = self._take_while("0123456789")
        return int(digits) if digits else 0

    def color(self) -> int:
        digits = self._take_while(_HEX)
        return int(digits, 16) & 0xFFFFFFFF if digits else 0


def _parse_rainbow(scan: _Scanner, seg: TextSegment) -> None:
    seg.rainbow = True
    seg.rainbow_length = 16
    seg.rainbow_speed = 1.0
    reverse = False
    while (ch := scan.next()) is not None and ch != "}":
        if ch == "=":
            seg.rainbow_speed = scan.number() / 100
        elif ch == "-":
            seg.rainbow_length = scan.number()
        elif ch == "<":
            reverse = True
    if reverse:
        seg.rainbow_speed *= -1


def _parse_wave(scan: _Scanner, seg: TextSegment) -> None:
    seg.wavy = True
    seg.wave_size = 2.0
    seg.wave_length = 8
    seg.wave_speed = 1.0
    while (ch := scan.next()) is not None and ch != "}":
        if ch == "^":
            seg.wave_size = scan.number() / 100
        elif ch == "-":
            seg.wave_length = scan.number()
        elif ch == "=":
            seg.wave_speed = scan.number() / 100


def _parse_reset(scan: _Scanner, seg: TextSegment) -> None:
    while (ch := scan.next()) is not None and ch != "}":
        if ch in "#*":
            seg.color = WHITE
        if ch in "^*":
            seg.scale = 1.0
        if ch in "%*":
            seg.opacity = 1.0
        if ch in "&*":
            seg.rainbow = False
        if ch in "~*":
            seg.wavy = False


def parse_text_graph(text: str) -> list[TextSegment]:
    """Split marked-up text into styled segments."""
    scan = _Scanner(text)
    seg = TextSegment()
    segments = [seg]
    while (ch := scan.next()) is not None:
        if ch != "$":
            seg.text += ch
            continue
        ch = scan.next()
        if ch is None:
            break
        if ch == "$":
            seg.text += "$"
            continue
        if ch != "{":
            seg.text += "$" + ch
            continue
        if seg.text:
            seg = replace(seg, text="", spacing=DEFAULT_SPACING)
            segments.append(seg)
        ch = scan.next()
        if ch is None:
            break
        if ch in "^%#_":
            if ch == "^":
                seg.scale = scan.number() / 100
            elif ch == "%":
                seg.opacity = scan.number() / 100
            elif ch == "#":
                seg.rainbow = False
                seg.color = scan.color()
            else:
                seg.spacing = scan.number()
                seg.text += " "
            if scan.next() is None:
                break
        elif ch == "&":
            _parse_rainbow(scan, seg)
        elif ch == "~":
            _parse_wave(scan, seg)
        elif ch == "!":
            _parse_reset(scan, seg)
    return segments


def hsv_to_rgb(h: float, s: float, v: float) -> tuple[float, float, float]:
    """Convert a hue in [0, 1) with saturation and value to RGB in [0, 1]."""
    i = math.floor(h * 6)
    f = h * 6 - i
    p = v * (1 - s)
    q = v * (1 - f * s)
    t = v * (1 - (1 - f) * s)
    return [
        (v, t, p),
        (q, v, p),
        (p, v, t),
        (p, q, v),
        (t, p, v),
        (v, p, q),
    ][i % 6]


def _glyph_source(ch: str) -> tuple[int, int]:
    index = ord(ch) - 32
    row, col = divmod(abs(index), GLYPHS_PER_ROW)
    if index < 0:
        row, col = -row, -col
    return col * GLYPH_SIZE, row * GLYPH_SIZE


def _glyph_color(seg: TextSegment, glyph: int, timer: int, alpha: int) -> int:
    if not seg.rainbow:
        return ((seg.color << 8) | alpha) & 0xFFFFFFFF
    hue = (timer * seg.rainbow_speed) / -60 + (glyph % seg.rainbow_length) / seg.rainbow_length
    r, g, b = hsv_to_rgb(hue % 1.0, 1.0, 1.0)
    return (int(r * 255) << 24) | (int(g * 255) << 16) | (int(b * 255) << 8) | alpha


def _render_segments(
    drawlist: DrawList, x: float, y: float, segments: list[TextSegment], timer: int, texture: Any
) -> None:
    origin_x = x
    glyph = 0
    for seg in segments:
        if not seg.text:
            break
        spacing = seg.spacing
        for ch in seg.text:
            if ch == "\n":
                x = origin_x
                y += seg.scale * spacing
                spacing = DEFAULT_SPACING
                continue
            wave = 0.0
            if seg.wavy:
                phase = (timer * seg.wave_speed) / -60 * _TAU + (
                    glyph % seg.wave_length
                ) / seg.wave_length * _TAU
                wave = math.sin(phase) * seg.wave_size * seg.scale
            alpha = min(max(int(seg.opacity * 255), 0), 255)
            src_x, src_y = _glyph_source(ch)
            size = seg.scale * GLYPH_SIZE
            drawlist.set_color(_glyph_color(seg, glyph, timer, alpha))
            drawlist.append(texture, x, y + wave, size, size, src_x, src_y, GLYPH_SIZE, GLYPH_SIZE)
            x += seg.scale * spacing
            spacing = DEFAULT_SPACING
            glyph += 1


def render_text(
    drawlist: DrawList, x: float, y: float, text: str, timer: int, texture: Any
) -> None:
    """Draw marked-up ``text`` at (x, y) using the font ``texture``.

    ``timer`` is the frame counter that drives rainbow and wave animation.
    The draw list's color is restored afterwards.
    """
    previous = drawlist.color
    _render_segments(drawlist, x, y, parse_text_graph(text), timer, texture)
    drawlist.set_color(previous)