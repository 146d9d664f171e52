"""
Module: layout.captions

Purpose:
    Build the "Figura N: description" caption for each figure and wrap it
    to the width available under the image.

    Every wrapped line keeps the same style split as a single-line caption:
    the "Figura N:" label is bold, the description italic. Line breaks
    happen at word boundaries; a single word wider than the available width
    is broken between characters.

Key Functions:
    - caption_label(): Label text for a figure
    - compose_caption(): Wrap a caption and compute its height

Key Classes:
    - CaptionLine: One rendered line (bold label part + italic part)
    - CaptionBlock: All lines plus total height

Used By:
    - layout.paginator: Row caption heights
    - output.pdf_renderer: Line-by-line drawing
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Protocol, Sequence, Tuple

FIGURE_LABEL = "Figura"


class TextMeasure(Protocol):
    """Anything that can measure a run of text in layout units."""

    def text_width(self, text: str, font_size: float, *, bold: bool = False, italic: bool = False) -> float:
        ...


@dataclass(frozen=True)
class CaptionLine:
    """
    One caption line.

    Attributes:
        label: Bold part of the line (empty after the label is consumed)
        description: Italic part of the line
    """

    label: str = ""
    description: str = ""

    @property
    def text(self) -> str:
        if self.label and self.description:
            return f"{self.label} {self.description}"
        return self.label or self.description


@dataclass(frozen=True)
class CaptionBlock:
    """
    Wrapped caption for one figure (immutable).

    Attributes:
        index: Figure number (1-based)
        label: Full label, e.g. "Figura 3: " or "Figura 3"
        description: Caption description (stripped)
        lines: Wrapped lines in order
        font_size: Font size used for measuring
        line_height: Height of one line in layout units
    """

    index: int
    label: str
    description: str
    lines: Tuple[CaptionLine, ...]
    font_size: float
    line_height: float

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def height(self) -> float:
        """Total caption height: line count x line height."""
        return self.line_count * self.line_height

    @property
    def is_wrapped(self) -> bool:
        return self.line_count > 1

    @property
    def text(self) -> str:
        """Unwrapped caption text."""
        return f"{self.label}{self.description}" if self.description else self.label

    def truncated(self, max_lines: int) -> "CaptionBlock":
        """Copy keeping only the first `max_lines` lines (never fewer than one)."""
        lines = self.lines[:max(1, max_lines)]
        description = " ".join(line.description for line in lines if line.description)
        return replace(self, lines=lines, description=description)


def caption_label(index: int, description: str = "") -> str:
    """
    Label for a figure.

    Example:
        >>> caption_label(3, "Fachada")
        'Figura 3: '
        >>> caption_label(3)
        'Figura 3'
    """
    if description and description.strip():
        return f"{FIGURE_LABEL} {index}: "
    return f"{FIGURE_LABEL} {index}"


def compose_caption(
    index: int,
    description: str,
    available_width: float,
    font_size: float,
    line_height: float,
    measure: TextMeasure,
) -> CaptionBlock:
    """
    Compose and wrap the caption for one figure.

    The caption stays on one line unless its measured width exceeds
    available_width.

    Args:
        index: Figure number (1-based)
        description: Caption text, possibly empty
        available_width: Width available for the caption
        font_size: Caption font size for the active column count
        line_height: Line height for the active column count
        measure: Provider of text widths in the same units as available_width

    Returns:
        CaptionBlock with wrapped lines and height

    Example:
        >>> block = compose_caption(1, "", 80, 9, 4, measure)
        >>> [line.text for line in block.lines]
        ['Figura 1']
    """
    description = " ".join((description or "").split())
    label = caption_label(index, description)

    words: List[Tuple[str, bool]] = [(w, True) for w in label.split()]
    words += [(w, False) for w in description.split()]

    single = _build_line(words)
    if _line_width(single, font_size, measure) <= available_width:
        lines: Sequence[CaptionLine] = [single]
    else:
        lines = _wrap(words, available_width, font_size, measure)

    return CaptionBlock(
        index=index,
        label=label,
        description=description,
        lines=tuple(lines),
        font_size=font_size,
        line_height=line_height,
    )


def _wrap(
    words: List[Tuple[str, bool]],
    available_width: float,
    font_size: float,
    measure: TextMeasure,
) -> List[CaptionLine]:
    """Greedy word wrap keeping the bold/italic flag of every word."""
    lines: List[CaptionLine] = []
    current: List[Tuple[str, bool]] = []

    for word, bold in words:
        candidate = current + [(word, bold)]
        if _line_width(_build_line(candidate), font_size, measure) <= available_width:
            current = candidate
            continue

        if current:
            lines.append(_build_line(current))
            current = []

        if measure.text_width(word, font_size, bold=bold, italic=not bold) <= available_width:
            current = [(word, bold)]
            continue

        pieces = _break_word(word, bold, available_width, font_size, measure)
        lines.extend(_build_line([(piece, bold)]) for piece in pieces[:-1])
        current = [(pieces[-1], bold)]

    if current:
        lines.append(_build_line(current))
    return lines


def _break_word(
    word: str,
    bold: bool,
    available_width: float,
    font_size: float,
    measure: TextMeasure,
) -> List[str]:
    """Split an over-long word into pieces that each fit the width."""
    pieces: List[str] = []
    piece = ""
    for char in word:
        candidate = piece + char
        if piece and measure.text_width(candidate, font_size, bold=bold, italic=not bold) > available_width:
            pieces.append(piece)
            piece = char
        else:
            piece = candidate
    pieces.append(piece)
    return pieces


def _build_line(words: Sequence[Tuple[str, bool]]) -> CaptionLine:
    label = " ".join(w for w, bold in words if bold)
    description = " ".join(w for w, bold in words if not bold)
    return CaptionLine(label=label, description=description)


def _line_width(line: CaptionLine, font_size: float, measure: TextMeasure) -> float:
    width = 0.0
    if line.label:
        label = f"{line.label} " if line.description else line.label
        width += measure.text_width(label, font_size, bold=True)
    if line.description:
        width += measure.text_width(line.description, font_size, italic=True)
    return width
