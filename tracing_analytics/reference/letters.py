"""
Vector stroke definitions for the uppercase alphabet.

Letters are authored on one of two design grids and converted onto the
600x800 tracing canvas:

- the 100x100 grid: ``x = 100 + 4 * gx``, ``y = 100 + 4 * gy``
- the 210x297 (A4) grid: ``x = 100 + gx * 400 / 210``, ``y = gy * 500 / 297``

Each stroke is an ordered list of PathSegment instances, and strokes are
listed in the order a child is taught to draw them.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from ..config.settings import DEFAULT_CANVAS
from .path_generator import PathSegment, ReferencePath, generate_ideal_path

EASY = 'easy'
MEDIUM = 'medium'
HARD = 'hard'

_LEFT = (DEFAULT_CANVAS.WIDTH - DEFAULT_CANVAS.LETTER_WIDTH) / 2
_TOP = 100.0


def _g(x: float, y: float) -> Tuple[float, float]:
    """100x100 design grid to canvas."""
    scale = DEFAULT_CANVAS.LETTER_WIDTH / 100
    return _LEFT + scale * x, _TOP + scale * y


def _a4(x: float, y: float) -> Tuple[float, float]:
    """210x297 design grid to canvas."""
    return _LEFT + x * DEFAULT_CANVAS.LETTER_WIDTH / 210, y * DEFAULT_CANVAS.LETTER_HEIGHT / 297


def _line(grid, x1, y1, x2, y2) -> PathSegment:
    return PathSegment.line(*grid(x1, y1), *grid(x2, y2))


def _bezier(grid, x1, y1, cx1, cy1, cx2, cy2, x2, y2) -> PathSegment:
    return PathSegment.bezier(*grid(x1, y1), *grid(cx1, cy1), *grid(cx2, cy2), *grid(x2, y2))


@dataclass(frozen=True)
class LetterDefinition:
    """Stroke geometry and teaching metadata for one letter."""
    letter: str
    strokes: Tuple[Tuple[PathSegment, ...], ...]
    difficulty: str
    confusion_pairs: Tuple[str, ...] = ()

    @property
    def expected_stroke_count(self) -> int:
        return len(self.strokes)

    def reference_path(self, samples_per_segment: int = 30) -> ReferencePath:
        return generate_ideal_path(self.strokes, samples_per_segment)


def _define(letter: str, strokes: List[List[PathSegment]], difficulty: str, confusions: str = '') -> LetterDefinition:
    return LetterDefinition(
        letter=letter,
        strokes=tuple(tuple(stroke) for stroke in strokes),
        difficulty=difficulty,
        confusion_pairs=tuple(confusions),
    )


# Shared strokes
_C_CURVE = [
    _bezier(_g, 70, 20, 50, 15, 30, 25, 30, 50),
    _bezier(_g, 30, 50, 30, 75, 50, 85, 70, 80),
]

_O_LOOP = [
    _bezier(_g, 50, 20, 67.07, 20, 75, 30.886, 75, 50),
    _bezier(_g, 75, 50, 75, 69.114, 67.07, 80, 50, 80),
    _bezier(_g, 50, 80, 32.93, 80, 25, 69.114, 25, 50),
    _bezier(_g, 25, 50, 25, 30.886, 32.93, 20, 50, 20),
]

_P_STEM = [_line(_g, 30, 20, 30, 80)]
_P_BOWL = [_bezier(_g, 30, 20, 75, 20, 70, 50, 30, 50)]

_E_STROKES = [
    [_line(_g, 20, 10, 20, 90)],
    [_line(_g, 20, 10, 70, 10)],
    [_line(_g, 20, 50, 60, 50)],
    [_line(_g, 20, 90, 70, 90)],
]


LETTER_DEFINITIONS: Dict[str, LetterDefinition] = {d.letter: d for d in (
    _define('A', [
        [_line(_g, 20, 90, 50, 10)],
        [_line(_g, 50, 10, 80, 90)],
        [_line(_g, 30, 60, 70, 60)],
    ], MEDIUM, 'V'),
    _define('B', [
        [_line(_g, 30, 80, 30, 20)],
        [_bezier(_g, 30, 20, 72, 20, 68, 50, 30, 50)],
        [_bezier(_g, 30, 50, 78, 50, 72, 80, 30, 80)],
    ], MEDIUM, 'DPR'),
    _define('C', [list(_C_CURVE)], EASY, 'OG'),
    _define('D', [
        [_line(_g, 20, 10, 20, 90)],
        [_bezier(_g, 20, 10, 65, 10, 70, 25, 70, 50),
         _bezier(_g, 70, 50, 70, 75, 65, 90, 20, 90)],
    ], EASY, 'BO'),
    _define('E', [list(s) for s in _E_STROKES], EASY, 'F'),
    _define('F', [list(s) for s in _E_STROKES[:3]], EASY, 'ET'),
    _define('G', [
        list(_C_CURVE),
        [_line(_g, 50, 55, 70, 55)],
        [_line(_g, 70, 55, 70, 80)],
    ], MEDIUM, 'CO'),
    _define('H', [
        [_line(_a4, 40, 40, 40, 260)],
        [_line(_a4, 170, 40, 170, 260)],
        [_line(_a4, 40, 150, 170, 150)],
    ], EASY, 'N'),
    _define('I', [[_line(_a4, 105, 40, 105, 260)]], EASY, 'LT'),
    _define('J', [
        [_line(_a4, 135, 40, 135, 240),
         _bezier(_a4, 135, 240, 135, 260, 100, 270, 70, 250)],
    ], EASY, 'I'),
    _define('K', [
        [_line(_a4, 40, 40, 40, 260)],
        [_line(_a4, 40, 150, 170, 40)],
        [_line(_a4, 40, 150, 170, 260)],
    ], MEDIUM, 'X'),
    _define('L', [
        [_line(_a4, 40, 40, 40, 260)],
        [_line(_a4, 40, 260, 170, 260)],
    ], EASY, 'IT'),
    _define('M', [
        [_line(_a4, 30, 40, 30, 260)],
        [_line(_a4, 30, 40, 105, 210)],
        [_line(_a4, 105, 210, 180, 40)],
        [_line(_a4, 180, 260, 180, 40)],
    ], HARD, 'WN'),
    _define('N', [
        [_line(_a4, 40, 40, 40, 260)],
        [_line(_a4, 40, 40, 170, 260)],
        [_line(_a4, 170, 40, 170, 260)],
    ], MEDIUM, 'MH'),
    _define('O', [list(_O_LOOP)], EASY, 'QC'),
    _define('P', [list(_P_STEM), list(_P_BOWL)], EASY, 'BRQ'),
    _define('Q', [list(_O_LOOP), [_line(_g, 60, 70, 75, 85)]], MEDIUM, 'OP'),
    _define('R', [
        list(_P_STEM),
        list(_P_BOWL),
        [_line(_g, 30, 50, 60, 80)],
    ], MEDIUM, 'PB'),
    _define('S', [
        [_bezier(_g, 67, 20, 20, 13, 25, 50, 50, 50),
         _bezier(_g, 50, 50, 75, 50, 80, 87, 32, 80)],
    ], MEDIUM, 'Z'),
    _define('T', [
        [_line(_g, 15, 15, 85, 15)],
        [_line(_g, 50, 15, 50, 90)],
    ], EASY, 'IL'),
    _define('U', [
        [_line(_g, 30, 20, 30, 65),
         _bezier(_g, 30, 65, 30, 85, 70, 85, 70, 65),
         _line(_g, 70, 65, 70, 20)],
    ], EASY, 'VN'),
    _define('V', [
        [_line(_g, 20, 10, 50, 90)],
        [_line(_g, 80, 10, 50, 90)],
    ], EASY, 'UA'),
    _define('W', [
        [_line(_a4, 15, 40, 40, 260)],
        [_line(_a4, 40, 260, 105, 120)],
        [_line(_a4, 105, 120, 170, 260)],
        [_line(_a4, 170, 260, 195, 40)],
    ], HARD, 'M'),
    _define('X', [
        [_line(_g, 20, 10, 80, 90)],
        [_line(_g, 80, 10, 20, 90)],
    ], EASY, 'K'),
    _define('Y', [
        [_line(_g, 20, 10, 50, 50)],
        [_line(_g, 80, 10, 50, 50)],
        [_line(_g, 50, 50, 50, 90)],
    ], EASY, 'V'),
    _define('Z', [
        [_line(_g, 20, 10, 80, 10)],
        [_line(_g, 80, 10, 20, 90)],
        [_line(_g, 20, 90, 80, 90)],
    ], EASY, 'S'),
)}


def get_letter_definition(letter: str) -> LetterDefinition:
    """Look up a letter (case-insensitive); raises KeyError for unknown letters."""
    key = letter.upper() if isinstance(letter, str) else letter
    if key not in LETTER_DEFINITIONS:
        raise KeyError(f"No stroke definition for letter {letter!r}")
    return LETTER_DEFINITIONS[key]
