"""Vector path interpreter for a compact SVG-like path language.

Provides:
    - tokenize(): split a path string into command letters and numbers
    - PathInterpreter: state machine executing tokens onto a Canvas
    - draw_path(): one-shot convenience wrapper

Commands (upper case absolute, lower case relative to the current point):
    M x y               move, sets the subpath start
    L x y               line
    H x / V y           horizontal / vertical line
    C x1 y1 x2 y2 x y   cubic Bézier
    S x2 y2 x y         smooth cubic (first control reflected)
    Q x1 y1 x y         quadratic Bézier
    T x y               smooth quadratic (control reflected)
    A x y               arc endpoint only, moves without drawing
    Z                   close back to the subpath start

Further argument groups after a command repeat that command. Path
coordinates become ``int((v + origin) * scale)`` before reaching the
rasterizer, which then applies the canvas scale factor.

Tracks:
    - Current point and subpath start
    - Last curve control point (for S/s and T/t reflection)
    - Pending command and its collected arguments

Usage:
    from blockpaint.engine.path import PathInterpreter

    interp = PathInterpreter(canvas, origin=(4, 4), scale=2.0)
    result = interp.run("M0 0 L10 0 L10 10 Z")
    if result['errors']:
        print(result['errors'])
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from blockpaint.utils.errors import ParseError
from blockpaint.utils.geometry import Point, reflect_point

from . import curves, raster
from .canvas import Canvas

logger = logging.getLogger(__name__)

# Command letter | signed decimal | any other non-separator character
TOKEN_RE = re.compile(
    r'([MmLlHhVvZzCcSsQqTtAa])'
    r'|([+-]?(?:\d+\.\d*|\.\d+|\d+))'
    r'|([^\s,])'
)

ARITY = {
    'M': 2,
    'L': 2,
    'H': 1,
    'V': 1,
    'C': 6,
    'S': 4,
    'Q': 4,
    'T': 2,
    'A': 2,
    'Z': 0,
}


def tokenize(path: str) -> List[Tuple[str, Any]]:
    """Split ``path`` into ('cmd', letter), ('num', float) or ('bad', char) tokens."""
    tokens = []
    for m in TOKEN_RE.finditer(path):
        cmd, num, bad = m.groups()
        if cmd is not None:
            tokens.append(('cmd', cmd))
        elif num is not None:
            tokens.append(('num', float(num)))
        else:
            tokens.append(('bad', bad))
    return tokens


# ============================================================================
# PATH INTERPRETER
# ============================================================================

class PathInterpreter:
    """Executes path strings onto a canvas.

    Parameters
    ----------
    canvas : Canvas
        Target canvas
    origin : Tuple[float, float]
        Offset added to every path coordinate, default (0, 0)
    on : bool
        Paint state for drawn segments, default True
    scale : float
        Path scale factor applied after the origin offset, default 1.0

    Attributes
    ----------
    pos : Tuple[float, float]
        Current point in path coordinates
    start : Tuple[float, float]
        Start of the current subpath (target of Z)
    last_control : Optional[Tuple[float, float]]
        Final control point of the previous curve, None after other commands
    errors : List[str]
        Parse problems of the current run
    segments : int
        Lines and curves drawn in the current run
    commands : int
        Commands executed in the current run
    """

    def __init__(
        self,
        canvas: Canvas,
        origin: Tuple[float, float] = (0.0, 0.0),
        on: bool = True,
        scale: float = 1.0
    ):
        self.canvas = canvas
        self.origin = (float(origin[0]), float(origin[1]))
        self.on = on
        self.scale = float(scale)
        self.reset()

    def reset(self) -> None:
        """Reset interpreter state to the origin."""
        self.pos: Point = (0.0, 0.0)
        self.start: Point = (0.0, 0.0)
        self.last_control: Optional[Point] = None
        self.cmd: Optional[str] = None
        self.args: List[float] = []
        self.errors: List[str] = []
        self.segments = 0
        self.commands = 0

    def _map(self, p: Point) -> Tuple[int, int]:
        return (int((p[0] + self.origin[0]) * self.scale),
                int((p[1] + self.origin[1]) * self.scale))

    def _absolute(self, x: float, y: float, relative: bool) -> Point:
        if relative:
            return (self.pos[0] + x, self.pos[1] + y)
        return (x, y)

    def _line_to(self, p: Point) -> None:
        x0, y0 = self._map(self.pos)
        x1, y1 = self._map(p)
        raster.line(self.canvas, x0, y0, x1, y1, self.on)
        self.segments += 1

    def _reflected(self) -> Point:
        if self.last_control is None:
            return self.pos
        return reflect_point(self.pos, self.last_control)

    def feed(self, kind: str, value: Any, index: int = 0) -> None:
        """Process a single token.

        Parameters
        ----------
        kind : str
            'cmd', 'num' or 'bad' (see tokenize)
        value : Any
            Command letter, number or offending character
        index : int
            Token position for error messages
        """
        if kind == 'bad':
            msg = f"Unknown token {value!r} at position {index}"
            logger.debug(msg)
            self.errors.append(msg)
            return

        if kind == 'cmd':
            if self.args:
                self._drop_incomplete(index)
            self.cmd = value
            if value in 'Zz':
                self.execute(value, [])
                # Numbers after Z have no command to repeat
                self.cmd = None
            return

        if self.cmd is None:
            logger.debug(f"Ignoring number {value} without a pending command at position {index}")
            return

        self.args.append(value)
        if len(self.args) == ARITY[self.cmd.upper()]:
            args, self.args = self.args, []
            self.execute(self.cmd, args)

    def _drop_incomplete(self, index: int) -> None:
        msg = f"Incomplete arguments for {self.cmd!r} before position {index}: {self.args}"
        logger.debug(msg)
        self.errors.append(msg)
        self.args = []

    def execute(self, cmd: str, args: List[float]) -> None:
        """Execute one command with a complete argument group.

        Parameters
        ----------
        cmd : str
            Command letter, case selects absolute/relative
        args : List[float]
            Exactly ARITY[cmd.upper()] numbers
        """
        rel = cmd.islower()
        op = cmd.upper()
        self.commands += 1

        if op == 'M':
            self.pos = self.start = self._absolute(args[0], args[1], rel)
            self.last_control = None

        elif op == 'L':
            p = self._absolute(args[0], args[1], rel)
            self._line_to(p)
            self.pos = p
            self.last_control = None

        elif op == 'H':
            p = (self.pos[0] + args[0] if rel else args[0], self.pos[1])
            self._line_to(p)
            self.pos = p
            self.last_control = None

        elif op == 'V':
            p = (self.pos[0], self.pos[1] + args[0] if rel else args[0])
            self._line_to(p)
            self.pos = p
            self.last_control = None

        elif op in ('C', 'S'):
            if op == 'C':
                c1 = self._absolute(args[0], args[1], rel)
                rest = args[2:]
            else:
                c1 = self._reflected()
                rest = args
            c2 = self._absolute(rest[0], rest[1], rel)
            p = self._absolute(rest[2], rest[3], rel)
            curves.cubic_bezier(self.canvas, self._map(self.pos), self._map(c1),
                                self._map(c2), self._map(p), self.on)
            self.segments += 1
            self.pos = p
            self.last_control = c2

        elif op in ('Q', 'T'):
            if op == 'Q':
                c1 = self._absolute(args[0], args[1], rel)
                rest = args[2:]
            else:
                c1 = self._reflected()
                rest = args
            p = self._absolute(rest[0], rest[1], rel)
            curves.quadratic_bezier(self.canvas, self._map(self.pos), self._map(c1),
                                    self._map(p), self.on)
            self.segments += 1
            self.pos = p
            self.last_control = c1

        elif op == 'A':
            # Endpoint only; no arc is rasterized
            self.pos = self._absolute(args[0], args[1], rel)
            self.last_control = None

        elif op == 'Z':
            self._line_to(self.start)
            self.pos = self.start
            self.last_control = None

    def run(self, path: str) -> Dict[str, Any]:
        """Reset, then execute every token of ``path``.

        Parameters
        ----------
        path : str
            Path string

        Returns
        -------
        Dict[str, Any]
            Results dictionary with keys:
                - segments: int (lines and curves drawn)
                - errors: List[str] (unknown tokens, truncated groups)
                - final_pos: Tuple[float, float] (current point at the end)
                - commands: int (commands executed)

        Notes
        -----
        Parse problems never stop execution. When any occurred, a ParseError
        is recorded as the canvas ``last_error``.
        """
        self.reset()
        tokens = tokenize(path)
        logger.debug(f"Running path with {len(tokens)} tokens")

        for i, (kind, value) in enumerate(tokens):
            self.feed(kind, value, index=i)
        if self.args:
            self._drop_incomplete(len(tokens))

        if self.errors:
            self.canvas.record_error(
                ParseError(f"{len(self.errors)} problem(s) in path: {self.errors[0]}")
            )

        return {
            'segments': self.segments,
            'errors': list(self.errors),
            'final_pos': self.pos,
            'commands': self.commands,
        }


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

def draw_path(
    canvas: Canvas,
    path: str,
    origin: Tuple[float, float] = (0.0, 0.0),
    on: bool = True,
    scale: float = 1.0
) -> Dict[str, Any]:
    """Draw ``path`` onto ``canvas`` and return the run results.

    See PathInterpreter.run() for the result keys.
    """
    return PathInterpreter(canvas, origin=origin, on=on, scale=scale).run(path)
