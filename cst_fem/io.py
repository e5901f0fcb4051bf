# cst_fem/io.py
"""
Text input / output.

Input is a stream of whitespace-delimited tokens in a fixed order:

    poissonRatio youngModulus
    nodesCount        then nodesCount × (x y)
    elementCount      then elementCount × (n0 n1 n2)
    constraintCount   then constraintCount × (node type)   type: 1=X, 2=Y, 3=XY
    loadsCount        then loadsCount × (node fx fy)

Line breaks carry no meaning. Output is the displacement vector followed by
one von Mises value per element, one number per line.
"""

import logging
from pathlib import Path
from typing import IO, List, Union

import numpy as np

from .model import Axis, Constraint, Mesh, Model, NodalLoad, TriangleElement

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ParseError(ValueError):
    """Raised when the input stream is malformed or ends early."""
    pass


class _Tokens:
    """Cursor over the whitespace-separated tokens of a text."""

    def __init__(self, text: str):
        self._tokens: List[str] = text.split()
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._tokens) - self._pos

    def _next(self, what: str) -> str:
        if self._pos >= len(self._tokens):
            raise ParseError(f"Unexpected end of input while reading {what}")
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def next_float(self, what: str) -> float:
        token = self._next(what)
        try:
            value = float(token)
        except ValueError:
            raise ParseError(f"Expected a number for {what}, got {token!r}") from None
        if not np.isfinite(value):
            raise ParseError(f"Expected a finite number for {what}, got {token!r}")
        return value

    def next_int(self, what: str) -> int:
        token = self._next(what)
        try:
            return int(token)
        except ValueError:
            raise ParseError(f"Expected an integer for {what}, got {token!r}") from None

    def next_count(self, what: str) -> int:
        count = self.next_int(what)
        if count < 0:
            raise ParseError(f"{what} must be non-negative, got {count}")
        return count


def parse_model(text: str) -> Model:
    """
    Parse the text input format into a validated Model.

    Raises:
    -------
    ParseError
        Missing tokens, non-numeric tokens, negative counts or an unknown
        constraint type
    ModelError
        Node indices out of range, repeated element nodes, invalid material
    """
    tokens = _Tokens(text)

    poisson = tokens.next_float("Poisson ratio")
    young = tokens.next_float("Young's modulus")

    xs, ys = [], []
    for i in range(tokens.next_count("node count")):
        xs.append(tokens.next_float(f"x of node {i}"))
        ys.append(tokens.next_float(f"y of node {i}"))
    mesh = Mesh(np.array(xs, dtype=float), np.array(ys, dtype=float))

    elements = []
    for i in range(tokens.next_count("element count")):
        node_ids = tuple(tokens.next_int(f"node {k} of element {i}") for k in range(3))
        elements.append(TriangleElement(id=i, node_ids=node_ids))

    constraints = []
    for i in range(tokens.next_count("constraint count")):
        node = tokens.next_int(f"node of constraint {i}")
        code = tokens.next_int(f"type of constraint {i}")
        if code not in (Axis.X, Axis.Y, Axis.XY):
            raise ParseError(f"Constraint {i} has unknown type {code} (expected 1=X, 2=Y, 3=XY)")
        constraints.append(Constraint(node=node, axis=Axis(code)))

    loads = []
    for i in range(tokens.next_count("load count")):
        node = tokens.next_int(f"node of load {i}")
        fx = tokens.next_float(f"x of load {i}")
        fy = tokens.next_float(f"y of load {i}")
        loads.append(NodalLoad(node=node, fx=fx, fy=fy))

    if tokens.remaining:
        logger.warning("Ignoring %d trailing token(s) after the load section", tokens.remaining)

    model = Model(
        poisson_ratio=poisson,
        young_modulus=young,
        mesh=mesh,
        elements=elements,
        constraints=constraints,
        loads=loads,
    )
    model.validate()
    return model


def read_model(stream: IO[str]) -> Model:
    """Parse a Model from an open text stream."""
    return parse_model(stream.read())


def load_model(path: PathLike) -> Model:
    """
    Read and parse a Model from a file.

    OSError (missing/unreadable file) propagates to the caller.
    """
    with open(path, "r", encoding="utf-8") as fh:
        try:
            text = fh.read()
        except UnicodeDecodeError as e:
            raise ParseError(f"{path} is not a text file ({e})") from e
    return parse_model(text)


def write_results(stream: IO[str], displacements: np.ndarray, von_mises: np.ndarray,
                  fmt: str = "%.6g") -> None:
    """
    Write displacements (one per line) then von Mises stresses (one per line).
    """
    for value in np.asarray(displacements, dtype=float):
        stream.write(fmt % value + "\n")
    for value in np.asarray(von_mises, dtype=float):
        stream.write(fmt % value + "\n")
