# tactjam/services/coordinates.py
"""
Coordinate set normalization.

Motor positions arrive either column-oriented

    {"xs": [1, 4], "ys": [2, 5], "zs": [3, 6]}

or row-oriented

    {"positions": [{"x": 1, "y": 2, "z": 3}, {"x": 4, "y": 5, "z": 6}]}

and are stored column-oriented. API responses use the row form.
"""
import hashlib
import json
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from tactjam.core.exceptions import ValidationError

AXES = ("x", "y", "z")


@dataclass(frozen=True)
class Coordinates:
    """Canonical column-oriented position set."""
    xs: List[float] = field(default_factory=list)
    ys: List[float] = field(default_factory=list)
    zs: List[float] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.xs)

    def as_columns(self) -> Dict[str, List[float]]:
        return {"xs": list(self.xs), "ys": list(self.ys), "zs": list(self.zs)}


def _number(value: Any, where: str) -> float:
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"Invalid number at {where}: {value!r}")
    if not math.isfinite(value):
        raise ValidationError(f"Invalid number at {where}: {value!r}")
    return float(value)


def _from_rows(positions: Any) -> Coordinates:
    if not isinstance(positions, list):
        raise ValidationError("positions must be an array")

    xs, ys, zs = [], [], []
    for index, entry in enumerate(positions):
        if not isinstance(entry, Mapping):
            raise ValidationError(f"positions[{index}] must be an object")
        # entries missing any axis are dropped from all three columns
        if any(entry.get(axis) is None for axis in AXES):
            continue
        xs.append(_number(entry["x"], f"positions[{index}].x"))
        ys.append(_number(entry["y"], f"positions[{index}].y"))
        zs.append(_number(entry["z"], f"positions[{index}].z"))
    return Coordinates(xs, ys, zs)


def _from_columns(xs: Any, ys: Any, zs: Any) -> Coordinates:
    columns = {"xs": xs, "ys": ys, "zs": zs}
    for name, column in columns.items():
        if not isinstance(column, list):
            raise ValidationError(f"{name} must be an array")
    if not (len(xs) == len(ys) == len(zs)):
        raise ValidationError("xs, ys and zs must have the same length")

    return Coordinates(
        [_number(v, f"xs[{i}]") for i, v in enumerate(xs)],
        [_number(v, f"ys[{i}]") for i, v in enumerate(ys)],
        [_number(v, f"zs[{i}]") for i, v in enumerate(zs)],
    )


def normalize(data: Mapping[str, Any], require_non_empty: bool = False) -> Coordinates:
    """
    Turn either input form into canonical Coordinates.

    `positions` takes precedence over the three arrays when both are given.
    Raises ValidationError when neither form is present, the arrays differ
    in length, or a kept coordinate is not a number.
    """
    if data.get("positions") is not None:
        coords = _from_rows(data["positions"])
    elif all(data.get(name) is not None for name in ("xs", "ys", "zs")):
        coords = _from_columns(data["xs"], data["ys"], data["zs"])
    else:
        raise ValidationError("Provide either positions or xs, ys and zs")

    if require_non_empty and len(coords) == 0:
        raise ValidationError("At least one motor position is required")
    return coords


def to_rows(columns: Mapping[str, Any]) -> List[Dict[str, float]]:
    """Inverse transform: zip the three columns index-wise."""
    return [
        {"x": x, "y": y, "z": z}
        for x, y, z in zip(columns.get("xs", []), columns.get("ys", []), columns.get("zs", []))
    ]


def to_output(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Stored position set row -> {id, positions: [{x, y, z}, ...]}."""
    return {"id": row["id"], "positions": to_rows(row)}


def fingerprint(coords: Coordinates) -> str:
    """Content hash backing the position set uniqueness constraint."""
    # -0.0 and 0.0 are the same position
    columns = [[value + 0.0 for value in column] for column in (coords.xs, coords.ys, coords.zs)]
    canonical = json.dumps(columns, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_query(x: Optional[str], y: Optional[str], z: Optional[str]) -> Coordinates:
    """Parse comma separated query values, e.g. x=1.1,2.2&y=0,0&z=3,3."""
    if x is None or y is None or z is None:
        raise ValidationError("Please provide x, y and z")

    columns = []
    for name, raw in (("x", x), ("y", y), ("z", z)):
        parts = [part.strip() for part in raw.split(",")] if raw.strip() else []
        try:
            columns.append([float(part) for part in parts])
        except ValueError:
            raise ValidationError(f"Invalid number in {name}")
    return _from_columns(*columns)
