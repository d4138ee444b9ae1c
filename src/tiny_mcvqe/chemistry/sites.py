"""
Chromophore site records and the block-format data loader.

Each chromophore is described by its ground/excited-state energies, its
center of mass and three dipole moments. The data file holds one block
of eight lines per chromophore::

    1
    Ground state energy: -0.500
    Excited state energy: -0.300
    Center of mass: 0.0, 0.0, 0.0
    Ground state dipole: 0.1, 0.0, 0.0
    Excited state dipole: 0.3, 0.0, 0.0
    Transition dipole: 0.9, 0.1, 0.0
    <blank>

The first line is a label and is ignored; everything after the first
``:`` is the value. Energies are in Hartree, positions in Angstrom,
ground/excited dipoles in Debye and the transition dipole in atomic units.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping, Sequence

import numpy as np

from tiny_mcvqe.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_LINES_PER_BLOCK = 8
_VECTOR_FIELDS = ("center_of_mass", "ground_dipole", "excited_dipole", "transition_dipole")


def _as_vector(value, name: str) -> np.ndarray:
    vec = np.asarray(value, dtype=float).ravel()
    if vec.shape != (3,):
        raise ConfigurationError(f"{name} must have 3 components, got {vec.shape[0]}")
    if not np.all(np.isfinite(vec)):
        raise ConfigurationError(f"{name} contains non-finite values: {vec}")
    vec.setflags(write=False)
    return vec


@dataclass(frozen=True, eq=False)
class SiteRecord:
    """Spectroscopic data of one chromophore."""

    ground_energy: float
    excited_energy: float
    center_of_mass: np.ndarray = field(repr=False)
    ground_dipole: np.ndarray = field(repr=False)
    excited_dipole: np.ndarray = field(repr=False)
    transition_dipole: np.ndarray = field(repr=False)

    def __post_init__(self):
        for name in ("ground_energy", "excited_energy"):
            value = float(getattr(self, name))
            if not np.isfinite(value):
                raise ConfigurationError(f"{name} must be finite, got {value}")
            object.__setattr__(self, name, value)
        for name in _VECTOR_FIELDS:
            object.__setattr__(self, name, _as_vector(getattr(self, name), name))

    @property
    def excitation_energy(self) -> float:
        return self.excited_energy - self.ground_energy

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SiteRecord):
            return NotImplemented
        return (
            self.ground_energy == other.ground_energy
            and self.excited_energy == other.excited_energy
            and all(
                np.array_equal(getattr(self, f), getattr(other, f))
                for f in _VECTOR_FIELDS
            )
        )

    @classmethod
    def from_mapping(cls, record: Mapping) -> SiteRecord:
        missing = [
            f for f in ("ground_energy", "excited_energy", *_VECTOR_FIELDS)
            if f not in record
        ]
        if missing:
            raise ConfigurationError(f"Site record is missing fields: {missing}")
        return cls(**{k: record[k] for k in ("ground_energy", "excited_energy", *_VECTOR_FIELDS)})


def sites_from_records(records: Iterable[SiteRecord | Mapping]) -> list[SiteRecord]:
    """Build site records from dataclasses or plain mappings."""
    sites = [
        r if isinstance(r, SiteRecord) else SiteRecord.from_mapping(r)
        for r in records
    ]
    if not sites:
        raise ConfigurationError("At least one chromophore is required")
    return sites


def _value(line: str, path: Path, lineno: int) -> str:
    if ":" not in line:
        raise ConfigurationError(f"{path}:{lineno}: expected 'label: value', got {line!r}")
    return line.split(":", 1)[1].strip()


def _parse_float(line: str, path: Path, lineno: int) -> float:
    text = _value(line, path, lineno)
    try:
        return float(text)
    except ValueError:
        raise ConfigurationError(f"{path}:{lineno}: cannot parse number {text!r}") from None


def _parse_vector(line: str, path: Path, lineno: int) -> list[float]:
    text = _value(line, path, lineno)
    try:
        vec = [float(c) for c in text.split(",")]
    except ValueError:
        raise ConfigurationError(f"{path}:{lineno}: cannot parse vector {text!r}") from None
    if len(vec) != 3:
        raise ConfigurationError(
            f"{path}:{lineno}: expected 3 comma-separated components, got {len(vec)}"
        )
    return vec


def load_sites(path: str | Path, n_sites: int) -> list[SiteRecord]:
    """
    Read ``n_sites`` chromophore blocks from a data file.

    Raises
    ------
    ConfigurationError
        If the file is missing or unreadable, holds fewer than ``n_sites``
        blocks, or a value cannot be parsed.
    """
    path = Path(path)
    if n_sites < 1:
        raise ConfigurationError(f"n_sites must be positive, got {n_sites}")
    try:
        lines = path.read_text().splitlines()
    except OSError as exc:
        raise ConfigurationError(f"Cannot access data file {path}: {exc}") from exc

    sites = []
    for a in range(n_sites):
        start = a * _LINES_PER_BLOCK
        # the trailing separator line of the last block is optional
        if len(lines) < start + _LINES_PER_BLOCK - 1:
            raise ConfigurationError(
                f"{path}: expected {n_sites} chromophore blocks, found {a}"
            )
        block = lines[start:start + _LINES_PER_BLOCK - 1]
        first = start + 1  # 1-based line number of the label
        sites.append(
            SiteRecord(
                ground_energy=_parse_float(block[1], path, first + 1),
                excited_energy=_parse_float(block[2], path, first + 2),
                center_of_mass=_parse_vector(block[3], path, first + 3),
                ground_dipole=_parse_vector(block[4], path, first + 4),
                excited_dipole=_parse_vector(block[5], path, first + 5),
                transition_dipole=_parse_vector(block[6], path, first + 6),
            )
        )
    logger.debug("Loaded %d chromophores from %s", n_sites, path)
    return sites


def dump_sites(sites: Sequence[SiteRecord], path: str | Path) -> None:
    """Write site records in the format read by :func:`load_sites`."""
    def vec(v):
        return ", ".join(repr(float(c)) for c in v)

    blocks = []
    for a, site in enumerate(sites):
        blocks.append(
            "\n".join([
                str(a + 1),
                f"Ground state energy: {site.ground_energy!r}",
                f"Excited state energy: {site.excited_energy!r}",
                f"Center of mass: {vec(site.center_of_mass)}",
                f"Ground state dipole: {vec(site.ground_dipole)}",
                f"Excited state dipole: {vec(site.excited_dipole)}",
                f"Transition dipole: {vec(site.transition_dipole)}",
                "",
            ])
        )
    Path(path).write_text("\n".join(blocks) + "\n")
