"""
Configuration system for spectralmap.

Supports:
- TOML configuration files (``spectralmap.toml``)
- Environment variable overrides
- CLI argument overrides (applied by the caller via ``dataclasses.replace``)

The configuration object is passed explicitly into the pipeline; nothing
here is process-global.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from ._errors import ConfigurationError

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None


CONFIG_FILENAME = "spectralmap.toml"

# Number of singular triplets requested from the solver unless overridden.
DEFAULT_RANK = 1000


# =============================================================================
# Configuration Classes
# =============================================================================

@dataclass
class DecomposeConfig:
    """Configuration for the co-occurrence + decomposition pipeline."""

    rank: int = DEFAULT_RANK           # Limits the number of singular triplets computed
    delimiter: str = " "               # Separator between values in dense output
    stream_dense_export: bool = False  # Write co-occurrence rows without a dense array
    solver_tol: float = 0.0            # Solver tolerance, 0 = machine precision
    index_base: Optional[int] = None   # Index base of the input, None = detect from data

    def validate(self) -> None:
        if isinstance(self.rank, bool) or not isinstance(self.rank, int) or self.rank < 1:
            raise ConfigurationError(f"rank must be a positive integer, got {self.rank!r}")
        if not isinstance(self.delimiter, str) or self.delimiter == "":
            raise ConfigurationError("delimiter must be a non-empty string")
        if self.solver_tol < 0:
            raise ConfigurationError(f"solver_tol must be >= 0, got {self.solver_tol}")
        if isinstance(self.index_base, bool) or self.index_base not in (None, 0, 1):
            raise ConfigurationError(f"index_base must be 0 or 1, got {self.index_base!r}")


@dataclass
class SpectrumConfig:
    """Configuration for ranking a term against the eigenvectors."""

    top_k: int = 20                  # Number of best matching eigenvectors
    similarity_cutoff: float = 0.05  # Cosine over which a match counts as similar
    visible_low: float = 400.0       # Wavelength (nm) of the smallest singular value
    visible_high: float = 700.0      # Wavelength (nm) of the largest singular value

    def validate(self) -> None:
        if isinstance(self.top_k, bool) or not isinstance(self.top_k, int) or self.top_k < 1:
            raise ConfigurationError(f"top_k must be a positive integer, got {self.top_k!r}")
        if not -1.0 <= self.similarity_cutoff <= 1.0:
            raise ConfigurationError(
                f"similarity_cutoff must lie in [-1, 1], got {self.similarity_cutoff}"
            )
        if self.visible_low >= self.visible_high:
            raise ConfigurationError(
                f"visible range is empty: {self.visible_low} >= {self.visible_high}"
            )


@dataclass
class SpectralMapConfig:
    """Main configuration container."""

    decompose: DecomposeConfig = field(default_factory=DecomposeConfig)
    spectrum: SpectrumConfig = field(default_factory=SpectrumConfig)

    def validate(self) -> "SpectralMapConfig":
        """Check every section; returns self for chaining."""
        self.decompose.validate()
        self.spectrum.validate()
        return self

    @classmethod
    def from_file(cls, path: Path) -> "SpectralMapConfig":
        """Load configuration from a TOML file."""
        if tomllib is None:
            raise ImportError(
                "tomli is required for Python < 3.11. "
                "Install with: pip install tomli"
            )

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except OSError as exc:
            raise ConfigurationError(f"cannot read config file {path}: {exc}") from exc
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(f"invalid TOML in {path}: {exc}") from exc

        return cls._from_dict(data).validate()

    @classmethod
    def _from_dict(cls, data: Mapping) -> "SpectralMapConfig":
        """Create config from dictionary."""
        dec_data = data.get("decompose", {})
        spec_data = data.get("spectrum", {})

        decompose = DecomposeConfig(
            rank=dec_data.get("rank", DEFAULT_RANK),
            delimiter=dec_data.get("delimiter", " "),
            stream_dense_export=bool(dec_data.get("stream_dense_export", False)),
            solver_tol=float(dec_data.get("solver_tol", 0.0)),
            index_base=dec_data.get("index_base"),
        )

        spectrum = SpectrumConfig(
            top_k=spec_data.get("top_k", 20),
            similarity_cutoff=float(spec_data.get("similarity_cutoff", 0.05)),
            visible_low=float(spec_data.get("visible_low", 400.0)),
            visible_high=float(spec_data.get("visible_high", 700.0)),
        )

        return cls(decompose=decompose, spectrum=spectrum)

    @classmethod
    def find_config(cls, start_path: Optional[Path] = None) -> Optional[Path]:
        """Find spectralmap.toml in current or parent directories."""
        if start_path is None:
            start_path = Path.cwd()

        current = start_path.resolve()

        for _ in range(10):  # Max 10 levels up
            config_path = current / CONFIG_FILENAME
            if config_path.exists():
                return config_path

            parent = current.parent
            if parent == current:
                break
            current = parent

        return None

    @classmethod
    def load(
        cls,
        config_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "SpectralMapConfig":
        """Load configuration, auto-discovering if path not provided.

        Environment variables ``SPECTRALMAP_RANK`` and ``SPECTRALMAP_DELIMITER``
        override values from the file.
        """
        if config_path is None:
            config_path = cls.find_config()

        if config_path is not None and Path(config_path).exists():
            config = cls.from_file(Path(config_path))
        elif config_path is not None:
            raise ConfigurationError(f"config file not found: {config_path}")
        else:
            config = cls()

        config.apply_environment(os.environ if environ is None else environ)
        return config.validate()

    def apply_environment(self, environ: Mapping[str, str]) -> None:
        rank = environ.get("SPECTRALMAP_RANK")
        if rank:
            try:
                self.decompose.rank = int(rank)
            except ValueError as exc:
                raise ConfigurationError(f"SPECTRALMAP_RANK is not an integer: {rank!r}") from exc
        delimiter = environ.get("SPECTRALMAP_DELIMITER")
        if delimiter:
            self.decompose.delimiter = delimiter
