"""
Configuration classes for bio-relatives.

Holds the comparison mode, the thread budget and the similarity
threshold policy used to turn per-chromosome percentages into a
kinship verdict.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Dict, Optional, Union

import yaml

from .exceptions import ConfigurationError
from .utils.sequence import chromosome_class


class ComparatorType(Enum):
    """Supported comparison algorithms."""
    LEVENSHTEIN = "levenshtein"
    HAMMING = "hamming"
    X_STR = "x_str"
    Y_STR = "y_str"

    @property
    def is_str(self) -> bool:
        """True for the marker-counting modes."""
        return self in (ComparatorType.X_STR, ComparatorType.Y_STR)

    @classmethod
    def from_code(cls, code: str) -> 'ComparatorType':
        """
        Parse a mode from its one-letter command line code or its name.

        Args:
            code: 'L', 'H', 'X', 'Y' or a full value such as 'levenshtein'

        Returns:
            The matching ComparatorType
        """
        codes = {
            'L': cls.LEVENSHTEIN,
            'H': cls.HAMMING,
            'X': cls.X_STR,
            'Y': cls.Y_STR,
        }
        key = code.strip()
        if key.upper() in codes:
            return codes[key.upper()]
        try:
            return cls(key.lower())
        except ValueError:
            raise ConfigurationError(f"Unknown comparison mode: {code}", parameter="mode")


@dataclass(frozen=True)
class SingleThreshold:
    """One similarity cutoff applied to every chromosome."""
    scheme: ClassVar[str] = "single"

    percentage: float = 99.7

    def category(self, chromosome: str) -> str:
        return "all"

    def threshold_for(self, chromosome: str) -> float:
        return self.percentage

    def is_similar(self, chromosome: str, similarity: float) -> bool:
        return similarity >= self.threshold_for(chromosome)

    def describe(self) -> str:
        return f"single threshold of {self.percentage}%"


@dataclass(frozen=True)
class TieredByChromosomeClass:
    """Separate cutoffs for mitochondrial, X and autosomal chromosomes."""
    scheme: ClassVar[str] = "tiered"

    mitochondrial: float = 98.0
    x: float = 45.0
    autosomal: float = 45.0

    def category(self, chromosome: str) -> str:
        return chromosome_class(chromosome)

    def threshold_for(self, chromosome: str) -> float:
        return {
            'mitochondrial': self.mitochondrial,
            'x': self.x,
            'autosomal': self.autosomal,
        }[self.category(chromosome)]

    def is_similar(self, chromosome: str, similarity: float) -> bool:
        return similarity >= self.threshold_for(chromosome)

    def describe(self) -> str:
        return (
            f"tiered thresholds (mitochondrial {self.mitochondrial}%, "
            f"X {self.x}%, autosomal {self.autosomal}%)"
        )


ThresholdPolicy = Union[SingleThreshold, TieredByChromosomeClass]


def threshold_policy_from_dict(data: Optional[Dict[str, Any]]) -> ThresholdPolicy:
    """
    Build a threshold policy from a configuration mapping.

    Examples:
        >>> threshold_policy_from_dict({'scheme': 'single', 'percentage': 99.5})
        SingleThreshold(percentage=99.5)
        >>> threshold_policy_from_dict({'scheme': 'tiered'})
        TieredByChromosomeClass(mitochondrial=98.0, x=45.0, autosomal=45.0)
    """
    if not data:
        return SingleThreshold()

    params = dict(data)
    scheme = str(params.pop('scheme', SingleThreshold.scheme)).lower()
    policies = {
        SingleThreshold.scheme: SingleThreshold,
        TieredByChromosomeClass.scheme: TieredByChromosomeClass,
    }
    if scheme not in policies:
        raise ConfigurationError(f"Unknown threshold scheme: {scheme}", parameter="threshold_policy")

    try:
        policy = policies[scheme](**{k: float(v) for k, v in params.items()})
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid threshold parameters: {e}", parameter="threshold_policy")

    for value in vars(policy).values():
        if not 0 <= value <= 100:
            raise ConfigurationError(f"Threshold out of range: {value}", parameter="threshold_policy")
    return policy


@dataclass
class ComparisonConfig:
    """Settings for one comparison run."""
    mode: ComparatorType = ComparatorType.LEVENSHTEIN
    threads: int = 1
    max_region_length: int = 20
    threshold_policy: ThresholdPolicy = field(default_factory=SingleThreshold)
    intermediate_output: bool = False
    cpu_count: Optional[int] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if isinstance(self.mode, str):
            self.mode = ComparatorType.from_code(self.mode)

        if self.threads < 1:
            raise ConfigurationError(f"Invalid threads: {self.threads}", parameter="threads")

        if self.max_region_length < 2:
            raise ConfigurationError(
                f"Invalid max_region_length: {self.max_region_length}",
                parameter="max_region_length",
            )

        if self.cpu_count is None:
            self.cpu_count = os.cpu_count() or 1

    @property
    def comparison_threads(self) -> int:
        """Workers for each feature's comparison pool.

        The hardware parallelism is shared between the outer feature
        workers, so the total number of threads stays bounded.
        """
        return max(1, self.cpu_count // self.threads)

    @classmethod
    def from_yaml(cls, path: Path, **overrides) -> 'ComparisonConfig':
        """
        Load configuration from a YAML file.

        Keyword overrides that are not None replace values from the file.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML config: {e}", config_file=str(path))
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(f"Cannot read config: {e}", config_file=str(path)) from e

        if not isinstance(data, dict):
            raise ConfigurationError("Top level must be a mapping", config_file=str(path))

        data.update({k: v for k, v in overrides.items() if v is not None})
        if 'threshold_policy' in data and not isinstance(
            data['threshold_policy'], (SingleThreshold, TieredByChromosomeClass)
        ):
            data['threshold_policy'] = threshold_policy_from_dict(data['threshold_policy'])

        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigurationError(f"Invalid config parameters: {e}", config_file=str(path))
