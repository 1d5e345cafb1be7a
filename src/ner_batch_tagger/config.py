"""Settings for a tagging run."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping

from .exceptions import ConfigurationError
from .models import OUTSIDE
from .sink import DEFAULT_SOURCE_COMPONENT
from .writer import DEFAULT_DOCUMENTS_PER_FILE, DEFAULT_FILE_PREFIX, DEFAULT_INDEX_WIDTH


@dataclass
class TaggerConfig:
    """Configuration of the tagging pipeline.

    Attributes
    ----------
    output_dir:
        Directory receiving the batch files. Created if missing.
    documents_per_file:
        Number of documents written before rotating to a new file.
    file_prefix:
        Prefix of the batch file names.
    index_width:
        Zero-padded width of the batch index in file names.
    source_component:
        Identifier stamped on every annotation.
    model_name:
        spaCy pipeline used by the default classifier.
    outside_label:
        Label marking tokens outside any entity.
    """

    output_dir: str
    documents_per_file: int = DEFAULT_DOCUMENTS_PER_FILE
    file_prefix: str = DEFAULT_FILE_PREFIX
    index_width: int = DEFAULT_INDEX_WIDTH
    source_component: str = DEFAULT_SOURCE_COMPONENT
    model_name: str = "en_core_web_sm"
    outside_label: str = OUTSIDE

    def __post_init__(self) -> None:
        if not isinstance(self.output_dir, str) or not self.output_dir:
            raise ConfigurationError("output_dir must be a non-empty string.")
        if not isinstance(self.documents_per_file, int) or self.documents_per_file < 1:
            raise ConfigurationError("documents_per_file must be a positive integer.")
        if not isinstance(self.index_width, int) or self.index_width < 1:
            raise ConfigurationError("index_width must be a positive integer.")
        if not self.file_prefix:
            raise ConfigurationError("file_prefix must not be empty.")
        if not self.source_component:
            raise ConfigurationError("source_component must not be empty.")
        if not self.outside_label:
            raise ConfigurationError("outside_label must not be empty.")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "TaggerConfig":
        """Build a config from a JSON-like mapping, rejecting unknown keys."""

        if not isinstance(mapping, Mapping):
            raise ConfigurationError("Configuration must be a mapping/dict.")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")
        if "output_dir" not in mapping:
            raise ConfigurationError("Missing 'output_dir' in configuration.")
        return cls(**dict(mapping))
