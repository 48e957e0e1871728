"""Output providers and the size-budgeted encoder."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .base import OutputProvider, PillowSequenceOutputProvider
from .dataurl_provider import GifDataUrlOutputProvider, to_data_url
from .encoder import EncodedArtifact, SizeBudgetedEncoder, default_palette_ladder
from .gif_provider import DitherAlgorithm, GifOutputProvider, PaletteConfig


@dataclass(frozen=True)
class OutputFormatSpec:
    extension: str
    media_type: str
    provider_class: type[OutputProvider[Any]]


_OUTPUT_FORMATS: dict[str, OutputFormatSpec] = {
    "gif": OutputFormatSpec(
        extension=".gif",
        media_type="image/gif",
        provider_class=GifOutputProvider,
    ),
}


def resolve_output_provider(file_path: str) -> OutputProvider[Any]:
    """
    Resolve the appropriate output provider based on file extension.

    Args:
        file_path: Output file path (extension determines format)

    Returns:
        An OutputProvider instance

    Raises:
        ValueError: If file extension is not supported
    """
    ext = Path(file_path).suffix.lower()
    spec = _output_spec_from_extension(ext)
    return spec.provider_class(file_path)


def supported_output_formats() -> tuple[str, ...]:
    """Return supported output format names."""
    return tuple(_OUTPUT_FORMATS.keys())


def media_type_for_output_format(output_format: str) -> str:
    """Resolve media type for a supported output format."""
    spec = _output_spec_from_format(output_format)
    return spec.media_type


def _output_spec_from_extension(ext: str) -> OutputFormatSpec:
    output_format = ext.removeprefix(".")
    spec = _OUTPUT_FORMATS.get(output_format)
    if spec is not None:
        return spec
    supported = ", ".join(spec.extension for spec in _OUTPUT_FORMATS.values())
    raise ValueError(f"Unsupported output format: {ext}. Supported formats: {supported}")


def _output_spec_from_format(output_format: str) -> OutputFormatSpec:
    spec = _OUTPUT_FORMATS.get(output_format.lower())
    if spec is not None:
        return spec
    supported = ", ".join(supported_output_formats())
    raise ValueError(f"Invalid format. Choose from: {supported}")


__all__ = [
    "DitherAlgorithm",
    "EncodedArtifact",
    "GifDataUrlOutputProvider",
    "GifOutputProvider",
    "OutputFormatSpec",
    "OutputProvider",
    "PaletteConfig",
    "PillowSequenceOutputProvider",
    "SizeBudgetedEncoder",
    "default_palette_ladder",
    "media_type_for_output_format",
    "resolve_output_provider",
    "supported_output_formats",
    "to_data_url",
]
