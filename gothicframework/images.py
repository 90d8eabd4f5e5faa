"""Producing original and low-resolution copies of the images in ``optimize``."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from PIL import Image

from gothicframework.project import GothicCli

DEFAULT_LOW_RESOLUTION_RATE = 20


@dataclass(frozen=True)
class _Codec:
    decode: str
    encode: str
    label: str
    original_options: dict[str, Any] = field(default_factory=dict)
    blurred_options: dict[str, Any] = field(default_factory=dict)


_JPEG = _Codec("JPEG", "JPEG", "JPEG", {"quality": 100}, {"quality": 20})
_CODECS = {
    ".png": _Codec("PNG", "PNG", "PNG"),
    ".jpg": _JPEG,
    ".jpeg": _JPEG,
    ".webp": _Codec("WEBP", "PNG", "WebP"),
}


def _extension(name: str) -> str:
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def blurred_size(width: int, height: int, rate: int) -> tuple[int, int]:
    """Size of the low-resolution copy at ``rate`` percent of the original.

    A side that shrinks to zero is derived from the other to keep the aspect
    ratio; when both do, the original size is kept.
    """
    new_width = width * rate // 100
    new_height = height * rate // 100
    if new_width and new_height:
        return new_width, new_height
    if not new_width and not new_height:
        return width, height
    if not new_width:
        scale = height / new_height
        return int(0.7 + width / scale), new_height
    scale = width / new_width
    return new_width, int(0.7 + height / scale)


@dataclass
class ImageOptimizer:
    """Writes ``original`` and ``blurred`` variants of each input image."""

    cli: GothicCli
    input_dir: str | os.PathLike = "./optimize"
    output_dir: str | os.PathLike = "./public"

    def optimize_images(self) -> None:
        """Process every file of the input folder in name order."""
        config = self.cli.get_config()
        rate = config.optimize_images.low_resolution_rate
        if rate <= 0:
            rate = DEFAULT_LOW_RESOLUTION_RATE

        os.makedirs(self.output_dir, exist_ok=True)
        with os.scandir(self.input_dir) as scanned:
            entries = sorted(scanned, key=lambda entry: entry.name)

        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                raise ValueError(
                    "error the 'optimizeImages' key was not found in gothic-config.json"
                )
            self._optimize(Path(self.input_dir) / entry.name, entry.name, rate)

        print("Resizing complete!")

    def _optimize(self, input_path: Path, name: str, rate: int) -> None:
        ext = _extension(name)
        base_name = name[: len(name) - len(ext)]
        image_dir = Path(self.output_dir) / base_name
        try:
            image_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OSError(f"error creating directory {image_dir}: {exc}") from exc

        codec = _CODECS.get(ext)
        if codec is None:
            raise ValueError(f"error unsupported file format: {ext}")

        try:
            handle = open(input_path, "rb")
        except OSError as exc:
            raise OSError(f"error opening file {input_path}: {exc}") from exc
        with handle:
            try:
                with Image.open(handle, formats=[codec.decode]) as opened:
                    opened.load()
                    image = opened.copy()
            except (OSError, SyntaxError, ValueError) as exc:
                raise ValueError(f"error decoding image {input_path}: {exc}") from exc

        width, height = blurred_size(image.width, image.height, rate)
        resized = image.resize((max(1, width), max(1, height)), Image.Resampling.LANCZOS)

        original_path = image_dir / f"original{ext}"
        blurred_path = image_dir / f"blurred{ext}"
        try:
            image.save(original_path, format=codec.encode, **codec.original_options)
        except (OSError, ValueError) as exc:
            raise OSError(
                f"error saving original {codec.label} image {original_path}: {exc}"
            ) from exc
        try:
            resized.save(blurred_path, format=codec.encode, **codec.blurred_options)
        except (OSError, ValueError) as exc:
            raise OSError(
                f"error saving blurred {codec.label} image {blurred_path}: {exc}"
            ) from exc