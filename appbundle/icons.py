"""
Icon resolution for Linux bundles.

Turns a list of icon sources in mixed formats into one PNG per distinct
(width, height, density) under a hicolor icon theme tree:

    {base}/{W}x{H}[@2x]/apps/{binary_name}.png

PNG sources always win. They are handled in a first pass and copied
verbatim; everything else only fills sizes still missing afterwards.
"""

import os
import shutil
import struct
import tempfile
from contextlib import contextmanager
from enum import Enum
from typing import List, NamedTuple

from PIL import IcnsImagePlugin, Image, UnidentifiedImageError

from appbundle.debug import debug, log
from appbundle.fs import copy_file, create_file

# Theme directory below a bundle data root
HICOLOR_DIR = os.path.join("usr", "share", "icons", "hicolor")

# Suffix of the file stem marking a high-density (retina) variant
HIGH_DENSITY_SUFFIX = "@2x"

# Image modes Pillow can write as PNG without conversion
PNG_MODES = {"1", "L", "LA", "I", "I;16", "I;16B", "P", "RGB", "RGBA"}

# Errors Pillow raises while decoding an already opened source. Pillow also
# reports truncated data as an OSError without an errno.
DECODE_ERRORS = (
    UnidentifiedImageError,
    SyntaxError,
    ValueError,
    EOFError,
    struct.error,
    Image.DecompressionBombError,
)


class IconError(Exception):
    """An icon source could not be decoded or re-encoded."""

    def __init__(self, path, reason):
        self.path = os.fspath(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


@contextmanager
def _decoding(path, what):
    try:
        yield
    except DECODE_ERRORS as e:
        raise IconError(path, f"{what}: {e}") from e
    except OSError as e:
        # Real read failures carry an errno and propagate unchanged
        if e.errno is not None:
            raise
        raise IconError(path, f"{what}: {e}") from e


class IconKey(NamedTuple):
    width: int
    height: int
    is_high_density: bool


class IconFormat(Enum):
    PNG = "png"
    ICNS = "icns"
    RASTER = "raster"


class IconSource(NamedTuple):
    path: str
    format: IconFormat


def classify_icon(path) -> IconFormat:
    """Format of an icon source, from its literal (case-sensitive) extension."""
    extension = os.path.splitext(os.fspath(path))[1]
    if extension == ".png":
        return IconFormat.PNG
    if extension == ".icns":
        return IconFormat.ICNS
    return IconFormat.RASTER


def is_high_density(path) -> bool:
    stem = os.path.splitext(os.path.basename(os.fspath(path)))[0]
    return stem.endswith(HIGH_DENSITY_SUFFIX)


def icon_dest_path(base, key: IconKey, binary_name: str) -> str:
    size_dir = f"{key.width}x{key.height}"
    if key.is_high_density:
        size_dir += HIGH_DENSITY_SUFFIX
    return os.path.join(os.fspath(base), size_dir, "apps", f"{binary_name}.png")


class IconResolver:
    """
    Single resolution pass into one destination tree.

    Keys are registered in the order their files are written; the first
    source to register a key owns it for the rest of the pass.
    """

    def __init__(self, destination_base, binary_name):
        self.destination_base = destination_base
        self.binary_name = binary_name
        self.keys: List[IconKey] = []
        self._seen = set()

    def resolve(self, candidates) -> List[IconKey]:
        sources = []

        # Prefer PNG files.
        for item in candidates:
            if isinstance(item, BaseException):
                raise item
            source = IconSource(os.fspath(item), classify_icon(item))
            sources.append(source)
            if source.format is IconFormat.PNG:
                self._resolve_png(source.path)

        # Fall back to non-PNG files for any missing sizes.
        for source in sources:
            if source.format is IconFormat.ICNS:
                self._resolve_icns(source.path)
            elif source.format is IconFormat.RASTER:
                self._resolve_raster(source.path)

        return self.keys

    def _register(self, key: IconKey, path) -> bool:
        if key in self._seen:
            log(f"Skipping {path}: {_describe(key)} already resolved", "debug")
            return False
        self._seen.add(key)
        self.keys.append(key)
        return True

    def _dest_path(self, key: IconKey) -> str:
        return icon_dest_path(self.destination_base, key, self.binary_name)

    def _resolve_png(self, path):
        # Only the header is read here; the pixels are copied untouched.
        with open(path, "rb") as f:
            with _decoding(path, "invalid PNG header"):
                with Image.open(f, formats=["PNG"]) as image:
                    width, height = image.size

        key = IconKey(width, height, is_high_density(path))
        if self._register(key, path):
            dest_path = self._dest_path(key)
            log(f"Copying {path} to {dest_path}", "debug")
            copy_file(path, dest_path)

    def _resolve_icns(self, path):
        with open(path, "rb") as f:
            with _decoding(path, "invalid icon family"):
                family = IcnsImagePlugin.IcnsFile(f)
                sizes = family.itersizes()

            for width, height, scale in sizes:
                key = IconKey(width, height, scale > 1)
                if not self._register(key, path):
                    continue
                with _decoding(path, f"cannot extract {_describe(key)} image"):
                    image = family.getimage((width, height, scale))
                    image.load()
                self._write_png(image, key, path)

    def _resolve_raster(self, path):
        with open(path, "rb") as f:
            with _decoding(path, "cannot decode image"):
                image = Image.open(f)
                image.load()

        width, height = image.size
        key = IconKey(width, height, is_high_density(path))
        if self._register(key, path):
            self._write_png(image, key, path)

    def _write_png(self, image, key: IconKey, source_path):
        if image.mode not in PNG_MODES:
            raise IconError(source_path, f"unsupported color mode {image.mode}")
        dest_path = self._dest_path(key)
        log(f"Encoding {_describe(key)} from {source_path} to {dest_path}", "debug")
        with create_file(dest_path) as out:
            image.save(out, format="PNG")


def _describe(key: IconKey) -> str:
    return f"{key.width}x{key.height}{HIGH_DENSITY_SUFFIX if key.is_high_density else ''}"


@debug("resolve_icons")
def resolve_icons(candidates, destination_base, binary_name, staged=False) -> List[IconKey]:
    """
    Resolve icon candidates into a hicolor tree rooted at destination_base.

    candidates yields paths, or exception instances from upstream discovery
    which are raised unchanged when reached. Any error aborts the pass. By
    default files already written stay on disk; with staged=True the icons
    are built in a sibling staging directory and only moved into place
    once every candidate resolved.

    Returns the keys written, in registration order.
    """
    if staged:
        keys = _resolve_staged(candidates, destination_base, binary_name)
    else:
        keys = IconResolver(destination_base, binary_name).resolve(candidates)
    log(f"Resolved {len(keys)} icon size(s) for {binary_name}")
    return keys


def _resolve_staged(candidates, destination_base, binary_name):
    parent = os.path.dirname(os.path.abspath(destination_base))
    os.makedirs(parent, exist_ok=True)
    staging_dir = tempfile.mkdtemp(prefix=".icons-staging-", dir=parent)
    try:
        keys = IconResolver(staging_dir, binary_name).resolve(candidates)
        for key in keys:
            dest_path = icon_dest_path(destination_base, key, binary_name)
            os.makedirs(os.path.dirname(dest_path), exist_ok=True)
            os.replace(icon_dest_path(staging_dir, key, binary_name), dest_path)
        return keys
    finally:
        shutil.rmtree(staging_dir, ignore_errors=True)


def generate_icon_files(settings, data_dir, staged=False) -> List[IconKey]:
    """Generate the icon files named by settings and store them under data_dir."""
    return resolve_icons(
        settings.icon_files(),
        os.path.join(os.fspath(data_dir), HICOLOR_DIR),
        settings.binary_name,
        staged=staged,
    )
