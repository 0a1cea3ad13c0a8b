"""
Directory to .tar.gz streaming for Linux bundles.

The tar stream is written straight into a gzip compressor wrapping the
destination file, one entry at a time, so memory use does not grow with the
size of the tree. The source directory is left in place; callers that
consider it consumed remove it themselves.
"""

import gzip
import os
import tarfile

from appbundle.debug import debug, log
from appbundle.fs import create_file

ARCHIVE_SUFFIX = ".tar.gz"


def archive_path(src_dir) -> str:
    """Sibling of src_dir with its extension replaced by .tar.gz."""
    # Absolute first so that "." and ".." name a real directory
    src_dir = os.path.abspath(os.fspath(src_dir))
    parent, name = os.path.split(src_dir)
    stem, _ext = os.path.splitext(name)
    return os.path.join(parent, stem + ARCHIVE_SUFFIX)


def _walk_entries(src_dir):
    """
    Yield (path, arcname, is_dir) for everything below src_dir, top-down so
    that every directory comes before its contents. The root is skipped.
    """
    def raise_error(err):
        raise err

    for dirpath, dirnames, filenames in os.walk(src_dir, onerror=raise_error):
        dirnames.sort()
        rel_dir = os.path.relpath(dirpath, src_dir)
        for name in dirnames:
            yield os.path.join(dirpath, name), os.path.normpath(os.path.join(rel_dir, name)), True
        for name in sorted(filenames):
            yield os.path.join(dirpath, name), os.path.normpath(os.path.join(rel_dir, name)), False


def create_tar_from_dir(src_dir, fileobj):
    """
    Write a tar stream of the contents of src_dir to fileobj and return
    fileobj. The tar stream is closed (end-of-archive blocks written) but
    fileobj is left open.
    """
    src_dir = os.fspath(src_dir)
    with tarfile.open(fileobj=fileobj, mode="w", format=tarfile.PAX_FORMAT) as tar:
        for path, arcname, is_dir in _walk_entries(src_dir):
            if is_dir:
                if os.path.islink(path):
                    raise IsADirectoryError(
                        f"Cannot archive symlinked directory: {path}"
                    )
                # Not recursive: os.walk reaches the contents itself.
                tar.add(path, arcname=arcname, recursive=False)
                continue
            # Opening follows symlinks, so links are stored as the file they
            # point to and broken links fail here.
            with open(path, "rb") as src_file:
                tarinfo = tar.gettarinfo(arcname=arcname, fileobj=src_file)
                # Hard links are stored as full copies, not link entries
                tarinfo.type = tarfile.REGTYPE
                tarinfo.linkname = ""
                tarinfo.size = os.fstat(src_file.fileno()).st_size
                tar.addfile(tarinfo, src_file)
            log(f"Archived {arcname} ({tarinfo.size} bytes)", "debug")
    return fileobj


@debug("tar_and_gzip_dir")
def tar_and_gzip_dir(src_dir) -> str:
    """
    Create a .tar.gz file from src_dir, placed in the parent directory of
    src_dir, and return its path.

    On failure the partially written artifact is left behind and must not
    be trusted.
    """
    dest_path = archive_path(src_dir)
    with create_file(dest_path) as dest_file:
        gzip_file = gzip.GzipFile(mode="wb", fileobj=dest_file)
        try:
            create_tar_from_dir(src_dir, gzip_file)
        finally:
            # Writes the gzip trailer; does not close dest_file
            gzip_file.close()
        dest_file.flush()
    log(f"Created {dest_path}")
    return dest_path
