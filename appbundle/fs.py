"""Filesystem helpers shared by the icon and archive stages."""

import hashlib
import os
import shutil

from appbundle.debug import debug

# Read size used when streaming files through hashes and archives
CHUNK_SIZE = 64 * 1024


def create_file(path):
    """
    Create (or truncate) the file at path, creating any missing parent
    directories first. Returns a binary file object open for writing.
    """
    parent = os.path.dirname(os.fspath(path))
    if parent:
        os.makedirs(parent, exist_ok=True)
    return open(path, 'wb')


def copy_file(src, dst):
    """Copy src to dst byte for byte, creating the parents of dst as needed."""
    if not os.path.exists(src):
        raise FileNotFoundError(f"Source path does not exist: {os.fspath(src)}")
    if not os.path.isfile(src):
        raise IsADirectoryError(f"Source path is not a file: {os.fspath(src)}")
    with open(src, 'rb') as src_file, create_file(dst) as dst_file:
        shutil.copyfileobj(src_file, dst_file, CHUNK_SIZE)


def create_file_with_data(path, data: str):
    """Create path with its parent directories, then write data into it."""
    with create_file(path) as f:
        f.write(data.encode('utf-8'))
        f.flush()


@debug('total_dir_size')
def total_dir_size(path) -> int:
    """
    Total size, in bytes, of a directory and everything below it.

    Directory entries contribute their own metadata size, as reported by
    lstat, on top of the files they contain. Symlinks are not followed.
    """
    def raise_error(err):
        raise err

    total = os.lstat(path).st_size
    for dirpath, dirnames, filenames in os.walk(path, onerror=raise_error):
        for name in dirnames + filenames:
            total += os.lstat(os.path.join(dirpath, name)).st_size
    return total


@debug('md5sum')
def md5sum(path) -> str:
    """Hex MD5 digest of the file at path, read in chunks."""
    digest = hashlib.md5()
    with open(path, 'rb') as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b''):
            digest.update(chunk)
    return digest.hexdigest()
