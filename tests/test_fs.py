"""Tests for appbundle.fs helpers."""

import os

import pytest

from appbundle.fs import (
    copy_file,
    create_file,
    create_file_with_data,
    md5sum,
    total_dir_size,
)


def test_create_file_creates_parents(tmp_path):
    path = tmp_path / "a" / "b" / "c.txt"
    with create_file(path) as f:
        f.write(b"data")
    assert path.read_bytes() == b"data"


def test_create_file_truncates_existing(tmp_path):
    path = tmp_path / "c.txt"
    path.write_bytes(b"previous contents")
    with create_file(path) as f:
        f.write(b"new")
    assert path.read_bytes() == b"new"


def test_copy_file_is_byte_exact(tmp_path):
    src = tmp_path / "src.bin"
    src.write_bytes(bytes(range(256)) * 3)
    dst = tmp_path / "out" / "nested" / "dst.bin"
    copy_file(src, dst)
    assert dst.read_bytes() == src.read_bytes()


def test_copy_file_missing_source(tmp_path):
    with pytest.raises(FileNotFoundError):
        copy_file(tmp_path / "missing.bin", tmp_path / "dst.bin")
    assert not (tmp_path / "dst.bin").exists()


def test_copy_file_directory_source(tmp_path):
    (tmp_path / "dir").mkdir()
    with pytest.raises(IsADirectoryError):
        copy_file(tmp_path / "dir", tmp_path / "dst.bin")


def test_create_file_with_data(tmp_path):
    path = tmp_path / "foo.txt"
    create_file_with_data(path, "test")
    assert path.exists()
    assert path.stat().st_size == 4


def test_total_dir_size_counts_files_and_directories(tmp_path):
    (tmp_path / "file1.txt").write_bytes(b"test")
    (tmp_path / "subdir").mkdir()
    (tmp_path / "subdir" / "file2.txt").write_bytes(b"test")

    expected = sum(
        os.lstat(p).st_size
        for p in (
            tmp_path,
            tmp_path / "file1.txt",
            tmp_path / "subdir",
            tmp_path / "subdir" / "file2.txt",
        )
    )
    total = total_dir_size(tmp_path)
    assert total == expected
    assert total >= 8


def test_total_dir_size_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        total_dir_size(tmp_path / "missing")


def test_md5sum_known_digest(tmp_path):
    path = tmp_path / "foo.txt"
    path.write_bytes(b"test")
    assert md5sum(path) == "098f6bcd4621d373cade4e832627b4f6"


def test_md5sum_independent_of_location(tmp_path):
    first = tmp_path / "a" / "one.txt"
    second = tmp_path / "b" / "two.dat"
    create_file_with_data(first, "test")
    create_file_with_data(second, "test")
    assert md5sum(first) == md5sum(second)
