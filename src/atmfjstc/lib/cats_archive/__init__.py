"""
A reader for CATS archives.

CATS is a simple single-file container format. An archive holds a tree of directories and files, each file being
compressed independently, so that any single file can be read without touching the others. The layout is:

- The signature: the magic ``CATS`` followed by a one-byte version (always 1)
- The index: a recursive description of the root directory, giving the name, type and, for files, the location, size
  and compression method of every entry
- The payload region: the concatenated (possibly compressed) content of all files

The main class of interest is `CatsArchive`, in the `archive` module::

    from atmfjstc.lib.cats_archive.archive import CatsArchive

    archive = CatsArchive.from_file('path/to/file.cats')

    for path, entry in archive.files():
        print(path, entry.size)

    data = archive.read('/docs/readme.txt')

This package does not offer functionality for writing CATS archives.
"""


__version__ = '1.0.0'
