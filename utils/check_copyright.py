#!/usr/bin/env python3
"""Copyright © 2024 Pixelgen Technologies AB.

Check that every python module of umiaware and its tests carries a
copyright notice in its module docstring.

Do not delete the shebang on top of the file or it will stop working
"""

import ast
import re
import sys
from itertools import chain
from pathlib import Path
from typing import Iterable, Optional

ROOT_DIR = Path(__file__).parent / ".."
PYTHON_DIRS = [ROOT_DIR / "src" / "umiaware", ROOT_DIR / "tests"]

COPYRIGHT_PATTERN = re.compile(r"Copyright (©|\(c\)) \d{4}")


class CopyrightNoticeMissing(Exception):
    """A python module without a copyright notice.

    :param message: a message of exception
    :param offending_file: the file with no copyright
    """

    def __init__(self, message: str, offending_file: Path) -> None:
        """Construct instance."""
        super().__init__(message)
        self.file = offending_file


def check_file_for_copyright(py_file: Path) -> Optional[CopyrightNoticeMissing]:
    """Check file for presence of copyright notice.

    Empty modules, e.g. bare `__init__.py` files, are accepted.

    :param py_file: a python file
    :return: missing notice class if copyright not present in file
    :rtype: Optional[CopyrightNoticeMissing]
    """
    source = py_file.read_text()
    if not source.strip():
        return None

    module_docstring = ast.get_docstring(ast.parse(source), clean=True)
    if not module_docstring:
        return CopyrightNoticeMissing("Module docstring missing", py_file.resolve())
    if not COPYRIGHT_PATTERN.search(module_docstring):
        return CopyrightNoticeMissing(
            "Copyright notice missing from module docstring", py_file.resolve()
        )
    return None


def check_copyright(files: Optional[Iterable[Path]]) -> None:
    """Check a list of files for copyright, all package files if None.

    :param files: files to check
    """
    files_to_check = files or chain.from_iterable(
        directory.rglob("*.py") for directory in PYTHON_DIRS
    )
    found_errors = [
        error
        for error in map(check_file_for_copyright, files_to_check)
        if error is not None
    ]

    if found_errors:
        print("A copyright notice is missing from the following files:")
        for exception in found_errors:
            print(exception.file, str(exception), sep=": ")
        sys.exit(1)

    print("All .py files have a copyright notice")


if __name__ == "__main__":
    if len(sys.argv) > 1:
        check_copyright(map(Path, sys.argv[1:]))
    else:
        check_copyright(None)
