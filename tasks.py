"""
Tasks for maintaining the project.

Execute 'invoke --list' for guidance on using Invoke

Copyright © 2024 Pixelgen Technologies AB.
"""

import platform
import shutil
import sys
import webbrowser
from pathlib import Path

from invoke import task

ROOT_DIR = Path(__file__).parent
TEST_DIR = ROOT_DIR.joinpath("tests")
SOURCE_DIR = ROOT_DIR.joinpath("src/umiaware")
COVERAGE_FILE = ROOT_DIR.joinpath(".coverage")
COVERAGE_DIR = ROOT_DIR.joinpath("htmlcov")
COVERAGE_REPORT = COVERAGE_DIR.joinpath("index.html")
PYTHON_DIRS = [str(d) for d in [SOURCE_DIR, TEST_DIR]]


def _run(c, command, **kwargs):
    return c.run(command, pty=platform.system() != "Windows", **kwargs)


@task(help={"check": "Checks if source is formatted without applying changes"})
def format(c, check=False):
    """
    Format code
    """
    black_options = "--diff --color --check" if check else ""
    _run(c, "black {} {}".format(black_options, " ".join(PYTHON_DIRS)))


@task
def typecheck(c):
    """
    Run type checking on the package
    """
    _run(c, f"mypy --ignore-missing-imports {SOURCE_DIR}")


@task
def lint(c):
    """
    Run all linting, including the copyright check
    """
    ruff_result = c.run("ruff check {}".format(" ".join(PYTHON_DIRS)), warn=True)
    copyright_result = c.run("python utils/check_copyright.py", warn=True)
    if ruff_result.exited == 0 and copyright_result.exited == 0:
        print("All linting successful")
    else:
        print("Failed in linting")
        sys.exit(1)


@task(
    optional=["basetemp"], help={"basetemp": "The base temp directory for test output"}
)
def test(c, basetemp=None):
    """
    Run tests
    """
    cmd = "python -m pytest -s"
    if basetemp is not None:
        cmd += f' --basetemp="{str(basetemp)}"'
    _run(c, cmd)


@task(help={"publish": "Publish the result via coveralls"})
def coverage(c, publish=False):
    """
    Create coverage report
    """
    _run(c, "python -m pytest --cov={} --cov-report=term".format(SOURCE_DIR))
    if publish:
        _run(c, "coveralls")
    else:
        _run(c, "coverage html")
        webbrowser.open(COVERAGE_REPORT.as_uri())


@task
def clean_build(c):
    """
    Clean up files from package building
    """
    _run(c, "rm -fr build/ dist/ .eggs/")
    _run(c, "find . -name '*.egg-info' -exec rm -fr {} +")


@task
def clean_python(c):
    """
    Clean up python file artifacts
    """
    _run(c, "find . -name '*.pyc' -exec rm -f {} +")
    _run(c, "find . -name '__pycache__' -exec rm -fr {} +")


@task
def clean_tests(c):
    """
    Clean up files from testing
    """
    COVERAGE_FILE.unlink(missing_ok=True)
    shutil.rmtree(COVERAGE_DIR, ignore_errors=True)


@task(pre=[clean_build, clean_python, clean_tests])
def clean(c):
    """
    Runs all clean sub-tasks
    """


@task(clean)
def dist(c):
    """
    Build source and wheel packages
    """
    _run(c, "python -m build")
