"""Version of the Tenant Router API.

Installed distributions report their metadata version. A source checkout
that was never installed reads ``pyproject.toml`` at the repository root.
"""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION_NAME = "tenant-router-api"

# src/api/infrastructure/version.py -> repository root
PYPROJECT_PATH = Path(__file__).resolve().parents[3] / "pyproject.toml"


def _version_from_pyproject(path: Path = PYPROJECT_PATH) -> str:
    with path.open("rb") as f:
        return tomllib.load(f)["project"]["version"]


def get_version() -> str:
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return _version_from_pyproject()


__version__ = get_version()
