"""
Shared utilities for the pipeline stages.

Only depends on the standard library so it can run before any
third-party package has been verified.
"""

import importlib
import importlib.util
import logging
import os
import subprocess
import sys
from typing import Dict, Iterable, Optional

logger = logging.getLogger(__name__)

# Import name -> name on the package index, where they differ
PIP_NAMES: Dict[str, str] = {
    'sklearn': 'scikit-learn',
    'yaml': 'pyyaml',
}


def is_installed(package: str) -> bool:
    """Return True if `package` can be imported."""
    return importlib.util.find_spec(package) is not None


def install_package(package: str) -> None:
    """
    Install a package into the running interpreter's environment.

    Args:
        package: Import name of the package

    Raises:
        subprocess.CalledProcessError: If pip fails
    """
    pip_name = PIP_NAMES.get(package, package)
    subprocess.check_call([sys.executable, '-m', 'pip', 'install', pip_name])
    importlib.invalidate_caches()


def check_pkg_status(packages: Iterable[str], auto_install: bool = True) -> Dict[str, str]:
    """
    Check that required packages are importable and install any that are missing.

    Args:
        packages: Import names to check
        auto_install: Install missing packages instead of only reporting them

    Returns:
        Mapping of package name to 'installed', 'already_installed' or 'missing'
    """
    status = {}
    for package in packages:
        if is_installed(package):
            logger.info(f"INFO: '{package}' is already installed.")
            status[package] = 'already_installed'
        elif auto_install:
            install_package(package)
            logger.info(f"INFO: '{package}' has been installed.")
            status[package] = 'installed'
        else:
            logger.warning(f"'{package}' is not installed.")
            status[package] = 'missing'
    return status


def detect_cpu_count() -> Optional[int]:
    """Number of processors available to this process, if known."""
    return os.cpu_count()
