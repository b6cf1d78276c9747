"""Packaging for ChainTimer.

Install for development:
    pip install -e ".[test]"

Build a macOS .app bundle:
    pip install py2app
    python setup.py py2app
"""

import sys

from setuptools import find_packages, setup

APP = ["main.py"]
DATA_FILES = []
OPTIONS = {
    "argv_emulation": False,
    "iconfile": None,
    "plist": {
        "CFBundleName": "ChainTimer",
        "CFBundleDisplayName": "ChainTimer",
        "CFBundleIdentifier": "com.chaintimer.app",
        "CFBundleVersion": "0.1.0",
        "CFBundleShortVersionString": "0.1.0",
        "LSMinimumSystemVersion": "13.0",
    },
}

py2app_kwargs = {}
if "py2app" in sys.argv:
    py2app_kwargs = {
        "app": APP,
        "data_files": DATA_FILES,
        "options": {"py2app": OPTIONS},
        "setup_requires": ["py2app"],
    }

setup(
    name="ChainTimer",
    version="0.1.0",
    packages=find_packages(include=["chaintimer", "chaintimer.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.4",
        "SQLAlchemy>=2.0",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": ["chaintimer=chaintimer.__main__:main"],
    },
    **py2app_kwargs,
)
