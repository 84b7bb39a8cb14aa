"""Build metadata for the running exporter.

The package version comes from the installed distribution.  Revision,
branch, build date and build user are stamped into the environment by the
image build (BUILD_REVISION, BUILD_BRANCH, BUILD_DATE, BUILD_USER).
"""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass
from importlib import metadata

DISTRIBUTION = "script-exporter"


@dataclass(frozen=True, slots=True)
class BuildInfo:
    version: str
    revision: str
    branch: str
    python_version: str
    build_date: str
    build_user: str

    def labels(self) -> dict[str, str]:
        return {
            "version": self.version,
            "revision": self.revision,
            "branch": self.branch,
            "pythonversion": self.python_version,
            "builddate": self.build_date,
            "builduser": self.build_user,
        }

    def info(self) -> str:
        return f"(version={self.version}, branch={self.branch}, revision={self.revision})"

    def build_context(self) -> str:
        return (
            f"(python={self.python_version}, user={self.build_user}, "
            f"date={self.build_date})"
        )

    def describe(self, program: str) -> str:
        return (
            f"{program}, version {self.version} "
            f"(branch: {self.branch}, revision: {self.revision})\n"
            f"  build user:       {self.build_user}\n"
            f"  build date:       {self.build_date}\n"
            f"  python version:   {self.python_version}"
        )


def _package_version() -> str:
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return "unknown"


def load_build_info() -> BuildInfo:
    return BuildInfo(
        version=_package_version(),
        revision=os.environ.get("BUILD_REVISION", "unknown"),
        branch=os.environ.get("BUILD_BRANCH", "unknown"),
        python_version=platform.python_version(),
        build_date=os.environ.get("BUILD_DATE", "unknown"),
        build_user=os.environ.get("BUILD_USER", "unknown"),
    )


BUILD_INFO = load_build_info()
