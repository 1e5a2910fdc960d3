"""
CondaEnvSpec — the isolated Python environment every run recreates.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ENV_NAME = "J"
DEFAULT_PYTHON_VERSION = "3.9"
DEFAULT_PACKAGES: tuple[str, ...] = (
    "numpy",
    "pandas",
    "matplotlib",
    "seaborn",
    "gradio",
    "notebook",
    "pip",
)


def normalize_package_name(name: str) -> str:
    """PEP 503-style comparison key (``Foo_Bar`` == ``foo-bar``)."""
    return name.strip().lower().replace("_", "-").replace(".", "-")


class CondaEnvSpec(BaseModel):
    """Name, runtime pin, and package set of the managed environment.

    The environment is destroyed and created from scratch on every run;
    it is never upgraded in place.
    """

    model_config = ConfigDict(frozen=True)

    name: str = DEFAULT_ENV_NAME
    python_version: str = DEFAULT_PYTHON_VERSION
    packages: tuple[str, ...] = Field(default=DEFAULT_PACKAGES)

    def missing_from(self, installed: set[str]) -> list[str]:
        """Required packages absent from a set of installed names."""
        have = {normalize_package_name(n) for n in installed}
        return [p for p in self.packages if normalize_package_name(p) not in have]
