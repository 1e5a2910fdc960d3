"""Workstation bootstrapper — detect the host, install the toolchain, build the conda env."""

__version__ = "0.1.0"
