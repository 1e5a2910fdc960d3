"""
L2 Resolver — tool table lookups and placeholder substitution.

Pure: no subprocess, no filesystem beyond loading the table.
"""

from devsetup.core.services.provisioning.resolver.registry import ToolRegistry  # noqa: F401
