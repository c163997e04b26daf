"""
Repository resolver - maps installed package names to the source repository that builds them
"""

from types import MappingProxyType
from typing import Dict, Optional


class RepositoryResolver:
    """Package name -> repository id, defaulting to the package name itself"""

    def __init__(self, overrides: Optional[Dict[str, str]] = None):
        self._overrides = MappingProxyType(dict(overrides or {}))

    @property
    def overrides(self):
        return self._overrides

    def resolve(self, package_name: str) -> str:
        return self._overrides.get(package_name, package_name)
