"""
Orchestrator modules package
"""

from .build_orchestrator import BuildOrchestrator
from .package_builder import PackageBuilder
from .policy import AbortPolicy, ContinuePolicy, FailurePolicy, PromptPolicy

__all__ = [
    'BuildOrchestrator',
    'PackageBuilder',
    'AbortPolicy',
    'ContinuePolicy',
    'FailurePolicy',
    'PromptPolicy',
]
