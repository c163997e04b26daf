"""
Repository management modules package
"""

from .apt_client import AptClient
from .database_manager import DatabaseManager
from .package_query import PackageQuery, PackageRecord
from .publisher import PublishResult, RepositoryPublisher
from .resolver import RepositoryResolver
from .upgrade_scanner import RebuildSet, ScanResult, UpgradeScanner

__all__ = [
    'AptClient',
    'DatabaseManager',
    'PackageQuery',
    'PackageRecord',
    'PublishResult',
    'RepositoryPublisher',
    'RepositoryResolver',
    'RebuildSet',
    'ScanResult',
    'UpgradeScanner',
]
