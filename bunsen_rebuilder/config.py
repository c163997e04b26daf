"""
Configuration file for the BunsenLabs source rebuilder
=================================================================================
PURPOSE: Centralized configuration for the rebuild pipeline.
         This file contains settings that control where sources come from,
         where built packages go, and how long external tools may run.

USAGE: Read by ConfigLoader. Environment variables can override the
       directory and package glob defaults.

ORGANIZATION:
1. Upstream hosting
2. Local directories
3. Package selection
4. Build policy and timeouts
5. Required build tools
"""

# ==============================================================================
# 1. UPSTREAM HOSTING
# ==============================================================================

# CHANGELOG_URL: Raw debian/changelog of a source repository
# {repo} is replaced with the repository id
CHANGELOG_URL = "https://raw.githubusercontent.com/BunsenLabs/{repo}/master/debian/changelog"

# SOURCE_ARCHIVE_URL: Tarball of the default branch of a source repository
SOURCE_ARCHIVE_URL = "https://github.com/BunsenLabs/{repo}/archive/refs/heads/master.tar.gz"

# CONNECTIVITY_URL: Probed once before any network work
CONNECTIVITY_URL = "https://github.com"

HTTP_TIMEOUT = 30

# ==============================================================================
# 2. LOCAL DIRECTORIES
# ==============================================================================

# LOCAL_REPO_DIR: Flat APT repository holding the rebuilt .deb files and Packages.gz
LOCAL_REPO_DIR = "~/.local/share/bunsen-rebuilder/repo"

# BUILD_OUTPUT_DIR: Shared directory receiving build artifacts before publishing
BUILD_OUTPUT_DIR = "~/.cache/bunsen-rebuilder/built_packages"

# LOG_DIR: Append-only run logs, one file per run category
LOG_DIR = "~/.cache/bunsen-rebuilder/log"

# OVERRIDES_FILE: Operator extensions to the package -> repository mapping
OVERRIDES_FILE = "~/.config/bunsen-rebuilder/overrides.yaml"

# SOURCES_LIST: APT sources entry pointing at LOCAL_REPO_DIR
SOURCES_LIST = "/etc/apt/sources.list.d/bunsen-rebuilder.list"

# ==============================================================================
# 3. PACKAGE SELECTION
# ==============================================================================

# PACKAGE_GLOB: dpkg-query pattern for the installed packages to check
PACKAGE_GLOB = "bunsen-*"

# ==============================================================================
# 4. BUILD POLICY AND TIMEOUTS (seconds)
# ==============================================================================

# SOURCE_FORMAT: The only accepted content of debian/source/format
SOURCE_FORMAT = "3.0 (quilt)"

BUILD_TIMEOUT = 3600
DEPENDS_TIMEOUT = 1800
APT_TIMEOUT = 600

# ==============================================================================
# 5. REQUIRED BUILD TOOLS
# ==============================================================================
# Debian packages providing mk-build-deps and dpkg-buildpackage.
# Installed on demand before the first build.

REQUIRED_BUILD_TOOLS = [
    "build-essential",  # compilers, make, dpkg-dev
    "devscripts",       # mk-build-deps
    "equivs",           # builds the build-deps helper package
    "fakeroot",         # dpkg-buildpackage without real root
]
