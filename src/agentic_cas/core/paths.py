"""Centralized path management for agentic-cas."""

from pathlib import Path

# Base directory
AGENTIC_CAS_HOME = Path.home() / ".agentic_cas"

# Configuration file
CONFIG_FILE = AGENTIC_CAS_HOME / "config.yaml"

# Default root for the local filesystem backend
LOCAL_STORE_DIR = AGENTIC_CAS_HOME / "store"
