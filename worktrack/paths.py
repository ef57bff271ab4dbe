#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""Centralized path resolution for worktrack.

All path resolution should go through this module to ensure consistency.
"""
import os
from pathlib import Path

from worktrack.models import DATABASE_DIR_NAME


class PathResolver:
    """Resolves paths for worktrack components."""

    @staticmethod
    def config_dir() -> Path:
        """Get the configuration directory.

        Resolution order:
        1. XDG_CONFIG_HOME/worktrack
        2. ~/.config/worktrack
        """
        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config:
            return Path(xdg_config) / "worktrack"
        return Path.home() / ".config" / "worktrack"

    @staticmethod
    def state_dir() -> Path:
        """Get the state directory for mutable diagnostics (debug log).

        Resolution order:
        1. WORKTRACK_STATE env var
        2. XDG_STATE_HOME/worktrack
        3. ~/.local/state/worktrack
        """
        state = os.environ.get("WORKTRACK_STATE")
        if state:
            return Path(state)
        xdg_state = os.environ.get("XDG_STATE_HOME")
        if xdg_state:
            return Path(xdg_state) / "worktrack"
        return Path.home() / ".local" / "state" / "worktrack"

    @staticmethod
    def database_dir() -> Path:
        """Get the directory holding sessions.txt and tags.txt.

        Resolution order:
        1. WORKTRACK_DATA env var
        2. XDG_DATA_HOME/worktrack/database
        3. ~/.local/share/worktrack/database

        The ``worktrack.databaseDir`` setting is applied on top of this by
        the config layer.
        """
        data = os.environ.get("WORKTRACK_DATA")
        if data:
            return Path(data)
        xdg_data = os.environ.get("XDG_DATA_HOME")
        if xdg_data:
            return Path(xdg_data) / "worktrack" / DATABASE_DIR_NAME
        return Path.home() / ".local" / "share" / "worktrack" / DATABASE_DIR_NAME
