# -*- coding: utf-8 -*-

"""
Environment configuration management.

Google credentials are usually provided through GOOGLE_APPLICATION_CREDENTIALS,
which can be set in a .env or .env.local file in the working directory or at
the root of a source checkout.
"""

import os
import logging
from pathlib import Path
from typing import List, Optional

import dotenv

from .misc import display_path


ENV_FILE_NAMES = ('.env.local', '.env')
CREDENTIALS_ENV_VAR = 'GOOGLE_APPLICATION_CREDENTIALS'


def _default_env_files() -> List[Path]:
    roots = [Path.cwd()]
    # Root of a source checkout (src/ layout)
    source_root = Path(__file__).resolve().parents[4]
    if source_root != Path.cwd():
        roots.append(source_root)
    return [root / name for root in roots for name in ENV_FILE_NAMES]


def setup_environment(env_file: Optional[str] = None) -> Optional[Path]:
    """
    Load the first .env file found into the process environment.

    Variables already set in the environment are not overridden.

    Args:
        env_file: Specific .env file to load instead of searching the default locations.

    Returns:
        Path of the file loaded, None if no file was found.
    """
    candidates = [Path(env_file)] if env_file else _default_env_files()
    for path in candidates:
        if path.is_file():
            dotenv.load_dotenv(path)
            logging.debug(f"Loaded environment from: {display_path(path)}")
            return path

    if env_file:
        logging.warning(f"Specified .env file not found: {env_file}")
    return None


def validate_required_env_vars(profile: Optional[dict] = None) -> list:
    """
    List the environment variables a profile still needs.

    Profiles with a `credentials_file`, or using application default
    credentials ('adc' mode), need nothing from the environment.
    """
    profile = profile or {}
    if profile.get('credentials') == 'adc' or profile.get('credentials_file'):
        return []
    return [] if os.getenv(CREDENTIALS_ENV_VAR) else [CREDENTIALS_ENV_VAR]
