"""
Configuration loading and validation.

Everything here runs before the first network call so that a bad setup
fails fast.
"""

import os
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

from dotenv import load_dotenv

from .errors import ConfigurationError

ENV_USERNAME = 'ATLAS_USERNAME'
ENV_API_KEY = 'ATLAS_API_KEY'
ENV_GROUP_ID = 'ATLAS_GROUP_ID'
ENV_APP_ID = 'ATLAS_APP_ID'

REQUIRED_ENV_VARS = (ENV_USERNAME, ENV_API_KEY, ENV_GROUP_ID, ENV_APP_ID)

DEFAULT_BATCH_SIZE = 100
DEFAULT_PENDING_USER_DATE = '2024-01-01'
OUTPUT_DIR = Path('exports')
DEFAULT_ENV_FILE = Path('.env')

_DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


@dataclass(frozen=True)
class ExportConfig:
    username: str
    api_key: str
    group_id: str
    app_id: str
    dry_run: bool = False
    verbose: bool = False
    batch_size: int = DEFAULT_BATCH_SIZE
    output_file: Optional[str] = None
    pending_user_date: str = DEFAULT_PENDING_USER_DATE

    @property
    def pending_user_timestamp(self) -> int:
        return date_to_epoch_seconds(self.pending_user_date)

    @property
    def should_write(self) -> bool:
        return bool(self.output_file) and not self.dry_run


def load_environment(env_file_path: Optional[str] = None) -> None:
    """
    Load variables from a .env file without overriding the real environment.

    Without an explicit path only .env in the working directory is read.
    """
    if env_file_path:
        env_file = Path(env_file_path)
        if not env_file.exists():
            raise ConfigurationError(f"Custom .env file not found: {env_file.absolute()}")
        load_dotenv(env_file)
    elif DEFAULT_ENV_FILE.exists():
        load_dotenv(DEFAULT_ENV_FILE)


def load_credentials(required: Sequence[str] = REQUIRED_ENV_VARS) -> Dict[str, str]:
    """Read the required variables, reporting every missing one at once."""
    values = {name: os.getenv(name, '').strip() for name in required}
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}. "
            "Please check your .env file."
        )
    return values


def validate_batch_size(value: Union[int, str]) -> int:
    try:
        size = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid batchSize {value!r}: must be a positive integer")
    if size < 1:
        raise ConfigurationError(f"Invalid batchSize {value!r}: must be a positive integer")
    return size


def validate_pending_user_date(value: str) -> str:
    if not value or not _DATE_PATTERN.match(value):
        raise ConfigurationError(f"Invalid pendingUserDate {value!r}: expected YYYY-MM-DD")
    try:
        datetime.strptime(value, '%Y-%m-%d')
    except ValueError:
        raise ConfigurationError(f"Invalid pendingUserDate {value!r}: not a calendar date")
    return value


def date_to_epoch_seconds(value: str) -> int:
    """Midnight UTC of a YYYY-MM-DD date, as seconds since the epoch."""
    parsed = datetime.strptime(validate_pending_user_date(value), '%Y-%m-%d')
    return int(parsed.replace(tzinfo=timezone.utc).timestamp())


def resolve_output_path(output_file: str, output_dir: Path = OUTPUT_DIR) -> Path:
    """
    Place the requested file inside the output directory.

    Only the final path component is kept, so "x/../y.json" and
    "/etc/y.json" both end up as <output_dir>/y.json.
    """
    name = os.path.basename(output_file.replace('\\', '/').rstrip('/'))
    if name in ('', '.', '..'):
        raise ConfigurationError(f"Invalid outputFile {output_file!r}: no file name")
    return output_dir / name


def load_config(
    dry_run: bool = False,
    verbose: bool = False,
    batch_size: Union[int, str] = DEFAULT_BATCH_SIZE,
    output_file: Optional[str] = None,
    pending_user_date: str = DEFAULT_PENDING_USER_DATE,
    env_file_path: Optional[str] = None,
) -> ExportConfig:
    load_environment(env_file_path)
    credentials = load_credentials()

    batch_size = validate_batch_size(batch_size)
    validate_pending_user_date(pending_user_date)
    if output_file:
        resolve_output_path(output_file)

    return ExportConfig(
        username=credentials[ENV_USERNAME],
        api_key=credentials[ENV_API_KEY],
        group_id=credentials[ENV_GROUP_ID],
        app_id=credentials[ENV_APP_ID],
        dry_run=dry_run,
        verbose=verbose,
        batch_size=batch_size,
        output_file=output_file,
        pending_user_date=pending_user_date,
    )
