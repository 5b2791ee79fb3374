"""
Runtime configuration read from the environment (and a .env file).
"""
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

DEFAULT_CATEGORY = 'Sport Utility'
DEFAULT_NAME_EXCLUSIONS = ('Escape', 'EcoSport')


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f'{name} must be an integer, got {value!r}')


def _env_list(name: str, default: tuple) -> frozenset:
    value = os.getenv(name)
    if value is None:
        return frozenset(default)
    return frozenset(part.strip() for part in value.split(',') if part.strip())


@dataclass(frozen=True)
class FilterPolicy:
    """
    Which feed segments count as inventory.

    A segment is kept when its body style contains `category` (if set) and
    its name contains none of `name_exclusions`.
    """
    category: Optional[str] = DEFAULT_CATEGORY
    name_exclusions: frozenset = field(default_factory=lambda: frozenset(DEFAULT_NAME_EXCLUSIONS))

    def accepts(self, name: Optional[str], body_style: Optional[str]) -> bool:
        if self.category and self.category not in (body_style or ''):
            return False
        name = name or ''
        return not any(excluded in name for excluded in self.name_exclusions)


@dataclass(frozen=True)
class SyncConfig:
    """Settings for one deployment of the inventory sync worker."""
    cars_url: Optional[str] = None
    fetch_timeout: int = 15
    record_limit: int = 100
    bulkclear_limit: int = 100
    prune_stale: bool = True
    filter_policy: FilterPolicy = field(default_factory=FilterPolicy)
    reply_timeout: int = 3
    store_type: str = 'memory'
    database_url: Optional[str] = None
    channel_id: Optional[str] = None
    client_token: Optional[str] = None
    scheduler_enabled: bool = False
    refresh_interval: int = 600
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls, dotenv: bool = True) -> 'SyncConfig':
        """
        Build config from environment variables.

        Reads a .env file first unless `dotenv` is False. Variables already
        set in the environment take precedence over the file.
        """
        if dotenv:
            load_dotenv()

        category = os.getenv('CATEGORY_FILTER', DEFAULT_CATEGORY)
        policy = FilterPolicy(
            category=category.strip() or None,
            name_exclusions=_env_list('NAME_EXCLUSIONS', DEFAULT_NAME_EXCLUSIONS),
        )

        return cls(
            cars_url=os.getenv('CARS_URL'),
            fetch_timeout=_env_int('FETCH_TIMEOUT', 15),
            record_limit=_env_int('RECORD_LIMIT', 100),
            bulkclear_limit=_env_int('BULKCLEAR_LIMIT', 100),
            prune_stale=_env_bool('PRUNE_STALE', True),
            filter_policy=policy,
            reply_timeout=_env_int('REPLY_TIMEOUT', 3),
            store_type=os.getenv('RECORD_STORE_TYPE', 'memory').strip().lower(),
            database_url=os.getenv('DATABASE_URL'),
            channel_id=os.getenv('CHANNEL_ID'),
            client_token=os.getenv('CLIENT_TOKEN'),
            scheduler_enabled=_env_bool('SCHEDULER_ENABLED', False),
            refresh_interval=_env_int('REFRESH_INTERVAL', 600),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        )
