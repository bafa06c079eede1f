"""
Centralized settings and path configuration for the billboard pricing engine.
"""
import json
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"Invalid value for {name}: {raw!r} is not a number") from exc


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"Invalid value for {name}: {raw!r} is not an integer") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    return raw.strip().lower() in ('true', '1', 'yes', 'on')


def _env_optional(name: str) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return None
    return raw.strip()


def load_zone_aliases(path: Optional[Path]) -> dict[str, str]:
    """Load the municipality → zone alias table from a JSON object file."""
    if path is None or not path.exists():
        return {}
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise RuntimeError(f"Zone alias file {path} must contain a JSON object")
    return {str(k).strip(): str(v).strip() for k, v in data.items()}


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path
    data_dir: Path

    # Persisted pricing document (zones, sizes, municipalities, packages)
    pricing_document: Path

    # Billboard inventory export (CSV or Excel)
    inventory_file: Optional[Path] = None

    # Quote configuration
    tax_rate: float = 0.0
    currency: str = 'د.ل'
    quote_validity_days: int = 30
    block_unpriced_quotes: bool = False

    # Zone resolution
    default_zone: Optional[str] = None
    template_zone: Optional[str] = None
    zone_aliases: dict[str, str] = field(default_factory=dict)

    log_level: str = 'INFO'

    @classmethod
    def load(cls, project_root: Optional[Path] = None, load_env: bool = True) -> 'Settings':
        """Load settings from the environment (and `.env`) on top of the project structure."""
        if load_env:
            load_dotenv()

        root = project_root or get_project_root()
        data_dir = Path(os.getenv('PRICING_DATA_DIR') or root / 'data')

        document = os.getenv('PRICING_DOCUMENT')
        inventory = _env_optional('INVENTORY_FILE')
        aliases_file = _env_optional('ZONE_ALIASES_FILE')
        aliases_path = Path(aliases_file) if aliases_file else data_dir / 'zone_aliases.json'

        tax_rate = _env_float('TAX_RATE', 0.0)
        if tax_rate < 0:
            raise RuntimeError(f"TAX_RATE must not be negative, got {tax_rate}")

        return cls(
            project_root=root,
            data_dir=data_dir,
            pricing_document=Path(document) if document else data_dir / 'pricing.json',
            inventory_file=Path(inventory) if inventory else None,
            tax_rate=tax_rate,
            currency=os.getenv('CURRENCY') or 'د.ل',
            quote_validity_days=_env_int('QUOTE_VALIDITY_DAYS', 30),
            block_unpriced_quotes=_env_bool('BLOCK_UNPRICED_QUOTES', False),
            default_zone=_env_optional('DEFAULT_ZONE'),
            template_zone=_env_optional('TEMPLATE_ZONE'),
            zone_aliases=load_zone_aliases(aliases_path),
            log_level=os.getenv('LOG_LEVEL') or 'INFO',
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
