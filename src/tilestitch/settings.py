from __future__ import annotations

import logging
from pathlib import Path

import tomlkit
from pydantic import BaseModel, field_validator
from tomlkit.exceptions import TOMLKitError

from tilestitch.domain.models import BoundingBox
from tilestitch.shared.constants import (
    ASYNC_MAX_CONCURRENCY,
    DEFAULT_USER_AGENT,
    HTTP_TIMEOUT_DEFAULT,
    TILE_SIZE,
)

logger = logging.getLogger(__name__)

URL_PLACEHOLDERS = ('{z}', '{x}', '{y}')


class StitchConfig(BaseModel):
    """Defaults read from a TOML config file; the command line overrides them."""

    model_config = {
        'extra': 'ignore',
    }

    tile_size: int = TILE_SIZE
    concurrency: int = ASYNC_MAX_CONCURRENCY
    timeout: float = HTTP_TIMEOUT_DEFAULT
    user_agent: str = DEFAULT_USER_AGENT

    @field_validator('tile_size', 'concurrency')
    @classmethod
    def validate_positive(cls, v: int | str) -> int:
        v = int(v)
        if v < 1:
            msg = 'value must be a positive integer'
            raise ValueError(msg)
        return v

    @field_validator('timeout')
    @classmethod
    def validate_timeout(cls, v: float | str) -> float:
        v = float(v)
        if v < 0:
            msg = 'timeout cannot be negative (0 disables it)'
            raise ValueError(msg)
        return v


class StitchSettings(StitchConfig):
    """Everything one stitching run needs."""

    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float
    zoom: int
    url: str
    output: Path

    @field_validator('url')
    @classmethod
    def validate_url_template(cls, v: str) -> str:
        missing = [p for p in URL_PLACEHOLDERS if p not in v]
        if missing:
            msg = f'URL template is missing {", ".join(missing)} placeholder(s)'
            raise ValueError(msg)
        return v

    @property
    def bbox(self) -> BoundingBox:
        return BoundingBox(self.min_lat, self.min_lon, self.max_lat, self.max_lon)


def load_config(path: str | Path) -> StitchConfig:
    """Load TOML defaults -> StitchConfig."""
    p = Path(path)
    if not p.exists():
        msg = f'Config file not found: {p}'
        raise FileNotFoundError(msg)
    text = p.read_text(encoding='utf-8')
    try:
        data = tomlkit.parse(text).unwrap()
    except TOMLKitError as e:
        msg = f'Invalid TOML in {p}: {e}'
        raise ValueError(msg) from e
    config = StitchConfig.model_validate(data)
    logger.debug('Loaded config from %s: %s', p, config)
    return config


def save_config(path: str | Path, config: StitchConfig) -> None:
    """Write ``config`` as TOML, e.g. to bootstrap a config file."""
    doc = tomlkit.document()
    for key, value in config.model_dump().items():
        doc[key] = value
    Path(path).write_text(tomlkit.dumps(doc), encoding='utf-8')
