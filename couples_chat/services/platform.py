"""Tenant (platform) configuration lookup and creation."""
import logging
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from couples_chat.core.errors import NotFoundError
from couples_chat.models.chat import Platform
from couples_chat.services import cache

logger = logging.getLogger(__name__)

DEFAULT_PLATFORM_NAME = "One2One Love"


@dataclass
class PlatformConfig:
    id: str
    platform_key: str
    name: str
    branding: Dict[str, Any] = field(default_factory=dict)
    features: List[str] = field(default_factory=list)
    subscription_tiers: Dict[str, Any] = field(default_factory=dict)
    system_prompt: Optional[str] = None
    mission_statement: Optional[str] = None

    @property
    def assistant_name(self) -> str:
        return f"{self.name} AI"


def _cache_key(platform_key: str) -> str:
    return f"platform:{platform_key}"


def load_platform(db: Session, platform_key: str) -> PlatformConfig:
    """Active platform by key. Raises NotFoundError."""
    row = (
        db.query(Platform)
        .filter(Platform.platform_key == platform_key, Platform.is_active.is_(True))
        .first()
    )
    if row is None:
        raise NotFoundError(f"Platform {platform_key} not found")
    return PlatformConfig(
        id=row.id,
        platform_key=row.platform_key,
        name=row.name,
        branding=row.branding or {},
        features=row.features or [],
        subscription_tiers=row.subscription_tiers or {},
        system_prompt=row.system_prompt,
        mission_statement=row.mission_statement,
    )


def get_platform_config(db: Session, platform_key: str, cache_ttl: int = 300) -> Optional[PlatformConfig]:
    """
    Platform configuration for a tenant key, or None for the default tenant.

    A missing platform is not an error for the caller: replies fall back to
    the default persona and global knowledge.
    """
    cached = cache.get_json(_cache_key(platform_key))
    if cached:
        return PlatformConfig(**cached)

    try:
        config = load_platform(db, platform_key)
    except NotFoundError:
        logger.warning(f"Platform {platform_key} not found, using default")
        return None

    cache.set_json(_cache_key(platform_key), asdict(config), cache_ttl)
    return config


def create_platform(
    db: Session,
    platform_key: str,
    name: str,
    domain: Optional[str] = None,
    branding: Optional[Dict[str, Any]] = None,
    mission_statement: Optional[str] = None,
    features: Optional[List[str]] = None,
    subscription_tiers: Optional[Dict[str, Any]] = None,
    system_prompt: Optional[str] = None,
) -> Platform:
    platform = Platform(
        id=str(uuid.uuid4()),
        platform_key=platform_key,
        name=name,
        domain=domain,
        branding=branding or {},
        mission_statement=mission_statement,
        features=features or [],
        subscription_tiers=subscription_tiers or {},
        system_prompt=system_prompt,
        is_active=True,
    )
    db.add(platform)
    db.commit()
    db.refresh(platform)
    cache.delete(_cache_key(platform_key))
    logger.info(f"Platform created: key={platform_key} id={platform.id}")
    return platform
