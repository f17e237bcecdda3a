"""
配置管理模块
"""
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

# 加载环境变量
load_dotenv()

logger = logging.getLogger(__name__)


def _optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """应用配置"""

    # 战斗配置
    rpg_mode: bool = _flag("SAGA_RPG_MODE", "true")
    rng_seed: Optional[int] = _optional_int("SAGA_RNG_SEED")  # 固定种子可复现整场战斗

    # 日志
    log_level: str = os.getenv("SAGA_LOG_LEVEL", "INFO")

    # API 配置
    api_prefix: str = os.getenv("SAGA_API_PREFIX", "/api")
    cors_origins: list = [
        origin.strip() for origin in os.getenv("SAGA_CORS_ORIGINS", "*").split(",") if origin.strip()
    ]

    model_config = ConfigDict(case_sensitive=False)


# 全局配置实例
settings = Settings()


def validate_config() -> bool:
    """
    验证配置是否完整

    Returns:
        bool: 配置是否有效
    """
    valid = True
    if logging.getLevelName(settings.log_level.upper()) == f"Level {settings.log_level.upper()}":
        logger.warning("Unknown SAGA_LOG_LEVEL %r", settings.log_level)
        valid = False
    if not settings.rpg_mode:
        logger.warning("SAGA_RPG_MODE is off: every combatant will use neutral stats")
    return valid


def configure_logging() -> None:
    level = logging.getLevelName(settings.log_level.upper())
    logging.basicConfig(
        level=level if isinstance(level, int) else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
