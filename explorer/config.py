"""
NASA Data Explorer Configuration Loader

Loads configuration from:
1. config/explorer.yaml - Server, upstream and rate-limit defaults
2. .env file - Secrets (NASA API key)
3. Environment variables - Deployment overrides
"""

import os
from pathlib import Path
from dataclasses import dataclass, field

import yaml
from dotenv import load_dotenv

DEV_ORIGINS = ["http://localhost:5173", "http://localhost:3000"]


@dataclass
class NasaConfig:
    api_key: str = "DEMO_KEY"
    base_url: str = "https://api.nasa.gov"
    timeout: float = 10.0
    long_timeout: float = 15.0


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 5000
    environment: str = "development"
    cors_origins: list[str] = field(default_factory=lambda: list(DEV_ORIGINS))


@dataclass
class RateLimitConfig:
    window_seconds: float = 15 * 60
    max_requests: int = 100


@dataclass
class Config:
    """Main configuration container."""
    nasa: NasaConfig = field(default_factory=NasaConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    log_level: str = "INFO"

    @property
    def is_development(self) -> bool:
        return self.server.environment == "development"

    @classmethod
    def load(cls, config_dir: Path | None = None) -> "Config":
        """Load configuration from yaml file and environment variables.

        Env vars win over yaml; the .env file next to config_dir is read
        first without overriding variables already set in the process.
        """
        if config_dir is None:
            config_dir = Path(__file__).parent.parent / "config"
        yaml_path = config_dir / "explorer.yaml"
        load_dotenv(config_dir.parent / ".env", override=False)

        yaml_config = {}
        if yaml_path.exists():
            with open(yaml_path) as f:
                yaml_config = yaml.safe_load(f) or {}

        nasa_cfg = yaml_config.get("nasa", {})
        nasa = NasaConfig(
            api_key=os.getenv("NASA_API_KEY") or nasa_cfg.get("api_key") or "DEMO_KEY",
            base_url=os.getenv("NASA_BASE_URL", nasa_cfg.get("base_url", "https://api.nasa.gov")).rstrip("/"),
            timeout=float(nasa_cfg.get("timeout", 10.0)),
            long_timeout=float(nasa_cfg.get("long_timeout", 15.0)),
        )

        server_cfg = yaml_config.get("server", {})
        environment = os.getenv("EXPLORER_ENV", server_cfg.get("environment", "development"))

        # Production origins must be listed explicitly; dev gets the usual frontend ports
        origins_env = os.getenv("CORS_ORIGINS", "")
        if origins_env:
            cors_origins = [o.strip() for o in origins_env.split(",") if o.strip()]
        elif environment == "production":
            cors_origins = list(server_cfg.get("production_origins", []))
        else:
            cors_origins = list(DEV_ORIGINS)

        server = ServerConfig(
            host=os.getenv("EXPLORER_HOST", server_cfg.get("host", "0.0.0.0")),
            port=int(os.getenv("PORT", server_cfg.get("port", 5000))),
            environment=environment,
            cors_origins=cors_origins,
        )

        limit_cfg = yaml_config.get("rate_limit", {})
        rate_limit = RateLimitConfig(
            window_seconds=float(limit_cfg.get("window_seconds", 15 * 60)),
            max_requests=int(limit_cfg.get("max_requests", 100)),
        )

        return cls(
            nasa=nasa,
            server=server,
            rate_limit=rate_limit,
            log_level=os.getenv("LOG_LEVEL", yaml_config.get("log_level", "INFO")).upper(),
        )
