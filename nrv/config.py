"""Configuration module for the nrv site backend."""

import os
from dataclasses import dataclass, field
from typing import List
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, "").split(",") if item.strip()]


@dataclass
class DatabaseConfig:
    """Relational store settings."""
    url: str = field(default_factory=lambda: os.getenv("NRV_DATABASE_URL", "sqlite:///./nrv.dev.db"))


@dataclass
class AuthConfig:
    """Credential and session settings."""
    # bcrypt work factor; every signup/signin pays for it
    bcrypt_rounds: int = field(default_factory=lambda: int(os.getenv("NRV_BCRYPT_ROUNDS", "14")))
    session_ttl_seconds: int = field(default_factory=lambda: int(os.getenv("NRV_SESSION_TTL_SECONDS", "86400")))
    cookie_name: str = field(default_factory=lambda: os.getenv("NRV_COOKIE_NAME", "session_token"))
    cookie_secure: bool = field(default_factory=lambda: _env_bool("NRV_COOKIE_SECURE", "true"))

    # Give the invitation code back when the signup that consumed it fails
    release_invite_on_failure: bool = field(
        default_factory=lambda: _env_bool("NRV_RELEASE_INVITE_ON_FAILURE", "true")
    )

    # Usernames allowed to generate invitation codes over HTTP
    admin_users: List[str] = field(default_factory=lambda: _env_list("NRV_ADMIN_USERS"))


@dataclass
class ChatConfig:
    """Upstream LLM (Ollama) settings."""
    url: str = field(default_factory=lambda: os.getenv("NRV_OLLAMA_URL", "http://localhost:11434/api/generate"))
    model: str = field(default_factory=lambda: os.getenv("NRV_OLLAMA_MODEL", "chat"))
    timeout_seconds: float = field(default_factory=lambda: float(os.getenv("NRV_CHAT_TIMEOUT_SECONDS", "120")))


@dataclass
class ServerConfig:
    """HTTP server settings."""
    host: str = field(default_factory=lambda: os.getenv("NRV_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("NRV_PORT", "443")))
    ssl_certfile: str = field(default_factory=lambda: os.getenv("NRV_SSL_CERTFILE", "cert.pem"))
    ssl_keyfile: str = field(default_factory=lambda: os.getenv("NRV_SSL_KEYFILE", "key.pem"))
    static_dir: str = field(default_factory=lambda: os.getenv("NRV_STATIC_DIR", "static"))
    proc_root: str = field(default_factory=lambda: os.getenv("NRV_PROC_ROOT", "/proc"))


@dataclass
class Config:
    """Main configuration container."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def load_config() -> Config:
    """Load configuration from environment variables."""
    return Config()
