"""Provisioning configuration."""

from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings for the dev-environment provisioner, loaded from DEVSETUP_* variables."""

    # Project layout (relative to project_root)
    project_root: Path = Path(".")
    backend_dir: str = "backend"
    env_file_name: str = ".env.dev"
    venv_name: str = "venv"
    requirements_file: str = "requirements.txt"
    backend_start_script: str = "dev.sh"

    # Launchers
    backend_launcher: str = "start-backend-dev.sh"
    frontend_launcher: str = "start-frontend-dev.sh"
    combined_launcher: str = "start-dev-servers.sh"

    # Local inference runtime (Ollama)
    ollama_base_url: str = "http://localhost:11434"
    ollama_install_script_url: str = "https://ollama.ai/install.sh"
    ollama_service_name: str = "ollama"
    models: list[str] = ["llama3.2:1b", "phi3:mini"]

    # Remote API (OpenAI-compatible)
    openai_api_base_url: str = "https://api.openai.com/v1"
    credential_env_var: str = "OPENAI_API_KEY"

    # Backend / front-end
    backend_port: int = 8080
    frontend_port: int = 5173
    cors_allow_origin: str = "http://localhost:5173"
    env_tag: str = "dev"

    # Timeouts (seconds)
    probe_timeout: float = 5.0
    version_timeout: float = 5.0
    install_timeout: int = 900
    model_pull_timeout: int = 1800

    # Process supervisor
    startup_delay: float = 3.0
    shutdown_timeout: float = 5.0

    # Logging
    log_level: str = "info"

    @model_validator(mode="after")
    def _validate(self) -> "Settings":
        if any(not name.strip() for name in self.models):
            raise ValueError("DEVSETUP_MODELS must not contain empty model names")
        for field in ("probe_timeout", "version_timeout", "install_timeout", "model_pull_timeout"):
            if getattr(self, field) <= 0:
                raise ValueError(f"{field} must be positive")
        if self.startup_delay < 0 or self.shutdown_timeout < 0:
            raise ValueError("startup_delay and shutdown_timeout must not be negative")
        for field in ("backend_port", "frontend_port"):
            port = getattr(self, field)
            if not 0 < port < 65536:
                raise ValueError(f"{field} must be between 1 and 65535, got {port}")
        return self

    @property
    def backend_path(self) -> Path:
        return self.project_root / self.backend_dir

    @property
    def env_file_path(self) -> Path:
        return self.backend_path / self.env_file_name

    @property
    def venv_path(self) -> Path:
        return self.backend_path / self.venv_name

    class Config:
        env_prefix = "DEVSETUP_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
