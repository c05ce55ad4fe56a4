"""Runtime configuration synthesis for the backend (``backend/.env.dev``).

Rendering is a pure function of the credential and settings: same inputs,
same bytes. The file is overwritten on every run without merging.
"""

import logging
from dataclasses import dataclass

from devsetup.config import Settings
from devsetup.exceptions import ConfigInvariantError, MissingCredentialError
from devsetup.fileutil import atomic_write
from devsetup.state import PipelineState, ProviderCredential

logger = logging.getLogger(__name__)

# Each enablement flag and the keys that must be non-empty when it is True
ENABLEMENT_REQUIREMENTS = {
    "ENABLE_OPENAI_API": ("OPENAI_API_BASE_URL", "OPENAI_API_KEY"),
    "ENABLE_OLLAMA_API": ("OLLAMA_BASE_URL",),
}

SECTIONS = (
    ("OpenAI Configuration", ("OPENAI_API_KEY", "OPENAI_API_BASE_URL", "ENABLE_OPENAI_API")),
    ("Ollama Configuration", ("OLLAMA_BASE_URL", "ENABLE_OLLAMA_API")),
    ("Development settings", ("CORS_ALLOW_ORIGIN", "ENV", "PORT")),
    ("Enable both providers simultaneously", ("ENABLE_DIRECT_CONNECTIONS",)),
)

LIST_DELIMITER = ";"


def _bool(value: bool) -> str:
    return "True" if value else "False"


@dataclass(frozen=True)
class RuntimeConfig:
    """Ordered key/value pairs written to the configuration artifact."""

    entries: tuple[tuple[str, str], ...]

    def as_dict(self) -> dict[str, str]:
        return dict(self.entries)

    def get(self, key: str, default: str = "") -> str:
        return self.as_dict().get(key, default)

    def validate(self) -> None:
        values = self.as_dict()
        for flag, required in ENABLEMENT_REQUIREMENTS.items():
            if values.get(flag) != "True":
                continue
            for key in required:
                if not values.get(key, "").strip():
                    raise ConfigInvariantError(f"{flag} is True but {key} is empty")


def build_config(credential: ProviderCredential, settings: Settings) -> RuntimeConfig:
    config = RuntimeConfig((
        ("OPENAI_API_KEY", credential.key),
        ("OPENAI_API_BASE_URL", settings.openai_api_base_url),
        ("ENABLE_OPENAI_API", _bool(True)),
        ("OLLAMA_BASE_URL", settings.ollama_base_url),
        ("ENABLE_OLLAMA_API", _bool(True)),
        ("CORS_ALLOW_ORIGIN", settings.cors_allow_origin),
        ("ENV", settings.env_tag),
        ("PORT", str(settings.backend_port)),
        ("ENABLE_DIRECT_CONNECTIONS", _bool(True)),
    ))
    config.validate()
    return config


def _templates(settings: Settings) -> list[str]:
    openai_urls = LIST_DELIMITER.join([settings.openai_api_base_url, "https://api.openrouter.ai/api/v1"])
    openai_keys = LIST_DELIMITER.join(["sk-your-first-key", "sk-your-other-key"])
    ollama_urls = LIST_DELIMITER.join([settings.ollama_base_url, "http://another-server:11434"])
    return [
        "# Optional: Uncomment to add multiple providers",
        f"# OPENAI_API_BASE_URLS={openai_urls}",
        f"# OPENAI_API_KEYS={openai_keys}",
        f"# OLLAMA_BASE_URLS={ollama_urls}",
    ]


def render(config: RuntimeConfig, settings: Settings) -> str:
    values = config.as_dict()
    lines: list[str] = []
    for title, keys in SECTIONS:
        lines.append(f"# {title}")
        lines.extend(f"{key}={values[key]}" for key in keys if key in values)
        lines.append("")
    lines.extend(_templates(settings))
    return "\n".join(lines) + "\n"


def write_env_file(state: PipelineState, settings: Settings) -> PipelineState:
    if state.credential is None:
        raise MissingCredentialError("Cannot write the environment file without an API key")
    logger.info("Creating development environment file...")
    config = build_config(state.credential, settings)
    path = settings.env_file_path
    atomic_write(path, render(config, settings), mode=0o600)
    logger.info("Environment file created: %s", path)
    return state.evolve(config_path=path)
