"""Remote API credential acquisition."""

import logging
import os
from typing import Mapping, Optional

from devsetup.console import Color, colorize
from devsetup.exceptions import MissingCredentialError
from devsetup.prompts import Prompter
from devsetup.state import CredentialSource, PipelineState, ProviderCredential

logger = logging.getLogger(__name__)

API_KEYS_URL = "https://platform.openai.com/api-keys"


def acquire_credential(
    env_var: str,
    prompter: Prompter,
    environ: Optional[Mapping[str, str]] = None,
) -> ProviderCredential:
    """Return the API key from ``env_var`` or a single masked prompt.

    Raises MissingCredentialError when the prompt yields nothing or no
    terminal is available to prompt on.
    """
    environ = os.environ if environ is None else environ
    key = environ.get(env_var, "").strip()
    if key:
        logger.debug("Using %s from the environment", env_var)
        return ProviderCredential(key=key, source=CredentialSource.ENVIRONMENT)

    if not prompter.is_interactive():
        raise MissingCredentialError(
            f"{env_var} is not set and no terminal is available to prompt for it",
            hint=f"Export {env_var} before running this script",
        )

    print(colorize("Please enter your OpenAI API Key:", Color.BLUE))
    print(f"Get one from: {API_KEYS_URL}")
    key = prompter.read_secret("OpenAI API Key: ")
    print()
    if not key:
        raise MissingCredentialError("OpenAI API Key is required", hint=f"Get one from: {API_KEYS_URL}")
    return ProviderCredential(key=key, source=CredentialSource.INTERACTIVE)


def acquire(state: PipelineState, env_var: str, prompter: Prompter) -> PipelineState:
    return state.evolve(credential=acquire_credential(env_var, prompter))
