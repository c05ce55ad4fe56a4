"""Local development environment provisioner for a dual-LLM (Ollama + OpenAI) setup."""

__version__ = "0.1.0"
