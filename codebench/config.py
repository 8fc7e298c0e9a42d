"""Configuration for Codebench, loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

from openai import OpenAI

DEFAULT_REMOTE_URL = "https://api.jdoodle.com/v1/execute"


@dataclass
class Config:
    openai_api_key: str = ""
    assistant_model: str = "gpt-4o-mini"
    assistant_temperature: float = 0.7
    assistant_max_tokens: int = 2000
    llm_provider: str = "openai"  # "openai" or "ollama"
    ollama_base_url: str = "http://localhost:11434/v1"
    remote_url: str = DEFAULT_REMOTE_URL
    remote_client_id: str = ""
    remote_client_secret: str = ""
    remote_timeout: float = 30.0  # seconds
    remote_fallback: bool = False  # run embedded-runtime code remotely if the VM fails to load
    runtime_bundle_url: str = ""
    preview_dir: str = ""
    log_level: str = "WARNING"

    @property
    def remote_configured(self) -> bool:
        return bool(self.remote_url and self.remote_client_id and self.remote_client_secret)

    @property
    def assistant_configured(self) -> bool:
        return self.llm_provider == "ollama" or bool(self.openai_api_key)

    def create_openai_client(self) -> OpenAI:
        """Create an OpenAI client configured for the active LLM provider."""
        if self.llm_provider == "ollama":
            return OpenAI(api_key="ollama", base_url=self.ollama_base_url)
        return OpenAI(api_key=self.openai_api_key)

    @classmethod
    def from_env(cls, **overrides) -> Config:
        kwargs: dict = {}
        env_map: dict[str, tuple[str, type]] = {
            "OPENAI_API_KEY": ("openai_api_key", str),
            "CODEBENCH_LLM_PROVIDER": ("llm_provider", str),
            "CODEBENCH_MODEL": ("assistant_model", str),
            "OLLAMA_BASE_URL": ("ollama_base_url", str),
            "JDOODLE_URL": ("remote_url", str),
            "JDOODLE_CLIENT_ID": ("remote_client_id", str),
            "JDOODLE_CLIENT_SECRET": ("remote_client_secret", str),
            "CODEBENCH_REMOTE_TIMEOUT": ("remote_timeout", float),
            "CODEBENCH_RUNTIME_BUNDLE_URL": ("runtime_bundle_url", str),
            "CODEBENCH_PREVIEW_DIR": ("preview_dir", str),
            "CODEBENCH_LOG_LEVEL": ("log_level", str),
        }
        for env_var, (field_name, conv) in env_map.items():
            val = os.environ.get(env_var)
            if val is not None:
                kwargs[field_name] = conv(val)
        # CODEBENCH_REMOTE_FALLBACK: "1" or "true" enables
        fb_val = os.environ.get("CODEBENCH_REMOTE_FALLBACK")
        if fb_val is not None:
            kwargs["remote_fallback"] = fb_val.lower() not in ("", "0", "false", "no")
        model = overrides.pop("model", None)
        if model:
            kwargs["assistant_model"] = model
        kwargs.update(overrides)
        return cls(**kwargs)
