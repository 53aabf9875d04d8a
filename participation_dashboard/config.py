"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults, overlaid with environment variables.
Configuration sections:
- DataConfig: CSV source settings
- ProviderConfig: Chat-completion provider settings
- SummaryConfig: Grouped/overview summarization settings
- CacheConfig: In-memory summary cache settings
- LoggingConfig: Logging behavior
- LangfuseConfig: Langfuse tracing settings
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any

import yaml


DEFAULT_CSV_FILENAME = "special_participation_a.csv"


@dataclass
class DataConfig:
    """Configuration for the CSV data source.

    Attributes:
        csv_path: Path to the posts CSV file (relative paths resolve against the cwd)
    """

    csv_path: str = DEFAULT_CSV_FILENAME


@dataclass
class ProviderConfig:
    """Configuration for the OpenAI-compatible chat-completion provider.

    Attributes:
        model: Model identifier sent with every request
        base_url: Base URL of the chat completions API
        api_key: Optional inline API key (overrides env var)
        api_key_env: Environment variable name containing the API key
        timeout_seconds: HTTP request timeout
        trust_env: Whether to respect system proxy settings for API requests
    """

    model: str = "gpt-4o-mini"
    base_url: str = "https://api.openai.com/v1"
    api_key: str | None = None
    api_key_env: str = "OPENAI_API_KEY"
    timeout_seconds: float = 60.0
    trust_env: bool = True


@dataclass
class SummaryConfig:
    """Configuration for LLM summarization.

    Attributes:
        max_groups: Number of largest homework/model groups summarized remotely
        concurrency: Number of parallel workers for per-group calls
        max_attempts: Maximum attempts per call on 429/5xx responses
        overview_sample_size: Posts sent for the ungrouped overview
        overview_body_chars: Body characters kept per post in the overview sample
        group_sample_size: Posts sent per group
        group_body_chars: Body characters kept per post in a group sample
    """

    max_groups: int = 8
    concurrency: int = 2
    max_attempts: int = 5
    overview_sample_size: int = 24
    overview_body_chars: int = 600
    group_sample_size: int = 28
    group_body_chars: int = 700


@dataclass
class CacheConfig:
    """Configuration for the process-wide summary cache.

    Attributes:
        max_entries: Capacity of the LRU cache; least recently used entries are evicted
    """

    max_entries: int = 256


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
        llm_log_enabled: Whether to enable separate LLM interaction logging
        llm_log_file: Name of the LLM log file
        log_dir: Directory for log files
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "run.jsonl"
    llm_log_enabled: bool = True
    llm_log_file: str = "llm.jsonl"
    log_dir: str = "logs"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse tracing.

    Attributes:
        enabled: Whether to enable Langfuse tracing
        public_key: Langfuse public key (optional)
        secret_key: Langfuse secret key (optional)
        host: Langfuse host URL (optional)
        redaction: Redaction mode for prompt/response payloads ("none",
            "redact_content", "redact_urls" or "redact_posts", which blanks
            post authors and bodies)
        max_text_chars: Maximum characters for prompt/response payloads
    """

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    host: str | None = None
    redaction: str = "none"
    max_text_chars: int = 20000


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    data: DataConfig = field(default_factory=DataConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)


DEFAULT_CONFIG = AppConfig()


def load_config(path: str | None, env: dict[str, str] | None = None) -> AppConfig:
    """Load configuration from a YAML file with defaults, then apply env overrides."""
    raw: dict[str, Any] = {}
    if path:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    cfg = _merge_config(DEFAULT_CONFIG, raw)
    return apply_env_overrides(cfg, os.environ if env is None else env)


def apply_env_overrides(cfg: AppConfig, env: Any) -> AppConfig:
    """Overlay the environment-style settings the dashboard historically used."""
    csv_path = env.get("CSV_PATH")
    if csv_path:
        cfg.data.csv_path = csv_path
    model = env.get("OPENAI_MODEL")
    if model:
        cfg.provider.model = model
    cfg.summary.max_groups = _int_env(env, "AI_GROUP_MAX", cfg.summary.max_groups)
    cfg.summary.concurrency = max(
        1, _int_env(env, "AI_OPENAI_CONCURRENCY", cfg.summary.concurrency)
    )
    cfg.summary.max_attempts = max(
        1, _int_env(env, "AI_OPENAI_MAX_RETRIES", cfg.summary.max_attempts)
    )
    return cfg


def _int_env(env: Any, key: str, default: int) -> int:
    value = env.get(key)
    if value is None or not str(value).strip():
        return default
    try:
        return int(float(value))
    except ValueError:
        return default


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to nested dictionary."""
    return {
        "data": {
            "csv_path": cfg.data.csv_path,
        },
        "provider": {
            "model": cfg.provider.model,
            "base_url": cfg.provider.base_url,
            "api_key": cfg.provider.api_key,
            "api_key_env": cfg.provider.api_key_env,
            "timeout_seconds": cfg.provider.timeout_seconds,
            "trust_env": cfg.provider.trust_env,
        },
        "summary": {
            "max_groups": cfg.summary.max_groups,
            "concurrency": cfg.summary.concurrency,
            "max_attempts": cfg.summary.max_attempts,
            "overview_sample_size": cfg.summary.overview_sample_size,
            "overview_body_chars": cfg.summary.overview_body_chars,
            "group_sample_size": cfg.summary.group_sample_size,
            "group_body_chars": cfg.summary.group_body_chars,
        },
        "cache": {
            "max_entries": cfg.cache.max_entries,
        },
        "logging": {
            "level": cfg.logging.level,
            "console": cfg.logging.console,
            "file": cfg.logging.file,
            "format": cfg.logging.format,
            "filename": cfg.logging.filename,
            "llm_log_enabled": cfg.logging.llm_log_enabled,
            "llm_log_file": cfg.logging.llm_log_file,
            "log_dir": cfg.logging.log_dir,
        },
        "langfuse": {
            "enabled": cfg.langfuse.enabled,
            "public_key": cfg.langfuse.public_key,
            "secret_key": cfg.langfuse.secret_key,
            "host": cfg.langfuse.host,
            "redaction": cfg.langfuse.redaction,
            "max_text_chars": cfg.langfuse.max_text_chars,
        },
    }


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        data=DataConfig(**data["data"]),
        provider=ProviderConfig(**data["provider"]),
        summary=SummaryConfig(**data["summary"]),
        cache=CacheConfig(**data["cache"]),
        logging=LoggingConfig(**data["logging"]),
        langfuse=LangfuseConfig(**data.get("langfuse", {})),
    )


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    if cfg.api_key_env:
        return os.getenv(cfg.api_key_env) or None
    return None


def get_langfuse_host(cfg: LangfuseConfig) -> str | None:
    """Get Langfuse host from inline config or environment variable."""
    if cfg.host:
        return cfg.host
    return os.getenv("LANGFUSE_HOST")
