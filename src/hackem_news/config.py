"""Configuration management for HackEM News."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import load_dotenv


DEFAULT_AUDIENCE_PROMPT = """
Focus on articles relevant to Engineering Managers who:
- Are new to management, especially those transitioning from a developer background
- Need practical advice for technical leadership and team management
- Want to improve communication, delegation, and mentoring skills
- Are interested in creating effective engineering processes and culture

Highlight aspects that are specifically valuable for engineering managers.
"""

KNOWN_SOURCES = ('hackernews', 'reddit')
REDDIT_TIME_RANGES = ('hour', 'day', 'week', 'month', 'year', 'all')


@dataclass
class HackerNewsConfig:
    """Configuration for the Hacker News adapter."""
    base_url: str = "https://hacker-news.firebaseio.com/v0"
    max_items: int = 100
    max_age_hours: Optional[int] = None  # None disables the recency window


@dataclass
class RedditConfig:
    """Configuration for the Reddit adapter."""
    base_url: str = "https://www.reddit.com"
    subreddits: List[str] = field(default_factory=lambda: ['EngineeringManagers'])
    max_items: int = 30
    time_range: str = "week"  # hour, day, week, month, year, all


@dataclass
class SourcesConfig:
    """Which sources feed the pipeline."""
    enabled: List[str] = field(default_factory=lambda: ['reddit', 'hackernews'])


@dataclass
class ArticlesConfig:
    """Result sizing and relevance thresholds."""
    max_results: int = 10
    min_relevance_score: float = 0.5
    fallback_score: float = 0.5
    preview_chars: int = 2000


@dataclass
class ProviderConfig:
    """Configuration for a single reasoning provider."""
    provider_id: str  # e.g., "openai_primary", "anthropic_fallback"
    provider_type: str  # "openai" or "anthropic"
    api_key: str
    model: str  # e.g., "gpt-3.5-turbo"
    enabled: bool = True
    priority: int = 10  # Lower = higher priority (0-100)
    base_url: Optional[str] = None
    timeout: float = 15.0
    retries: int = 2
    temperature: float = 0.3


@dataclass
class RequestsConfig:
    """Limits for article page downloads."""
    timeout: float = 12.0
    max_content_length: int = 5 * 1024 * 1024  # 5MB
    content_char_limit: int = 12000


@dataclass
class CacheConfig:
    """Cache lifetime settings."""
    ttl: int = 3600  # seconds


@dataclass
class AudienceConfig:
    """Target audience description injected into every prompt."""
    name: str = "engineering management"
    prompt: str = DEFAULT_AUDIENCE_PROMPT


@dataclass
class ServerConfig:
    """HTTP server settings."""
    host: str = "127.0.0.1"
    port: int = 3000


@dataclass
class Config:
    """Main application configuration."""
    providers: List[ProviderConfig]
    sources: SourcesConfig = field(default_factory=SourcesConfig)
    hacker_news: HackerNewsConfig = field(default_factory=HackerNewsConfig)
    reddit: RedditConfig = field(default_factory=RedditConfig)
    articles: ArticlesConfig = field(default_factory=ArticlesConfig)
    requests: RequestsConfig = field(default_factory=RequestsConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    audience: AudienceConfig = field(default_factory=AudienceConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log_file: Path = field(default_factory=lambda: Path("logs/hackem_news.log"))


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""
    pass


def _api_key_for(prov_data: dict, required: bool = True) -> str:
    """Resolve a provider API key from the environment or the config entry."""
    env_vars = {
        'openai': 'OPENAI_API_KEY',
        'anthropic': 'ANTHROPIC_API_KEY',
    }
    env_var = env_vars.get(prov_data.get('provider_type'))
    api_key = os.getenv(env_var) if env_var else None
    if not api_key:
        api_key = prov_data.get('api_key', '')
    if not api_key and required:
        raise ConfigError(
            f"No API key found for provider {prov_data.get('provider_id')}. "
            f"Set {env_var} environment variable or api_key in config."
        )
    return api_key


def _load_providers(yaml_config: dict) -> List[ProviderConfig]:
    providers_config = yaml_config.get('providers')

    if not providers_config:
        # Single OpenAI provider from the short-form `openai` section
        openai_config = yaml_config.get('openai', {}) or {}
        providers_config = [{
            'provider_id': 'openai_default',
            'provider_type': 'openai',
            'model': openai_config.get('model', 'gpt-3.5-turbo'),
            'timeout': openai_config.get('timeout', 15.0),
            'retries': openai_config.get('retries', 2),
            'api_key': openai_config.get('api_key', ''),
            'base_url': openai_config.get('base_url'),
        }]

    providers = []
    for prov_data in providers_config:
        try:
            providers.append(ProviderConfig(
                provider_id=prov_data['provider_id'],
                provider_type=prov_data['provider_type'],
                api_key=_api_key_for(prov_data, required=prov_data.get('enabled', True)),
                model=prov_data['model'],
                enabled=prov_data.get('enabled', True),
                priority=prov_data.get('priority', 10),
                base_url=prov_data.get('base_url'),
                timeout=float(prov_data.get('timeout', 15.0)),
                retries=int(prov_data.get('retries', 2)),
                temperature=float(prov_data.get('temperature', 0.3))
            ))
        except KeyError as e:
            raise ConfigError(f"Missing required provider config field: {e}")
    return providers


def load_config(config_path: str = "config/config.yaml") -> Config:
    """
    Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the configuration YAML file

    Returns:
        Config object with all settings

    Raises:
        ConfigError: If configuration is invalid or missing required fields
    """
    load_dotenv("config/.env")
    load_dotenv()

    if not os.path.exists(config_path):
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            yaml_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML configuration: {e}")

    if not yaml_config:
        raise ConfigError("Configuration file is empty")

    sources_data = yaml_config.get('sources', {}) or {}
    hn_data = yaml_config.get('hackernews', {}) or {}
    reddit_data = yaml_config.get('reddit', {}) or {}
    articles_data = yaml_config.get('articles', {}) or {}
    requests_data = yaml_config.get('requests', {}) or {}
    cache_data = yaml_config.get('cache', {}) or {}
    audience_data = yaml_config.get('target_audience', {}) or {}
    server_data = yaml_config.get('server', {}) or {}
    paths_data = yaml_config.get('paths', {}) or {}

    try:
        config = Config(
            providers=_load_providers(yaml_config),
            sources=SourcesConfig(
                enabled=list(sources_data.get('enabled', ['reddit', 'hackernews']))
            ),
            hacker_news=HackerNewsConfig(
                base_url=hn_data.get('base_url', HackerNewsConfig.base_url),
                max_items=hn_data.get('max_items', 100),
                max_age_hours=hn_data.get('max_age_hours')
            ),
            reddit=RedditConfig(
                base_url=reddit_data.get('base_url', RedditConfig.base_url),
                subreddits=list(reddit_data.get('subreddits', ['EngineeringManagers'])),
                max_items=reddit_data.get('max_items', 30),
                time_range=reddit_data.get('time_range', 'week')
            ),
            articles=ArticlesConfig(
                max_results=articles_data.get('max_results', 10),
                min_relevance_score=articles_data.get('min_relevance_score', 0.5),
                fallback_score=articles_data.get('fallback_score', 0.5),
                preview_chars=articles_data.get('preview_chars', 2000)
            ),
            requests=RequestsConfig(
                timeout=float(requests_data.get('timeout', 12.0)),
                max_content_length=requests_data.get('max_content_length', 5 * 1024 * 1024),
                content_char_limit=requests_data.get('content_char_limit', 12000)
            ),
            cache=CacheConfig(ttl=cache_data.get('ttl', 3600)),
            audience=AudienceConfig(
                name=audience_data.get('name', 'engineering management'),
                prompt=audience_data.get('prompt', DEFAULT_AUDIENCE_PROMPT)
            ),
            server=ServerConfig(
                host=os.getenv('HOST') or server_data.get('host', '127.0.0.1'),
                port=int(os.getenv('PORT') or server_data.get('port', 3000))
            ),
            log_file=Path(paths_data.get('log_file', 'logs/hackem_news.log'))
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Failed to create configuration object: {e}")

    return config


def validate_config(config: Config) -> None:
    """
    Validate configuration object.

    Args:
        config: Configuration object to validate

    Raises:
        ConfigError: If configuration is invalid
    """
    if not config.sources.enabled:
        raise ConfigError("At least one source must be enabled")

    for source in config.sources.enabled:
        if source not in KNOWN_SOURCES:
            raise ConfigError(
                f"Unknown source '{source}'. Must be one of: {', '.join(KNOWN_SOURCES)}"
            )

    if config.reddit.time_range not in REDDIT_TIME_RANGES:
        raise ConfigError(
            f"Invalid reddit time_range '{config.reddit.time_range}'. "
            f"Must be one of: {', '.join(REDDIT_TIME_RANGES)}"
        )

    for name, value in [
        ('min_relevance_score', config.articles.min_relevance_score),
        ('fallback_score', config.articles.fallback_score)
    ]:
        if not (0 <= value <= 1):
            raise ConfigError(f"Invalid {name}: {value}. Must be between 0 and 1.")

    for name, value in [
        ('articles.max_results', config.articles.max_results),
        ('hackernews.max_items', config.hacker_news.max_items),
        ('reddit.max_items', config.reddit.max_items),
        ('cache.ttl', config.cache.ttl),
        ('requests.max_content_length', config.requests.max_content_length)
    ]:
        if value <= 0:
            raise ConfigError(f"Invalid {name}: {value}. Must be positive.")

    if not any(p.enabled for p in config.providers):
        raise ConfigError("No enabled reasoning provider configured")

    for provider in config.providers:
        if provider.provider_type not in ('openai', 'anthropic'):
            raise ConfigError(
                f"Unknown provider type '{provider.provider_type}' "
                f"for provider {provider.provider_id}"
            )

    if not config.log_file.parent.exists():
        try:
            config.log_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"Failed to create directory {config.log_file.parent}: {e}")
