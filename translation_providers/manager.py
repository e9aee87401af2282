"""
Translation Provider Manager
Social Corpus Normalizer - Multi-Provider Support

Builds translation adapters from settings.
"""

from typing import Optional, Dict, List, Sequence, Type
from dataclasses import dataclass

import httpx

from config.logging_config import get_logger
from config.settings import Settings, settings as default_settings
from core.errors import ConfigurationError

from .base import BaseTranslationAdapter, TranslationProviderType, ProviderConfig
from .deepl_provider import DeepLProvider
from .google_provider import GoogleProvider

logger = get_logger(__name__)


@dataclass
class ProviderInfo:
    """Information about a translation provider"""
    type: TranslationProviderType
    name: str
    description: str
    env_key: str  # Environment variable name for API key


# Registry of all available providers
PROVIDER_REGISTRY: Dict[TranslationProviderType, Type[BaseTranslationAdapter]] = {
    TranslationProviderType.DEEPL: DeepLProvider,
    TranslationProviderType.GOOGLE: GoogleProvider,
}

# Provider information
PROVIDER_INFO: Dict[TranslationProviderType, ProviderInfo] = {
    TranslationProviderType.DEEPL: ProviderInfo(
        type=TranslationProviderType.DEEPL,
        name="DeepL",
        description="DeepL API v2 - neural MT, European languages",
        env_key="DEEPL_API_KEY"
    ),
    TranslationProviderType.GOOGLE: ProviderInfo(
        type=TranslationProviderType.GOOGLE,
        name="Google Cloud Translation",
        description="Cloud Translation v2 (Basic) - broad language coverage",
        env_key="GOOGLE_API_KEY"
    ),
}


def get_provider_type(name: str) -> TranslationProviderType:
    """Resolve a provider name ("deepl", "google")"""
    try:
        return TranslationProviderType(name.strip().lower())
    except ValueError:
        available = ", ".join(t.value for t in TranslationProviderType)
        raise ConfigurationError(f"Unknown provider '{name}' (available: {available})", provider=name) from None


def create_adapter(
    name: str,
    settings: Optional[Settings] = None,
    api_key: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
    strict: bool = False
) -> BaseTranslationAdapter:
    """
    Create one adapter.

    Args:
        name: Provider name
        settings: Settings to read credentials and limits from
        api_key: Explicit credential, overrides settings
        client: Shared httpx client (the adapter will not close it)
        strict: Raise immediately when the credential is missing instead
            of leaving it to the adapter's configuration check

    Returns:
        Configured adapter
    """
    settings = settings or default_settings
    provider_type = get_provider_type(name)

    if api_key is None:
        try:
            api_key = settings.get_api_key(provider_type.value)
        except ConfigurationError:
            if strict:
                raise
            logger.warning(
                f"No API key for {PROVIDER_INFO[provider_type].name} "
                f"(set {PROVIDER_INFO[provider_type].env_key})"
            )

    config = ProviderConfig(api_key=api_key, **settings.get_provider_options(provider_type.value))
    adapter_cls = PROVIDER_REGISTRY[provider_type]

    if provider_type == TranslationProviderType.DEEPL:
        return adapter_cls(
            config,
            client=client,
            english_variant=settings.deepl_english_variant,
            portuguese_variant=settings.deepl_portuguese_variant,
        )
    return adapter_cls(config, client=client)


def create_adapters(
    names: Optional[Sequence[str]] = None,
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None
) -> List[BaseTranslationAdapter]:
    """Create adapters in the given order (defaults to settings.providers)"""
    settings = settings or default_settings
    names = list(names or settings.providers)

    seen = set()
    adapters = []
    for name in names:
        provider_type = get_provider_type(name)
        if provider_type in seen:
            raise ConfigurationError(f"Provider listed twice: {name}", provider=name)
        seen.add(provider_type)
        adapters.append(create_adapter(name, settings=settings, client=client))
    return adapters


def list_providers() -> List[ProviderInfo]:
    """Information about every registered provider"""
    return list(PROVIDER_INFO.values())
