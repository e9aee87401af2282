"""
Translation Providers Package
Social Corpus Normalizer - Multi-Provider Support

Supports:
- DeepL API v2 (free and pro endpoints)
- Google Cloud Translation v2

Usage:
    from translation_providers import create_adapters

    adapters = create_adapters(["deepl", "google"])

    results = await adapters[0].translate(
        ["Guten Morgen", "Wie geht's?"],
        source_language="de",
        target_language="en",
        ids=["t1", "t2"],
    )
    for result in results:
        print(result.record_id, result.text, result.error)
"""

from .base import (
    BaseTranslationAdapter,
    TranslationProviderType,
    ProviderConfig,
    ProviderTranslation,
)

from .deepl_provider import DeepLProvider
from .google_provider import GoogleProvider

from .manager import (
    ProviderInfo,
    PROVIDER_REGISTRY,
    PROVIDER_INFO,
    create_adapter,
    create_adapters,
    get_provider_type,
    list_providers,
)

__all__ = [
    # Base classes
    "BaseTranslationAdapter",
    "TranslationProviderType",
    "ProviderConfig",
    "ProviderTranslation",

    # Providers
    "DeepLProvider",
    "GoogleProvider",

    # Manager
    "ProviderInfo",
    "PROVIDER_REGISTRY",
    "PROVIDER_INFO",
    "create_adapter",
    "create_adapters",
    "get_provider_type",
    "list_providers",
]
