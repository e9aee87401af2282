#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Error taxonomy for corpus normalization.

Record-level failures are isolated and counted; configuration failures are
surfaced to the caller. ``ExclusionReason`` values double as the reason codes
reported for records that never reach the merged corpus.
"""

from enum import Enum
from typing import Optional


class NormalizationError(Exception):
    """Base class for all normalization errors."""


class ConfigurationError(NormalizationError):
    """Unsupported language pair, missing or rejected credential."""

    def __init__(self, message: str, provider: Optional[str] = None):
        self.provider = provider
        super().__init__(f"[{provider}] {message}" if provider else message)


class TransientProviderError(NormalizationError):
    """Rate limit, timeout or temporary outage. Safe to retry."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None
    ):
        self.provider = provider
        self.status_code = status_code
        self.retry_after = retry_after
        super().__init__(message)


class RecordTranslationFailure(NormalizationError):
    """Translation of one record (or one request batch) failed for a provider."""

    def __init__(self, message: str, code: str = "provider_error", provider: Optional[str] = None):
        self.code = code
        self.provider = provider
        super().__init__(message)


class UnresolvedRecordError(NormalizationError):
    """No provider produced a translation for a record."""

    def __init__(self, record_id: str, message: str = "no successful translation"):
        self.record_id = record_id
        super().__init__(f"{record_id}: {message}")


class UnknownLanguageError(NormalizationError):
    """Record language tag is missing or not recognised."""

    def __init__(self, record_id: str, language: Optional[str]):
        self.record_id = record_id
        self.language = language
        super().__init__(f"{record_id}: unrecognised language tag {language!r}")


class ExclusionReason(str, Enum):
    """Why a record is missing from the merged corpus."""
    UNRESOLVED = "UnresolvedRecordError"
    UNKNOWN_LANGUAGE = "UnknownLanguageError"
    INCOMPLETE = "IncompleteReconciliation"


# Per-item error codes carried on TranslationResult.error_code
ERROR_TEXT_TOO_LONG = "text_too_long"
ERROR_RETRIES_EXHAUSTED = "retries_exhausted"
ERROR_QUOTA_EXCEEDED = "quota_exceeded"
ERROR_MISSING_RESULT = "missing_result"
ERROR_PROVIDER = "provider_error"
ERROR_CONFIGURATION = "configuration_error"
ERROR_CANCELLED = "cancelled"
