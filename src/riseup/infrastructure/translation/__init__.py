"""Translation providers and language detectors."""

from riseup.infrastructure.translation.chain import ProviderChain
from riseup.infrastructure.translation.detection import ScriptLanguageDetector
from riseup.infrastructure.translation.google import GoogleTranslateProvider
from riseup.infrastructure.translation.libretranslate import LibreTranslateProvider

__all__ = [
    "GoogleTranslateProvider",
    "LibreTranslateProvider",
    "ProviderChain",
    "ScriptLanguageDetector",
]
