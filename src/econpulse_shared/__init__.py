"""
econpulse_shared — configuration, models, and static catalogues for econpulse.

Usage:
    from econpulse_shared.config import Settings, get_settings
    from econpulse_shared.constants import COUNTRY_CONFIGS, INDICATOR_METADATA
    from econpulse_shared.models.indicators import CanonicalPoint, CountryConfig
    from econpulse_shared.time_utils import month_key, parse_provider_period
"""

__version__ = "0.1.0"
