"""Core package for the Khadamat marketplace front-end logic."""

from .api import ApiError, MarketplaceClient
from .browser import QueryParams, ServiceBrowser
from .catalog import Catalog, load_catalog
from .config import Settings, get_settings
from .filters import FilterCriteria, SortOrder, category_count, compute_visible
from .notifications import LoggingNotifier, RecordingNotifier
from .registration import RegistrationFormData, RegistrationWizard, WizardStep

__all__ = [
    "ApiError",
    "Catalog",
    "FilterCriteria",
    "LoggingNotifier",
    "MarketplaceClient",
    "QueryParams",
    "RecordingNotifier",
    "RegistrationFormData",
    "RegistrationWizard",
    "ServiceBrowser",
    "Settings",
    "SortOrder",
    "WizardStep",
    "category_count",
    "compute_visible",
    "get_settings",
    "load_catalog",
]
