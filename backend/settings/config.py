"""
Centralized configuration access using the Singleton pattern.
Business logic reads settings through ``app_settings`` instead of querying
GlobalSettings directly.
"""

from decimal import Decimal
from typing import Optional, Any, Dict
import logging

logger = logging.getLogger(__name__)


class AppSettings:
    """
    A LAZY singleton that exposes GlobalSettings values as attributes.
    Loading is deferred until the first attribute access so management
    commands can run before the schema exists.
    """

    _instance: Optional["AppSettings"] = None

    def __new__(cls) -> "AppSettings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.__dict__["_initialized"] = False
        return cls._instance

    def __getattr__(self, name: str) -> Any:
        if not self.__dict__.get("_initialized"):
            self.load_settings()
        try:
            return self.__dict__[name]
        except KeyError:
            raise AttributeError(f"'AppSettings' object has no attribute '{name}'")

    def load_settings(self) -> None:
        from .models import GlobalSettings

        settings_obj = GlobalSettings.load()

        self.restaurant_name: str = settings_obj.restaurant_name
        self.kot_split_by_major_category: bool = settings_obj.kot_split_by_major_category
        self.kot_include_variants: bool = settings_obj.kot_include_variants
        self.kot_include_deal_breakdown: bool = settings_obj.kot_include_deal_breakdown
        self.default_delivery_charge: Decimal = settings_obj.default_delivery_charge
        self.__dict__["_initialized"] = True

    def reload(self) -> None:
        """
        Drops the loaded values; the next attribute access reads the database again.
        """
        initialized = self.__dict__.get("_initialized")
        self.__dict__.clear()
        self.__dict__["_initialized"] = False
        if initialized:
            logger.debug("AppSettings invalidated")

    def get_kot_config(self) -> Dict[str, bool]:
        return {
            "split_by_major_category": self.kot_split_by_major_category,
            "include_variants": self.kot_include_variants,
            "include_deal_breakdown": self.kot_include_deal_breakdown,
        }

    def __repr__(self):
        if not self.__dict__.get("_initialized"):
            return "<AppSettings (not loaded)>"
        return f"<AppSettings restaurant={self.restaurant_name!r}>"


app_settings = AppSettings()
