import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Currency:
    code: str
    name: str
    symbol: str


AVAILABLE_CURRENCIES: Tuple[Currency, ...] = (
    Currency("INR", "Indian Rupee", "₹"),
    Currency("USD", "US Dollar", "$"),
    Currency("EUR", "Euro", "€"),
    Currency("GBP", "British Pound", "£"),
    Currency("JPY", "Japanese Yen", "¥"),
)
DEFAULT_CURRENCY = "INR"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    currency: Currency
    store_path: Optional[str]
    storage_namespace: str
    log_level: str


def get_currency(code: Optional[str]) -> Currency:
    for currency in AVAILABLE_CURRENCIES:
        if currency.code == (code or "").strip().upper():
            return currency
    return next(c for c in AVAILABLE_CURRENCIES if c.code == DEFAULT_CURRENCY)


def format_currency(amount: float, currency: Currency) -> str:
    return f"{currency.symbol}{amount:.2f}"


def load_settings() -> Settings:
    level = os.environ.get("FINPAL_LOG_LEVEL", "INFO").strip().upper()
    return Settings(
        currency=get_currency(os.environ.get("FINPAL_CURRENCY")),
        store_path=os.environ.get("FINPAL_STORE_PATH") or None,
        storage_namespace=os.environ.get("FINPAL_STORAGE_NAMESPACE", "guest-"),
        log_level=level if level in _LOG_LEVELS else "INFO",
    )


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
