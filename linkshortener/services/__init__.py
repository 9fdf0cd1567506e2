from linkshortener.services.short_url_store import ShortURLStore, ShortURLStats
from linkshortener.services.redirect_resolver import RedirectResolver, RedirectState, Resolution, Redirect


__all__ = [
    'ShortURLStore',
    'ShortURLStats',
    'RedirectResolver',
    'RedirectState',
    'Resolution',
    'Redirect',
]
