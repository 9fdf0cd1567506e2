from linkshortener.models.short_url_model import ShortURLModel, ClickModel


__all__ = [
    'ShortURLModel',
    'ClickModel',
]
