from urllib.parse import urlparse

def is_absolute_url(url: str) -> bool:
    """True when `url` carries both a scheme and a host (http://host/..., https://...)."""
    if not isinstance(url, str):
        return False
    parts = urlparse(url.strip())
    return bool(parts.scheme and parts.netloc)

def format_time(seconds: float) -> str:
    """Render a playback position as m:ss; negative or NaN input renders 0:00."""
    if not seconds or seconds != seconds or seconds < 0:
        return "0:00"
    total = int(seconds)
    return f"{total // 60}:{total % 60:02d}"
