# User value: This file turns raw bytes and seconds into short labels users can read at a glance.
import math
from typing import Optional

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_file_size(num_bytes: float) -> str:
    """Format a byte count with 1024-based units.

    Bytes and KB are shown without decimals, MB with one, GB and above with two:
    ``format_file_size(600 * 1024 * 1024) == "600.0 MB"``.
    """
    if not num_bytes or num_bytes <= 0:
        return "0 B"

    exponent = 0
    size = float(num_bytes)
    while size >= 1024 and exponent < len(_SIZE_UNITS) - 1:
        size /= 1024
        exponent += 1

    if exponent < 2:
        precision = 0
    elif exponent < 3:
        precision = 1
    else:
        precision = 2
    return f"{size:.{precision}f} {_SIZE_UNITS[exponent]}"


def format_download_progress(loaded: int, total: int) -> str:
    if total <= 0:
        return format_file_size(loaded)
    return f"{format_file_size(loaded)} / {format_file_size(total)}"


def format_size_mb_label(num_bytes: int) -> str:
    mb = num_bytes / (1024 * 1024)
    if float(mb).is_integer():
        return f"{int(mb)} MB"
    return format_file_size(num_bytes)


# User value: compact ETA for progress rows ("1h 5m", "2m 30s", "45s").
def format_eta(seconds: Optional[float]) -> Optional[str]:
    if seconds is None or seconds <= 0:
        return None

    total = int(seconds)
    hours = total // 3600
    minutes = (total % 3600) // 60
    secs = total % 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_time_remaining(seconds: Optional[int]) -> str:
    if seconds is None or seconds <= 0:
        return "Calculating..."

    seconds = int(seconds)
    if seconds < 60:
        return f"{seconds}s remaining"
    if seconds < 3600:
        return f"{seconds // 60}m {seconds % 60}s remaining"
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m remaining"


def format_upload_speed(bytes_per_second: float) -> str:
    if bytes_per_second < 1024:
        return f"{bytes_per_second:.0f} B/s"
    if bytes_per_second < 1024 * 1024:
        return f"{bytes_per_second / 1024:.1f} KB/s"
    return f"{bytes_per_second / (1024 * 1024):.1f} MB/s"


# User value: shows "video_resize" as "Video Resize" in pickers and job history.
def get_operation_display_name(operation_name: str) -> str:
    words = str(operation_name or "").split("_")
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
