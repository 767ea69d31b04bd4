# User value: This file works out whether an upload is video, image or audio from its name and MIME type.
from typing import Dict, Iterable, List, Optional

from schemas.common import MediaType, get_media_type_display_name, normalize_media_type

VIDEO = MediaType.VIDEO
IMAGE = MediaType.IMAGE
AUDIO = MediaType.AUDIO

MIME_TO_MEDIA_TYPE: Dict[str, MediaType] = {
    "video/mp4": VIDEO,
    "video/webm": VIDEO,
    "video/x-msvideo": VIDEO,
    "video/avi": VIDEO,
    "video/quicktime": VIDEO,
    "video/x-matroska": VIDEO,
    "video/x-flv": VIDEO,
    "video/mpeg": VIDEO,
    "video/3gpp": VIDEO,
    "video/ogg": VIDEO,
    "image/jpeg": IMAGE,
    "image/png": IMAGE,
    "image/gif": IMAGE,
    "image/webp": IMAGE,
    "image/bmp": IMAGE,
    "image/tiff": IMAGE,
    "image/svg+xml": IMAGE,
    "image/x-icon": IMAGE,
    "image/heic": IMAGE,
    "image/heif": IMAGE,
    "audio/mpeg": AUDIO,
    "audio/mp3": AUDIO,
    "audio/wav": AUDIO,
    "audio/x-wav": AUDIO,
    "audio/ogg": AUDIO,
    "audio/aac": AUDIO,
    "audio/flac": AUDIO,
    "audio/x-flac": AUDIO,
    "audio/webm": AUDIO,
    "audio/mp4": AUDIO,
    "audio/x-m4a": AUDIO,
}

# Fallback when the browser/OS reports a generic or missing MIME type.
EXTENSION_TO_MEDIA_TYPE: Dict[str, MediaType] = {
    "mp4": VIDEO, "webm": VIDEO, "avi": VIDEO, "mov": VIDEO, "mkv": VIDEO,
    "flv": VIDEO, "mpeg": VIDEO, "mpg": VIDEO, "3gp": VIDEO, "wmv": VIDEO,
    "jpg": IMAGE, "jpeg": IMAGE, "png": IMAGE, "gif": IMAGE, "webp": IMAGE,
    "bmp": IMAGE, "tiff": IMAGE, "tif": IMAGE, "svg": IMAGE, "ico": IMAGE,
    "heic": IMAGE, "heif": IMAGE,
    "mp3": AUDIO, "wav": AUDIO, "ogg": AUDIO, "aac": AUDIO, "flac": AUDIO,
    "m4a": AUDIO, "wma": AUDIO,
}

MIME_PREFIXES = (
    ("video/", VIDEO),
    ("image/", IMAGE),
    ("audio/", AUDIO),
)

ACCEPTED_MIME_TYPES: Dict[MediaType, List[str]] = {
    VIDEO: [
        "video/mp4",
        "video/webm",
        "video/x-msvideo",
        "video/avi",
        "video/quicktime",
        "video/x-matroska",
        "video/mpeg",
    ],
    IMAGE: [
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "image/bmp",
        "image/tiff",
    ],
    AUDIO: [
        "audio/mpeg",
        "audio/mp3",
        "audio/wav",
        "audio/x-wav",
        "audio/ogg",
        "audio/aac",
        "audio/flac",
    ],
}

ACCEPTED_EXTENSIONS: Dict[MediaType, List[str]] = {
    VIDEO: ["mp4", "webm", "avi", "mov", "mkv", "mpeg", "mpg"],
    IMAGE: ["jpg", "jpeg", "png", "gif", "webp", "bmp", "tiff"],
    AUDIO: ["mp3", "wav", "ogg", "aac", "flac", "m4a"],
}


# User value: parses extension consistently so "Clip.MP4" and "clip.mp4" are treated alike.
def get_file_extension(filename: Optional[str]) -> str:
    name = str(filename or "").strip()
    dot = name.rfind(".")
    if dot == -1 or dot == len(name) - 1:
        return ""
    return name[dot + 1:].lower()


def _mime(mime_type: Optional[str]) -> str:
    return str(mime_type or "").strip().lower()


def _from_exact_mime(mime_type: Optional[str]) -> Optional[MediaType]:
    return MIME_TO_MEDIA_TYPE.get(_mime(mime_type))


def _from_extension(filename: Optional[str]) -> Optional[MediaType]:
    return EXTENSION_TO_MEDIA_TYPE.get(get_file_extension(filename))


def _from_mime_prefix(mime_type: Optional[str]) -> Optional[MediaType]:
    mime = _mime(mime_type)
    for prefix, media_type in MIME_PREFIXES:
        if mime.startswith(prefix):
            return media_type
    return None


def detect_media_type(filename: Optional[str], mime_type: Optional[str]) -> Optional[MediaType]:
    """Exact MIME match first, then extension, then MIME prefix; None when nothing matches."""
    return _from_exact_mime(mime_type) or _from_extension(filename) or _from_mime_prefix(mime_type)


def detect_media_type_for_file(file) -> Optional[MediaType]:
    return detect_media_type(getattr(file, "filename", None), getattr(file, "content_type", None))


# User value: returns the media kind plus reasons so users and support can see why a file was classified.
def detect_media_type_from_metadata(filename: Optional[str], mime_type: Optional[str]) -> dict:
    ext = get_file_extension(filename)
    mime = _mime(mime_type)
    detected = detect_media_type(filename, mime_type)
    ext_media = _from_extension(filename)
    mime_media = _from_exact_mime(mime_type) or _from_mime_prefix(mime_type)

    if detected is None:
        return {
            "detected_media_type": None,
            "confidence": 0.0,
            "reasons": [f"extension={ext or 'none'}", f"mime={mime or 'none'}", "no_media_signal"],
        }

    reasons: List[str] = []
    if mime_media is not None:
        reasons.append(f"mime={mime}")
    if ext_media is not None:
        reasons.append(f"extension={ext}")

    if mime_media is not None and ext_media is not None:
        if mime_media == ext_media:
            confidence = 0.99
        else:
            confidence = 0.75
            reasons.append("mime_extension_mismatch")
    elif mime_media is not None:
        confidence = 0.9 if _from_exact_mime(mime_type) else 0.7
        reasons.append("extension_unknown")
    else:
        confidence = 0.8
        reasons.append("mime_unknown")

    return {
        "detected_media_type": detected,
        "confidence": confidence,
        "reasons": reasons,
    }


def is_valid_media_file(file) -> bool:
    return detect_media_type_for_file(file) is not None


def file_matches_media_types(file, media_types: Iterable[MediaType]) -> bool:
    detected = detect_media_type_for_file(file)
    if detected is None:
        return False
    return detected in {normalize_media_type(m) for m in media_types}


def get_accepted_extensions(media_type: MediaType) -> List[str]:
    media = normalize_media_type(media_type)
    return list(ACCEPTED_EXTENSIONS.get(media, []))


# User value: builds the file picker accept list so users are only offered files the operation can take.
def build_accept_string(media_types: Iterable[MediaType]) -> str:
    mime_types: List[str] = []
    for media_type in media_types:
        mime_types.extend(ACCEPTED_MIME_TYPES.get(normalize_media_type(media_type), []))
    return ", ".join(mime_types)


def get_accepted_types_description(media_types: Iterable[MediaType]) -> str:
    descriptions = []
    for media_type in media_types:
        extensions = get_accepted_extensions(media_type)
        if extensions:
            listed = ", ".join(f".{e}" for e in extensions)
            descriptions.append(f"{get_media_type_display_name(media_type)} ({listed})")
    return "; ".join(descriptions)


def truncate_filename(filename: str, max_length: int = 30) -> str:
    if len(filename) <= max_length:
        return filename

    extension = get_file_extension(filename)
    dot = filename.rfind(".")
    stem = filename[:dot] if dot != -1 else filename
    extension_part = f".{extension}" if extension else ""
    available = max_length - len(extension_part) - 3

    if available <= 0:
        return filename[: max_length - 3] + "..."
    return stem[:available] + "..." + extension_part
