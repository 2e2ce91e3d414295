import base64
from typing import Any, Dict, Literal, Optional, Tuple


# =============================================================================
# Image Helpers
# =============================================================================

# Leading bytes of the image formats the OCR apps hand us.
_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
)


def detect_mime_type(data: bytes, default: str = "image/png") -> str:
    """
    Guess an image MIME type from its magic bytes.

    Args:
        data (bytes): Raw image bytes.
        default (str): Returned when the format isn't recognized.

    Returns:
        str: The MIME type (e.g., 'image/jpeg').
    """
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    for signature, mime_type in _SIGNATURES:
        if data.startswith(signature):
            return mime_type
    return default


def encode_image_bytes(data: bytes, mime_type: Optional[str] = None) -> Tuple[str, str]:
    """
    Base64-encode raw image bytes for inline transport.

    Args:
        data (bytes): Raw image bytes, e.g. a dropped PNG or a camera frame.
        mime_type (str, optional): Overrides the sniffed MIME type.

    Returns:
        Tuple[str, str]: A tuple containing:
            - b64_data (str): The base64-encoded image.
            - mime_type (str): The MIME type.
    """
    b64_data = base64.b64encode(data).decode("utf-8")
    return b64_data, mime_type or detect_mime_type(data)


def create_image_content(
    data: bytes,
    *,
    mime_type: Optional[str] = None,
    detail: Optional[Literal["auto", "low", "high"]] = None,
) -> Dict[str, Any]:
    """
    Create an OpenAI-style ``image_url`` content part holding a data URI.

    Args:
        data (bytes): Raw image bytes.
        mime_type (str, optional): Overrides the sniffed MIME type.
        detail (str, optional): Detail level for OpenAI vision ('auto', 'low', 'high').

    Returns:
        Dict[str, Any]: {"type": "image_url", "image_url": {"url": "data:..."}}
    """
    b64_data, mime_type = encode_image_bytes(data, mime_type)
    image_url: Dict[str, Any] = {"url": f"data:{mime_type};base64,{b64_data}"}
    if detail:
        image_url["detail"] = detail
    return {"type": "image_url", "image_url": image_url}


def create_text_content(text: str) -> Dict[str, Any]:
    return {"type": "text", "text": text}
