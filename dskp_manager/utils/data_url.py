import base64
import mimetypes
from pathlib import Path
from typing import Tuple

def read_file_as_data_url(path) -> Tuple[str, str]:
    """Read a file the way a browser FileReader.readAsDataURL would.

    Returns the data URL and the MIME type guessed from the file name.
    """
    path = Path(path)
    mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    payload = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type};base64,{payload}", mime_type

def extract_base64_payload(data_url: str) -> str:
    """Everything after the first comma of a data URL."""
    _, sep, payload = data_url.partition(",")
    if not sep:
        raise ValueError("Not a data URL: missing ',' separator")
    return payload
