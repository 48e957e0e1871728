"""GIF data URL output provider."""

import base64

from ..constants import DATAURL_MARKER
from .gif_provider import GifOutputProvider


class GifDataUrlOutputProvider(GifOutputProvider):
    """Output provider that writes a GIF data URL inside an HTML img tag.

    Encoding is inherited unchanged; wrap the GIF bytes with :func:`to_data_url`
    before calling :meth:`write`, so the size ceiling applies to the GIF itself.
    """

    def write(self, data: bytes) -> None:
        """
        Write data URL to file as an HTML img tag with injection or append mode.

        The first line holding the marker is replaced; without a marker the
        tag is appended.

        Args:
            data: Data URL as bytes (will be decoded as UTF-8 text)
        """
        if not self.path:
            raise ValueError("Output path not set")
        img_tag = f'<img src="{data.decode("utf-8")}" />'

        # Try to create new file exclusively (avoids TOCTOU race condition)
        try:
            with open(self.path, "x") as f:
                f.write(img_tag + "\n")
            return
        except FileExistsError:
            with open(self.path, "r") as f:
                content = f.read()

        if DATAURL_MARKER in content:
            lines = content.splitlines(keepends=True)
            for i, line in enumerate(lines):
                if DATAURL_MARKER in line:
                    lines[i] = img_tag + "\n"
                    break
            content = "".join(lines)
        else:
            if content and not content.endswith("\n"):
                content += "\n"
            content += img_tag + "\n"

        with open(self.path, "w") as f:
            f.write(content)


def to_data_url(gif_bytes: bytes) -> bytes:
    """Wrap GIF bytes as a ``data:image/gif;base64,`` URL; empty input stays empty."""
    if not gif_bytes:
        return b""
    encoded = base64.b64encode(gif_bytes).decode("ascii")
    return f"data:image/gif;base64,{encoded}".encode("utf-8")
