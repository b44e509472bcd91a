"""Service configuration: endpoint URLs, callback URLs and credentials."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from shumeiclient.models import _decode, _nested, _text


@dataclass
class ShumeiUrl:
    """Endpoints of the moderation service."""

    video_stream_close_url: str = _text()
    voice_stream_close_url: str = _text()
    image_url: str = _text()
    multi_image_url: str = _text()
    text_url: str = _text()
    # Synchronous voice file checks are only offered by domestic nodes.
    voice_url: str = _text()
    async_voice_url: str = _text()
    async_video_url: str = _text()
    voice_stream_url: str = _text()
    video_stream_url: str = _text()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ShumeiUrl:
        """Build from a decoded JSON object."""
        return _decode(cls, data)


@dataclass
class CallBackUrl:
    """Default callback URLs per check type."""

    image_call_back_url: str = _text()
    multi_image_call_back_url: str = _text()
    voice_call_back_url: str = _text()
    video_call_back_url: str = _text()
    voice_stream_call_back_url: str = _text()
    video_stream_call_back_url: str = _text()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> CallBackUrl:
        """Build from a decoded JSON object."""
        return _decode(cls, data)


@dataclass
class ShumeiConfig:
    """Complete client configuration; JSON keys match field names case-insensitively."""

    app_id: str = _text()
    access_key: str = _text()
    cdn_url: str = _text()
    token_prefix: str = _text()
    callback_domain: str = _text()
    shumei_url: ShumeiUrl = _nested(ShumeiUrl)
    callback_url: CallBackUrl = _nested(CallBackUrl)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ShumeiConfig:
        """Build from a decoded JSON object."""
        return _decode(cls, data)