"""Client for the content moderation and risk event API."""

from __future__ import annotations

import hashlib
import logging
import posixpath
import time
from typing import Any, Protocol, TypeVar
from urllib.parse import urlsplit, urlunsplit

import requests

from .common import DEFAULT_TIMEOUT, new_session, rand_str
from .config import CallBackUrl, ShumeiConfig, ShumeiUrl
from .models import (
    AudioStreamResponse,
    CloseStreamResponse,
    PublicLongResponse,
    PublicShortResponse,
    ShumeiAsyncAudioStream,
    ShumeiAsyncVideoFile,
    ShumeiAsyncVideoStream,
    ShumeiImage,
    ShumeiMultiImage,
    ShumeiText,
    ShumeiVoiceFile,
    TianWangParams,
    VideoFileResponse,
    VoiceFileResponse,
)

logger = logging.getLogger(__name__)

SUCCESS_CODE = 1100
REJECT = "REJECT"

IMAGE_LANGS = frozenset({"zh", "en", "ar"})
VOICE_LANGS = frozenset(
    {
        "zh", "en", "ar", "hi", "es", "fr", "ru", "pt", "id",
        "de", "ja", "tr", "vi", "it", "th", "tl", "ko", "ms",
    }
)
TEXT_LANGS = VOICE_LANGS | {"auto"}

_DEFAULT_SESSION = new_session()


class _FromDict(Protocol):
    @classmethod
    def from_dict(cls, data: Any) -> Any: ...


_R = TypeVar("_R")


def _is_absolute(url: str) -> bool:
    return url.startswith("http://") or url.startswith("https://")


def _clean_path(path: str) -> str:
    if not path:
        return ""
    cleaned = posixpath.normpath(path)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def _join_url(base: str, *elements: str) -> str:
    """Append path elements to ``base``, normalising the resulting path."""
    parts = urlsplit(base)
    items = [parts.path, *elements]
    relative = not items[0].startswith("/")
    if relative:
        items[0] = "/" + items[0]
    joined = _clean_path("/".join(item for item in items if item))
    if relative:
        joined = joined[1:]
    if items[-1].endswith("/") and not joined.endswith("/"):
        joined += "/"
    return urlunsplit(parts._replace(path=joined))


class ShuMei:
    """Moderation API client holding credentials, endpoints and defaults."""

    tian_wang_url = "http://api-skynet-bj.fengkongcloud.com/v4/event"

    def __init__(
        self,
        app_id: str,
        access_key: str,
        *,
        token_prefix: str = "",
        cdn_url: str = "",
        callback_domain: str = "",
        urls: ShumeiUrl | None = None,
        callback_urls: CallBackUrl | None = None,
        default_image_type: str = "",
        default_text_type: str = "",
        default_voice_type: str = "",
        default_video_type: str = "",
        session: requests.Session | None = None,
    ) -> None:
        self.app_id = app_id
        self.access_key = access_key
        self.token_prefix = token_prefix
        self.cdn_url = cdn_url
        self.callback_domain = callback_domain
        self.urls = urls if urls is not None else ShumeiUrl()
        self.callback_urls = callback_urls if callback_urls is not None else CallBackUrl()
        self.default_image_type = default_image_type or "POLITICS_PORN_AD"
        self.default_text_type = default_text_type or "AD"
        self.default_voice_type = default_voice_type or "PORN_MOAN_AD"
        self.default_video_type = default_video_type or "POLITY_EROTIC_ADVERT"
        self.session = session if session is not None else _DEFAULT_SESSION

    @classmethod
    def from_config(cls, config: ShumeiConfig) -> ShuMei:
        """Build a client from a complete configuration."""
        return cls(
            config.app_id,
            config.access_key,
            token_prefix=config.token_prefix,
            cdn_url=config.cdn_url,
            callback_domain=config.callback_domain,
            urls=config.shumei_url,
            callback_urls=config.callback_url,
        )

    # ------------------------------------------------------------ transport

    def send(self, url: str, body: Any, response_type: type[_R] | None = None) -> Any:
        """POST ``body`` as JSON to ``url``.

        With ``response_type`` the decoded body is returned as that record;
        without it the decoded JSON object is returned, or None when the body
        is not a JSON object. Transport failures raise ``requests.RequestException``.
        """
        response = self.session.post(
            url,
            json=body,
            headers={"Accept": "application/json", "Content-Type": "application/json"},
            timeout=DEFAULT_TIMEOUT,
        )
        try:
            data = response.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            data = None
        if response_type is None:
            return data
        return response_type.from_dict(data)  # type: ignore[attr-defined]

    # -------------------------------------------------------------- helpers

    def _resource_url(self, url: str) -> str:
        return url if _is_absolute(url) else _join_url(self.cdn_url, url)

    def _token(self, user_id: str) -> str:
        if not user_id:
            return ""
        if not user_id.startswith(self.token_prefix):
            return self.token_prefix + user_id
        return user_id

    @staticmethod
    def _voice_lang(lang: str) -> str:
        return lang if lang in VOICE_LANGS else "zh"

    @staticmethod
    def _image_lang(lang: str) -> str:
        return lang if lang in IMAGE_LANGS else "zh"

    @staticmethod
    def _text_lang(lang: str) -> str:
        return lang if lang in TEXT_LANGS else "auto"

    def handle_callback_url(self, url: str) -> str:
        """Resolve a callback path against the callback domain."""
        if not url:
            return ""
        return url if _is_absolute(url) else _join_url(self.callback_domain, url)

    # --------------------------------------------------------------- checks

    def image(self, params: ShumeiImage) -> tuple[bool, PublicLongResponse | None]:
        """Check a single image; False only when the service rejects it."""
        data: dict[str, Any] = {
            "img": self._resource_url(params.image_url),
            "tokenId": self._token(params.user_id),
            "receiveTokenId": self._token(params.receive_token_id),
            "lang": self._image_lang(params.lang),
        }
        if params.ip:
            data["ip"] = params.ip
        data["extra"] = {"passThrough": params.through_params}

        payload: dict[str, Any] = {
            "accessKey": self.access_key,
            "type": params.m_type or self.default_image_type,
            "eventId": params.event_id or "IMAGE",
            "businessType": params.business_type or "FACE",
            "appId": self.app_id,
            "data": data,
        }
        if params.need_call_back:
            payload["callback"] = (
                self.handle_callback_url(params.call_back_url)
                if params.call_back_url
                else self.callback_urls.image_call_back_url
            )

        try:
            res = self.send(self.urls.image_url, payload, PublicLongResponse)
        except requests.RequestException as exc:
            logger.error("image check request failed: %s", exc)
            return True, None
        if res.code == SUCCESS_CODE and res.risk_level == REJECT:
            return False, res
        return True, res

    def multi_image(
        self, params: ShumeiMultiImage
    ) -> tuple[bool, PublicLongResponse | None]:
        """Check several images in one request; True when the request succeeded."""
        images = []
        bt_id_map: dict[str, str] = {}
        for img in params.image_urls:
            bt_id = hashlib.md5(img.encode("utf-8")).hexdigest()[8:]
            images.append({"img": self._resource_url(img), "btId": bt_id})
            bt_id_map[bt_id] = img

        data: dict[str, Any] = {
            "tokenId": self._token(params.user_id),
            "receiveTokenId": self._token(params.receive_token_id),
            "lang": self._image_lang(params.lang),
            "imgs": images,
        }
        if params.ip:
            data["ip"] = params.ip
        through = dict(params.through_params or {})
        through["btIdMap"] = bt_id_map
        data["extra"] = {"passThrough": through}

        payload: dict[str, Any] = {
            "accessKey": self.access_key,
            "appId": self.app_id,
            "eventId": params.event_id or "IMAGE",
            "type": params.m_type or self.default_image_type,
            "businessType": "FACE",
            "data": data,
        }
        if params.need_call_back:
            payload["callback"] = (
                self.handle_callback_url(params.call_back_url)
                if params.call_back_url
                else self.callback_urls.multi_image_call_back_url
            )

        try:
            res = self.send(self.urls.multi_image_url, payload, PublicLongResponse)
        except requests.RequestException as exc:
            logger.error("multi image check request failed: %s", exc)
            return False, None
        if res.code != SUCCESS_CODE:
            logger.error(
                "multi image check failed: %s (requestId=%s, code=%s)",
                res.message, res.request_id, res.code,
            )
            return False, res
        return True, res

    def text(self, params: ShumeiText) -> tuple[bool, PublicLongResponse | None]:
        """Check a text; False only when the service rejects it."""
        event_id = params.event_id or "text"
        data: dict[str, Any] = {
            "text": params.text,
            "tokenId": self._token(params.user_id),
            "lang": self._text_lang(params.lang),
            "ip": params.ip,
            "deviceId": params.device_id,
        }
        if event_id == "message":
            data["extra"] = {"receiveTokenId": self._token(params.receive_token_id)}

        payload = {
            "accessKey": self.access_key,
            "appId": self.app_id,
            "eventId": event_id,
            "type": params.m_type or self.default_text_type,
            "data": data,
        }
        try:
            res = self.send(self.urls.text_url, payload, PublicLongResponse)
        except requests.RequestException as exc:
            logger.error("text check request failed: %s", exc)
            return True, None
        if res.code == SUCCESS_CODE and res.risk_level == REJECT:
            return False, res
        return True, res

    def voice_file(
        self, params: ShumeiVoiceFile
    ) -> tuple[bool, VoiceFileResponse | None]:
        """Check a voice file synchronously; False only when it is rejected."""
        payload = {
            "accessKey": self.access_key,
            "appId": self.app_id,
            "eventId": params.event_id or "default",
            "type": params.m_type or self.default_voice_type,
            "contentType": "URL",
            "content": self._resource_url(params.voice_url),
            "data": {"tokenId": self._token(params.user_id)},
            "btId": rand_str(16),
        }
        try:
            res = self.send(self.urls.voice_url, payload, VoiceFileResponse)
        except requests.RequestException as exc:
            logger.error("voice file check request failed: %s", exc)
            return True, None
        if res.code == SUCCESS_CODE and res.detail.risk_level == REJECT:
            return False, res
        return True, res

    def async_voice_file(self, params: ShumeiVoiceFile) -> bool:
        """Submit a voice file for asynchronous checking."""
        payload: dict[str, Any] = {
            "accessKey": self.access_key,
            "appId": self.app_id,
            "eventId": params.event_id or "default",
            "type": params.m_type or self.default_voice_type,
            "contentType": "URL",
            "content": self._resource_url(params.voice_url),
            "data": {
                "tokenId": self._token(params.user_id),
                "lang": self._voice_lang(params.lang),
                "passThrough": params.callback_params,
            },
            "btId": rand_str(16),
            "callback": self.callback_urls.voice_call_back_url,
        }
        if params.callback_url:
            payload["callback"] = self.handle_callback_url(params.callback_url)

        try:
            res = self.send(self.urls.async_voice_url, payload, PublicShortResponse)
        except requests.RequestException as exc:
            logger.error("async voice file request failed: %s", exc)
            return False
        if res.code != SUCCESS_CODE:
            logger.error(
                "async voice file check failed: %s (requestId=%s, code=%s)",
                res.message, res.request_id, res.code,
            )
            return False
        return True

    def async_video_file(
        self, params: ShumeiAsyncVideoFile
    ) -> tuple[bool, VideoFileResponse | None]:
        """Submit a video file for asynchronous checking."""
        data = {
            "tokenId": self._token(params.user_id),
            "lang": self._image_lang(params.lang),
            "btId": rand_str(16),
            "url": self._resource_url(params.video_url),
            "extra": {"passThrough": params.through_params},
        }
        payload: dict[str, Any] = {
            "accessKey": self.access_key,
            "appId": self.app_id,
            "eventId": params.event_id or "default",
            "imgType": params.video_type or self.default_video_type,
            "audioType": params.voice_type or self.default_voice_type,
            "callback": self.callback_urls.video_call_back_url,
            "data": data,
        }
        if params.call_back_url:
            payload["callback"] = self.handle_callback_url(params.call_back_url)

        try:
            res = self.send(self.urls.async_video_url, payload, VideoFileResponse)
        except requests.RequestException as exc:
            logger.error("async video file request failed: %s", exc)
            return False, None
        if res.code != SUCCESS_CODE:
            logger.error(
                "async video file check failed: %s (requestId=%s, code=%s)",
                res.message, res.request_id, res.code,
            )
            return False, res
        return True, res

    def _check_stream(
        self, url: str, payload: dict[str, Any], kind: str
    ) -> tuple[bool, AudioStreamResponse | None]:
        try:
            res = self.send(url, payload, AudioStreamResponse)
        except requests.RequestException as exc:
            logger.error("%s request failed: %s", kind, exc)
            return False, None
        if res.code != SUCCESS_CODE:
            logger.error(
                "%s check failed: %s (requestId=%s, code=%s, request=%s)",
                kind, res.message, res.request_id, res.code, payload,
            )
            return False, None
        if res.detail.errorcode != 0:
            logger.error(
                "%s check failed: %s (requestId=%s, errorCode=%s)",
                kind, res.message, res.request_id, res.detail.errorcode,
            )
            return False, None
        return True, res

    def audio_stream(
        self, params: ShumeiAsyncAudioStream
    ) -> tuple[bool, AudioStreamResponse | None]:
        """Start checking an audio stream."""
        data: dict[str, Any] = {
            "tokenId": self._token(params.user_id),
            "lang": self._voice_lang(params.lang),
            "btId": rand_str(16),
            "streamType": params.stream_type,
            "returnAllText": params.return_all_text,
            "room": params.room_id,
            "returnFinishInfo": params.return_finish_info,
            "audioDetectStep": params.audio_detect_step,
            "extra": {"passThrough": params.through_params},
        }
        data.update(params.rtc_params or {})

        payload: dict[str, Any] = {
            "accessKey": self.access_key,
            "appId": self.app_id,
            "eventId": params.event_id or "default",
            "type": params.voice_type or self.default_voice_type,
        }
        if params.business_type:
            payload["businessType"] = params.business_type
        payload["callback"] = self.handle_callback_url(params.callback)
        payload["data"] = data
        return self._check_stream(self.urls.voice_stream_url, payload, "audio stream")

    def video_stream(
        self, params: ShumeiAsyncVideoStream
    ) -> tuple[bool, AudioStreamResponse | None]:
        """Start checking a video stream."""
        data: dict[str, Any] = {
            "tokenId": self._token(params.user_id),
            "lang": self._image_lang(params.lang),
            "btId": rand_str(16),
            "streamType": params.stream_type,
            "room": params.room_id,
            "returnFinishInfo": params.return_finish_info,
            "detectFrequency": params.detect_frequency,
            "returnAllImg": params.return_all_img,
            "returnAllText": params.return_all_text,
            "extra": {"passThrough": params.through_params},
        }
        if params.detect_step > 0:
            data["detectStep"] = params.detect_step
        data.update(params.rtc_params or {})

        payload: dict[str, Any] = {
            "accessKey": self.access_key,
            "appId": self.app_id,
            "eventId": params.event_id or "default",
            "imgType": params.video_type or self.default_video_type,
            "audioType": params.voice_type,
        }
        img_callback = self.handle_callback_url(params.img_callback)
        if img_callback:
            payload["imgCallback"] = img_callback
        audio_callback = self.handle_callback_url(params.audio_callback)
        if audio_callback:
            payload["audioCallback"] = audio_callback
        payload["data"] = data
        if params.img_business_type:
            payload["imgBusinessType"] = params.img_business_type
        if params.audio_business_type:
            payload["audioBusinessType"] = params.audio_business_type
        return self._check_stream(self.urls.video_stream_url, payload, "video stream")

    def close_stream_check(
        self, request_id: str, ltype: str
    ) -> tuple[bool, CloseStreamResponse | None]:
        """Stop checking a stream; ``ltype`` is ``"voice"`` or ``"video"``."""
        if ltype == "video":
            url = self.urls.video_stream_close_url
        elif ltype == "voice":
            url = self.urls.voice_stream_close_url
        else:
            url = ""
        payload = {"accessKey": self.access_key, "requestId": request_id}
        try:
            res = self.send(url, payload, CloseStreamResponse)
        except requests.RequestException as exc:
            logger.error("closing stream check failed: %s", exc)
            return False, None
        return True, res

    def tian_wang(self, params: TianWangParams) -> dict[str, Any] | None:
        """Report a risk event and return the decoded response, if any."""
        payload = {
            "accessKey": self.access_key,
            "appId": self.app_id,
            "eventId": params.event_id,
            "data": {
                "tokenId": self._token(params.token_id),
                "ip": params.ip,
                "timestamp": int(time.time() * 1000),
                "deviceId": params.sm_device_id,
                "phone": params.phone,
                "os": params.channel,
                "appVersion": params.version,
                "type": params.register_method,
                "userAgent": params.user_agent,
            },
        }
        try:
            return self.send(self.tian_wang_url, payload, None)
        except requests.RequestException as exc:
            logger.error("risk event request failed: %s", exc)
            return None


def new_shumei_client(config: ShumeiConfig) -> ShuMei:
    """Create a client from configuration."""
    return ShuMei.from_config(config)