"""Request parameters and response records for the moderation API."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Callable, Mapping, TypeVar

_R = TypeVar("_R")


def _lookup(data: Mapping[str, Any] | None, key: str, default: Any = None) -> Any:
    """Fetch ``key`` from a JSON object, falling back to a case-insensitive match."""
    if not data:
        return default
    if key in data:
        return data[key]
    lowered = key.lower()
    for name, value in data.items():
        if isinstance(name, str) and name.lower() == lowered:
            return value
    return default


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _int(value: Any) -> int:
    return 0 if value is None else int(value)


def _float(value: Any) -> float:
    return 0.0 if value is None else float(value)


def _dict(value: Any) -> dict[str, Any]:
    return {} if value is None else dict(value)


def _dict_list(value: Any) -> list[dict[str, Any]]:
    return [dict(item) for item in value or []]


def _parsed(parse: Callable[[Any], Any], **kwargs: Any) -> Any:
    return field(metadata={"parse": parse}, **kwargs)


def _text() -> Any:
    return _parsed(_str, default="")


def _integer() -> Any:
    return _parsed(_int, default=0)


def _number() -> Any:
    return _parsed(_float, default=0.0)


def _mapping() -> Any:
    return _parsed(_dict, default_factory=dict)


def _mappings() -> Any:
    return _parsed(_dict_list, default_factory=list)


def _nested(record: Any) -> Any:
    return _parsed(record.from_dict, default_factory=record)


def _records(record: Any) -> Any:
    return _parsed(
        lambda value: [record.from_dict(item) for item in value or []],
        default_factory=list,
    )


def _decode(cls: type[_R], data: Mapping[str, Any] | None) -> _R:
    """Build a record from a camel-cased JSON object; missing keys keep zero values."""
    values = {
        f.name: f.metadata["parse"](_lookup(data, _camel(f.name)))
        for f in fields(cls)  # type: ignore[arg-type]
    }
    return cls(**values)


# ---------------------------------------------------------------- requests


@dataclass
class ShumeiImage:
    """Single image check request."""

    image_url: str = ""
    user_id: str = ""
    receive_token_id: str = ""
    m_type: str = ""
    business_type: str = ""
    lang: str = ""
    ip: str = ""
    event_id: str = ""
    through_params: dict[str, Any] | None = None
    need_call_back: bool = False
    call_back_url: str = ""


@dataclass
class ShumeiMultiImage:
    """Synchronous check of several images at once."""

    image_urls: list[str] = field(default_factory=list)
    user_id: str = ""
    receive_token_id: str = ""
    m_type: str = ""
    event_id: str = ""
    lang: str = ""
    ip: str = ""
    through_params: dict[str, Any] | None = None
    need_call_back: bool = False
    call_back_url: str = ""


@dataclass
class ShumeiText:
    """Text check request."""

    text: str = ""
    user_id: str = ""
    receive_token_id: str = ""
    m_type: str = ""
    lang: str = ""
    event_id: str = ""
    ip: str = ""
    device_id: str = ""


@dataclass
class ShumeiVoiceFile:
    """Voice file check request; the callback fields apply to the async variant."""

    voice_url: str = ""
    user_id: str = ""
    receive_token_id: str = ""
    m_type: str = ""
    event_id: str = ""
    callback_url: str = ""
    lang: str = ""
    callback_params: dict[str, Any] | None = None


@dataclass
class ShumeiAsyncVideoFile:
    """Asynchronous video file check request."""

    video_url: str = ""
    user_id: str = ""
    receive_token_id: str = ""
    video_type: str = ""
    voice_type: str = ""
    event_id: str = ""
    lang: str = ""
    call_back_url: str = ""
    through_params: dict[str, Any] | None = None


@dataclass
class ShumeiAsyncAudioStream:
    """Asynchronous audio stream check request."""

    rtc_params: dict[str, Any] | None = None
    stream_type: str = ""
    user_id: str = ""
    receive_token_id: str = ""
    voice_type: str = ""
    business_type: str = ""
    event_id: str = ""
    callback: str = ""
    lang: str = ""
    audio_detect_step: int = 0
    room_id: str = ""
    # 0: only segments whose risk level is not PASS; 1: every segment.
    return_all_text: int = 0
    return_finish_info: int = 0
    through_params: dict[str, Any] | None = None


@dataclass
class ShumeiAsyncVideoStream:
    """Asynchronous video stream check request."""

    user_id: str = ""
    receive_token_id: str = ""
    video_type: str = ""
    voice_type: str = ""
    img_business_type: str = ""
    audio_business_type: str = ""
    event_id: str = ""
    img_callback: str = ""
    audio_callback: str = ""
    return_all_img: int = 0
    return_all_text: int = 0
    return_finish_info: int = 0
    lang: str = ""
    rtc_params: dict[str, Any] | None = None
    stream_type: str = ""
    room_id: str = ""
    detect_frequency: int = 0
    # Frames are checked once per step; values below 1 disable stepping.
    detect_step: int = 0
    img_business_detect_step: int = 0
    through_params: dict[str, Any] | None = None


@dataclass
class TianWangParams:
    """Parameters of a risk event report."""

    event_id: str = ""
    token_id: str = ""
    ip: str = ""
    sm_device_id: str = ""
    phone: str = ""
    channel: str = ""
    version: str = ""
    register_method: str = ""
    user_agent: str = ""


# ---------------------------------------------------------------- responses


@dataclass
class AllLabels:
    probability: float = _number()
    risk_description: str = _text()
    risk_detail: dict[str, Any] = _mapping()
    risk_label1: str = _text()
    risk_label2: str = _text()
    risk_label3: str = _text()
    risk_level: str = _text()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> AllLabels:
        """Build from a decoded JSON object."""
        return _decode(cls, data)


@dataclass
class BusinessLabels:
    business_description: str = _text()
    business_detail: dict[str, Any] = _mapping()
    business_label1: str = _text()
    business_label2: str = _text()
    business_label3: str = _text()
    confidence_level: int = _integer()
    probability: float = _number()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> BusinessLabels:
        """Build from a decoded JSON object."""
        return _decode(cls, data)


@dataclass
class PublicLongResponse:
    request_id: str = _text()
    code: int = _integer()
    message: str = _text()
    risk_level: str = _text()
    risk_label1: str = _text()
    risk_label2: str = _text()
    risk_label3: str = _text()
    risk_description: str = _text()
    risk_detail: dict[str, Any] = _mapping()
    aux_info: dict[str, Any] = _mapping()
    all_labels: list[AllLabels] = _records(AllLabels)
    business_labels: list[BusinessLabels] = _records(BusinessLabels)
    token_labels: dict[str, Any] = _mapping()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> PublicLongResponse:
        """Build from a decoded JSON object."""
        return _decode(cls, data)


@dataclass
class PublicShortResponse:
    request_id: str = _text()
    code: int = _integer()
    message: str = _text()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> PublicShortResponse:
        """Build from a decoded JSON object."""
        return _decode(cls, data)


@dataclass
class VideoFileResponse:
    request_id: str = _text()
    code: int = _integer()
    message: str = _text()
    bt_id: str = _text()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> VideoFileResponse:
        """Build from a decoded JSON object."""
        return _decode(cls, data)


@dataclass
class AudioStreamResponseDetail:
    errorcode: int = _integer()
    dup_request_id: str = _text()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> AudioStreamResponseDetail:
        """Build from a decoded JSON object."""
        return _decode(cls, data)


@dataclass
class AudioStreamResponse:
    request_id: str = _text()
    code: int = _integer()
    message: str = _text()
    detail: AudioStreamResponseDetail = _nested(AudioStreamResponseDetail)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> AudioStreamResponse:
        """Build from a decoded JSON object."""
        return _decode(cls, data)


@dataclass
class VoiceFileDetail:
    audio_detail: list[dict[str, Any]] = _mappings()
    audio_tags: dict[str, Any] = _mapping()
    audio_text: str = _text()
    audio_time: int = _integer()
    code: int = _integer()
    request_params: dict[str, Any] = _mapping()
    risk_level: str = _text()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> VoiceFileDetail:
        """Build from a decoded JSON object."""
        return _decode(cls, data)


@dataclass
class VoiceFileResponse:
    code: int = _integer()
    message: str = _text()
    request_id: str = _text()
    bt_id: str = _text()
    detail: VoiceFileDetail = _nested(VoiceFileDetail)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> VoiceFileResponse:
        """Build from a decoded JSON object."""
        return _decode(cls, data)


@dataclass
class CloseStreamResponse:
    code: int = _integer()
    message: str = _text()
    request_id: str = _text()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> CloseStreamResponse:
        """Build from a decoded JSON object."""
        return _decode(cls, data)


@dataclass
class TianWangResponse:
    code: int = _integer()
    message: str = _text()
    request_id: str = _text()
    risk_level: str = _text()
    detail: dict[str, Any] = _mapping()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> TianWangResponse:
        """Build from a decoded JSON object."""
        return _decode(cls, data)