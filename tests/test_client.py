import hashlib
import json

import pytest
import requests
import responses

from shumeiclient.client import ShuMei, new_shumei_client
from shumeiclient.config import CallBackUrl, ShumeiConfig, ShumeiUrl
from shumeiclient.models import (
    ShumeiAsyncAudioStream,
    ShumeiAsyncVideoFile,
    ShumeiAsyncVideoStream,
    ShumeiImage,
    ShumeiMultiImage,
    ShumeiText,
    ShumeiVoiceFile,
    TianWangParams,
)

API = "https://api.example.com"

URLS = ShumeiUrl(
    video_stream_close_url=f"{API}/videostream/close",
    voice_stream_close_url=f"{API}/audiostream/close",
    image_url=f"{API}/image",
    multi_image_url=f"{API}/images",
    text_url=f"{API}/text",
    voice_url=f"{API}/audiomessage",
    async_voice_url=f"{API}/audio",
    async_video_url=f"{API}/video",
    voice_stream_url=f"{API}/audiostream",
    video_stream_url=f"{API}/videostream",
)

CALLBACKS = CallBackUrl(
    image_call_back_url="https://cb.example.com/image",
    multi_image_call_back_url="https://cb.example.com/images",
    voice_call_back_url="https://cb.example.com/voice",
    video_call_back_url="https://cb.example.com/video",
)


@pytest.fixture
def client():
    return ShuMei(
        "app",
        "placeholder",
        token_prefix="u_",
        cdn_url="https://cdn.example.com",
        callback_domain="https://cb.example.com",
        urls=URLS,
        callback_urls=CALLBACKS,
    )


@pytest.fixture
def rsps():
    with responses.RequestsMock() as mock:
        yield mock


def body_of(rsps, index=0):
    return json.loads(rsps.calls[index].request.body)


def test_defaults_applied():
    c = ShuMei("app", "placeholder")
    assert c.default_image_type == "POLITICS_PORN_AD"
    assert c.default_text_type == "AD"
    assert c.default_voice_type == "PORN_MOAN_AD"
    assert c.default_video_type == "POLITY_EROTIC_ADVERT"


def test_explicit_types_kept():
    c = ShuMei("app", "placeholder", default_image_type="PORN", default_text_type="ABUSE")
    assert (c.default_image_type, c.default_text_type) == ("PORN", "ABUSE")


def test_new_shumei_client_from_config():
    config = ShumeiConfig(
        app_id="app",
        access_key="placeholder",
        cdn_url="https://cdn.example.com",
        token_prefix="p_",
        callback_domain="https://cb.example.com",
        shumei_url=URLS,
        callback_url=CALLBACKS,
    )
    c = new_shumei_client(config)
    assert c.app_id == "app"
    assert c.access_key == "placeholder"
    assert c.token_prefix == "p_"
    assert c.cdn_url == "https://cdn.example.com"
    assert c.callback_domain == "https://cb.example.com"
    assert c.urls == URLS
    assert c.callback_urls == CALLBACKS


@pytest.mark.parametrize(
    "url, expected",
    [
        ("", ""),
        ("http://other.example.com/x", "http://other.example.com/x"),
        ("https://other.example.com/x", "https://other.example.com/x"),
        ("hook/image", "https://cb.example.com/hook/image"),
        ("/hook/image", "https://cb.example.com/hook/image"),
        ("hook/", "https://cb.example.com/hook/"),
    ],
)
def test_handle_callback_url(client, url, expected):
    assert client.handle_callback_url(url) == expected


def test_handle_callback_url_with_base_path():
    c = ShuMei("app", "placeholder", callback_domain="https://cb.example.com/api/")
    assert c.handle_callback_url("/hook") == "https://cb.example.com/api/hook"
    assert c.handle_callback_url("../hook") == "https://cb.example.com/hook"


def test_image_reject(client, rsps):
    rsps.add(responses.POST, URLS.image_url, json={"code": 1100, "riskLevel": "REJECT", "requestId": "r1"})
    ok, res = client.image(ShumeiImage(image_url="a/b.jpg", user_id="42", lang="xx", ip="1.2.3.4"))
    assert ok is False
    assert res.request_id == "r1"
    body = body_of(rsps)
    assert body["type"] == "POLITICS_PORN_AD"
    assert body["eventId"] == "IMAGE"
    assert body["businessType"] == "FACE"
    assert body["accessKey"] == "placeholder"
    assert body["data"]["img"] == "https://cdn.example.com/a/b.jpg"
    assert body["data"]["tokenId"] == "u_42"
    assert body["data"]["receiveTokenId"] == ""
    assert body["data"]["lang"] == "zh"
    assert body["data"]["ip"] == "1.2.3.4"
    assert "callback" not in body


def test_image_pass_and_callback(client, rsps):
    rsps.add(responses.POST, URLS.image_url, json={"code": 1100, "riskLevel": "PASS"})
    ok, res = client.image(
        ShumeiImage(image_url="https://x.example.com/i.png", user_id="u_7", need_call_back=True)
    )
    assert ok is True
    assert res.risk_level == "PASS"
    body = body_of(rsps)
    assert body["callback"] == "https://cb.example.com/image"
    assert body["data"]["img"] == "https://x.example.com/i.png"
    assert body["data"]["tokenId"] == "u_7"
    assert "ip" not in body["data"]


def test_image_custom_callback(client, rsps):
    rsps.add(responses.POST, URLS.image_url, json={"code": 1100})
    client.image(ShumeiImage(image_url="i.png", need_call_back=True, call_back_url="custom"))
    assert body_of(rsps)["callback"] == "https://cb.example.com/custom"


def test_image_reject_ignored_on_other_code(client, rsps):
    rsps.add(responses.POST, URLS.image_url, json={"code": 1902, "riskLevel": "REJECT"})
    ok, res = client.image(ShumeiImage(image_url="i.png"))
    assert ok is True
    assert res.code == 1902


def test_image_transport_error(client, rsps):
    rsps.add(responses.POST, URLS.image_url, body=requests.exceptions.ConnectionError("down"))
    assert client.image(ShumeiImage(image_url="i.png")) == (True, None)


def test_multi_image(client, rsps):
    rsps.add(responses.POST, URLS.multi_image_url, json={"code": 1100, "requestId": "m"})
    ok, res = client.multi_image(
        ShumeiMultiImage(image_urls=["a.jpg", "https://x.example.com/b.jpg"], through_params={"k": 1})
    )
    assert ok is True
    assert res.request_id == "m"
    data = body_of(rsps)["data"]
    first, second = data["imgs"]
    assert first["img"] == "https://cdn.example.com/a.jpg"
    assert second["img"] == "https://x.example.com/b.jpg"
    assert first["btId"] == hashlib.md5(b"a.jpg").hexdigest()[8:]
    assert len(second["btId"]) == 24
    through = data["extra"]["passThrough"]
    assert through["k"] == 1
    assert through["btIdMap"] == {first["btId"]: "a.jpg", second["btId"]: "https://x.example.com/b.jpg"}
    assert body_of(rsps)["businessType"] == "FACE"


def test_multi_image_failure_code(client, rsps):
    rsps.add(responses.POST, URLS.multi_image_url, json={"code": 1901, "message": "bad"})
    ok, res = client.multi_image(ShumeiMultiImage(image_urls=["a.jpg"]))
    assert ok is False
    assert res.message == "bad"


def test_multi_image_transport_error(client, rsps):
    rsps.add(responses.POST, URLS.multi_image_url, body=requests.exceptions.ConnectionError("down"))
    assert client.multi_image(ShumeiMultiImage(image_urls=["a.jpg"])) == (False, None)


def test_text_defaults(client, rsps):
    rsps.add(responses.POST, URLS.text_url, json={"code": 1100, "riskLevel": "PASS"})
    ok, _ = client.text(ShumeiText(text="hello", user_id="9", lang="xx"))
    assert ok is True
    body = body_of(rsps)
    assert body["type"] == "AD"
    assert body["eventId"] == "text"
    assert body["data"]["lang"] == "auto"
    assert body["data"]["tokenId"] == "u_9"
    assert "extra" not in body["data"]


def test_text_message_reject(client, rsps):
    rsps.add(responses.POST, URLS.text_url, json={"code": 1100, "riskLevel": "REJECT"})
    ok, res = client.text(ShumeiText(text="x", event_id="message", receive_token_id="5", lang="ja"))
    assert ok is False
    assert res.risk_level == "REJECT"
    data = body_of(rsps)["data"]
    assert data["extra"] == {"receiveTokenId": "u_5"}
    assert data["lang"] == "ja"


def test_voice_file_reject(client, rsps):
    rsps.add(
        responses.POST,
        URLS.voice_url,
        json={"code": 1100, "detail": {"riskLevel": "REJECT", "audioText": "hi"}},
    )
    ok, res = client.voice_file(ShumeiVoiceFile(voice_url="v.mp3", user_id="1"))
    assert ok is False
    assert res.detail.audio_text == "hi"
    body = body_of(rsps)
    assert body["content"] == "https://cdn.example.com/v.mp3"
    assert body["contentType"] == "URL"
    assert body["eventId"] == "default"
    assert body["type"] == "PORN_MOAN_AD"
    assert len(body["btId"]) == 16


def test_async_voice_file(client, rsps):
    rsps.add(responses.POST, URLS.async_voice_url, json={"code": 1100})
    assert client.async_voice_file(ShumeiVoiceFile(voice_url="v.mp3", lang="ko", callback_params={"a": 1}))
    body = body_of(rsps)
    assert body["callback"] == "https://cb.example.com/voice"
    assert body["data"]["lang"] == "ko"
    assert body["data"]["passThrough"] == {"a": 1}


def test_async_voice_file_custom_callback_and_failure(client, rsps):
    rsps.add(responses.POST, URLS.async_voice_url, json={"code": 1902})
    assert client.async_voice_file(ShumeiVoiceFile(voice_url="v.mp3", callback_url="cb", lang="auto")) is False
    body = body_of(rsps)
    assert body["callback"] == "https://cb.example.com/cb"
    assert body["data"]["lang"] == "zh"


def test_async_video_file(client, rsps):
    rsps.add(responses.POST, URLS.async_video_url, json={"code": 1100, "btId": "b"})
    ok, res = client.async_video_file(ShumeiAsyncVideoFile(video_url="v.mp4"))
    assert ok is True
    assert res.bt_id == "b"
    body = body_of(rsps)
    assert body["imgType"] == "POLITY_EROTIC_ADVERT"
    assert body["audioType"] == "PORN_MOAN_AD"
    assert body["callback"] == "https://cb.example.com/video"
    assert body["data"]["url"] == "https://cdn.example.com/v.mp4"


def test_async_video_file_failure(client, rsps):
    rsps.add(responses.POST, URLS.async_video_url, json={"code": 1901})
    ok, res = client.async_video_file(ShumeiAsyncVideoFile(video_url="v.mp4"))
    assert ok is False
    assert res.code == 1901


def test_audio_stream(client, rsps):
    rsps.add(responses.POST, URLS.voice_stream_url, json={"code": 1100, "detail": {"errorcode": 0}})
    ok, res = client.audio_stream(
        ShumeiAsyncAudioStream(
            rtc_params={"zegoParam": {"roomId": "r"}, "room": "override"},
            stream_type="ZEGO",
            room_id="room1",
            callback="audio",
        )
    )
    assert ok is True
    assert res.code == 1100
    body = body_of(rsps)
    assert "businessType" not in body
    assert body["callback"] == "https://cb.example.com/audio"
    assert body["type"] == "PORN_MOAN_AD"
    assert body["data"]["room"] == "override"
    assert body["data"]["zegoParam"] == {"roomId": "r"}
    assert body["data"]["streamType"] == "ZEGO"


def test_audio_stream_error_code(client, rsps):
    rsps.add(responses.POST, URLS.voice_stream_url, json={"code": 1100, "detail": {"errorcode": 1001}})
    ok, res = client.audio_stream(ShumeiAsyncAudioStream(business_type="B"))
    assert (ok, res) == (False, None)
    assert body_of(rsps)["businessType"] == "B"


def test_audio_stream_bad_code(client, rsps):
    rsps.add(responses.POST, URLS.voice_stream_url, json={"code": 9100})
    assert client.audio_stream(ShumeiAsyncAudioStream()) == (False, None)


def test_video_stream(client, rsps):
    rsps.add(responses.POST, URLS.video_stream_url, json={"code": 1100, "requestId": "s"})
    ok, res = client.video_stream(ShumeiAsyncVideoStream(detect_step=2, img_callback="img"))
    assert ok is True
    assert res.request_id == "s"
    body = body_of(rsps)
    assert body["imgType"] == "POLITY_EROTIC_ADVERT"
    assert body["audioType"] == ""
    assert body["imgCallback"] == "https://cb.example.com/img"
    assert "audioCallback" not in body
    assert "imgBusinessType" not in body
    assert body["data"]["detectStep"] == 2


def test_video_stream_without_step(client, rsps):
    rsps.add(responses.POST, URLS.video_stream_url, json={"code": 1100})
    client.video_stream(ShumeiAsyncVideoStream(img_business_type="IB", audio_business_type="AB"))
    body = body_of(rsps)
    assert "detectStep" not in body["data"]
    assert body["imgBusinessType"] == "IB"
    assert body["audioBusinessType"] == "AB"


def test_close_stream_check(client, rsps):
    rsps.add(responses.POST, URLS.video_stream_close_url, json={"code": 1100, "requestId": "c"})
    ok, res = client.close_stream_check("req", "video")
    assert ok is True
    assert res.request_id == "c"
    assert body_of(rsps) == {"accessKey": "placeholder", "requestId": "req"}


def test_close_stream_check_unknown_type(client):
    assert client.close_stream_check("req", "other") == (False, None)


def test_tian_wang(client, rsps):
    rsps.add(responses.POST, client.tian_wang_url, json={"code": 1100, "riskLevel": "PASS"})
    result = client.tian_wang(TianWangParams(event_id="register", token_id="3", channel="ios"))
    assert result == {"code": 1100, "riskLevel": "PASS"}
    body = body_of(rsps)
    assert body["eventId"] == "register"
    assert body["data"]["tokenId"] == "u_3"
    assert body["data"]["os"] == "ios"
    assert isinstance(body["data"]["timestamp"], int) and body["data"]["timestamp"] > 0


def test_tian_wang_transport_error(client, rsps):
    rsps.add(responses.POST, client.tian_wang_url, body=requests.exceptions.ConnectionError("down"))
    assert client.tian_wang(TianWangParams()) is None


def test_send_non_json_body(client, rsps):
    rsps.add(responses.POST, f"{API}/raw", body="not json")
    assert client.send(f"{API}/raw", {"a": 1}, None) is None


def test_send_typed_defaults_on_bad_body(client, rsps):
    rsps.add(responses.POST, URLS.text_url, body="oops", status=500)
    ok, res = client.text(ShumeiText(text="x"))
    assert ok is True
    assert res.code == 0