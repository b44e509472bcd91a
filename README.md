# shumeiclient

A Python client for the Shumei content moderation and risk-control HTTP API.
It sends image, multi-image, text, voice-file, video-file, audio-stream and
video-stream checks. It can also close stream checks and report risk events
(TianWang).

## Installation

```
pip install shumeiclient
```

## Configuration

`ShumeiConfig` (in `shumeiclient.config`) holds the following:

- the app id and access key;
- the CDN URL;
- the user token prefix;
- the callback domain;
- a `ShumeiUrl` with the service endpoints;
- a `CallBackUrl` with the default callback URLs.

Each of these classes has a `from_dict` classmethod that reads a decoded JSON
or YAML object. Keys are the camel-cased field names, matched
case-insensitively. Missing keys are left empty.

```python
from shumeiclient.config import ShumeiConfig
from shumeiclient.client import new_shumei_client

config = ShumeiConfig.from_dict({
    "appid": "default",
    "accessKey": "placeholder",
    "cdnUrl": "https://cdn.example.com",
    "tokenPrefix": "app_",
    "callBackDomain": "https://hooks.example.com",
    "shumeiUrl": {
        "imageUrl": "https://image.example.com/image/v4",
        "textUrl": "https://text.example.com/text/v4",
    },
    "callBackUrl": {
        "imageCallBackUrl": "https://hooks.example.com/shumei/image",
    },
})

client = new_shumei_client(config)
```

`ShuMei.from_config(config)` does the same. You can also call the `ShuMei`
constructor directly. It takes `app_id` and `access_key`, and these keyword
arguments:

- `token_prefix`, `cdn_url` and `callback_domain`;
- `urls` and `callback_urls`;
- `default_image_type`, `default_text_type`, `default_voice_type` and `default_video_type`;
- `session`, a `requests.Session` of your own.

If you leave the default types empty, they are:

| Content | Default type |
| --- | --- |
| Image | `POLITICS_PORN_AD` |
| Text | `AD` |
| Voice | `PORN_MOAN_AD` |
| Video | `POLITY_EROTIC_ADVERT` |

Without a session, the client uses a shared one made by `new_session()`.

## Checking content

Request parameters are dataclasses in `shumeiclient.models`:

- `ShumeiImage`, `ShumeiMultiImage` and `ShumeiText`;
- `ShumeiVoiceFile` and `ShumeiAsyncVideoFile`;
- `ShumeiAsyncAudioStream` and `ShumeiAsyncVideoStream`;
- `TianWangParams`.

```python
from shumeiclient.models import ShumeiImage, ShumeiText

ok, result = client.text(ShumeiText(text="hello", user_id="42"))
if not ok:
    print("rejected:", result.risk_level, result.risk_description)

ok, result = client.image(ShumeiImage(image_url="avatars/42.png", user_id="42"))
```

Rules applied to every request:

- A resource URL that does not start with `http://` or `https://` is joined onto the CDN URL.
- A non-empty user id gets the token prefix unless it already starts with it.
- An unsupported language falls back to a default: `zh` for image, video and voice checks, and `auto` for text.
- A callback path that is not absolute is joined onto the callback domain. `handle_callback_url` exposes this rule.
- Empty event ids default to `IMAGE` for images, `text` for text, and `default` for everything else.

### Return values

- `image`, `text` and `voice_file` return `(passed, response)`.
  - `passed` is `False` only when the service answered code 1100 with risk level `REJECT`.
  - When the HTTP request fails, they return `(True, None)`.
- `multi_image` and `async_video_file` return `(accepted, response)`.
  - When the code is not 1100, they return `(False, response)`.
  - When the request fails, they return `(False, None)`.
  - `multi_image` sends a `btId` for each image: the MD5 hex digest of its URL without the first 8 characters. It also passes the map from these ids to the URLs through as `btIdMap`.
- `async_voice_file` returns `True` only when the service answered 1100.
- `audio_stream` and `video_stream` return `(True, response)` only when the code is 1100 and `detail.errorcode` is 0. Otherwise they return `(False, None)`.
- `close_stream_check(request_id, ltype)` posts to the video or voice close endpoint, for `ltype` `"video"` or `"voice"`.
  - It returns `(True, response)` whenever the request goes through.
  - It returns `(False, None)` when the request fails.
- `tian_wang(params)` reports an event. It returns the decoded JSON object, or `None` when the body is not a JSON object or the request fails.

`send(url, body, response_type)` is the underlying call. It POSTs JSON with a
3-second timeout and decodes the reply into `response_type`, or into a plain
dict when `response_type` is `None`. Transport errors raise
`requests.RequestException`.

Failures are logged through the standard `logging` module under the
`shumeiclient.client` logger.

## Helpers

- `shumeiclient.common.new_session()` returns a `requests.Session` that sends and accepts JSON and has a connection pool of 100.
- `shumeiclient.common.rand_str(length)` returns a random alphanumeric string. A negative length raises `ValueError`.

## What this package does not do

The package only sends requests. It has no server or endpoint for the
callbacks the service makes: receiving and handling callback results is up to
your own application. There is no command-line tool.