from __future__ import annotations
import pytest
import requests
from app.errors import UpstreamServiceError
from app.services.speech_service import SpeechRecognitionService


def _service(session, **kwargs):
    params = dict(api_key="k", base_url="http://asr.test/", backoff=0, session=session)
    params.update(kwargs)
    return SpeechRecognitionService(**params)


def test_busy_upstream_is_retried_then_succeeds(fake_session, fake_response):
    session = fake_session(
        fake_response(503),
        fake_response(200, {"data": {"text": "老刘买了20包饲料", "duration": 3.2}}),
    )
    result = _service(session).recognize(audio_url="http://host/api/upload/audio-temp/temp-1-a")
    assert result == {"text": "老刘买了20包饲料", "duration": 3.2}
    assert len(session.calls) == 2
    url, kwargs = session.calls[0]
    assert url == "http://asr.test/v1/audio/recognize"
    assert kwargs["json"] == {"url": "http://host/api/upload/audio-temp/temp-1-a"}
    assert kwargs["headers"]["Authorization"] == "Bearer k"


def test_busy_upstream_gives_up_after_max_attempts(fake_session, fake_response):
    session = fake_session(*(fake_response(503) for _ in range(3)))
    with pytest.raises(UpstreamServiceError) as excinfo:
        _service(session, max_attempts=3).recognize(audio_base64="UklGRg==")
    assert excinfo.value.status_code == 503
    assert len(session.calls) == 3


def test_other_upstream_errors_are_not_retried(fake_session, fake_response):
    session = fake_session(fake_response(500), fake_response(200, {"text": "unused"}))
    with pytest.raises(UpstreamServiceError) as excinfo:
        _service(session).recognize(audio_base64="UklGRg==")
    assert excinfo.value.status_code == 400
    assert len(session.calls) == 1


def test_connection_error_maps_to_upstream_error(fake_session):
    session = fake_session(requests.ConnectionError("refused"))
    with pytest.raises(UpstreamServiceError):
        _service(session).recognize(audio_url="http://host/a")


def test_inline_audio_preferred_over_url(fake_session, fake_response):
    session = fake_session(fake_response(200, {"text": "hi"}))
    result = _service(session).recognize(audio_url="http://host/a", audio_base64="UklGRg==")
    assert result["text"] == "hi"
    assert session.calls[0][1]["json"] == {"base64_data": "UklGRg=="}


def test_trace_headers_forwarded(fake_session, fake_response):
    session = fake_session(fake_response(200, {"text": "hi"}))
    _service(session).recognize(
        audio_url="http://host/a",
        headers={"X-Request-Id": "abc", "X-Tt-Logid": "log-1", "Cookie": "secret"},
    )
    headers = session.calls[0][1]["headers"]
    assert headers["x-request-id"] == "abc"
    assert headers["x-tt-logid"] == "log-1"
    assert "Cookie" not in headers and "cookie" not in headers


def test_missing_input_and_missing_key(fake_session):
    with pytest.raises(ValueError):
        _service(fake_session()).recognize()
    with pytest.raises(UpstreamServiceError) as excinfo:
        _service(fake_session(), api_key="").recognize(audio_url="http://host/a")
    assert excinfo.value.status_code == 503


def test_recognize_endpoint(client, monkeypatch, fake_session, fake_response):
    session = fake_session(fake_response(503), fake_response(200, {"data": {"text": "未付款"}}))
    monkeypatch.setattr(
        SpeechRecognitionService, "from_config", classmethod(lambda cls, config: _service(session))
    )
    rv = client.post("/api/asr/recognize", json={"audioUrl": "http://host/a"})
    assert rv.status_code == 200
    assert rv.get_json() == {"code": 200, "msg": "success", "data": {"text": "未付款", "duration": None}}


def test_recognize_endpoint_errors(client, monkeypatch, fake_session, fake_response):
    rv = client.post("/api/asr/recognize", json={})
    assert rv.status_code == 400
    assert rv.get_json()["msg"] == "请提供 audioUrl 或 audioBase64"

    session = fake_session(*(fake_response(503) for _ in range(3)))
    monkeypatch.setattr(
        SpeechRecognitionService, "from_config", classmethod(lambda cls, config: _service(session))
    )
    rv2 = client.post("/api/asr/recognize", json={"audioBase64": "UklGRg=="})
    assert rv2.status_code == 503
    assert rv2.get_json() == {"code": 503, "msg": "服务繁忙，请稍后重试", "data": None}


def test_malformed_upstream_body_is_upstream_error(fake_session, fake_response):
    for payload in ({"code": 0, "data": None}, ["text"]):
        session = fake_session(fake_response(200, payload))
        with pytest.raises(UpstreamServiceError) as excinfo:
            _service(session).recognize(audio_url="http://host/a")
        assert excinfo.value.status_code == 400
        assert str(excinfo.value).startswith("语音识别失败")
