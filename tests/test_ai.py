from __future__ import annotations
import json
import pytest
from app.errors import UpstreamServiceError
from app.services.ai_service import AIService


def _completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _service(session, api_key="k"):
    return AIService(
        api_key=api_key,
        model_base_url="http://llm.test",
        text_model="text-model",
        vision_model="vision-model",
        session=session,
    )


def test_voice_result_extracted_from_chatty_reply(fake_session, fake_response):
    reply = '好的，提取结果如下：\n{"customer_name": "老刘", "phone": 13986707070, "amount": "1,200元", "item_description": "买了20包饲料", "is_paid": "已付款"}\n以上。'
    session = fake_session(fake_response(200, _completion(reply)))
    result = _service(session).parse_voice_to_account("老刘买了20包饲料")
    assert result == {
        "customer_name": "老刘",
        "phone": "13986707070",
        "amount": 1200.0,
        "item_description": "买了20包饲料",
        "is_paid": True,
    }
    url, kwargs = session.calls[0]
    assert url == "http://llm.test/v1/chat/completions"
    assert kwargs["json"]["model"] == "text-model"
    assert kwargs["json"]["messages"][1] == {"role": "user", "content": "老刘买了20包饲料"}


def test_voice_result_without_json_is_empty(fake_session, fake_response):
    session = fake_session(fake_response(200, _completion("抱歉，我没听清。")))
    assert _service(session).parse_voice_to_account("嗯") == {}


def test_voice_upstream_failure(fake_session, fake_response):
    session = fake_session(fake_response(500))
    with pytest.raises(UpstreamServiceError) as excinfo:
        _service(session).parse_voice_to_account("老刘")
    assert excinfo.value.status_code == 502
    assert str(excinfo.value) == "语音解析失败，请重试"


def test_missing_key_is_service_unavailable(fake_session):
    session = fake_session()
    with pytest.raises(UpstreamServiceError) as excinfo:
        _service(session, api_key="").parse_image_to_accounts("http://host/img.png")
    assert excinfo.value.status_code == 503
    assert session.calls == []


def test_image_result_lists_every_record(fake_session, fake_response):
    records = [
        {"customer_name": "老刘", "amount": 1200, "is_paid": False, "account_date": "2025-10-15"},
        {"customer_name": "老孔", "amount": 1500, "is_paid": "true"},
    ]
    session = fake_session(fake_response(200, _completion("```json\n" + json.dumps(records, ensure_ascii=False) + "\n```")))
    result = _service(session).parse_image_to_accounts("http://host/api/upload/image-temp/img-1-a")
    assert result == [
        {"customer_name": "老刘", "amount": 1200.0, "is_paid": False, "account_date": "2025-10-15"},
        {"customer_name": "老孔", "amount": 1500.0, "is_paid": True},
    ]
    body = session.calls[0][1]["json"]
    assert body["model"] == "vision-model"
    image_part = body["messages"][1]["content"][1]
    assert image_part["image_url"]["url"] == "http://host/api/upload/image-temp/img-1-a"


def test_image_result_without_array_is_empty(fake_session, fake_response):
    session = fake_session(fake_response(200, _completion("图片里没有账单")))
    assert _service(session).parse_image_to_accounts("http://host/img.png") == []


def test_image_malformed_json_is_upstream_error(fake_session, fake_response):
    session = fake_session(fake_response(200, _completion("[{customer_name: 老刘}]")))
    with pytest.raises(UpstreamServiceError) as excinfo:
        _service(session).parse_image_to_accounts("http://host/img.png")
    assert str(excinfo.value) == "图片识别失败，请重试"


def test_parse_endpoints_require_input(client):
    rv = client.post("/api/ai/parse-voice", json={"text": "  "})
    assert rv.status_code == 400
    assert rv.get_json()["msg"] == "缺少 text"
    rv2 = client.post("/api/ai/parse-image", json={})
    assert rv2.status_code == 400
    assert rv2.get_json()["msg"] == "缺少 imageUrl"


def test_parse_voice_endpoint(client, monkeypatch, fake_session, fake_response):
    session = fake_session(fake_response(200, _completion('{"customer_name": "老孔", "is_paid": false}')))
    monkeypatch.setattr(AIService, "from_config", classmethod(lambda cls, config: _service(session)))
    rv = client.post("/api/ai/parse-voice", json={"text": "老孔没付钱"})
    assert rv.status_code == 200
    assert rv.get_json()["data"] == {"customer_name": "老孔", "is_paid": False}


def test_parse_image_endpoint_upstream_error(client, monkeypatch, fake_session, fake_response):
    session = fake_session(fake_response(502))
    monkeypatch.setattr(AIService, "from_config", classmethod(lambda cls, config: _service(session)))
    rv = client.post("/api/ai/parse-image", json={"imageUrl": "http://host/img.png"})
    assert rv.status_code == 502
    assert rv.get_json() == {"code": 502, "msg": "图片识别失败，请重试", "data": None}


def test_image_result_skips_non_object_entries(fake_session, fake_response):
    reply = '[{"customer_name": "老刘", "amount": 1200}, "老孔", 42, null, {}]'
    session = fake_session(fake_response(200, _completion(reply)))
    assert _service(session).parse_image_to_accounts("http://host/img.png") == [
        {"customer_name": "老刘", "amount": 1200.0}
    ]
