"""
AI 账单信息提取服务

- 语音识别文本 -> 单条账单字段（文本模型）
- 账单图片 URL -> 多条账单字段（视觉模型）

上游为 OpenAI 兼容的 chat/completions 接口。
"""
from __future__ import annotations

import json
import re
import time
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from ..errors import UpstreamServiceError
from ..schemas.account_schemas import ParsedAccountSchema
from ..utils.logging_utils import get_logger, performance_logger

logger = get_logger("ai")

VOICE_SYSTEM_PROMPT = """你是一个专业的账单信息提取助手。请从用户的语音描述中提取账单信息，返回JSON格式数据。

提取规则：
1. 客户姓名：识别"客户"、"姓名"、"买了"、"购买了"等关键词后的名字
2. 联系电话：识别11位手机号，格式如 13812345678
3. 金额：识别"元"、"块钱"前的数字
4. 商品描述：提取购买的物品和数量
5. 付款状态：识别"已付"、"未付"、"欠"等关键词
6. 日期：识别交易日期，格式 YYYY-MM-DD

返回JSON格式，如果某个字段无法识别，不要包含该字段。
示例输入："老刘今天买了20包饲料，客户姓名是老刘，联系电话是13986707070，金额是1200元，未付款"
示例输出：
{
  "customer_name": "老刘",
  "phone": "13986707070",
  "amount": 1200,
  "item_description": "买了20包饲料",
  "is_paid": false
}"""

IMAGE_SYSTEM_PROMPT = """你是一个专业的账单图片识别助手。请从图片中识别所有账单信息，返回JSON数组格式。

识别规则：
1. 识别图片中的每一行账单记录
2. 提取：客户姓名、联系电话、金额、商品描述、付款状态、日期
3. 如果图片中有多条账单记录，返回数组
4. 如果某个字段无法识别，不要包含该字段
5. 金额：提取数字，不要包含货币符号
6. 付款状态：识别是否已付款
7. 日期：识别交易日期，格式 YYYY-MM-DD

返回JSON数组格式，如果图片中有多条记录，返回多条记录。
示例输出：
[
  {
    "customer_name": "老刘",
    "phone": "13986707070",
    "amount": 1200,
    "item_description": "20包饲料",
    "is_paid": false,
    "account_date": "2025-10-15"
  },
  {
    "customer_name": "老孔",
    "phone": "13986202020",
    "amount": 1500,
    "item_description": "20包饲料",
    "is_paid": true,
    "account_date": "2025-10-15"
  }
]"""

IMAGE_USER_PROMPT = "请识别这张图片中的所有账单信息。"

_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def _normalize_record(raw: Any) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        return {}
    try:
        return ParsedAccountSchema(**raw).model_dump(exclude_none=True)
    except ValidationError as e:
        logger.warning(f"Dropping unparseable fields from AI result: {e.errors()}")
        return {k: v for k, v in raw.items() if k in ParsedAccountSchema.model_fields and isinstance(v, str)}


class AIService:
    """大模型账单字段提取"""

    def __init__(
        self,
        api_key: str,
        model_base_url: str,
        text_model: str,
        vision_model: str,
        temperature: float = 0.2,
        timeout: int = 60,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = (api_key or "").strip()
        self.url = f"{model_base_url.rstrip('/')}/v1/chat/completions"
        self.text_model = text_model
        self.vision_model = vision_model
        self.temperature = temperature
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config) -> "AIService":
        return cls(
            api_key=config.get("AI_API_KEY", ""),
            model_base_url=config.get("AI_MODEL_BASE_URL", ""),
            text_model=config.get("LLM_TEXT_MODEL", ""),
            vision_model=config.get("LLM_VISION_MODEL", ""),
            temperature=config.get("LLM_TEMPERATURE", 0.2),
            timeout=config.get("AI_REQUEST_TIMEOUT", 60),
        )

    def _invoke(self, messages: List[Dict[str, Any]], model: str) -> str:
        if not self.api_key:
            raise UpstreamServiceError("AI 解析需配置 AI_API_KEY", status_code=503)
        start = time.perf_counter()
        response = self.session.post(
            self.url,
            json={"model": model, "messages": messages, "temperature": self.temperature},
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
        )
        performance_logger.log_upstream_call(
            "llm", model, (time.perf_counter() - start) * 1000, response.status_code
        )
        response.raise_for_status()
        return response.json()["choices"][0]["message"]["content"] or ""

    def parse_voice_to_account(self, text: str) -> Dict[str, Any]:
        """从语音文本中提取结构化账单信息"""
        messages = [
            {"role": "system", "content": VOICE_SYSTEM_PROMPT},
            {"role": "user", "content": text},
        ]
        try:
            content = self._invoke(messages, self.text_model)
            match = _OBJECT_RE.search(content)
            if not match:
                logger.error(f"无法解析 AI 响应: {content}")
                return {}
            parsed = _normalize_record(json.loads(match.group(0)))
        except UpstreamServiceError:
            raise
        except (requests.RequestException, ValueError, KeyError, IndexError) as e:
            logger.error(f"语音解析失败: {e}")
            raise UpstreamServiceError("语音解析失败，请重试")

        logger.info(f"AI 提取结果: {parsed}")
        return parsed

    def parse_image_to_accounts(self, image_url: str) -> List[Dict[str, Any]]:
        """从图片中识别账单信息"""
        messages = [
            {"role": "system", "content": IMAGE_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": IMAGE_USER_PROMPT},
                    {"type": "image_url", "image_url": {"url": image_url, "detail": "high"}},
                ],
            },
        ]
        try:
            content = self._invoke(messages, self.vision_model)
            match = _ARRAY_RE.search(content)
            if not match:
                logger.error(f"无法解析 AI 响应: {content}")
                return []
            raw = json.loads(match.group(0))
            raw_list = raw if isinstance(raw, list) else []
            # 非对象元素或无可用字段的记录直接丢弃
            parsed = [r for r in map(_normalize_record, raw_list) if r]
        except UpstreamServiceError:
            raise
        except (requests.RequestException, ValueError, KeyError, IndexError) as e:
            logger.error(f"图片识别失败: {e}")
            raise UpstreamServiceError("图片识别失败，请重试")

        logger.info(f"AI 图片识别结果: {parsed}")
        return parsed
