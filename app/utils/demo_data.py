"""演示账单数据生成（Faker zh_CN），供 `flask seed-accounts` 与 scripts/seed_data.py 使用。"""
from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from faker import Faker

ITEMS = ["饲料", "化肥", "种子", "农药", "玉米", "豆粕", "麸皮", "兽药"]
UNITS = ["包", "袋", "箱", "斤"]


def generate_accounts(count: int = 20, days: int = 30, seed: Optional[int] = None) -> List[Dict[str, Any]]:
    """生成 count 条账单字段字典，日期分布在最近 days 天内。"""
    fake = Faker("zh_CN")
    rnd = random.Random(seed)
    if seed is not None:
        fake.seed_instance(seed)
    today = date.today()
    records: List[Dict[str, Any]] = []
    for _ in range(count):
        qty = rnd.randint(1, 50)
        unit_price = rnd.choice([30, 45, 60, 80, 120])
        records.append(
            {
                "customer_name": fake.name(),
                "phone": fake.phone_number(),
                "amount": float(qty * unit_price),
                "is_paid": rnd.random() < 0.6,
                "item_description": f"{qty}{rnd.choice(UNITS)}{rnd.choice(ITEMS)}",
                "account_date": (today - timedelta(days=rnd.randint(0, max(days - 1, 0)))).isoformat(),
            }
        )
    return records
