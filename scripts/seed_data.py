"""示例账单数据脚本。

用法示例：
  python scripts/seed_data.py seed --count 50 --days 60 --seed 7
  python scripts/seed_data.py clear
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))
os.chdir(ROOT)

from app import create_app  # noqa: E402
from app.extensions import db  # noqa: E402
from app.models import Account  # noqa: E402
from app.utils.demo_data import generate_accounts  # noqa: E402


def seed(count: int, days: int, seed_value: int | None) -> int:
    records = generate_accounts(count=count, days=days, seed=seed_value)
    db.session.add_all([Account(**r) for r in records])
    db.session.commit()
    return len(records)


def clear() -> int:
    n = db.session.query(Account).delete()
    db.session.commit()
    return n


def main() -> None:
    parser = argparse.ArgumentParser(description="账单示例数据")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_seed = sub.add_parser("seed", help="写入演示账单")
    p_seed.add_argument("--count", type=int, default=20)
    p_seed.add_argument("--days", type=int, default=30)
    p_seed.add_argument("--seed", type=int, default=None)

    sub.add_parser("clear", help="清空全部账单")

    args = parser.parse_args()
    app = create_app()
    with app.app_context():
        if args.cmd == "seed":
            print(f"已写入 {seed(args.count, args.days, args.seed)} 条演示账单")
        elif args.cmd == "clear":
            print(f"已删除 {clear()} 条账单")


if __name__ == "__main__":
    main()
