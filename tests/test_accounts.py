from __future__ import annotations
import csv
import io


def _create(client, **overrides):
    payload = {
        "customer_name": "老刘",
        "phone": "13986707070",
        "amount": 1200,
        "item_description": "买了20包饲料",
        "account_date": "2025-10-15",
    }
    payload.update(overrides)
    rv = client.post("/api/accounts", json=payload)
    assert rv.status_code == 200, rv.get_json()
    return rv.get_json()["data"]


def test_create_and_fetch_account(client):
    created = _create(client)
    assert created["id"] > 0
    assert created["is_paid"] is False
    assert created["amount"] == 1200.0

    rv = client.get(f"/api/accounts/{created['id']}")
    assert rv.status_code == 200
    body = rv.get_json()
    assert body["code"] == 200 and body["msg"] == "success"
    assert body["data"]["customer_name"] == "老刘"
    assert body["data"]["phone"] == "13986707070"


def test_create_requires_core_fields(client):
    rv = client.post("/api/accounts", json={"customer_name": "老孔"})
    assert rv.status_code == 400
    body = rv.get_json()
    assert body["code"] == 400
    fields = {err["loc"][0] for err in body["data"]}
    assert {"amount", "item_description", "account_date"} <= fields


def test_create_rejects_malformed_date(client):
    rv = client.post(
        "/api/accounts",
        json={"customer_name": "老孔", "amount": 10, "item_description": "x", "account_date": "15/10/2025"},
    )
    assert rv.status_code == 400


def test_update_only_touches_given_fields(client):
    created = _create(client)
    rv = client.put(f"/api/accounts/{created['id']}", json={"is_paid": True, "amount": "1300.50"})
    assert rv.status_code == 200
    data = rv.get_json()["data"]
    assert data["is_paid"] is True
    assert data["amount"] == 1300.5
    assert data["customer_name"] == "老刘"
    assert data["item_description"] == "买了20包饲料"


def test_missing_account_returns_404_envelope(client):
    assert client.get("/api/accounts/99999").get_json() == {"code": 404, "msg": "账单不存在", "data": None}
    assert client.put("/api/accounts/99999", json={"is_paid": True}).status_code == 404
    assert client.delete("/api/accounts/99999").status_code == 404


def test_delete_account(client):
    created = _create(client)
    rv = client.delete(f"/api/accounts/{created['id']}")
    assert rv.status_code == 200
    assert rv.get_json()["data"] is None
    assert client.get(f"/api/accounts/{created['id']}").status_code == 404


def test_list_newest_first_with_filters(client):
    a = _create(client, customer_name="老刘", account_date="2025-10-01", item_description="20包饲料")
    b = _create(client, customer_name="老孔", phone="13986202020", account_date="2025-10-15")
    c = _create(client, customer_name="王五", phone=None, account_date="2025-11-02", item_description="化肥")

    ids = [r["id"] for r in client.get("/api/accounts").get_json()["data"]]
    assert ids == [c["id"], b["id"], a["id"]]

    by_name = client.get("/api/accounts", query_string={"keyword": "老孔"}).get_json()["data"]
    assert [r["id"] for r in by_name] == [b["id"]]

    by_phone = client.get("/api/accounts", query_string={"keyword": "202020"}).get_json()["data"]
    assert [r["id"] for r in by_phone] == [b["id"]]

    by_item = client.get("/api/accounts", query_string={"keyword": "饲料"}).get_json()["data"]
    assert {r["id"] for r in by_item} == {a["id"], b["id"]}

    in_range = client.get(
        "/api/accounts", query_string={"startDate": "2025-10-01", "endDate": "2025-10-15"}
    ).get_json()["data"]
    assert {r["id"] for r in in_range} == {a["id"], b["id"]}

    blank = client.get("/api/accounts", query_string={"keyword": "", "startDate": ""}).get_json()["data"]
    assert len(blank) == 3


def test_export_csv_with_totals(client):
    _create(client, customer_name="老刘", amount=1200, is_paid=False)
    _create(client, customer_name="老孔", amount=1500, is_paid=True)

    rv = client.get("/api/accounts/export")
    assert rv.status_code == 200
    assert rv.mimetype == "text/csv"
    assert "attachment" in rv.headers["Content-Disposition"]

    text = rv.data.decode("utf-8-sig")
    rows = list(csv.reader(io.StringIO(text)))
    assert rows[0] == ["日期", "客户姓名", "联系电话", "金额", "商品描述", "付款状态", "图片"]
    assert len(rows) == 4
    assert {rows[1][5], rows[2][5]} == {"已付款", "未付款"}
    assert rows[-1][0] == "合计"
    assert rows[-1][3] == "2700.00"
    assert rows[-1][5] == "已付 1500.00 / 未付 1200.00"


def test_export_respects_keyword(client):
    _create(client, customer_name="老刘")
    _create(client, customer_name="老孔")
    rv = client.get("/api/accounts/export", query_string={"keyword": "老孔"})
    rows = list(csv.reader(io.StringIO(rv.data.decode("utf-8-sig"))))
    assert [r[1] for r in rows[1:-1]] == ["老孔"]


def test_update_rejects_null_for_required_fields(client):
    created = _create(client)
    for field in ("customer_name", "amount", "is_paid", "item_description", "account_date"):
        rv = client.put(f"/api/accounts/{created['id']}", json={field: None})
        assert rv.status_code == 400, field
        assert rv.get_json()["data"][0]["loc"] == [field]

    # 可空字段允许清空
    rv = client.put(f"/api/accounts/{created['id']}", json={"phone": None})
    assert rv.status_code == 200
    assert rv.get_json()["data"]["phone"] is None
    assert rv.get_json()["data"]["customer_name"] == "老刘"


def test_keyword_wildcards_match_literally(client):
    _create(client, customer_name="老刘", item_description="饲料")
    discounted = _create(client, customer_name="老孔", item_description="九折_50%优惠")

    for keyword in ("%", "_", "50%"):
        rows = client.get("/api/accounts", query_string={"keyword": keyword}).get_json()["data"]
        assert [r["id"] for r in rows] == [discounted["id"]], keyword
