"""
LedgerPOS - Smoke Scenarios
=============================
Runs the core checkout / loan / transfer / stats flows against a running server.

Usage:
    # serve main:app with any ASGI server, demo data seeded (SEED_DEMO_DATA=true)
    python scripts/smoke_scenarios.py [base_url]

Every scenario uses fresh carts for the manager and cashier actors, so the
script can be re-run against the same process; counts are compared as deltas.
"""
import sys
import httpx

BASE = sys.argv[1] if len(sys.argv) > 1 else "http://127.0.0.1:8000"
results = []

MANAGER = {"X-Actor-Id": "1", "X-Actor-Name": "Admin Manager", "X-Actor-Role": "manager"}
ACCOUNTANT = {"X-Actor-Id": "2", "X-Actor-Name": "Sara Aziz", "X-Actor-Role": "accountant"}
CASHIER = {"X-Actor-Id": "3", "X-Actor-Name": "Omar Khalid", "X-Actor-Role": "cashier"}


def report(test_id, desc, passed, note=""):
    status = "PASS" if passed else "FAIL"
    results.append((test_id, desc, status, note))
    icon = "✅" if passed else "❌"
    print(f"  {icon} {test_id}: {desc} {'- ' + note if note else ''}")


def section(title):
    print("\n" + "=" * 60)
    print(f"  {title}")
    print("=" * 60)


def product_id(client, name):
    products = client.get("/api/catalog/products", params={"q": name}, headers=MANAGER).json()["products"]
    return products[0]["id"]


def transaction_count(client):
    return len(client.get("/api/transactions", headers=MANAGER).json()["transactions"])


def fill_cart(client, pid, quantity=1, discount=0, headers=MANAGER):
    client.delete("/api/cart", headers=headers)
    client.post("/api/cart/items", json={"product_id": pid}, headers=headers)
    if quantity != 1:
        client.put(f"/api/cart/items/{pid}/quantity", json={"quantity": quantity}, headers=headers)
    if discount:
        client.put(f"/api/cart/items/{pid}/discount", json={"amount": discount}, headers=headers)
    return client.get("/api/cart", headers=headers).json()


def main():
    c = httpx.Client(base_url=BASE, timeout=15)
    milk = product_id(c, "Milk")
    eggs = product_id(c, "Eggs")

    section("Checkout")

    c.delete("/api/cart", headers=MANAGER)
    before = transaction_count(c)
    r = c.post("/api/checkout", json={"paid": 1000}, headers=MANAGER)
    report("SC-A", "Empty cart is rejected", r.status_code == 400 and transaction_count(c) == before,
           f"status={r.status_code}")

    cart = fill_cart(c, milk, quantity=3, discount=500)
    report("SC-A2", "Cart totals 7500 - 500 = 7000", cart["totals"] == {"subtotal": 7500, "discount": 500, "total": 7000},
           str(cart["totals"]))

    r = c.post("/api/checkout", json={"paid": 5000}, headers=MANAGER)
    detail = r.json().get("detail", {})
    report("SC-B", "Loan without customer signals 409", r.status_code == 409 and detail.get("loan") == 2000,
           f"status={r.status_code}")

    customer = c.post(
        "/api/customers", json={"name": "Smoke Customer", "phone": "0750 000 0000"}, headers=MANAGER,
    ).json()["customer"]
    c.put("/api/cart/customer", json={"customer_id": customer["id"]}, headers=MANAGER)
    r = c.post("/api/checkout", json={"paid": 5000}, headers=MANAGER)
    txn = r.json().get("transaction", {})
    balance = c.get(f"/api/customers/{customer['id']}", headers=MANAGER).json()["customer"]["balance"]
    report("SC-C", "Loan charged to bound customer", txn.get("loan") == 2000 and balance == -2000,
           f"loan={txn.get('loan')} balance={balance}")

    fill_cart(c, eggs)
    r = c.post("/api/checkout", json={"paid": 8000}, headers=MANAGER)
    txn = r.json().get("transaction", {})
    report("SC-D", "Overpayment returns change", txn.get("change") == 3000 and txn.get("loan") == 0,
           f"change={txn.get('change')}")

    section("Cash transfers")

    fill_cart(c, eggs, headers=CASHIER)
    c.post("/api/checkout", json={"paid": 5000}, headers=CASHIER)
    r = c.post("/api/cash/transfers", json={"to_actor_id": 2, "to_actor_name": "Sara Aziz", "amount": 10000},
               headers=CASHIER)
    report("SC-E1", "Cashier hands cash to accountant", r.status_code == 201, f"status={r.status_code}")

    r = c.post("/api/cash/transfers",
               json={"to_actor_id": 1, "to_actor_name": "Admin Manager", "amount": -5, "kind": "withdrawal"},
               headers=ACCOUNTANT)
    report("SC-E2", "Negative withdrawal rejected", r.status_code == 400, f"status={r.status_code}")

    section("Statistics")

    daily = c.get("/api/stats/daily", headers=ACCOUNTANT).json()["stats"]
    report("SC-F1", "Daily stats count today's sales", daily["transaction_count"] >= 3,
           str(daily))
    report("SC-F2", "total_sales = cash_in + loans - change", daily["total_sales"] <= daily["cash_in"] + daily["loans"])

    overview = c.get("/api/stats/overview", headers=MANAGER).json()
    report("SC-F3", "Overview lists recent transactions", len(overview["recent_transactions"]) > 0)

    c.close()

    # ============================================================
    section("Summary")
    passed = sum(1 for r in results if r[2] == "PASS")
    failed = sum(1 for r in results if r[2] == "FAIL")
    print(f"  Total: {len(results)} | PASS: {passed} | FAIL: {failed}")
    if failed:
        print("\n  FAILED:")
        for r in results:
            if r[2] == "FAIL":
                print(f"    {r[0]}: {r[1]} - {r[3]}")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
