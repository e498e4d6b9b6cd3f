from __future__ import annotations

from sqlalchemy import text


def fetch_customers_for_matching(conn) -> list[dict]:
    rows = conn.execute(
        text(
            """
            SELECT id, customer_name, company_name
            FROM customers
            ORDER BY id ASC
            """
        )
    ).mappings().all()
    return [dict(r) for r in rows]


def fetch_customer_usage(conn) -> list[dict]:
    """Hours purchased/used/remaining per customer, most consumed first."""
    rows = conn.execute(
        text(
            """
            SELECT id, customer_name, company_name, hours_purchased, hours_used, updated_at
            FROM customers
            ORDER BY customer_name ASC, id ASC
            """
        )
    ).mappings().all()

    usage: list[dict] = []
    for r in rows:
        purchased = float(r["hours_purchased"] or 0.0)
        used = float(r["hours_used"] or 0.0)
        usage.append(
            {
                "id": r["id"],
                "customer_name": r["customer_name"],
                "company_name": r["company_name"],
                "hours_purchased": round(purchased, 2),
                "hours_used": round(used, 2),
                "hours_remaining": round(purchased - used, 2),
                "usage_percentage": round(used / purchased * 100.0, 2) if purchased > 0 else None,
                "updated_at": r["updated_at"],
            }
        )
    usage.sort(key=lambda u: u["usage_percentage"] if u["usage_percentage"] is not None else -1.0, reverse=True)
    return usage
