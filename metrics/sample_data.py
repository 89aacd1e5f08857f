"""
metrics/sample_data.py

Built-in sample orders shown before any upload and restored by a dataset
reset.
"""

from __future__ import annotations

from datetime import datetime

from app.domain.orders import OrderRecord

# (order_id, YYYY-MM-DD, status, quantity, amount, category, city, state)
_SAMPLE_ROWS: tuple[tuple[str, str, str, int, float, str, str, str], ...] = (
    ("171-9198151-1101146", "2022-04-30", "Shipped - Delivered to Buyer", 1, 406, "kurta", "BENGALURU", "KARNATAKA"),
    ("404-0687676-7273146", "2022-04-30", "Shipped", 1, 329, "kurta", "NAVI MUMBAI", "MAHARASHTRA"),
    ("407-1069790-7240320", "2022-04-30", "Shipped", 1, 574, "Top", "CHENNAI", "TAMIL NADU"),
    ("404-1490984-4578765", "2022-04-30", "Shipped", 1, 824, "Set", "GHAZIABAD", "UTTAR PRADESH"),
    ("408-5748499-6859555", "2022-04-30", "Shipped", 1, 653, "Set", "CHANDIGARH", "CHANDIGARH"),
    ("406-7807733-3785945", "2022-04-30", "Shipped - Delivered to Buyer", 1, 399, "kurta", "HYDERABAD", "TELANGANA"),
    ("402-4393761-0311520", "2022-04-30", "Shipped", 1, 363, "kurta", "Chennai", "TAMIL NADU"),
    ("407-5633625-6970741", "2022-04-30", "Shipped", 1, 685, "kurta", "CHENNAI", "TAMIL NADU"),
    ("123-4567890-1234567", "2022-04-29", "Shipped", 1, 450, "Western Dress", "MUMBAI", "MAHARASHTRA"),
    ("123-4567890-1234568", "2022-04-29", "Shipped", 2, 900, "Set", "DELHI", "DELHI"),
    ("123-4567890-1234569", "2022-04-28", "Shipped", 1, 550, "Top", "PUNE", "MAHARASHTRA"),
    ("123-4567890-1234570", "2022-04-28", "Shipped", 1, 320, "kurta", "BANGALORE", "KARNATAKA"),
    ("123-4567890-1234571", "2022-04-27", "Shipped", 3, 1200, "Set", "KOLKATA", "WEST BENGAL"),
    ("123-4567890-1234572", "2022-04-26", "Shipped", 1, 480, "Western Dress", "JAIPUR", "RAJASTHAN"),
    ("123-4567890-1234573", "2022-04-25", "Shipped", 2, 750, "kurta", "AHMEDABAD", "GUJARAT"),
    ("123-4567890-1234574", "2022-03-30", "Shipped", 1, 420, "Top", "LUCKNOW", "UTTAR PRADESH"),
    ("123-4567890-1234575", "2022-03-29", "Shipped", 1, 380, "kurta", "SURAT", "GUJARAT"),
    ("123-4567890-1234576", "2022-03-15", "Shipped", 2, 920, "Set", "HYDERABAD", "TELANGANA"),
    ("123-4567890-1234577", "2022-03-10", "Shipped", 1, 540, "Western Dress", "CHENNAI", "TAMIL NADU"),
    ("123-4567890-1234578", "2022-03-05", "Shipped", 1, 620, "Top", "PUNE", "MAHARASHTRA"),
    ("123-4567890-1234579", "2022-02-28", "Shipped", 3, 1500, "Set", "BANGALORE", "KARNATAKA"),
    ("123-4567890-1234580", "2022-02-15", "Shipped", 1, 350, "kurta", "MUMBAI", "MAHARASHTRA"),
)


def sample_orders() -> list[OrderRecord]:
    """Fresh list of the sample orders, dated at noon."""
    return [
        OrderRecord(
            order_id=order_id,
            date=datetime.strptime(day, "%Y-%m-%d").replace(hour=12),
            status=status,
            quantity=quantity,
            amount=float(amount),
            currency="INR",
            category=category,
            city=city,
            state=state,
        )
        for order_id, day, status, quantity, amount, category, city, state in _SAMPLE_ROWS
    ]
