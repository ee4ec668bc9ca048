"""Generate mock freight orders for local development."""

import csv
import random
from pathlib import Path

PRODUCTS = [
    "هاتف ذكي",
    "سماعات بلوتوث",
    "ساعة يد",
    "حقيبة ظهر",
    "مكنسة روبوت",
    "قطع غيار سيارات",
    "ملابس أطفال",
    "خلاط كهربائي",
    "شاحن متنقل",
    "طابعة منزلية",
]
COUNTRIES = ["CHINA", "CHINA", "CHINA", "TURKEY", "DUBAI", "USA"]
CUSTOMERS = [
    ("LY-1001", "محمد علي"),
    ("LY-1002", "فاطمة سالم"),
    ("LY-1003", "أحمد المبروك"),
    ("LY-1004", "سارة الورفلي"),
]

rows = []
random.seed(42)
for idx in range(1, 101):
    code, customer_name = random.choice(CUSTOMERS)
    usd_price = round(random.uniform(5, 400), 2)
    rows.append(
        {
            "tracking_number": f"FD{idx:06d}",
            "name": random.choice(PRODUCTS),
            "usd_price": usd_price,
            "cny_price": round(usd_price * 7.2, 2),
            "country": random.choice(COUNTRIES),
            "customer_code": code,
            "customer_name": customer_name,
            "notes": "",
        }
    )

path = Path("data/orders_seed.csv")
path.parent.mkdir(parents=True, exist_ok=True)
with path.open("w", newline="", encoding="utf-8") as file:
    writer = csv.DictWriter(file, fieldnames=list(rows[0].keys()))
    writer.writeheader()
    writer.writerows(rows)

print(f"Generated {len(rows)} rows -> {path}")
