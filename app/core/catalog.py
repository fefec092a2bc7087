from typing import Literal

COLLECTION_CATALOG: list[tuple[str, str]] = [
    ("Sajna Lawn", "Sajna Lawn summer collection"),
    ("Parwaz", "Parwaz festive collection"),
    ("Noor Jehan", "Noor Jehan formal collection"),
    ("Raabta", "Raabta pret collection"),
    ("Custom", "Custom and one-off orders"),
]

COLLECTION_NAMES = {name for name, _description in COLLECTION_CATALOG}

CollectionName = Literal["Sajna Lawn", "Parwaz", "Noor Jehan", "Raabta", "Custom"]
Size = Literal["S", "M", "L", "XL", "XXL"]
MovementType = Literal["received", "transferred", "sold", "returned", "adjusted"]
MovementStatus = Literal["pending", "completed", "cancelled"]
PaymentMethod = Literal["Cash", "Card", "Online", "Bank Transfer"]

SIZES: tuple[str, ...] = ("S", "M", "L", "XL", "XXL")
MOVEMENT_TYPES: tuple[str, ...] = ("received", "transferred", "sold", "returned", "adjusted")
MOVEMENT_STATUSES: tuple[str, ...] = ("pending", "completed", "cancelled")

# Ledger endpoints that never hold an inventory record of their own.
VENDOR_MARKER = "vendor"
CUSTOMER_MARKER = "customer"

CODE_PREFIXES: tuple[str, ...] = ("ITM", "ART", "MAT", "SALE", "PRD", "EMP")
CODE_DIGITS = 4


def normalize_location_code(value: str | None) -> str:
    return (value or "").strip()


def normalize_code(value: str | None) -> str:
    return (value or "").strip().upper()
