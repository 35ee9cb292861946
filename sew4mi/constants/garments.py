from decimal import Decimal


# id -> catalogue entry; prices in GHS
GARMENT_TYPES = {
    "custom-suit": {
        "name": "Custom Suit",
        "category": "formal",
        "base_price": Decimal("300.00"),
        "fabric_yards": Decimal("3.5"),
        "estimated_days": 21,
    },
    "kente-shirt": {
        "name": "Kente Shirt",
        "category": "traditional",
        "base_price": Decimal("80.00"),
        "fabric_yards": Decimal("2.0"),
        "estimated_days": 7,
    },
    "dashiki": {
        "name": "Dashiki",
        "category": "traditional",
        "base_price": Decimal("60.00"),
        "fabric_yards": Decimal("2.0"),
        "estimated_days": 5,
    },
    "casual-shirt": {
        "name": "Casual Shirt",
        "category": "casual",
        "base_price": Decimal("40.00"),
        "fabric_yards": Decimal("2.5"),
        "estimated_days": 7,
    },
    "wedding-dress": {
        "name": "Wedding Dress",
        "category": "special",
        "base_price": Decimal("500.00"),
        "fabric_yards": Decimal("6.0"),
        "estimated_days": 30,
    },
    "funeral-cloth": {
        "name": "Funeral Cloth",
        "category": "traditional",
        "base_price": Decimal("120.00"),
        "fabric_yards": Decimal("4.0"),
        "estimated_days": 10,
    },
    "office-dress": {
        "name": "Office Dress",
        "category": "formal",
        "base_price": Decimal("150.00"),
        "fabric_yards": Decimal("3.0"),
        "estimated_days": 14,
    },
    "traditional-smock": {
        "name": "Traditional Smock",
        "category": "traditional",
        "base_price": Decimal("100.00"),
        "fabric_yards": Decimal("3.0"),
        "estimated_days": 10,
    },
}

FABRIC_COST_PER_YARD = Decimal("25.00")
FABRIC_MIN_RATIO = Decimal("0.30")
DEFAULT_EXPRESS_SURCHARGE_RATIO = Decimal("0.25")
