# app/data/seed.py
from app.data.database import SessionLocal
from app.data.models import AdminSettingsModel, ProductModel, ProductVariantModel

SAMPLE_PRODUCTS = [
    {
        "name": "Boubou brodé",
        "description": "Boubou en bazin riche, broderie main",
        "price": 25000,
        "category": "Vêtements",
        "stock": 10,
        "variants": [("color", "Bleu", 4), ("color", "Blanc", 4), ("size", "L", 2)],
    },
    {
        "name": "Sac en wax",
        "description": "Sac cabas en tissu wax",
        "price": 8000,
        "category": "Accessoires",
        "stock": 15,
        "variants": [],
    },
    {
        "name": "Sandales en cuir",
        "description": None,
        "price": 12000,
        "category": "Chaussures",
        "stock": 6,
        "variants": [("size", "40", 3), ("size", "42", 3)],
    },
]


def seed():
    db = SessionLocal()
    try:
        #only seed an empty database
        if db.query(ProductModel).first():
            return
        for data in SAMPLE_PRODUCTS:
            product = ProductModel(
                name=data["name"],
                description=data["description"],
                price=data["price"],
                category=data["category"],
                stock=data["stock"],
                is_active=True,
            )
            product.variants = [
                ProductVariantModel(type=t, value=v, stock=s) for t, v, s in data["variants"]
            ]
            db.add(product)
        if not db.query(AdminSettingsModel).first():
            db.add(AdminSettingsModel(company_name="Ma Boutique", hero_title="Bienvenue"))
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    seed()
