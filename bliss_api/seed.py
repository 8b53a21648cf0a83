# bliss_api/seed.py
# Bubble Bliss menu. Prices are in cedis here and stored as pesewas.
import re

from .extensions import db
from .model import Category, Product, ProductVariant, Topping
from .utils.money import to_pesewas

CATEGORIES = [
    {"slug": "milk-tea", "name": "Milk Tea"},
    {"slug": "hq-special", "name": "HQ Special"},
    {"slug": "iced-tea", "name": "Iced Tea"},
    {"slug": "milkshakes", "name": "Milkshakes"},
    {"slug": "shawarma", "name": "Shawarma"},
]

DRINKS = {
    "milk-tea": [
        ("Brown Sugar Milk", "Rich brown sugar syrup swirled into creamy milk tea.", 40),
        ("Dalgona Coffee", "Whipped coffee foam layered over smooth milk tea.", 40),
        ("Caramel Dream Milk", "Silky milk tea with a warm caramel finish.", 40),
        ("Coconut Milk", "Light and tropical milk tea with fresh coconut flavour.", 40),
        ("Original", "The classic milk tea: clean, balanced, and timeless.", 40),
        ("Terrific Taro", "Creamy taro milk tea with an earthy, subtly sweet flavour.", 40),
        ("Matcha-Emerald", "Earthy Japanese matcha blended into a creamy milk tea.", 40),
        ("Lotus", "Delicately floral lotus milk tea with a smooth, clean taste.", 50),
        ("Oreo", "Cookies-and-cream milk tea loaded with Oreo flavour.", 50),
        ("Tiramisu", "Coffee-soaked tiramisu flavour in a rich creamy milk tea.", 50),
    ],
    "hq-special": [
        ("Corny Boba-Popcorn", "Buttery popcorn-inspired milk tea loaded with chewy boba.", 40),
        ("Cheesy Mango", "Juicy mango base topped with a signature cheese foam.", 50),
        ("C3 Blaze - Chocolate Chip Cookie", "Chocolate chip cookie milk tea with a bold, indulgent flavour.", 40),
        ("Cheesy Ube", "Creamy ube milk tea crowned with cheese foam.", 40),
    ],
    "iced-tea": [
        ("Fizzy Lemonade", "Sparkling lemonade iced tea.", 35),
        ("Peach Perfect", "Iced black tea with ripe peach.", 35),
        ("Spiced Chai", "Chilled chai with warming spices.", 35),
    ],
    "milkshakes": [
        ("Creamy Chai", "Chai spiced milkshake.", 55),
        ("Bubble Gum", "Sweet bubble gum milkshake.", 55),
        ("Vanilla Shake", "Classic vanilla milkshake.", 55),
    ],
}

# (name, description, [(key, label, price), ...])
SHAWARMA = [
    ("Chicken Shawarma", "Tender grilled chicken wrapped in a soft flatbread with fresh toppings.",
     [("medium", "Medium", 50), ("large", "Large", 60)]),
    ("Beef Shawarma", "Seasoned beef wrapped in a soft flatbread with fresh toppings.",
     [("medium", "Medium", 55), ("large", "Large", 65)]),
    ("Mixed Shawarma", "A generous mix of chicken and beef shawarma in one satisfying wrap.",
     [("medium", "Medium", 60), ("large", "Large", 70)]),
    ("Cheese Chicken Shawarma", "Grilled chicken shawarma with melted cheese for an extra indulgent bite.",
     [("medium", "Medium", 65), ("large", "Large", 75)]),
    ("Cheese Beef Shawarma", "Seasoned beef shawarma with a rich melted cheese layer inside.",
     [("medium", "Medium", 70), ("large", "Large", 80)]),
]

TOPPINGS = [
    ("Chocolate", 5), ("Sweetened Choco", 5), ("Vanilla", 5), ("Cheese Foam", 7),
    ("Strawberry Popping", 6), ("Blueberry Popping", 6), ("Mint Popping", 6),
    ("Whipped Cream", 6), ("Biscoff Spread", 8), ("Caramel Syrup", 5),
    ("Grape Popping", 6), ("Strawberry Jam", 5), ("Extra Boba", 10),
    ("Extra Cheese Foam", 10),
]


def slugify(text):
    text = text.strip().lower()
    text = re.sub(r"[^a-z0-9]+", "-", text)
    return text.strip("-")


def _upsert_category(slug, name, sort_order):
    c = Category.query.filter_by(slug=slug).first()
    if not c:
        c = Category(slug=slug)
        db.session.add(c)
    c.name = name
    c.sort_order = sort_order
    return c


def _upsert_product(name, description, category, sort_order, price_ghs=None):
    slug = slugify(name)
    p = Product.query.filter_by(slug=slug).first()
    if not p:
        p = Product(slug=slug)
        db.session.add(p)
    p.name = name
    p.description = description
    p.category = category
    p.price_pesewas = to_pesewas(price_ghs) if price_ghs is not None else None
    p.sort_order = sort_order
    p.is_active = True
    p.in_stock = True
    return p


def seed_catalog():
    """Idempotent: running it twice leaves one copy of everything."""
    counts = {"categories": 0, "products": 0, "variants": 0, "toppings": 0}

    cats = {}
    for i, c in enumerate(CATEGORIES, start=1):
        cats[c["slug"]] = _upsert_category(c["slug"], c["name"], i)
        counts["categories"] += 1
    db.session.flush()

    for cat_slug, drinks in DRINKS.items():
        for i, (name, desc, price) in enumerate(drinks, start=1):
            _upsert_product(name, desc, cats[cat_slug], i, price_ghs=price)
            counts["products"] += 1

    for i, (name, desc, variants) in enumerate(SHAWARMA, start=1):
        p = _upsert_product(name, desc, cats["shawarma"], i)
        db.session.flush()
        for j, (key, label, price) in enumerate(variants, start=1):
            v = ProductVariant.query.filter_by(product_id=p.id, key=key).first()
            if not v:
                v = ProductVariant(product_id=p.id, key=key)
                db.session.add(v)
            v.label = label
            v.price_pesewas = to_pesewas(price)
            v.sort_order = j
            counts["variants"] += 1
        counts["products"] += 1

    for i, (name, price) in enumerate(TOPPINGS, start=1):
        t = Topping.query.filter_by(name=name).first()
        if not t:
            t = Topping(name=name)
            db.session.add(t)
        t.price_pesewas = to_pesewas(price)
        t.is_active = True
        t.in_stock = True
        t.sort_order = i
        counts["toppings"] += 1

    db.session.commit()
    return counts
