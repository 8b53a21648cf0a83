from ..model import Category, Product, Topping


def get_catalog():
    """Categories, active products with their size options, and active toppings.

    Prices leave here in cedis; ``price_ghs`` is ``None`` for products
    priced by variant.
    """
    categories = Category.query.order_by(Category.sort_order.asc(), Category.id.asc()).all()
    products = (
        Product.query
        .filter(Product.is_active.is_(True))
        .order_by(Product.sort_order.asc(), Product.id.asc())
        .all()
    )
    toppings = (
        Topping.query
        .filter(Topping.is_active.is_(True))
        .order_by(Topping.sort_order.asc(), Topping.id.asc())
        .all()
    )
    return {
        "categories": [c.as_dict() for c in categories],
        "items": [p.as_api() for p in products],
        "toppings": [t.as_api() for t in toppings],
    }
