# bliss_api/model/product.py
from sqlalchemy.sql import func
from ..extensions import db
from ..utils.money import ghs_float

class Product(db.Model):
    __tablename__ = "product"
    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(255), nullable=False, unique=True, index=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False, default="")
    category_id = db.Column(db.Integer, db.ForeignKey("category.id"), nullable=False, index=True)

    # NULL means the price comes from the selected variant (e.g. wrap sizes)
    price_pesewas = db.Column(db.Integer, nullable=True)

    sort_order = db.Column(db.Integer, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)   # visible in catalog
    in_stock = db.Column(db.Boolean, nullable=False, default=True)
    image = db.Column(db.String(1024))

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    variants = db.relationship(
        "ProductVariant",
        backref="product",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ProductVariant.sort_order.asc()",
    )

    def as_api(self):
        return {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "description": self.description,
            "category": self.category.slug if self.category else None,
            "price_ghs": ghs_float(self.price_pesewas),
            "options": [v.as_api() for v in self.variants],
            "image": self.image,
            "in_stock": self.in_stock,
        }

    def as_admin(self):
        return {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "price_pesewas": self.price_pesewas,
            "is_active": self.is_active,
            "in_stock": self.in_stock,
        }

class ProductVariant(db.Model):
    __tablename__ = "product_variant"
    __table_args__ = (db.UniqueConstraint("product_id", "key", name="uq_product_variant_key"),)

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("product.id"), nullable=False, index=True)
    key = db.Column(db.String(64), nullable=False)      # e.g. "medium", "large"
    label = db.Column(db.String(120), nullable=False)
    price_pesewas = db.Column(db.Integer, nullable=False)
    sort_order = db.Column(db.Integer, default=0)

    def as_api(self):
        return {
            "id": self.id,
            "key": self.key,
            "label": self.label,
            "price_ghs": ghs_float(self.price_pesewas),
        }
