from ..extensions import db
from ..utils.money import ghs_float

class Topping(db.Model):
    __tablename__ = "topping"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False, unique=True)
    price_pesewas = db.Column(db.Integer, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    in_stock = db.Column(db.Boolean, nullable=False, default=True)
    sort_order = db.Column(db.Integer, default=0)

    def as_api(self):
        return {
            "id": self.id,
            "name": self.name,
            "price_ghs": ghs_float(self.price_pesewas),
            "in_stock": self.in_stock,
        }

    def as_admin(self):
        return {
            "id": self.id,
            "name": self.name,
            "price_pesewas": self.price_pesewas,
            "is_active": self.is_active,
            "in_stock": self.in_stock,
        }
