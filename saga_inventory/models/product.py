"""Product model."""
from sqlalchemy import Column, String, Integer, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from saga_inventory.database import Base
from saga_inventory.utils.identifiers import new_id, epoch_now


class Product(Base):
    """Product model."""

    __tablename__ = 'products'
    __table_args__ = (
        CheckConstraint('quantity >= 0', name='ck_products_quantity_non_negative'),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    stock_code = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False)
    buying_price = Column(Numeric(10, 2), nullable=False)
    selling_price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    supplier_id = Column(String(32), ForeignKey('suppliers.id'), nullable=True)
    created_at = Column(Integer, nullable=False, default=epoch_now)

    # Relationships
    supplier = relationship('Supplier', back_populates='products')

    def to_dict(self):
        return {
            'id': self.id,
            'stock_code': self.stock_code,
            'name': self.name,
            'category': self.category,
            'buying_price': self.buying_price,
            'selling_price': self.selling_price,
            'quantity': self.quantity,
            'supplier_id': self.supplier_id,
            'created_at': self.created_at,
        }

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', stock_code='{self.stock_code}')>"
