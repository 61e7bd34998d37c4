"""Sale Item model."""
from sqlalchemy import Column, String, Integer, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from saga_inventory.database import Base
from saga_inventory.utils.identifiers import new_id


class SaleItem(Base):
    """Sale line. Name, stock code and prices are snapshots taken at sale time."""

    __tablename__ = 'sale_items'

    id = Column(String(32), primary_key=True, default=new_id)
    sale_id = Column(String(32), ForeignKey('sales.id'), nullable=False, index=True)
    product_id = Column(String(32), ForeignKey('products.id'), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    product_name = Column(String, nullable=False)
    stock_code = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    buying_price = Column(Numeric(10, 2), nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)

    # Relationships
    sale = relationship('Sale', back_populates='items')
    product = relationship('Product')

    def to_dict(self):
        return {
            'id': self.id,
            'sale_id': self.sale_id,
            'product_id': self.product_id,
            'product_name': self.product_name,
            'stock_code': self.stock_code,
            'quantity': self.quantity,
            'unit_price': self.unit_price,
            'buying_price': self.buying_price,
            'subtotal': self.subtotal,
        }

    def __repr__(self):
        return f"<SaleItem(id={self.id}, stock_code='{self.stock_code}', quantity={self.quantity})>"
