"""Sale model."""
from sqlalchemy import Column, String, Integer, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from saga_inventory.database import Base
from saga_inventory.utils.identifiers import new_id, epoch_now
import enum


class DiscountType(str, enum.Enum):
    """How Sale.discount is applied to the subtotal."""
    PERCENTAGE = 'percentage'
    FIXED = 'fixed'


class Sale(Base):
    """Sale (confirmed receipt). Immutable once written."""

    __tablename__ = 'sales'

    id = Column(String(32), primary_key=True, default=new_id)
    receipt_number = Column(String, nullable=False, unique=True)
    customer_id = Column(String(32), ForeignKey('customers.id'), nullable=False)
    seller_id = Column(String(32), ForeignKey('sellers.id'), nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    discount_type = Column(String(20), nullable=False, default=DiscountType.PERCENTAGE.value)
    total = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String, nullable=False)
    created_at = Column(Integer, nullable=False, default=epoch_now)

    # Relationships
    customer = relationship('Customer', back_populates='sales')
    seller = relationship('Seller', back_populates='sales')
    items = relationship('SaleItem', back_populates='sale', order_by='SaleItem.position')

    def to_dict(self, include_items=False):
        data = {
            'id': self.id,
            'receipt_number': self.receipt_number,
            'customer_id': self.customer_id,
            'seller_id': self.seller_id,
            'subtotal': self.subtotal,
            'discount': self.discount,
            'discount_type': self.discount_type,
            'total': self.total,
            'payment_method': self.payment_method,
            'created_at': self.created_at,
        }
        if include_items:
            data['items'] = [item.to_dict() for item in self.items]
        return data

    def __repr__(self):
        return f"<Sale(id={self.id}, receipt='{self.receipt_number}', total={self.total})>"
