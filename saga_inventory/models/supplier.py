"""Supplier model."""
from sqlalchemy import Column, String, Integer
from sqlalchemy.orm import relationship
from saga_inventory.database import Base
from saga_inventory.utils.identifiers import new_id, epoch_now


class Supplier(Base):
    """Supplier (optional source of a product)."""

    __tablename__ = 'suppliers'

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    email = Column(String, nullable=False)
    created_at = Column(Integer, nullable=False, default=epoch_now)

    # Relationships
    # passive_deletes='all': deleting a referenced supplier must fail at the store
    products = relationship('Product', back_populates='supplier', passive_deletes='all')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'phone': self.phone,
            'email': self.email,
            'created_at': self.created_at,
        }

    def __repr__(self):
        return f"<Supplier(id={self.id}, name='{self.name}')>"
