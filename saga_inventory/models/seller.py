"""Seller model."""
from sqlalchemy import Column, String, Integer
from sqlalchemy.orm import relationship
from saga_inventory.database import Base
from saga_inventory.utils.identifiers import new_id, epoch_now


class Seller(Base):
    """Seller (staff member credited with a sale)."""

    __tablename__ = 'sellers'

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    created_at = Column(Integer, nullable=False, default=epoch_now)

    sales = relationship('Sale', back_populates='seller', passive_deletes='all')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'created_at': self.created_at,
        }

    def __repr__(self):
        return f"<Seller(id={self.id}, name='{self.name}')>"
