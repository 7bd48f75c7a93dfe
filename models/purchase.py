# models/purchase.py
from sqlalchemy import Column, Integer, String, DECIMAL, ForeignKey
from sqlalchemy.orm import relationship
from models.base import Base, AuditMixin


class Purchase(Base, AuditMixin):
    __tablename__ = 'purchases'

    # Primary key
    purchaseID = Column(Integer, primary_key=True, autoincrement=True)

    # Foreign keys
    memberID = Column(Integer, ForeignKey('members.memberID'), nullable=False, index=True)
    productID = Column(Integer, ForeignKey('products.productID'), nullable=False)

    # Purchase details
    quantity = Column(Integer, nullable=False, default=1)
    totalAmount = Column(DECIMAL(12, 2), nullable=False)  # price * quantity, база для ребейтов
    totalPV = Column(DECIMAL(12, 2), default=0)
    status = Column(String, default="completed")

    # Relationships
    member = relationship('Member', backref='purchases')
    product = relationship('Product')

    def __repr__(self):
        return f"<Purchase(purchaseID={self.purchaseID}, member={self.memberID}, amount={self.totalAmount})>"
