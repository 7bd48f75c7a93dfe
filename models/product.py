# models/product.py
"""
Product and per-level commission configuration.
"""
from sqlalchemy import Column, Integer, String, DECIMAL, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from models.base import Base, AuditMixin


class Product(Base, AuditMixin):
    __tablename__ = 'products'

    productID = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    price = Column(DECIMAL(12, 2), nullable=False)
    pv = Column(DECIMAL(12, 2), default=0)  # Point value за единицу
    isActive = Column(Boolean, default=True)

    commissionConfigs = relationship(
        'CommissionConfig',
        back_populates='product',
        order_by='CommissionConfig.level',
        cascade='all, delete-orphan'
    )

    def __repr__(self):
        return f"<Product(productID={self.productID}, name={self.name}, price={self.price})>"


class CommissionConfig(Base, AuditMixin):
    __tablename__ = 'commission_configs'

    configID = Column(Integer, primary_key=True, autoincrement=True)
    productID = Column(Integer, ForeignKey('products.productID'), nullable=False, index=True)

    level = Column(Integer, nullable=False)  # 1..N, без пропусков
    rewardType = Column(String, nullable=False, default="percentage")  # percentage, fixed
    percentage = Column(DECIMAL(5, 2), default=0)
    fixedAmount = Column(DECIMAL(12, 2), default=0)

    # Минимальный ранг получателя на этом уровне (null = без ограничения)
    minRank = Column(String, nullable=True)

    product = relationship('Product', back_populates='commissionConfigs')

    __table_args__ = (
        UniqueConstraint('productID', 'level', name='uq_commission_config_product_level'),
    )

    def __repr__(self):
        return f"<CommissionConfig(product={self.productID}, level={self.level}, type={self.rewardType})>"
