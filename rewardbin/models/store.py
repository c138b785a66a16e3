"""
Store, material, reward rule and bin models
"""

from sqlalchemy import Column, String, Integer, Float, ForeignKey, Text, CheckConstraint, Index, Uuid
from sqlalchemy.orm import relationship

from .base import Base, TimestampedModel, UUIDModel, StatusModel


class Store(Base, TimestampedModel, UUIDModel, StatusModel):
    """Physical location hosting recycling bins"""

    __tablename__ = "stores"

    organization_id = Column(
        Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="SET NULL"), nullable=True, index=True
    )
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String(2048), nullable=True)

    # Address
    address1 = Column(String(200), nullable=False)
    address2 = Column(String(200), nullable=True)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    zip = Column(String(20), nullable=False)
    country = Column(String(100), nullable=False)

    # Location
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)

    # Relationships
    organization = relationship("Organization", back_populates="stores")
    bins = relationship("Bin", back_populates="store")

    __table_args__ = (
        CheckConstraint("lat >= -90 AND lat <= 90", name="check_store_lat"),
        CheckConstraint("lng >= -180 AND lng <= 180", name="check_store_lng"),
    )


class RewardRule(Base, TimestampedModel, UUIDModel):
    """Exchange rate from recycled units to points"""

    __tablename__ = "reward_rules"

    organization_id = Column(
        Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="SET NULL"), nullable=True, index=True
    )
    name = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    point = Column(Integer, nullable=False)
    unit = Column(Float, nullable=False)
    unit_type = Column(String(50), nullable=False)

    # Relationships
    organization = relationship("Organization", back_populates="reward_rules")
    materials = relationship("Material", back_populates="reward_rule")

    __table_args__ = (
        CheckConstraint("point > 0", name="check_positive_point"),
        CheckConstraint("unit > 0", name="check_positive_unit"),
    )


class Material(Base, TimestampedModel, UUIDModel):
    """Recyclable category such as plastic or aluminum"""

    __tablename__ = "materials"

    organization_id = Column(
        Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="SET NULL"), nullable=True, index=True
    )
    reward_rule_id = Column(Uuid(as_uuid=True), ForeignKey("reward_rules.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    # Relationships
    organization = relationship("Organization", back_populates="materials")
    reward_rule = relationship("RewardRule", back_populates="materials")
    bins = relationship("Bin", back_populates="material")


class Bin(Base, TimestampedModel, UUIDModel, StatusModel):
    """Recycling bin placed in a store for one material"""

    __tablename__ = "bins"

    number = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String(2048), nullable=True)
    store_id = Column(Uuid(as_uuid=True), ForeignKey("stores.id"), nullable=False)
    material_id = Column(Uuid(as_uuid=True), ForeignKey("materials.id"), nullable=False)

    # Relationships
    store = relationship("Store", back_populates="bins")
    material = relationship("Material", back_populates="bins")
    recycle_histories = relationship("RecycleHistory", back_populates="bin")

    __table_args__ = (
        Index("idx_bins_store_material", "store_id", "material_id"),
    )
