# ===================================
# app/models/sweet.py
# ===================================
from sqlalchemy import Column, Integer, String, DateTime, Text, Numeric, CheckConstraint, Index
from sqlalchemy.sql import func as sql_func
from sqlalchemy.ext.hybrid import hybrid_property

from app.core.database import Base

# Column ranges: INTEGER stock, NUMERIC(10, 2) price
MAX_QUANTITY = 2_147_483_647
MAX_PRICE = 99_999_999.99


class Sweet(Base):
    __tablename__ = "sweet"
    __table_args__ = (
        CheckConstraint('quantity >= 0', name='check_sweet_quantity_positive'),
        CheckConstraint('price >= 0', name='check_sweet_price_positive'),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Main information
    name = Column(String(100), unique=True, index=True, nullable=False)
    category = Column(String(50), index=True, nullable=False)
    description = Column(Text, nullable=True)

    # Price with two decimals, exposed as float to the API
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)

    # Stock on hand
    quantity = Column(Integer, default=0, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=sql_func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=sql_func.now(), onupdate=sql_func.now())

    def __repr__(self):
        return f"<Sweet(id={self.id}, name='{self.name}', qty={self.quantity})>"

    @hybrid_property
    def is_in_stock(self):
        """Whether at least one unit is available"""
        return self.quantity > 0


Index('idx_sweet_name_category', Sweet.name, Sweet.category)

# Trigram indexes behind the ILIKE substring search (pg_trgm, PostgreSQL only)
Index(
    'idx_sweet_name_trgm', Sweet.name,
    postgresql_using='gin', postgresql_ops={'name': 'gin_trgm_ops'}
).ddl_if(dialect='postgresql')
Index(
    'idx_sweet_category_trgm', Sweet.category,
    postgresql_using='gin', postgresql_ops={'category': 'gin_trgm_ops'}
).ddl_if(dialect='postgresql')
