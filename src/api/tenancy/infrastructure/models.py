"""SQLAlchemy ORM models for the tenant registry.

The registry is written by the platform's tenant administration service.
These models describe its tables for reads only.
"""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class TenantModel(Base, TimestampMixin):
    """ORM model for tenants table.

    A tenant is addressable by either its id or its subdomain.
    """

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    subdomain: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    db_type: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, index=True)

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<TenantModel(id={self.id}, subdomain={self.subdomain}, "
            f"db_type={self.db_type}, status={self.status})>"
        )


class TenantDatabaseConfigModel(Base):
    """ORM model for tenant_database_configs table.

    Zero or one row per tenant. Username and password are stored
    encrypted.
    """

    __tablename__ = "tenant_database_configs"

    tenant_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("tenants.id", ondelete="CASCADE"), primary_key=True
    )
    db_schema: Mapped[str | None] = mapped_column(String(63), nullable=True)
    db_name: Mapped[str | None] = mapped_column(String(63), nullable=True)
    db_host: Mapped[str | None] = mapped_column(String(255), nullable=True)
    db_port: Mapped[int | None] = mapped_column(Integer, nullable=True)
    db_username: Mapped[str | None] = mapped_column(String(512), nullable=True)
    db_password: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    db_ssl_mode: Mapped[str | None] = mapped_column(String(16), nullable=True)
    connection_pool_size: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<TenantDatabaseConfigModel(tenant_id={self.tenant_id}, "
            f"db_name={self.db_name}, db_host={self.db_host})>"
        )
