from sqlalchemy import BigInteger, Column, Index, Integer, String, Text

from authsome_otp.database import Base


class OtpEntry(Base):
    __tablename__ = "otps"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(20), nullable=False, index=True)
    parent_id = Column(String(255), nullable=False, index=True)
    parent_source = Column(String(100), nullable=False)
    metadata_json = Column("metadata", Text, nullable=True)
    created_at = Column(BigInteger, nullable=False)
    expires_at = Column(BigInteger, nullable=False)

    __table_args__ = (
        Index("ix_otps_expires_at", "expires_at"),
        Index("ix_otps_parent", "parent_id", "parent_source"),
    )
