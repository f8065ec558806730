# models/sms_rate.py
from sqlalchemy import Float, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from coinsms.db.session import Base


class SmsRate(Base):
    __tablename__ = "sms_rates"
    # Provider rate sheet, one row per (country, operator). Loaded out of band; read-only here.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    country: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    country_code: Mapped[str] = mapped_column(Text, nullable=False)
    operator: Mapped[str | None] = mapped_column(Text, nullable=True)
    sale_price: Mapped[float] = mapped_column(Float, nullable=False)
