from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from session_booking.db.base_class import Base


class PluginSetting(Base):
    __tablename__ = "plugin_settings"

    name: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str | None] = mapped_column(Text)
