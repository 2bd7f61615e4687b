from typing import Any, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from core.logging_config import get_logger
from core.model import SystemConfig

logger = get_logger("core.system_config")


class SystemConfigService:
    """Configuration values scoped per sales channel.

    A value stored for a sales channel wins over the global value (stored with
    no sales channel). Unknown keys read as ``None``.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str, sales_channel_id: Optional[str] = None) -> Any:
        query = self.db.query(SystemConfig).filter(SystemConfig.configuration_key == key)
        if sales_channel_id:
            query = query.filter(or_(
                SystemConfig.sales_channel_id == sales_channel_id,
                SystemConfig.sales_channel_id.is_(None),
            ))
        else:
            query = query.filter(SystemConfig.sales_channel_id.is_(None))

        rows = query.all()
        if not rows:
            return None

        # Channel specific rows sort before the global default
        row = sorted(rows, key=lambda r: r.sales_channel_id is None)[0]
        return self._unwrap(row.configuration_value)

    def get_bool(self, key: str, sales_channel_id: Optional[str] = None) -> bool:
        return bool(self.get(key, sales_channel_id))

    def set(self, key: str, value: Any, sales_channel_id: Optional[str] = None) -> None:
        row = (
            self.db.query(SystemConfig)
            .filter(
                SystemConfig.configuration_key == key,
                SystemConfig.sales_channel_id.is_(None) if sales_channel_id is None
                else SystemConfig.sales_channel_id == sales_channel_id,
            )
            .first()
        )
        if row is None:
            row = SystemConfig(configuration_key=key, sales_channel_id=sales_channel_id)
            self.db.add(row)
        row.configuration_value = {"_value": value}
        self.db.commit()
        logger.info(f"Config {key} updated", extra={"sales_channel_id": sales_channel_id})

    @staticmethod
    def _unwrap(stored: Any) -> Any:
        if isinstance(stored, dict) and "_value" in stored:
            return stored["_value"]
        return stored
